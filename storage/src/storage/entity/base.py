from sqlalchemy import BigInteger, Column, Integer, MetaData, String
from sqlalchemy.orm import DeclarativeBase
from storage.util import get_utc_iso8601_timestamp, get_unix_timestamp

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_N_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class TimestampMixin:
    """Audit columns shared by every document table (unix values in ms)."""

    created_at = Column(String, default=get_utc_iso8601_timestamp)
    updated_at = Column(String, default=get_utc_iso8601_timestamp, onupdate=get_utc_iso8601_timestamp)
    created_at_unix = Column(BigInteger, default=get_unix_timestamp)
    updated_at_unix = Column(BigInteger, default=get_unix_timestamp, onupdate=get_unix_timestamp)


class UserDocumentMixin(TimestampMixin):
    """Row owned by one user, with a surrogate integer key."""

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False, index=True)
