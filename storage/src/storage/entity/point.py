from sqlalchemy import Column, Integer, String, BigInteger, Index
from .base import Base, TimestampMixin, UserDocumentMixin


class PointHistoryEntity(Base, UserDocumentMixin):
    __tablename__ = "point_history"

    entry_id = Column(String, nullable=False, unique=True)
    type = Column(String, nullable=False)
    points = Column(Integer, nullable=False)
    description = Column(String, nullable=False, default="")
    task_id = Column(String, nullable=True)
    sub_task_id = Column(String, nullable=True)
    date = Column(String, nullable=False)
    timestamp = Column(BigInteger, nullable=False)

    __table_args__ = (
        Index("ix_point_history_user_task", "user_id", "task_id"),
    )


class UserPointsEntity(Base, TimestampMixin):
    __tablename__ = "user_points"

    user_id = Column(String, primary_key=True)
    total_points = Column(Integer, nullable=False, default=0)
    current_points = Column(Integer, nullable=False, default=0)
    login_streak = Column(Integer, nullable=False, default=0)
    max_login_streak = Column(Integer, nullable=False, default=0)
    last_login_date = Column(String, nullable=True)
    last_login_bonus_date = Column(String, nullable=True)
