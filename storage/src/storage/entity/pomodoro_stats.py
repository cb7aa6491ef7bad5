from sqlalchemy import Column, Integer, String, UniqueConstraint
from .base import Base, UserDocumentMixin


class PomodoroStatsEntity(Base, UserDocumentMixin):
    __tablename__ = "pomodoro_stats"

    date = Column(String, nullable=False)
    completed_sessions = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("user_id", "date"),
    )
