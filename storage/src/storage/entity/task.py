from sqlalchemy import Column, Integer, String, Text, Boolean, BigInteger, UniqueConstraint, JSON
from .base import Base, UserDocumentMixin


class TaskEntity(Base, UserDocumentMixin):
    __tablename__ = "enhanced_task"

    task_id = Column(String, nullable=False)
    text = Column(String, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(BigInteger, nullable=True)
    priority = Column(String, nullable=False, default="medium")
    deadline = Column(String, nullable=True)
    memo = Column(Text, nullable=True)
    order = Column(Integer, nullable=False, default=0)
    estimated_minutes = Column(Integer, nullable=True)
    actual_minutes = Column(Integer, nullable=True)
    scheduled_for_deletion = Column(Boolean, nullable=False, default=False)
    sub_tasks = Column(JSON, nullable=False, default=list)
    sub_tasks_count = Column(Integer, nullable=False, default=0)
    completed_sub_tasks_count = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("user_id", "task_id"),
    )
