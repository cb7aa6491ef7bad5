"""Plain data objects passed between repositories, services and the API."""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

PRIORITIES = ("low", "medium", "high", "urgent")
POINT_TYPES = ("task_completion", "login_bonus", "daily_bonus", "streak_bonus", "game_play")


@dataclass
class SubTask:
    id: str
    text: str
    completed: bool = False
    completed_at: Optional[int] = None
    order: int = 0
    created_at: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubTask":
        return cls(
            id=data["id"],
            text=data["text"],
            completed=bool(data.get("completed", False)),
            completed_at=data.get("completed_at"),
            order=data.get("order", 0),
            created_at=data.get("created_at"),
        )


@dataclass
class Task:
    task_id: str
    text: str
    completed: bool = False
    completed_at: Optional[int] = None
    priority: str = "medium"
    deadline: Optional[str] = None
    memo: Optional[str] = None
    order: int = 0
    estimated_minutes: Optional[int] = None
    actual_minutes: Optional[int] = None
    scheduled_for_deletion: bool = False
    sub_tasks: List[SubTask] = field(default_factory=list)
    sub_tasks_count: int = 0
    completed_sub_tasks_count: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    created_at_unix: Optional[int] = None
    updated_at_unix: Optional[int] = None

    def get_sub_task(self, sub_task_id: str) -> Optional[SubTask]:
        for st in self.sub_tasks:
            if st.id == sub_task_id:
                return st
        return None

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["sub_tasks"] = [st.to_dict() for st in self.sub_tasks]
        return d


@dataclass
class PointHistory:
    user_id: str
    type: str
    points: int
    description: str
    date: str
    timestamp: int
    task_id: Optional[str] = None
    sub_task_id: Optional[str] = None
    entry_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class UserPoints:
    user_id: str
    total_points: int = 0
    current_points: int = 0
    login_streak: int = 0
    max_login_streak: int = 0
    last_login_date: Optional[str] = None
    last_login_bonus_date: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PomodoroStats:
    user_id: str
    date: str
    completed_sessions: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class TaskAnalytics:
    total_tasks: int
    completed_tasks: int
    total_sub_tasks: int
    completed_sub_tasks: int
    average_sub_tasks_per_task: float
    tasks_with_memo: int
    tasks_with_sub_tasks: int
    estimated_total_minutes: int
    actual_total_minutes: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
