"""Function-based task repository using SQLAlchemy sessions.

Writes for a user re-deliver that user's full task list to every subscriber
registered through :func:`subscribe`.
"""

from typing import Callable, Dict, List, Optional

from loguru import logger
from sqlalchemy import case

from storage.database.base import get_db
from storage.entity.dto import SubTask, Task
from storage.entity.task import TaskEntity
from storage.errors import NotFoundError

TaskListener = Callable[[List[Task]], None]

_listeners: Dict[str, List[TaskListener]] = {}

_PRIORITY_ORDER = case(
    (TaskEntity.priority == "urgent", 0),
    (TaskEntity.priority == "high", 1),
    (TaskEntity.priority == "medium", 2),
    (TaskEntity.priority == "low", 3),
    else_=4,
)

_FIELDS = (
    "text", "completed", "completed_at", "priority", "deadline", "memo", "order",
    "estimated_minutes", "actual_minutes", "scheduled_for_deletion",
)


def _entity_to_dto(entity: TaskEntity) -> Task:
    sub_tasks = [SubTask.from_dict(st) for st in (entity.sub_tasks or [])]
    return Task(
        task_id=entity.task_id,
        text=entity.text,
        completed=entity.completed,
        completed_at=entity.completed_at,
        priority=entity.priority,
        deadline=entity.deadline,
        memo=entity.memo,
        order=entity.order,
        estimated_minutes=entity.estimated_minutes,
        actual_minutes=entity.actual_minutes,
        scheduled_for_deletion=entity.scheduled_for_deletion,
        sub_tasks=sub_tasks,
        sub_tasks_count=len(sub_tasks),
        completed_sub_tasks_count=sum(1 for st in sub_tasks if st.completed),
        created_at=entity.created_at if entity.created_at else None,
        updated_at=entity.updated_at if entity.updated_at else None,
        created_at_unix=entity.created_at_unix if entity.created_at_unix else None,
        updated_at_unix=entity.updated_at_unix if entity.updated_at_unix else None,
    )


def _apply(entity: TaskEntity, fields: dict):
    for key, value in fields.items():
        if key == "sub_tasks":
            value = [st.to_dict() if isinstance(st, SubTask) else st for st in value]
            entity.sub_tasks_count = len(value)
            entity.completed_sub_tasks_count = sum(1 for st in value if st.get("completed"))
        setattr(entity, key, value)


def list_tasks(user_id: str, completed: Optional[bool] = None, priority: Optional[str] = None) -> List[Task]:
    with get_db() as session:
        query = session.query(TaskEntity).filter_by(user_id=user_id)
        if completed is not None:
            query = query.filter_by(completed=completed)
        if priority:
            query = query.filter_by(priority=priority)
        query = query.order_by(TaskEntity.order.asc(), _PRIORITY_ORDER.asc())
        return [_entity_to_dto(row) for row in query.all()]


def get_task(user_id: str, task_id: str) -> Optional[Task]:
    with get_db() as session:
        row = session.query(TaskEntity).filter_by(user_id=user_id, task_id=task_id).first()
        return _entity_to_dto(row) if row else None


def create_task(user_id: str, task: Task) -> Task:
    with get_db() as session:
        fields = {k: getattr(task, k) for k in _FIELDS}
        fields["sub_tasks"] = task.sub_tasks
        entity = TaskEntity(user_id=user_id, task_id=task.task_id)
        _apply(entity, fields)
        session.add(entity)
        session.flush()
        saved = _entity_to_dto(entity)
    _notify(user_id)
    return saved


def update_task(user_id: str, task_id: str, **fields) -> Task:
    """Partial update. Raises NotFoundError when the task does not exist."""
    with get_db() as session:
        entity = session.query(TaskEntity).filter_by(user_id=user_id, task_id=task_id).first()
        if entity is None:
            raise NotFoundError("task", task_id)
        _apply(entity, fields)
        session.flush()
        saved = _entity_to_dto(entity)
    _notify(user_id)
    return saved


def delete_task(user_id: str, task_id: str) -> bool:
    with get_db() as session:
        count = session.query(TaskEntity).filter_by(user_id=user_id, task_id=task_id).delete()
        session.flush()
    if count:
        _notify(user_id)
    return count > 0


def count_tasks(user_id: str) -> int:
    with get_db() as session:
        return session.query(TaskEntity).filter_by(user_id=user_id).count()


def list_expired_completed(cutoff_ms: int, user_id: Optional[str] = None) -> List[tuple]:
    """(user_id, task) pairs completed before ``cutoff_ms`` and scheduled for deletion."""
    with get_db() as session:
        query = session.query(TaskEntity).filter(
            TaskEntity.completed.is_(True),
            TaskEntity.scheduled_for_deletion.is_(True),
            TaskEntity.completed_at.isnot(None),
            TaskEntity.completed_at < cutoff_ms,
        )
        if user_id is not None:
            query = query.filter_by(user_id=user_id)
        return [(row.user_id, _entity_to_dto(row)) for row in query.all()]


def subscribe(user_id: str, on_change: TaskListener) -> Callable[[], None]:
    """Register ``on_change`` and deliver the current snapshot immediately."""
    _listeners.setdefault(user_id, []).append(on_change)
    _deliver(on_change, list_tasks(user_id))

    def unsubscribe():
        listeners = _listeners.get(user_id, [])
        if on_change in listeners:
            listeners.remove(on_change)
        if not listeners:
            _listeners.pop(user_id, None)

    return unsubscribe


def _notify(user_id: str):
    listeners = list(_listeners.get(user_id, []))
    if not listeners:
        return
    snapshot = list_tasks(user_id)
    for listener in listeners:
        _deliver(listener, snapshot)


def _deliver(listener: TaskListener, snapshot: List[Task]):
    try:
        listener(list(snapshot))
    except Exception:
        logger.exception("Task listener {} failed", listener)
