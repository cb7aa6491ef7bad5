"""Task service: CRUD, completion reconciliation with the point ledger, retention sweep."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from storage.entity.dto import PRIORITIES, SubTask, Task, TaskAnalytics
from storage.errors import NotFoundError
from storage.repository import task as task_repo
from storage.service import point as point_service
from storage.service.feedback import feedback
from storage.util import generate_id, generate_sub_task_id, get_today, get_unix_timestamp

RETENTION_MS = 7 * 24 * 60 * 60 * 1000

SORT_FIELDS = ("created", "deadline", "priority", "progress", "alphabetical")
FILTERS = ("all", "active", "completed")
_PRIORITY_RANK = {"low": 1, "medium": 2, "high": 3, "urgent": 4}

_cue: Optional[Callable[[str], None]] = None


@dataclass
class ToggleResult:
    task: Task
    completed: bool
    points: int
    message: str


def set_completion_cue(cue: Optional[Callable[[str], None]]):
    """Install the callback that plays completion sounds ("task-complete", "sub-task-complete")."""
    global _cue
    _cue = cue


def _play_cue(name: str):
    if _cue is None:
        return
    try:
        _cue(name)
    except Exception:
        logger.exception("Completion cue {} failed", name)


def _lookup(user_id: str, task_id: str) -> Optional[Task]:
    if not user_id:
        logger.warning("Task operation without a user (task={})", task_id)
        return None
    try:
        task = task_repo.get_task(user_id, task_id)
    except SQLAlchemyError:
        logger.exception("Failed to load task {}", task_id)
        feedback.set_message("Failed to load the task")
        return None
    if task is None:
        logger.warning("Task {} not found for user {}", task_id, user_id)
    return task


def _write(user_id: str, task_id: str, failure: str, **fields) -> Optional[Task]:
    try:
        return task_repo.update_task(user_id, task_id, **fields)
    except (SQLAlchemyError, NotFoundError):
        logger.exception("Failed to update task {}", task_id)
        feedback.set_message(failure)
        return None


# ---------------------------------------------------------------------------
# Loading and CRUD
# ---------------------------------------------------------------------------

def load_tasks(user_id: str) -> List[Task]:
    """Load a user's tasks, then run the retention sweep for that user."""
    if not user_id:
        logger.info("No user; returning an empty task list")
        return []
    try:
        tasks = task_repo.list_tasks(user_id)
    except SQLAlchemyError:
        logger.exception("Failed to load tasks for user {}", user_id)
        feedback.set_message("Failed to load tasks. Please reload.")
        return []
    if check_and_delete_completed_tasks(user_id) > 0:
        return task_repo.list_tasks(user_id)
    return tasks


def get_task(user_id: str, task_id: str) -> Optional[Task]:
    return _lookup(user_id, task_id)


def add_task(
    user_id: str,
    text: str,
    deadline: Optional[str] = None,
    priority: str = "medium",
    memo: Optional[str] = None,
) -> Optional[Task]:
    if not user_id:
        logger.warning("add_task called without a user")
        return None
    text = (text or "").strip()
    if not text:
        raise ValueError("Task text must not be empty")
    if priority not in PRIORITIES:
        raise ValueError(f"Unknown priority '{priority}'")
    try:
        task = Task(
            task_id=generate_id(),
            text=text,
            priority=priority,
            deadline=deadline.strip() if deadline and deadline.strip() else None,
            memo=memo if memo and memo.strip() else None,
            order=task_repo.count_tasks(user_id) + 1,
        )
        task = task_repo.create_task(user_id, task)
    except SQLAlchemyError:
        logger.exception("Failed to add task for user {}", user_id)
        feedback.set_message("Failed to add the task")
        return None
    feedback.set_message(f"Added task '{text}'")
    return task


def remove_task(user_id: str, task_id: str) -> bool:
    task = _lookup(user_id, task_id)
    if not task:
        return False
    try:
        deleted = task_repo.delete_task(user_id, task_id)
    except SQLAlchemyError:
        logger.exception("Failed to delete task {}", task_id)
        feedback.set_message("Failed to delete the task")
        return False
    feedback.set_message(f"Deleted task '{task.text}'")
    return deleted


def update_task(user_id: str, task_id: str, **fields) -> Optional[Task]:
    """Update editable fields: text, deadline, priority, memo, estimated_minutes, actual_minutes."""
    task = _lookup(user_id, task_id)
    if not task:
        return None
    allowed = {"text", "deadline", "priority", "memo", "estimated_minutes", "actual_minutes"}
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
    if "priority" in fields and fields["priority"] not in PRIORITIES:
        raise ValueError(f"Unknown priority '{fields['priority']}'")
    changed = {k: v for k, v in fields.items() if getattr(task, k) != v}
    if not changed:
        return task
    return _write(user_id, task_id, "Failed to update the task", **changed)


# ---------------------------------------------------------------------------
# Completion reconciliation
# ---------------------------------------------------------------------------

def toggle_complete_task(user_id: str, task_id: str) -> Optional[ToggleResult]:
    """Flip completion, then award or revoke the task's points."""
    task = _lookup(user_id, task_id)
    if not task:
        return None

    new_completed = not task.completed
    updated = _write(
        user_id, task_id, "Failed to change the task status",
        completed=new_completed,
        completed_at=get_unix_timestamp() if new_completed else None,
        scheduled_for_deletion=new_completed,
    )
    if updated is None:
        return None

    if new_completed:
        _play_cue("task-complete")
        points = point_service.award_task_completion_points(user_id, task_id, task.text, task.priority)
        message = f"Completed '{task.text}'! +{points} points"
    else:
        revoked = point_service.revoke_task_completion_points(user_id, task_id, task.text)
        points = -revoked
        if revoked > 0:
            message = f"Task completion undone. -{revoked} points"
        else:
            message = f"'{task.text}' marked as not completed"

    feedback.set_message(message)
    return ToggleResult(task=updated, completed=new_completed, points=points, message=message)


def toggle_complete_sub_task(user_id: str, task_id: str, sub_task_id: str) -> Optional[ToggleResult]:
    task = _lookup(user_id, task_id)
    if not task:
        return None
    sub_task = task.get_sub_task(sub_task_id)
    if not sub_task:
        logger.warning("Subtask {} not found in task {}", sub_task_id, task_id)
        return None

    new_completed = not sub_task.completed
    now = get_unix_timestamp()
    sub_tasks = []
    for st in task.sub_tasks:
        if st.id == sub_task_id:
            st = SubTask(
                id=st.id, text=st.text, completed=new_completed,
                completed_at=now if new_completed else None,
                order=st.order, created_at=st.created_at,
            )
        sub_tasks.append(st)

    updated = _write(user_id, task_id, "Failed to change the subtask status", sub_tasks=sub_tasks)
    if updated is None:
        return None

    if new_completed:
        _play_cue("sub-task-complete")
        points = point_service.award_sub_task_completion_points(user_id, task_id, sub_task_id, sub_task.text)
        message = f"Subtask completed! +{points} points"
    else:
        revoked = point_service.revoke_sub_task_completion_points(user_id, task_id, sub_task_id, sub_task.text)
        points = -revoked
        message = f"Subtask undone: -{revoked} points" if revoked > 0 else "Subtask marked as not completed"

    feedback.set_message(message)
    return ToggleResult(task=updated, completed=new_completed, points=points, message=message)


def check_and_delete_completed_tasks(user_id: Optional[str] = None, now: Optional[int] = None) -> int:
    """Delete tasks completed more than a week ago. Failures are left for the next run."""
    now = now if now is not None else get_unix_timestamp()
    try:
        expired = task_repo.list_expired_completed(now - RETENTION_MS, user_id=user_id)
    except SQLAlchemyError:
        logger.exception("Retention sweep could not query expired tasks")
        return 0
    if not expired:
        return 0

    deleted = 0
    for owner, task in expired:
        try:
            if task_repo.delete_task(owner, task.task_id):
                deleted += 1
        except SQLAlchemyError:
            logger.exception("Retention sweep failed to delete task {} (user {})", task.task_id, owner)
    if deleted:
        logger.info("Retention sweep deleted {} completed tasks", deleted)
        if user_id:
            feedback.set_message(f"Removed {deleted} tasks completed over a week ago")
    return deleted


# ---------------------------------------------------------------------------
# Subtasks
# ---------------------------------------------------------------------------

def _renumber(sub_tasks: List[SubTask]) -> List[SubTask]:
    for index, st in enumerate(sub_tasks, start=1):
        st.order = index
    return sub_tasks


def add_sub_task(user_id: str, task_id: str, text: str) -> Optional[SubTask]:
    task = _lookup(user_id, task_id)
    if not task:
        return None
    text = (text or "").strip()
    if not text:
        raise ValueError("Subtask text must not be empty")
    sub_task = SubTask(
        id=generate_sub_task_id(),
        text=text,
        order=len(task.sub_tasks) + 1,
        created_at=get_unix_timestamp(),
    )
    if _write(user_id, task_id, "Failed to add the subtask", sub_tasks=task.sub_tasks + [sub_task]) is None:
        return None
    feedback.set_message(f"Added subtask '{text}'")
    return sub_task


def update_sub_task(user_id: str, task_id: str, sub_task_id: str, text: Optional[str] = None) -> Optional[Task]:
    task = _lookup(user_id, task_id)
    if not task:
        return None
    sub_task = task.get_sub_task(sub_task_id)
    if not sub_task:
        return None
    if text is not None:
        text = text.strip()
        if not text:
            raise ValueError("Subtask text must not be empty")
        sub_task.text = text
    return _write(user_id, task_id, "Failed to update the subtask", sub_tasks=task.sub_tasks)


def remove_sub_task(user_id: str, task_id: str, sub_task_id: str) -> Optional[Task]:
    task = _lookup(user_id, task_id)
    if not task:
        return None
    sub_task = task.get_sub_task(sub_task_id)
    if not sub_task:
        return None
    remaining = _renumber([st for st in task.sub_tasks if st.id != sub_task_id])
    updated = _write(user_id, task_id, "Failed to delete the subtask", sub_tasks=remaining)
    if updated is not None:
        feedback.set_message(f"Deleted subtask '{sub_task.text}'")
    return updated


def reorder_sub_tasks(user_id: str, task_id: str, new_order: List[str]) -> Optional[Task]:
    """Reorder by id list. Unknown ids are ignored; subtasks left out keep their relative order at the end."""
    task = _lookup(user_id, task_id)
    if not task:
        return None
    by_id = {st.id: st for st in task.sub_tasks}
    ordered = [by_id.pop(sid) for sid in new_order if sid in by_id]
    ordered.extend(st for st in task.sub_tasks if st.id in by_id)
    return _write(user_id, task_id, "Failed to reorder subtasks", sub_tasks=_renumber(ordered))


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def calculate_total_progress(task: Task) -> int:
    """Progress 0-100: the task itself weighs 30%, its subtasks 70%."""
    if not task.sub_tasks:
        return 100 if task.completed else 0
    done = sum(1 for st in task.sub_tasks if st.completed)
    sub_progress = round(done / len(task.sub_tasks) * 100)
    main_progress = 100 if task.completed else 0
    return round(main_progress * 0.3 + sub_progress * 0.7)


def filter_tasks(tasks: List[Task], filter: str = "all") -> List[Task]:
    if filter == "active":
        return [t for t in tasks if not t.completed]
    if filter == "completed":
        return [t for t in tasks if t.completed]
    return list(tasks)


def sort_tasks(tasks: List[Task], sort_by: str = "priority", sort_order: str = "desc") -> List[Task]:
    """Sort tasks. ``desc`` puts the most important, latest, newest, most progressed or Z-first on top.

    Tasks without a deadline always sort last when sorting by deadline.
    """
    if sort_by not in SORT_FIELDS:
        raise ValueError(f"Unknown sort field '{sort_by}'")
    reverse = sort_order == "desc"
    if sort_by == "deadline":
        dated = sorted((t for t in tasks if t.deadline), key=lambda t: t.deadline, reverse=reverse)
        return dated + [t for t in tasks if not t.deadline]
    keys = {
        "priority": lambda t: _PRIORITY_RANK.get(t.priority, 0),
        "created": lambda t: t.created_at_unix or 0,
        "progress": calculate_total_progress,
        "alphabetical": lambda t: t.text.casefold(),
    }
    return sorted(tasks, key=keys[sort_by], reverse=reverse)


def get_sorted_tasks(user_id: str, filter: str = "all", sort_by: str = "priority", sort_order: str = "desc") -> List[Task]:
    return sort_tasks(filter_tasks(load_tasks(user_id), filter), sort_by, sort_order)


def get_overdue_tasks(user_id: str) -> List[Task]:
    today = get_today()
    return [t for t in load_tasks(user_id) if not t.completed and t.deadline and t.deadline < today]


def get_tasks_due_today(user_id: str) -> List[Task]:
    today = get_today()
    return [t for t in load_tasks(user_id) if not t.completed and t.deadline == today]


def get_tasks_due_soon(user_id: str, days: int = 3) -> List[Task]:
    today = datetime.now(timezone.utc).date()
    start = today.isoformat()
    end = (today + timedelta(days=days)).isoformat()
    return [t for t in load_tasks(user_id) if not t.completed and t.deadline and start <= t.deadline <= end]


def get_task_analytics(user_id: str) -> TaskAnalytics:
    tasks = load_tasks(user_id)
    total = len(tasks)
    total_sub = sum(len(t.sub_tasks) for t in tasks)
    return TaskAnalytics(
        total_tasks=total,
        completed_tasks=sum(1 for t in tasks if t.completed),
        total_sub_tasks=total_sub,
        completed_sub_tasks=sum(1 for t in tasks for st in t.sub_tasks if st.completed),
        average_sub_tasks_per_task=total_sub / total if total else 0,
        tasks_with_memo=sum(1 for t in tasks if t.memo),
        tasks_with_sub_tasks=sum(1 for t in tasks if t.sub_tasks),
        estimated_total_minutes=sum(t.estimated_minutes or 0 for t in tasks),
        actual_total_minutes=sum(t.actual_minutes or 0 for t in tasks),
    )
