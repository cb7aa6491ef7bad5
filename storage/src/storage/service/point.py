"""Point ledger service.

History is append-only: a revocation is a new negative entry, never a delete.
``total_points`` only grows; ``current_points`` is clamped at zero.
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from storage.entity.dto import PointHistory, UserPoints, POINT_TYPES
from storage.repository import point_history as history_repo
from storage.repository import user_points as points_repo
from storage.service.feedback import feedback
from storage.util import get_today, get_unix_timestamp, days_between, truncate

PRIORITY_POINTS = {"low": 5, "medium": 10, "high": 15}
DEFAULT_TASK_POINTS = 10
SUB_TASK_POINTS = 3
HISTORY_WINDOW = 50

DAY_MS = 24 * 60 * 60 * 1000


def get_points_for_priority(priority: Optional[str]) -> int:
    return PRIORITY_POINTS.get(priority, DEFAULT_TASK_POINTS)


def get_login_bonus_points(streak: int) -> int:
    if streak >= 30:
        return 50
    if streak >= 14:
        return 30
    if streak >= 7:
        return 20
    if streak >= 3:
        return 15
    return 10


def load_user_points(user_id: str) -> Optional[UserPoints]:
    """Return the user's balance, creating a zeroed record on first access."""
    if not user_id:
        logger.warning("load_user_points called without a user")
        return None
    try:
        return points_repo.get_or_create(user_id)
    except SQLAlchemyError:
        logger.exception("Failed to load points for user {}", user_id)
        return UserPoints(user_id=user_id)


def load_point_history(user_id: str, limit: int = HISTORY_WINDOW) -> List[PointHistory]:
    if not user_id:
        return []
    try:
        return history_repo.list_entries(user_id, limit=limit)
    except SQLAlchemyError:
        logger.exception("Failed to load point history for user {}", user_id)
        return []


def _entry(user_id: str, type: str, points: int, description: str,
           task_id: Optional[str] = None, sub_task_id: Optional[str] = None) -> PointHistory:
    now = get_unix_timestamp()
    return PointHistory(
        user_id=user_id,
        type=type,
        points=points,
        description=description,
        task_id=task_id,
        sub_task_id=sub_task_id,
        date=get_today(now),
        timestamp=now,
    )


def _valid(user_id: str, type: str, points: int) -> bool:
    if not user_id:
        logger.warning("Point change ignored: no user")
        return False
    if points <= 0:
        logger.warning("Point change ignored: non-positive amount {}", points)
        return False
    if type not in POINT_TYPES:
        logger.warning("Point change ignored: unknown type {}", type)
        return False
    return True


def add_points(
    user_id: str,
    type: str,
    points: int,
    description: str,
    task_id: Optional[str] = None,
    sub_task_id: Optional[str] = None,
) -> Optional[UserPoints]:
    """Record an award and raise both the lifetime total and the balance."""
    if not _valid(user_id, type, points):
        return None
    try:
        balance = points_repo.credit(_entry(user_id, type, points, description, task_id, sub_task_id))
    except SQLAlchemyError:
        logger.exception("Failed to add {} points for user {}", points, user_id)
        return None
    logger.info("Added {} points user={} type={} task={}", points, user_id, type, task_id)
    return balance


def remove_points(
    user_id: str,
    type: str,
    points: int,
    description: str,
    task_id: Optional[str] = None,
    sub_task_id: Optional[str] = None,
) -> Optional[UserPoints]:
    """Record a revocation; the balance is clamped at zero and the total is kept."""
    if not _valid(user_id, type, points):
        return None
    try:
        balance = points_repo.debit(_entry(user_id, type, -points, description, task_id, sub_task_id))
    except SQLAlchemyError:
        logger.exception("Failed to remove {} points for user {}", points, user_id)
        return None
    logger.info("Removed {} points user={} type={} task={}", points, user_id, type, task_id)
    return balance


def spend_points(user_id: str, amount: int, description: str) -> bool:
    """Spend from the balance (shop purchases, games). Refused when the balance is too low."""
    if not _valid(user_id, "game_play", amount):
        return False
    try:
        balance = points_repo.spend(_entry(user_id, "game_play", -amount, description))
    except SQLAlchemyError:
        logger.exception("Failed to spend {} points for user {}", amount, user_id)
        feedback.set_message("Failed to use points")
        return False
    if balance is None:
        logger.info("Spend refused user={} amount={}: balance too low", user_id, amount)
        feedback.set_message(f"Not enough points (need {amount})")
        return False
    logger.info("Spent {} points user={} left={}", amount, user_id, balance.current_points)
    feedback.set_message(f"Used {amount} points")
    return True


def award_task_completion_points(user_id: str, task_id: str, task_text: str, priority: Optional[str]) -> int:
    points = get_points_for_priority(priority)
    description = f"Task completed: {truncate(task_text, 20)}"
    if add_points(user_id, "task_completion", points, description, task_id=task_id) is None:
        return 0
    feedback.set_message(f"+{points} points!")
    return points


def _net_task_points(user_id: str, task_id: str) -> int:
    entries = history_repo.list_entries(user_id, task_id=task_id, type="task_completion")
    return sum(e.points for e in entries if e.sub_task_id is None)


def revoke_task_completion_points(user_id: str, task_id: str, task_text: str) -> int:
    """Revoke whatever task-level completion points for ``task_id`` are still unconsumed.

    Earlier revocations are netted against earlier awards, so calling this twice
    without an award in between returns 0 the second time.
    """
    if not user_id:
        return 0
    try:
        outstanding = _net_task_points(user_id, task_id)
    except SQLAlchemyError:
        logger.exception("Failed to read point history for task {}", task_id)
        return 0
    if outstanding <= 0:
        return 0
    description = f"Task completion undone: {truncate(task_text, 20)}"
    if remove_points(user_id, "task_completion", outstanding, description, task_id=task_id) is None:
        return 0
    feedback.set_message(f"-{outstanding} points")
    return outstanding


def award_sub_task_completion_points(user_id: str, task_id: str, sub_task_id: str, sub_task_text: str) -> int:
    description = f"Subtask completed: {truncate(sub_task_text, 15)}"
    balance = add_points(user_id, "task_completion", SUB_TASK_POINTS, description,
                         task_id=task_id, sub_task_id=sub_task_id)
    return SUB_TASK_POINTS if balance is not None else 0


def revoke_sub_task_completion_points(user_id: str, task_id: str, sub_task_id: str, sub_task_text: str) -> int:
    """Revoke the fixed subtask award, correlated by ``sub_task_id``."""
    if not user_id:
        return 0
    try:
        entries = history_repo.list_entries(user_id, task_id=task_id, sub_task_id=sub_task_id,
                                            type="task_completion")
    except SQLAlchemyError:
        logger.exception("Failed to read point history for subtask {}", sub_task_id)
        return 0
    outstanding = min(SUB_TASK_POINTS, sum(e.points for e in entries))
    if outstanding <= 0:
        return 0
    description = f"Subtask completion undone: {truncate(sub_task_text, 15)}"
    if remove_points(user_id, "task_completion", outstanding, description,
                     task_id=task_id, sub_task_id=sub_task_id) is None:
        return 0
    feedback.set_message(f"Subtask undone: -{outstanding} points")
    return outstanding


def check_and_award_login_bonus(user_id: str, today: Optional[str] = None) -> int:
    """Award the daily login bonus once per calendar day. Returns points awarded."""
    user_points = load_user_points(user_id)
    if user_points is None:
        return 0
    today = today or get_today()
    if user_points.last_login_bonus_date == today:
        logger.debug("Login bonus already awarded today for {}", user_id)
        return 0

    streak = 1
    if user_points.last_login_date:
        gap = days_between(user_points.last_login_date, today)
        if gap == 0:
            return 0
        if gap == 1:
            streak = user_points.login_streak + 1
    bonus = get_login_bonus_points(streak)
    max_streak = max(streak, user_points.max_login_streak or 0)

    entry = _entry(user_id, "login_bonus", bonus, f"Login bonus ({streak} day streak)")
    try:
        if not points_repo.apply_login_bonus(entry, today, streak, max_streak):
            logger.info("Login bonus for {} on {} already recorded by another writer", user_id, today)
            return 0
    except SQLAlchemyError:
        logger.exception("Failed to award login bonus for {}", user_id)
        feedback.set_message("Could not award the login bonus")
        return 0

    if streak == 1:
        feedback.set_message(f"Login bonus: +{bonus} points!")
    else:
        feedback.set_message(f"{streak} day streak! Bonus +{bonus} points!")
    logger.info("Login bonus user={} streak={} points={}", user_id, streak, bonus)
    return bonus


def _sum_points(history: List[PointHistory], since_ms: Optional[int] = None, date: Optional[str] = None) -> int:
    total = 0
    for h in history:
        if date is not None and h.date != date:
            continue
        if since_ms is not None and h.timestamp < since_ms:
            continue
        total += h.points
    return total


def get_today_points(user_id: str) -> int:
    return _sum_points(load_point_history(user_id), date=get_today())


def get_weekly_points(user_id: str) -> int:
    return _sum_points(load_point_history(user_id), since_ms=get_unix_timestamp() - 7 * DAY_MS)


def get_monthly_points(user_id: str) -> int:
    return _sum_points(load_point_history(user_id), since_ms=get_unix_timestamp() - 30 * DAY_MS)
