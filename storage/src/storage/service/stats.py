"""Pomodoro statistics service."""

from typing import Optional
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from storage.entity.dto import PomodoroStats
from storage.repository import pomodoro_stats as stats_repo
from storage.util import get_today


def get_today_stats(user_id: str) -> Optional[PomodoroStats]:
    if not user_id:
        return None
    return stats_repo.get_stats(user_id, get_today())


def increment_pomodoro(user_id: str) -> Optional[PomodoroStats]:
    if not user_id:
        logger.warning("Pomodoro completed without a user; stats not recorded")
        return None
    try:
        stats = stats_repo.increment_sessions(user_id, get_today())
    except SQLAlchemyError:
        logger.exception("Failed to record pomodoro for user {}", user_id)
        return None
    logger.info("Pomodoro sessions today user={} count={}", user_id, stats.completed_sessions)
    return stats
