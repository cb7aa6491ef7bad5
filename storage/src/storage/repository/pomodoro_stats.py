"""Daily pomodoro session counters."""

from typing import Optional
from sqlalchemy import update
from storage.entity.pomodoro_stats import PomodoroStatsEntity
from storage.entity.dto import PomodoroStats
from storage.database.base import get_db


def _entity_to_dto(entity: PomodoroStatsEntity) -> PomodoroStats:
    return PomodoroStats(user_id=entity.user_id, date=entity.date, completed_sessions=entity.completed_sessions)


def get_stats(user_id: str, date: str) -> Optional[PomodoroStats]:
    with get_db() as session:
        row = session.query(PomodoroStatsEntity).filter_by(user_id=user_id, date=date).first()
        return _entity_to_dto(row) if row else None


def increment_sessions(user_id: str, date: str) -> PomodoroStats:
    with get_db() as session:
        result = session.execute(
            update(PomodoroStatsEntity)
            .where(PomodoroStatsEntity.user_id == user_id, PomodoroStatsEntity.date == date)
            .values(completed_sessions=PomodoroStatsEntity.completed_sessions + 1)
        )
        if result.rowcount == 0:
            session.add(PomodoroStatsEntity(user_id=user_id, date=date, completed_sessions=1))
        session.flush()
        row = session.query(PomodoroStatsEntity).filter_by(user_id=user_id, date=date).populate_existing().first()
        return _entity_to_dto(row)
