"""Append-only point history repository."""

from typing import List, Optional

from sqlalchemy.orm import Session

from storage.entity.point import PointHistoryEntity
from storage.entity.dto import PointHistory
from storage.database.base import get_db
from storage.util import generate_id


def _entity_to_dto(entity: PointHistoryEntity) -> PointHistory:
    return PointHistory(
        entry_id=entity.entry_id,
        user_id=entity.user_id,
        type=entity.type,
        points=entity.points,
        description=entity.description,
        task_id=entity.task_id,
        sub_task_id=entity.sub_task_id,
        date=entity.date,
        timestamp=entity.timestamp,
    )


def insert_entry(session: Session, entry: PointHistory) -> PointHistory:
    """Add ``entry`` inside the caller's session; committed with the caller's balance change."""
    entity = PointHistoryEntity(
        entry_id=entry.entry_id or generate_id(),
        user_id=entry.user_id,
        type=entry.type,
        points=entry.points,
        description=entry.description,
        task_id=entry.task_id,
        sub_task_id=entry.sub_task_id,
        date=entry.date,
        timestamp=entry.timestamp,
    )
    session.add(entity)
    session.flush()
    return _entity_to_dto(entity)


def list_entries(
    user_id: str,
    task_id: Optional[str] = None,
    sub_task_id: Optional[str] = None,
    type: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[PointHistory]:
    """Entries for a user, newest first, filtered by equality on the given fields."""
    with get_db() as session:
        query = session.query(PointHistoryEntity).filter_by(user_id=user_id)
        if task_id is not None:
            query = query.filter_by(task_id=task_id)
        if sub_task_id is not None:
            query = query.filter_by(sub_task_id=sub_task_id)
        if type is not None:
            query = query.filter_by(type=type)
        query = query.order_by(PointHistoryEntity.timestamp.desc(), PointHistoryEntity.id.desc())
        if limit:
            query = query.limit(limit)
        return [_entity_to_dto(row) for row in query.all()]
