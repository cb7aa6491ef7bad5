"""User points balance repository.

Every balance change is written together with its history entry in one
session, so a failure leaves neither behind.
"""

from typing import Optional
from sqlalchemy import case, or_, update
from sqlalchemy.orm import Session
from storage.entity.point import UserPointsEntity
from storage.entity.dto import PointHistory, UserPoints
from storage.database.base import get_db
from storage.repository import point_history as history_repo


def _entity_to_dto(entity: UserPointsEntity) -> UserPoints:
    return UserPoints(
        user_id=entity.user_id,
        total_points=entity.total_points,
        current_points=entity.current_points,
        login_streak=entity.login_streak,
        max_login_streak=entity.max_login_streak,
        last_login_date=entity.last_login_date,
        last_login_bonus_date=entity.last_login_bonus_date,
    )


def _ensure_row(session: Session, user_id: str) -> UserPointsEntity:
    row = session.get(UserPointsEntity, user_id)
    if row is None:
        row = UserPointsEntity(
            user_id=user_id,
            total_points=0,
            current_points=0,
            login_streak=0,
            max_login_streak=0,
        )
        session.add(row)
        session.flush()
    return row


def _reload(session: Session, user_id: str) -> UserPoints:
    return _entity_to_dto(session.get(UserPointsEntity, user_id, populate_existing=True))


def _add_to_balance(session: Session, user_id: str, points: int):
    session.execute(
        update(UserPointsEntity)
        .where(UserPointsEntity.user_id == user_id)
        .values(
            total_points=UserPointsEntity.total_points + points,
            current_points=UserPointsEntity.current_points + points,
        )
    )


def _subtract_from_balance(session: Session, user_id: str, points: int):
    session.execute(
        update(UserPointsEntity)
        .where(UserPointsEntity.user_id == user_id)
        .values(
            current_points=case(
                (UserPointsEntity.current_points > points, UserPointsEntity.current_points - points),
                else_=0,
            )
        )
    )


def get_user_points(user_id: str) -> Optional[UserPoints]:
    with get_db() as session:
        row = session.get(UserPointsEntity, user_id)
        return _entity_to_dto(row) if row else None


def get_or_create(user_id: str) -> UserPoints:
    with get_db() as session:
        return _entity_to_dto(_ensure_row(session, user_id))


def credit(entry: PointHistory) -> UserPoints:
    """Record a positive ``entry`` and add it to both the lifetime total and the balance."""
    with get_db() as session:
        _ensure_row(session, entry.user_id)
        history_repo.insert_entry(session, entry)
        _add_to_balance(session, entry.user_id, entry.points)
        return _reload(session, entry.user_id)


def debit(entry: PointHistory) -> UserPoints:
    """Record a negative ``entry``; the balance is clamped at zero and the total is kept."""
    with get_db() as session:
        _ensure_row(session, entry.user_id)
        history_repo.insert_entry(session, entry)
        _subtract_from_balance(session, entry.user_id, -entry.points)
        return _reload(session, entry.user_id)


def spend(entry: PointHistory) -> Optional[UserPoints]:
    """Take ``-entry.points`` from the balance only if it covers the amount.

    Returns None, writing nothing, when the balance is too low.
    """
    amount = -entry.points
    with get_db() as session:
        _ensure_row(session, entry.user_id)
        result = session.execute(
            update(UserPointsEntity)
            .where(
                UserPointsEntity.user_id == entry.user_id,
                UserPointsEntity.current_points >= amount,
            )
            .values(current_points=UserPointsEntity.current_points - amount)
        )
        if result.rowcount != 1:
            return None
        history_repo.insert_entry(session, entry)
        return _reload(session, entry.user_id)


def apply_login_bonus(entry: PointHistory, today: str, streak: int, max_streak: int) -> bool:
    """Record today's login bonus unless one was already recorded today.

    Returns False, writing nothing, when another writer got there first.
    """
    with get_db() as session:
        _ensure_row(session, entry.user_id)
        result = session.execute(
            update(UserPointsEntity)
            .where(
                UserPointsEntity.user_id == entry.user_id,
                or_(
                    UserPointsEntity.last_login_bonus_date.is_(None),
                    UserPointsEntity.last_login_bonus_date != today,
                ),
            )
            .values(
                last_login_date=today,
                last_login_bonus_date=today,
                login_streak=streak,
                max_login_streak=max_streak,
                total_points=UserPointsEntity.total_points + entry.points,
                current_points=UserPointsEntity.current_points + entry.points,
            )
        )
        if result.rowcount != 1:
            return False
        history_repo.insert_entry(session, entry)
        return True
