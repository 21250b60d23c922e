from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.orm.password_history import PasswordHistory
from src.models.orm.user import User

_NEWEST_FIRST = (PasswordHistory.changed_at.desc(), PasswordHistory.id.desc())


async def lock_user(db: AsyncSession, user_id: UUID) -> User | None:
    """Take a row lock on the owning user for the rest of the transaction.

    Record-then-purge for one user must run under this lock, otherwise two
    concurrent password changes can both read the pre-change history.
    """
    result = await db.execute(
        select(User).where(User.id == user_id).with_for_update()
    )
    return result.scalar_one_or_none()


async def create(
    db: AsyncSession,
    *,
    user_id: UUID,
    password_hash: str,
    changed_at: datetime,
) -> PasswordHistory:
    entry = PasswordHistory(
        user_id=user_id,
        password_hash=password_hash,
        changed_at=changed_at,
    )
    db.add(entry)
    await db.flush()
    return entry


async def get_recent(
    db: AsyncSession, user_id: UUID, limit: int
) -> list[PasswordHistory]:
    result = await db.execute(
        select(PasswordHistory)
        .where(PasswordHistory.user_id == user_id)
        .order_by(*_NEWEST_FIRST)
        .limit(limit)
    )
    return list(result.scalars().all())


async def get_all_for_user(
    db: AsyncSession, user_id: UUID, *, for_update: bool = False
) -> list[PasswordHistory]:
    stmt = (
        select(PasswordHistory)
        .where(PasswordHistory.user_id == user_id)
        .order_by(*_NEWEST_FIRST)
    )
    if for_update:
        stmt = stmt.with_for_update()
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def count_for_user(db: AsyncSession, user_id: UUID) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(PasswordHistory)
        .where(PasswordHistory.user_id == user_id)
    )
    return result.scalar() or 0


async def delete_by_ids(db: AsyncSession, ids: Sequence[int]) -> int:
    if not ids:
        return 0
    result = await db.execute(
        delete(PasswordHistory).where(PasswordHistory.id.in_(ids))
    )
    return result.rowcount


async def delete_all_for_user(db: AsyncSession, user_id: UUID) -> int:
    result = await db.execute(
        delete(PasswordHistory).where(PasswordHistory.user_id == user_id)
    )
    return result.rowcount
