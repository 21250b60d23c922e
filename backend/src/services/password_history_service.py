"""Password history retention: record, purge and reuse checks.

Hashing and hash verification live outside this module. Callers pass an
already computed hash to ``record_new_password`` and a matcher callable to
``is_reused``.
"""
import logging
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.exceptions import PasswordReusedError
from src.models.orm.password_history import PasswordHistory
from src.repositories import password_history_repo

logger = logging.getLogger(__name__)

HashMatcher = Callable[[str], bool]

T = TypeVar("T")


def validate_keep_count(keep_count: int) -> None:
    """Reject keep counts that would allow purging the newest entry."""
    if keep_count < 1:
        raise ValueError(f"keep_count must be at least 1, got {keep_count}")


def select_stale_entries(entries: Sequence[T], keep_count: int) -> list[T]:
    """Return the entries beyond the ``keep_count`` newest.

    ``entries`` must already be ordered newest first.
    """
    validate_keep_count(keep_count)
    return list(entries[keep_count:])


async def record_new_password(
    db: AsyncSession, user_id: UUID, password_hash: str
) -> PasswordHistory:
    """Append a history entry stamped with the current time. Does not purge."""
    entry = await password_history_repo.create(
        db,
        user_id=user_id,
        password_hash=password_hash,
        changed_at=datetime.now(timezone.utc),
    )
    logger.debug("Recorded password history entry for user %s", user_id)
    return entry


async def purge(db: AsyncSession, user_id: UUID, keep_count: int) -> int:
    """Delete all but the ``keep_count`` most recent entries. Returns rows removed."""
    validate_keep_count(keep_count)
    entries = await password_history_repo.get_all_for_user(db, user_id, for_update=True)
    stale = select_stale_entries(entries, keep_count)
    if not stale:
        return 0
    removed = await password_history_repo.delete_by_ids(db, [e.id for e in stale])
    logger.info(
        "Purged %d password history entries for user %s (keeping %d)",
        removed, user_id, keep_count,
    )
    return removed


async def is_reused(
    db: AsyncSession,
    user_id: UUID,
    matcher: HashMatcher,
    *,
    limit: int | None = None,
) -> bool:
    """True if ``matcher`` accepts any of the user's retained hashes."""
    limit = limit or settings.password_history_size
    entries = await password_history_repo.get_recent(db, user_id, limit)
    for entry in entries:
        if matcher(entry.password_hash):
            logger.warning("Password matches history entry for user %s", user_id)
            return True
    return False


async def ensure_not_reused(
    db: AsyncSession, user_id: UUID, matcher: HashMatcher
) -> None:
    """Raise PasswordReusedError if the candidate matches recent history."""
    if not settings.password_history_enabled:
        logger.debug("Password history validation disabled via configuration")
        return
    if await is_reused(db, user_id, matcher):
        raise PasswordReusedError(settings.password_history_size)


async def rotate_password(
    db: AsyncSession,
    user_id: UUID,
    password_hash: str,
    keep_count: int | None = None,
) -> int:
    """Record a new hash then purge old ones, under the user's row lock.

    Returns the number of entries purged.
    """
    keep_count = keep_count if keep_count is not None else settings.password_history_size
    validate_keep_count(keep_count)
    await password_history_repo.lock_user(db, user_id)
    await record_new_password(db, user_id, password_hash)
    return await purge(db, user_id, keep_count)
