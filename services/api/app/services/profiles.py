"""
Profile store accessor and the shared counter-adjustment helpers.

Follower, following and post counts are denormalized onto the profile row and
adjusted by the same transaction that changes the underlying ledger. Like and
comment counts are never stored; they are aggregated when read.
"""
import logging
from typing import Iterable, Optional

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from app.models import Profile, utcnow

logger = logging.getLogger(__name__)

COUNTERS = ("follower_count", "following_count", "post_count")


def _counter_column(counter: str) -> InstrumentedAttribute:
    if counter not in COUNTERS:
        raise ValueError(f"Unknown profile counter: {counter}")
    return getattr(Profile, counter)


async def increment_counter(db: AsyncSession, user_id: str, counter: str) -> None:
    """count = count + 1, evaluated by the database."""
    column = _counter_column(counter)
    await db.execute(
        update(Profile)
        .where(Profile.user_id == user_id)
        .values({column: column + 1, Profile.updated_at: utcnow()})
        .execution_options(synchronize_session=False)
    )


async def decrement_counter(db: AsyncSession, user_id: str, counter: str) -> None:
    """count = max(count - 1, 0), evaluated by the database.

    Saturates at zero so a counter that drifted out of sync can never go
    negative.
    """
    column = _counter_column(counter)
    await db.execute(
        update(Profile)
        .where(Profile.user_id == user_id)
        .values(
            {
                column: case((column > 0, column - 1), else_=0),
                Profile.updated_at: utcnow(),
            }
        )
        .execution_options(synchronize_session=False)
    )


class ProfileService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, user_id: str) -> Optional[Profile]:
        result = await self.db.execute(select(Profile).where(Profile.user_id == user_id))
        return result.scalar_one_or_none()

    async def get_or_create(self, user_id: str, lock: bool = False) -> Profile:
        """
        Fetch a user's profile, inserting an empty one on first access.

        With lock=True the row is selected FOR UPDATE so that concurrent
        writers touching the same user's counters queue behind each other.
        """
        stmt = select(Profile).where(Profile.user_id == user_id)
        if lock:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        profile = result.scalar_one_or_none()
        if profile is None:
            profile = Profile(user_id=user_id)
            self.db.add(profile)
            await self.db.flush()
            logger.info("Created profile for user %s", user_id)
        return profile

    async def ensure(self, user_id: str) -> Profile:
        """get_or_create, committed so the lazily created row outlives the request."""
        profile = await self.get_or_create(user_id)
        await self.db.commit()
        return profile

    async def get_many(self, user_ids: Iterable[str]) -> dict[str, Profile]:
        """Batch lookup: one IN (...) query, keyed by user_id."""
        ids = list(dict.fromkeys(user_ids))
        if not ids:
            return {}
        result = await self.db.execute(select(Profile).where(Profile.user_id.in_(ids)))
        return {p.user_id: p for p in result.scalars().all()}

    async def update(self, user_id: str, fields: dict) -> Profile:
        profile = await self.get_or_create(user_id)
        for key, value in fields.items():
            setattr(profile, key, value)
        profile.updated_at = utcnow()
        await self.db.commit()
        return profile
