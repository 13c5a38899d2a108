"""
Follow graph: the follow/unfollow toggle and follower listings.

toggle_follow keeps three rows consistent inside one transaction:

    follows(actor → target)          inserted or deleted
    user_profiles[target].follower_count   ±1
    user_profiles[actor].following_count   ±1

Both profile rows are locked first, so two toggles touching the same pair
cannot interleave their existence check and their writes.
"""
import logging

from opentelemetry import trace
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import InvalidOperation
from app.models import Follow
from app.schemas import FollowerItem, FollowingItem, FollowerListResponse, FollowingListResponse
from app.services.listing import Page, load_authors, profile_summary
from app.services.profiles import ProfileService, decrement_counter, increment_counter
from app.telemetry import FOLLOW_TOGGLES_TOTAL, LISTING_LATENCY

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class FollowService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.profiles = ProfileService(db)

    async def toggle_follow(self, actor_id: str, target_id: str) -> bool:
        """Follow target if not yet followed, unfollow otherwise.

        Returns the new state: True when actor now follows target.
        """
        if actor_id == target_id:
            raise InvalidOperation("Cannot follow yourself")

        with tracer.start_as_current_span("toggle_follow") as span:
            span.set_attribute("follow.actor_id", actor_id)
            span.set_attribute("follow.target_id", target_id)

            # Both rows locked in a fixed order so A→B and B→A cannot deadlock
            for user_id in sorted((actor_id, target_id)):
                await self.profiles.get_or_create(user_id, lock=True)

            existing = await self.db.execute(
                select(Follow).where(
                    Follow.follower_id == actor_id,
                    Follow.following_id == target_id,
                )
            )
            edge = existing.scalar_one_or_none()

            if edge is not None:
                await self.db.execute(delete(Follow).where(Follow.id == edge.id))
                await decrement_counter(self.db, target_id, "follower_count")
                await decrement_counter(self.db, actor_id, "following_count")
                following = False
            else:
                self.db.add(Follow(follower_id=actor_id, following_id=target_id))
                await self.db.flush()
                await increment_counter(self.db, target_id, "follower_count")
                await increment_counter(self.db, actor_id, "following_count")
                following = True

            await self.db.commit()

            action = "follow" if following else "unfollow"
            span.set_attribute("follow.action", action)
            FOLLOW_TOGGLES_TOTAL.labels(action=action).inc()
            logger.info("%s %sed %s", actor_id, action, target_id)
            return following

    async def is_following(self, actor_id: str, target_id: str) -> bool:
        result = await self.db.execute(
            select(Follow.id).where(
                Follow.follower_id == actor_id,
                Follow.following_id == target_id,
            )
        )
        return result.first() is not None

    async def list_followers(self, user_id: str, page: Page) -> FollowerListResponse:
        with LISTING_LATENCY.labels(listing="followers").time():
            rows = (
                await self.db.execute(
                    select(Follow.follower_id, Follow.created_at)
                    .where(Follow.following_id == user_id)
                    .order_by(Follow.created_at.desc())
                    .limit(page.limit)
                    .offset(page.offset)
                )
            ).all()
            profiles = await load_authors(self.db, (r.follower_id for r in rows))

        return FollowerListResponse(
            followers=[
                FollowerItem(
                    follower_id=r.follower_id,
                    created_at=r.created_at,
                    profile=profile_summary(profiles, r.follower_id),
                )
                for r in rows
            ],
            pagination=page.pagination(len(rows)),
        )

    async def list_following(self, user_id: str, page: Page) -> FollowingListResponse:
        with LISTING_LATENCY.labels(listing="following").time():
            rows = (
                await self.db.execute(
                    select(Follow.following_id, Follow.created_at)
                    .where(Follow.follower_id == user_id)
                    .order_by(Follow.created_at.desc())
                    .limit(page.limit)
                    .offset(page.offset)
                )
            ).all()
            profiles = await load_authors(self.db, (r.following_id for r in rows))

        return FollowingListResponse(
            following=[
                FollowingItem(
                    following_id=r.following_id,
                    created_at=r.created_at,
                    profile=profile_summary(profiles, r.following_id),
                )
                for r in rows
            ],
            pagination=page.pagination(len(rows)),
        )
