"""
Like toggles for posts and comments.

Unlike follows, likes keep no denormalized counter: like_count is aggregated
from the likes table whenever a post or comment is read.
"""
import logging

from opentelemetry import trace
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFound
from app.models import Comment, Like, Post
from app.telemetry import LIKE_TOGGLES_TOTAL

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class LikeService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def toggle_post_like(self, actor_id: str, post_id: str) -> bool:
        if await self.db.get(Post, post_id) is None:
            raise NotFound("Post")
        return await self._toggle(actor_id, "post", Like.post_id, post_id)

    async def toggle_comment_like(self, actor_id: str, comment_id: str) -> bool:
        if await self.db.get(Comment, comment_id) is None:
            raise NotFound("Comment")
        return await self._toggle(actor_id, "comment", Like.comment_id, comment_id)

    async def _find(self, actor_id: str, column, target_id: str):
        result = await self.db.execute(
            select(Like.id).where(column == target_id, Like.user_id == actor_id)
        )
        return result.scalar_one_or_none()

    async def _toggle(self, actor_id: str, target: str, column, target_id: str) -> bool:
        """Delete the (target, actor) like if present, insert it otherwise."""
        with tracer.start_as_current_span(f"toggle_{target}_like") as span:
            span.set_attribute("like.actor_id", actor_id)
            span.set_attribute("like.target_id", target_id)

            like_id = await self._find(actor_id, column, target_id)

            if like_id is not None:
                await self.db.execute(delete(Like).where(Like.id == like_id))
                liked = False
            else:
                self.db.add(Like(user_id=actor_id, **{column.key: target_id}))
                try:
                    await self.db.flush()
                    liked = True
                except IntegrityError:
                    # A concurrent toggle by the same user inserted it first
                    await self.db.rollback()
                    liked = await self._find(actor_id, column, target_id) is not None
                    logger.info("Like race on %s %s by %s resolved", target, target_id, actor_id)

            await self.db.commit()

            action = "like" if liked else "unlike"
            LIKE_TOGGLES_TOTAL.labels(target=target, action=action).inc()
            logger.debug("%s %s %s %s", actor_id, action, target, target_id)
            return liked
