"""
Post lifecycle and post listings.

Creating or deleting a post moves the author's post_count in the same
transaction. Reads attach live like/comment counts through correlated
subqueries and the author's profile through one batched lookup per page.
"""
import logging
from typing import Optional

from opentelemetry import trace
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import Forbidden, InvalidOperation, NotFound
from app.models import Comment, Like, Post, utcnow
from app.schemas import PostDetail, PostListResponse, PostResponse
from app.services.listing import Page, load_authors, profile_summary
from app.services.profiles import ProfileService, decrement_counter, increment_counter
from app.telemetry import LISTING_LATENCY, POSTS_CREATED_TOTAL, POSTS_DELETED_TOTAL

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def _like_count():
    return (
        select(func.count(Like.id))
        .where(Like.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
        .label("like_count")
    )


def _comment_count():
    return (
        select(func.count(Comment.id))
        .where(Comment.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
        .label("comment_count")
    )


def _detail(post: Post, like_count: int, comment_count: int, author) -> PostDetail:
    return PostDetail(
        **PostResponse.model_validate(post).model_dump(),
        like_count=like_count or 0,
        comment_count=comment_count or 0,
        author=author,
    )


class PostService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.profiles = ProfileService(db)

    # ─────────────────────────── Writes ──────────────────────────────────

    async def create_post(
        self, actor_id: str, content: str, media_urls: Optional[list[str]] = None
    ) -> Post:
        with tracer.start_as_current_span("create_post") as span:
            await self.profiles.get_or_create(actor_id)

            post = Post(user_id=actor_id, content=content, media_urls=media_urls or None)
            self.db.add(post)
            await self.db.flush()  # materialise post.id
            await increment_counter(self.db, actor_id, "post_count")
            await self.db.commit()

            span.set_attribute("post.id", post.id)
            span.set_attribute("post.user_id", actor_id)
            POSTS_CREATED_TOTAL.inc()
            logger.info("Post created: %s by user %s", post.id, actor_id)
            return post

    async def _owned_post(self, actor_id: str, post_id: str) -> Post:
        post = await self.db.get(Post, post_id)
        if post is None:
            raise NotFound("Post")
        if post.user_id != actor_id:
            raise Forbidden()
        return post

    async def update_post(self, actor_id: str, post_id: str, fields: dict) -> Post:
        if "content" in fields and fields["content"] is None:
            raise InvalidOperation("content cannot be null")

        post = await self._owned_post(actor_id, post_id)
        for key, value in fields.items():
            setattr(post, key, value)
        post.updated_at = utcnow()
        await self.db.commit()
        return post

    async def delete_post(self, actor_id: str, post_id: str) -> None:
        """Owner-only delete; comments and likes go with it via ON DELETE CASCADE."""
        with tracer.start_as_current_span("delete_post") as span:
            span.set_attribute("post.id", post_id)
            await self._owned_post(actor_id, post_id)

            await self.profiles.get_or_create(actor_id, lock=True)
            result = await self.db.execute(
                delete(Post).where(Post.id == post_id, Post.user_id == actor_id)
            )
            if result.rowcount != 1:
                # Removed by a concurrent delete after the ownership check
                raise NotFound("Post")
            await decrement_counter(self.db, actor_id, "post_count")
            await self.db.commit()

            POSTS_DELETED_TOTAL.inc()
            logger.info("Post deleted: %s by user %s", post_id, actor_id)

    # ─────────────────────────── Reads ───────────────────────────────────

    async def get_post(self, post_id: str) -> PostDetail:
        row = (
            await self.db.execute(
                select(Post, _like_count(), _comment_count()).where(Post.id == post_id)
            )
        ).first()
        if row is None:
            raise NotFound("Post")

        post, like_count, comment_count = row
        profiles = await load_authors(self.db, [post.user_id])
        return _detail(post, like_count, comment_count, profile_summary(profiles, post.user_id))

    async def list_posts(self, page: Page) -> PostListResponse:
        """Discovery feed: every post, newest first."""
        with LISTING_LATENCY.labels(listing="posts").time():
            return await self._list(page)

    async def list_user_posts(self, user_id: str, page: Page) -> PostListResponse:
        with LISTING_LATENCY.labels(listing="user_posts").time():
            return await self._list(page, Post.user_id == user_id)

    async def _list(self, page: Page, *where) -> PostListResponse:
        rows = (
            await self.db.execute(
                select(Post, _like_count(), _comment_count())
                .where(*where)
                .order_by(Post.created_at.desc())
                .limit(page.limit)
                .offset(page.offset)
            )
        ).all()
        profiles = await load_authors(self.db, (post.user_id for post, _, _ in rows))

        return PostListResponse(
            posts=[
                _detail(post, likes, comments, profile_summary(profiles, post.user_id))
                for post, likes, comments in rows
            ],
            pagination=page.pagination(len(rows)),
        )
