"""Comments on posts. No counter is maintained; comment_count is aggregated on read."""
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import NotFound
from app.models import Comment, Like, Post
from app.schemas import CommentDetail, CommentListResponse, CommentResponse
from app.services.listing import Page, load_authors, profile_summary
from app.telemetry import COMMENTS_CREATED_TOTAL, LISTING_LATENCY

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_comment(self, actor_id: str, post_id: str, content: str) -> Comment:
        if await self.db.get(Post, post_id) is None:
            raise NotFound("Post")

        comment = Comment(post_id=post_id, user_id=actor_id, content=content)
        self.db.add(comment)
        await self.db.commit()

        COMMENTS_CREATED_TOTAL.inc()
        logger.info("Comment %s added to post %s by %s", comment.id, post_id, actor_id)
        return comment

    async def list_comments(self, post_id: str, page: Page) -> CommentListResponse:
        like_count = (
            select(func.count(Like.id))
            .where(Like.comment_id == Comment.id)
            .correlate(Comment)
            .scalar_subquery()
            .label("like_count")
        )

        with LISTING_LATENCY.labels(listing="comments").time():
            rows = (
                await self.db.execute(
                    select(Comment, like_count)
                    .where(Comment.post_id == post_id)
                    .order_by(Comment.created_at.desc())
                    .limit(page.limit)
                    .offset(page.offset)
                )
            ).all()
            profiles = await load_authors(self.db, (c.user_id for c, _ in rows))

        return CommentListResponse(
            comments=[
                CommentDetail(
                    **CommentResponse.model_validate(comment).model_dump(),
                    like_count=likes or 0,
                    author=profile_summary(profiles, comment.user_id),
                )
                for comment, likes in rows
            ],
            pagination=page.pagination(len(rows)),
        )
