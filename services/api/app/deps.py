"""
Per-request dependencies.

Everything a handler needs about the current request (DB session, caller
session, pagination) arrives through these, never through module state.
"""
from typing import Optional

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.clients.auth_client import auth_client
from app.database import get_db
from app.exceptions import Unauthenticated
from app.schemas import Session
from app.services.comments import CommentService
from app.services.follows import FollowService
from app.services.likes import LikeService
from app.services.listing import DEFAULT_LIMIT, DEFAULT_PAGE, MAX_LIMIT, Page
from app.services.posts import PostService
from app.services.profiles import ProfileService


async def get_session(request: Request) -> Optional[Session]:
    """Caller's session, or None for anonymous requests."""
    return await auth_client.get_session(request.headers)


async def require_session(session: Optional[Session] = Depends(get_session)) -> Session:
    if session is None:
        raise Unauthenticated()
    return session


def get_page(
    page: int = Query(default=DEFAULT_PAGE, ge=1),
    limit: int = Query(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT),
) -> Page:
    return Page(page=page, limit=limit)


async def get_profile_service(db: AsyncSession = Depends(get_db)) -> ProfileService:
    return ProfileService(db)


async def get_follow_service(db: AsyncSession = Depends(get_db)) -> FollowService:
    return FollowService(db)


async def get_like_service(db: AsyncSession = Depends(get_db)) -> LikeService:
    return LikeService(db)


async def get_post_service(db: AsyncSession = Depends(get_db)) -> PostService:
    return PostService(db)


async def get_comment_service(db: AsyncSession = Depends(get_db)) -> CommentService:
    return CommentService(db)
