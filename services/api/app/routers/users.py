"""
User profile and social graph endpoints:
  GET   /users/me              — caller's user record + profile (created lazily)
  PATCH /users/me              — edit bio / location / website / avatar
  GET   /users/{id}            — a profile, with is_following for the caller
  GET   /users/{id}/posts      — posts by a user, newest first
  POST  /users/{id}/follow     — follow / unfollow toggle
  GET   /users/{id}/followers  — who follows the user
  GET   /users/{id}/following  — whom the user follows
"""
from typing import Optional

from fastapi import APIRouter, Depends

from app.deps import (
    get_follow_service,
    get_page,
    get_post_service,
    get_profile_service,
    get_session,
    require_session,
)
from app.exceptions import NotFound
from app.schemas import (
    FollowerListResponse,
    FollowingListResponse,
    FollowToggleResponse,
    MeResponse,
    PostListResponse,
    ProfileResponse,
    ProfileUpdate,
    Session,
    UserProfileResponse,
)
from app.services.follows import FollowService
from app.services.listing import Page
from app.services.posts import PostService
from app.services.profiles import ProfileService

router = APIRouter()


@router.get("/me", response_model=MeResponse)
async def get_me(
    session: Session = Depends(require_session),
    profiles: ProfileService = Depends(get_profile_service),
):
    profile = await profiles.ensure(session.user.id)
    return MeResponse(
        **session.user.model_dump(exclude={"profile"}),
        profile=ProfileResponse.model_validate(profile),
    )


@router.patch("/me", response_model=ProfileResponse)
async def update_me(
    body: ProfileUpdate,
    session: Session = Depends(require_session),
    profiles: ProfileService = Depends(get_profile_service),
):
    fields = body.model_dump(exclude_unset=True, mode="json")
    return await profiles.update(session.user.id, fields)


@router.get("/{user_id}", response_model=UserProfileResponse)
async def get_user(
    user_id: str,
    session: Optional[Session] = Depends(get_session),
    profiles: ProfileService = Depends(get_profile_service),
    follows: FollowService = Depends(get_follow_service),
):
    profile = await profiles.get(user_id)
    if profile is None:
        raise NotFound("User")

    is_following = False
    if session is not None:
        is_following = await follows.is_following(session.user.id, user_id)

    return UserProfileResponse(
        **ProfileResponse.model_validate(profile).model_dump(),
        is_following=is_following,
    )


@router.get("/{user_id}/posts", response_model=PostListResponse)
async def list_user_posts(
    user_id: str,
    page: Page = Depends(get_page),
    posts: PostService = Depends(get_post_service),
):
    return await posts.list_user_posts(user_id, page)


@router.post("/{user_id}/follow", response_model=FollowToggleResponse)
async def toggle_follow(
    user_id: str,
    session: Session = Depends(require_session),
    follows: FollowService = Depends(get_follow_service),
):
    """
    Follow the user if the caller doesn't yet, unfollow otherwise.

    Both profiles' follower/following counters move in the same transaction
    as the edge itself.
    """
    following = await follows.toggle_follow(session.user.id, user_id)
    return FollowToggleResponse(following=following)


@router.get("/{user_id}/followers", response_model=FollowerListResponse)
async def list_followers(
    user_id: str,
    page: Page = Depends(get_page),
    follows: FollowService = Depends(get_follow_service),
):
    return await follows.list_followers(user_id, page)


@router.get("/{user_id}/following", response_model=FollowingListResponse)
async def list_following(
    user_id: str,
    page: Page = Depends(get_page),
    follows: FollowService = Depends(get_follow_service),
):
    return await follows.list_following(user_id, page)
