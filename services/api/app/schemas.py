"""
Pydantic request / response schemas for the API layer.
Kept separate from ORM models to avoid coupling transport to storage.
"""
from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field, HttpUrl, TypeAdapter, ValidationError

_http_url = TypeAdapter(HttpUrl)


def _check_http_url(value: str) -> str:
    """Reject anything that is not an http(s) URL, but keep the text as sent."""
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError("must be a valid http or https URL") from None
    return value


UrlStr = Annotated[str, AfterValidator(_check_http_url)]


# ──────────────────────────── Session ─────────────────────────────────────

class SessionUser(BaseModel):
    """User record as returned by the auth service; unknown fields are kept."""
    id: str
    email: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None

    class Config:
        extra = "allow"


class Session(BaseModel):
    user: SessionUser
    session: Optional[dict] = None


# ──────────────────────────── Profiles ────────────────────────────────────

class ProfileResponse(BaseModel):
    id: str
    user_id: str
    bio: Optional[str]
    avatar_url: Optional[str]
    location: Optional[str]
    website: Optional[str]
    follower_count: int
    following_count: int
    post_count: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ProfileSummary(BaseModel):
    """Author block attached to listed items; only user_id when no row exists."""
    user_id: str
    id: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    location: Optional[str] = None
    website: Optional[str] = None
    follower_count: Optional[int] = None
    following_count: Optional[int] = None
    post_count: Optional[int] = None

    class Config:
        from_attributes = True


class UserProfileResponse(ProfileResponse):
    is_following: bool = False


class MeResponse(SessionUser):
    profile: ProfileResponse


class ProfileUpdate(BaseModel):
    bio: Optional[str] = Field(None, max_length=160)
    location: Optional[str] = Field(None, max_length=100)
    website: Optional[UrlStr] = Field(None, max_length=200)
    avatar_url: Optional[UrlStr] = None


# ──────────────────────────── Follows ─────────────────────────────────────

class FollowToggleResponse(BaseModel):
    following: bool


class Pagination(BaseModel):
    page: int
    limit: int
    # True whenever the page came back full; see app.services.listing
    has_more: bool


class FollowerItem(BaseModel):
    follower_id: str
    created_at: datetime
    profile: ProfileSummary


class FollowingItem(BaseModel):
    following_id: str
    created_at: datetime
    profile: ProfileSummary


class FollowerListResponse(BaseModel):
    followers: list[FollowerItem]
    pagination: Pagination


class FollowingListResponse(BaseModel):
    following: list[FollowingItem]
    pagination: Pagination


# ──────────────────────────── Posts ───────────────────────────────────────

class PostCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=280)
    media_urls: Optional[list[UrlStr]] = None


class PostUpdate(BaseModel):
    content: Optional[str] = Field(None, min_length=1, max_length=280)
    media_urls: Optional[list[UrlStr]] = None


class PostResponse(BaseModel):
    id: str
    user_id: str
    content: str
    media_urls: Optional[list[str]]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PostDetail(PostResponse):
    """A post with live engagement counts and its author block."""
    like_count: int
    comment_count: int
    author: ProfileSummary


class PostListResponse(BaseModel):
    posts: list[PostDetail]
    pagination: Pagination


class LikeToggleResponse(BaseModel):
    liked: bool


class DeleteResponse(BaseModel):
    success: bool = True


# ──────────────────────────── Comments ────────────────────────────────────

class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)


class CommentResponse(BaseModel):
    id: str
    post_id: str
    user_id: str
    content: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class CommentDetail(CommentResponse):
    like_count: int
    author: ProfileSummary


class CommentListResponse(BaseModel):
    comments: list[CommentDetail]
    pagination: Pagination


# ──────────────────────────── Health ──────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
    version: str
    environment: str


class ReadyResponse(BaseModel):
    ready: bool
    error: Optional[str] = None
