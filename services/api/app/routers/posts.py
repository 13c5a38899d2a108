"""
Post endpoints:
  GET    /posts                — discovery feed, newest first
  POST   /posts                — create a post
  GET    /posts/{id}           — a single post with counts and author
  PATCH  /posts/{id}           — edit (owner only)
  DELETE /posts/{id}           — delete (owner only)
  POST   /posts/{id}/like      — like / unlike toggle
  GET    /posts/{id}/comments  — comments, newest first
  POST   /posts/{id}/comments  — add a comment
"""
from fastapi import APIRouter, Depends, status

from app.deps import (
    get_comment_service,
    get_like_service,
    get_page,
    get_post_service,
    require_session,
)
from app.schemas import (
    CommentCreate,
    CommentListResponse,
    CommentResponse,
    DeleteResponse,
    LikeToggleResponse,
    PostCreate,
    PostDetail,
    PostListResponse,
    PostResponse,
    PostUpdate,
    Session,
)
from app.services.comments import CommentService
from app.services.likes import LikeService
from app.services.listing import Page
from app.services.posts import PostService

router = APIRouter()


@router.get("", response_model=PostListResponse)
async def list_posts(
    page: Page = Depends(get_page),
    posts: PostService = Depends(get_post_service),
):
    return await posts.list_posts(page)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    body: PostCreate,
    session: Session = Depends(require_session),
    posts: PostService = Depends(get_post_service),
):
    """Create a post and bump the author's post_count."""
    return await posts.create_post(session.user.id, body.content, body.media_urls)


@router.get("/{post_id}", response_model=PostDetail)
async def get_post(post_id: str, posts: PostService = Depends(get_post_service)):
    return await posts.get_post(post_id)


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str,
    body: PostUpdate,
    session: Session = Depends(require_session),
    posts: PostService = Depends(get_post_service),
):
    fields = body.model_dump(exclude_unset=True, mode="json")
    return await posts.update_post(session.user.id, post_id, fields)


@router.delete("/{post_id}", response_model=DeleteResponse)
async def delete_post(
    post_id: str,
    session: Session = Depends(require_session),
    posts: PostService = Depends(get_post_service),
):
    await posts.delete_post(session.user.id, post_id)
    return DeleteResponse(success=True)


@router.post("/{post_id}/like", response_model=LikeToggleResponse)
async def toggle_post_like(
    post_id: str,
    session: Session = Depends(require_session),
    likes: LikeService = Depends(get_like_service),
):
    liked = await likes.toggle_post_like(session.user.id, post_id)
    return LikeToggleResponse(liked=liked)


@router.get("/{post_id}/comments", response_model=CommentListResponse)
async def list_comments(
    post_id: str,
    page: Page = Depends(get_page),
    comments: CommentService = Depends(get_comment_service),
):
    return await comments.list_comments(post_id, page)


@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: str,
    body: CommentCreate,
    session: Session = Depends(require_session),
    comments: CommentService = Depends(get_comment_service),
):
    return await comments.create_comment(session.user.id, post_id, body.content)
