"""
Comment endpoints:
  POST /comments/{id}/like — like / unlike toggle on a comment
"""
from fastapi import APIRouter, Depends

from app.deps import get_like_service, require_session
from app.schemas import LikeToggleResponse, Session
from app.services.likes import LikeService

router = APIRouter()


@router.post("/{comment_id}/like", response_model=LikeToggleResponse)
async def toggle_comment_like(
    comment_id: str,
    session: Session = Depends(require_session),
    likes: LikeService = Depends(get_like_service),
):
    liked = await likes.toggle_comment_like(session.user.id, comment_id)
    return LikeToggleResponse(liked=liked)
