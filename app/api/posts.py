from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.db.session import get_db
from app.models.user import User
from app.schemas.engagement import LikeOut
from app.services.engagement import AddOutcome, RemoveOutcome, likes

router = APIRouter(prefix="/posts", tags=["posts"])

# Whether the current user likes a post, with the current count
@router.get("/{post_id}/like", response_model=LikeOut)
def get_like(
    post_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    is_liked, count = likes.status(db, user.id, post_id)
    return LikeOut(post_id=post_id, likes_count=count, is_liked=is_liked)

# Like a post
@router.post("/{post_id}/like", response_model=LikeOut)
def like_post(
    post_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = likes.add_relation(db, user.id, post_id)
    if result.outcome is AddOutcome.ALREADY_EXISTS:
        raise HTTPException(status_code=409, detail="Post already liked")
    return LikeOut(post_id=post_id, likes_count=result.count, is_liked=True)

# Unlike a post
@router.delete("/{post_id}/like", response_model=LikeOut)
def unlike_post(
    post_id: int,
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = likes.remove_relation(db, user.id, post_id)
    if result.outcome is RemoveOutcome.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Post not liked by user")
    return LikeOut(post_id=post_id, likes_count=result.count, is_liked=False)
