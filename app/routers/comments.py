from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.dependencies import get_current_user_id, get_reference_policy
from app.references import ReferencePolicy
from app.schemas import CommentCreate, CommentResponse, MessageResponse
from app.services import comment_service

router = APIRouter(prefix="/api/v1/comments", tags=["comments"])

@router.get("/{post_id}", response_model=list[CommentResponse])
async def list_comments(post_id: str, db: AsyncSession = Depends(get_db)):
    return await comment_service.list_comments(db, post_id)

@router.post("/{post_id}", status_code=201, response_model=CommentResponse)
async def create_comment(
    post_id: str,
    data: CommentCreate,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    policy: ReferencePolicy = Depends(get_reference_policy),
):
    return await comment_service.create_comment(db, post_id, user_id, data.content, policy=policy)

@router.delete("/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: str,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return await comment_service.delete_comment(db, comment_id, user_id)
