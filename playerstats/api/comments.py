from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.db.database import get_db
from playerstats.schemas.comments import AdminComment, CommentReply, CommentResponse
from playerstats.schemas.settings import MessageResponse
from playerstats.services.comment_service import CommentService
from playerstats.utils.security import Viewer, get_client_info, get_viewer

comments_router = APIRouter()


@comments_router.get("/comments", response_model=List[AdminComment])
async def list_comments(db: AsyncSession = Depends(get_db)):
    return await CommentService(db).list_admin()


@comments_router.get("/player/{player_id}/comments", response_model=List[CommentResponse])
async def list_player_comments(player_id: int, db: AsyncSession = Depends(get_db)):
    return await CommentService(db).player_comments(player_id)


@comments_router.put("/comment/{comment_id}/approve", response_model=List[CommentResponse])
async def approve_comment(comment_id: int, db: AsyncSession = Depends(get_db)):
    return await CommentService(db).approve(comment_id)


@comments_router.put("/comment/{comment_id}/reject", response_model=List[CommentResponse])
async def reject_comment(comment_id: int, db: AsyncSession = Depends(get_db)):
    return await CommentService(db).reject(comment_id)


@comments_router.post("/comment/{comment_id}/reply", response_model=MessageResponse)
async def reply_comment(
    request: Request,
    comment_id: int,
    payload: CommentReply,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    await CommentService(db).reply(comment_id, payload.reply, viewer, get_client_info(request))
    return MessageResponse(message="Comment inserted successfully")


@comments_router.delete("/comment/{comment_id}", response_model=List[CommentResponse])
async def delete_comment(comment_id: int, db: AsyncSession = Depends(get_db)):
    return await CommentService(db).delete(comment_id)
