from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.db.database import get_db
from playerstats.schemas.comments import Commenter
from playerstats.schemas.users import BanCreate, BannedUserResponse, UserEmailResponse
from playerstats.services.ban_service import BanService
from playerstats.services.email_form_service import EmailFormService
from playerstats.services.mail_queue import MailQueue, get_mail_queue
from playerstats.utils.security import Viewer, get_viewer

users_router = APIRouter()


@users_router.get("/users-submitted-comment", response_model=List[Commenter])
async def list_commenters(db: AsyncSession = Depends(get_db)):
    return await BanService(db).commenters()


@users_router.get("/banned-users", response_model=List[BannedUserResponse])
async def list_banned_users(db: AsyncSession = Depends(get_db)):
    return await BanService(db).list_bans()


@users_router.post("/ban-user", response_model=List[Commenter])
async def ban_user(
    payload: BanCreate,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    return await BanService(db).ban(payload, registrar=viewer.user_id)


@users_router.delete("/unban-user/{ban_id}", response_model=List[BannedUserResponse])
async def unban_user(ban_id: int, db: AsyncSession = Depends(get_db)):
    return await BanService(db).unban(ban_id)


@users_router.get("/user-emails/{player_id}", response_model=List[UserEmailResponse])
async def list_user_emails(
    player_id: int,
    db: AsyncSession = Depends(get_db),
    mail_queue: MailQueue = Depends(get_mail_queue),
):
    return await EmailFormService(db, mail_queue).list_emails(player_id)


@users_router.delete("/delete-email/{email_id}", response_model=List[UserEmailResponse])
async def delete_user_email(
    email_id: int,
    db: AsyncSession = Depends(get_db),
    mail_queue: MailQueue = Depends(get_mail_queue),
):
    return await EmailFormService(db, mail_queue).delete_email(email_id)
