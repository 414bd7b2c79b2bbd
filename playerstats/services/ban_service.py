import re
from typing import List, Optional

from loguru import logger
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.core.errors import ForbiddenError, NotFoundError, StorageError
from playerstats.models.banned_users import BannedUser
from playerstats.models.comments import Comment
from playerstats.schemas.comments import Commenter
from playerstats.schemas.users import BanCreate

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

GUEST_LABEL = "Guest"


def ban_message(ban: BannedUser) -> str:
    message = "User with this identifier is banned!"
    if ban.note:
        message += f" Reason: {ban.note}"
    if ban.banned_for:
        message += f" | Banned for {ban.banned_for}"
    return message


class BanService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_bans(self) -> List[BannedUser]:
        result = await self.db.execute(select(BannedUser).order_by(BannedUser.id))
        return list(result.scalars().all())

    async def ban(self, payload: BanCreate, registrar: int) -> List[Commenter]:
        self.db.add(BannedUser(**payload.model_dump(), registrar=registrar))
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to ban {payload.email}: {e}")
            raise StorageError("Problem occurred on inserting user to banned user table")

        logger.info(f"Banned {payload.email} / {payload.ip} (by {registrar})")
        return await self.commenters()

    async def unban(self, ban_id: int) -> List[BannedUser]:
        ban = await self.db.get(BannedUser, ban_id)
        if ban is None:
            raise NotFoundError("No banned user found with this ID")

        try:
            await self.db.delete(ban)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to unban {ban_id}: {e}")
            raise StorageError("Problem occurred on deleting user from banned user table")

        logger.info(f"Removed ban {ban_id}")
        return await self.list_bans()

    async def commenters(self) -> List[Commenter]:
        """One row per commenter email, banned emails left out."""
        latest = (
            select(Comment.author_email, func.max(Comment.id).label("comment_id"))
            .where(Comment.author_email.not_in(select(BannedUser.email)))
            .group_by(Comment.author_email)
            .subquery()
        )
        result = await self.db.execute(
            select(Comment).join(latest, Comment.id == latest.c.comment_id).order_by(Comment.author_email)
        )
        return [
            Commenter(
                user_email=comment.author_email,
                user_name=comment.author_name,
                user_ip=comment.author_ip,
                comment_date=comment.creation_date,
                comment_content=comment.content,
                user_id=comment.user_id or GUEST_LABEL,
            )
            for comment in result.scalars().all()
        ]

    async def find_ban(
        self,
        email: Optional[str] = None,
        user_id: Optional[int] = None,
        ip: Optional[str] = None,
    ) -> Optional[BannedUser]:
        conditions = []
        if email:
            conditions.append(BannedUser.email == email)
        if user_id:
            conditions.append(BannedUser.user_id == user_id)
        if ip:
            conditions.append(BannedUser.ip == ip)
        if not conditions:
            return None

        result = await self.db.execute(select(BannedUser).where(or_(*conditions)).limit(1))
        return result.scalar_one_or_none()

    async def check_identifier(self, identifier: str, ip: str) -> None:
        """Raise if the email or numeric user id, or the caller's IP, is banned."""
        identifier = (identifier or "").strip()
        if EMAIL_RE.match(identifier):
            ban = await self.find_ban(email=identifier, ip=ip)
        elif identifier.isdigit():
            ban = await self.find_ban(user_id=int(identifier), ip=ip)
        else:
            raise NotFoundError("No user found with this identifier")

        if ban is not None:
            raise ForbiddenError(ban_message(ban), code="is-banned")

    async def is_user_banned(self, user_id: int) -> bool:
        return await self.find_ban(user_id=user_id) is not None
