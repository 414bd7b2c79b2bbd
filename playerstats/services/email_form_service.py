from typing import List

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.core.errors import NotFoundError, StorageError
from playerstats.models.comments import UserEmail
from playerstats.schemas.players import EmailFormOptions
from playerstats.services.mail_queue import MailQueue
from playerstats.services.player_service import PlayerRepository

SAVE_EMAIL = "saveEmail"


class EmailFormService:
    def __init__(self, db: AsyncSession, mail_queue: MailQueue):
        self.db = db
        self.players = PlayerRepository(db)
        self.mail_queue = mail_queue

    async def submit(self, player_id: int, email: str, registrar: int = 0) -> None:
        player = await self.players.get_or_404(player_id)
        form = EmailFormOptions(**((player.options or {}).get("emailForm") or {}))

        if not form.show:
            raise NotFoundError("Email form is closed!", code="email-form-closed")

        if form.formAction == SAVE_EMAIL:
            self.db.add(UserEmail(player_id=player_id, email=email, registrar=registrar))
            try:
                await self.db.commit()
            except SQLAlchemyError as e:
                await self.db.rollback()
                logger.error(f"Failed to store email for player {player_id}: {e}")
                raise StorageError("Problem occurred on inserting email to db")
            logger.info(f"Stored email form submission for player {player_id}")
            return

        await self.mail_queue.send(
            form.emailTo,
            f"New email from video id {player_id}",
            form.emailContent,
        )

    async def list_emails(self, player_id: int) -> List[UserEmail]:
        result = await self.db.execute(
            select(UserEmail).where(UserEmail.player_id == player_id).order_by(UserEmail.id)
        )
        return list(result.scalars().all())

    async def delete_email(self, email_id: int) -> List[UserEmail]:
        record = await self.db.get(UserEmail, email_id)
        if record is None:
            raise NotFoundError("No email found with this ID")

        player_id = record.player_id
        try:
            await self.db.delete(record)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to delete email {email_id}: {e}")
            raise StorageError("Problem occurred on deleting data from DB")
        return await self.list_emails(player_id)
