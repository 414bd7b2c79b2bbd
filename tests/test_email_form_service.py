import pytest

from playerstats.core.errors import NotFoundError
from playerstats.services.email_form_service import EmailFormService


class TestEmailFormService:
    async def test_save_email(self, db, make_player, mail_queue):
        player = await make_player()
        service = EmailFormService(db, mail_queue)

        await service.submit(player.id, "fan@example.com", registrar=3)

        emails = await service.list_emails(player.id)
        assert [(e.email, e.registrar) for e in emails] == [("fan@example.com", 3)]
        assert mail_queue.sent == []

    async def test_send_email_queues_mail(self, db, make_player, mail_queue):
        player = await make_player(
            emailForm={
                "show": True,
                "formAction": "sendEmail",
                "emailTo": "owner@example.com",
                "emailContent": "Someone subscribed",
            }
        )

        await EmailFormService(db, mail_queue).submit(player.id, "fan@example.com")

        assert mail_queue.sent == [
            {
                "to": "owner@example.com",
                "subject": f"New email from video id {player.id}",
                "body": "Someone subscribed",
            }
        ]

    async def test_hidden_form(self, db, make_player, mail_queue):
        player = await make_player(emailForm={"show": False})

        with pytest.raises(NotFoundError) as exc_info:
            await EmailFormService(db, mail_queue).submit(player.id, "fan@example.com")

        assert exc_info.value.code == "email-form-closed"

    async def test_missing_player(self, db, mail_queue):
        with pytest.raises(NotFoundError):
            await EmailFormService(db, mail_queue).submit(55, "fan@example.com")

    async def test_delete_email(self, db, make_player, mail_queue):
        player = await make_player()
        service = EmailFormService(db, mail_queue)
        await service.submit(player.id, "a@example.com")
        await service.submit(player.id, "b@example.com")
        first = (await service.list_emails(player.id))[0]

        remaining = await service.delete_email(first.id)

        assert [e.email for e in remaining] == ["b@example.com"]

    async def test_delete_missing_email(self, db, mail_queue):
        with pytest.raises(NotFoundError):
            await EmailFormService(db, mail_queue).delete_email(77)
