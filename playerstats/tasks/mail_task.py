import asyncio
import smtplib
from email.message import EmailMessage
from typing import Any, Dict, Optional

from loguru import logger

from playerstats.core.config import MailSettings


def build_message(to: str, subject: str, body: str, settings: MailSettings) -> EmailMessage:
    message = EmailMessage()
    message["From"] = settings.mail_from
    message["To"] = to
    message["Subject"] = subject
    message.set_content(body, subtype="html")
    return message


def deliver(message: EmailMessage, settings: MailSettings) -> None:
    with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=30) as smtp:
        if settings.smtp_starttls:
            smtp.starttls()
        if settings.smtp_user:
            smtp.login(settings.smtp_user, settings.smtp_password or "")
        smtp.send_message(message)


async def send_mail_task(
    ctx: Dict[str, Any],
    to: str,
    subject: str,
    body: str,
    settings: Optional[MailSettings] = None,
) -> bool:
    settings = settings or MailSettings()
    message = build_message(to, subject, body, settings)

    try:
        await asyncio.to_thread(deliver, message, settings)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send mail to {to}: {e}")
        raise

    logger.info(f"Mail sent to {to}: {subject!r}")
    return True
