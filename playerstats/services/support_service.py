import html
from typing import Any, List, Optional

import httpx
from loguru import logger

from playerstats.core.config import SupportSettings
from playerstats.core.errors import UpstreamError
from playerstats.schemas.settings import SupportTicket
from playerstats.services.mail_queue import MailQueue


def upstream_error(response: httpx.Response) -> UpstreamError:
    """Carry the upstream's code, message and status through unchanged."""
    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}
    code = str(body.get("code") or "upstream-error").lower().replace(" ", "-")
    message = body.get("message") or response.text or f"HTTP {response.status_code}"
    return UpstreamError(message, code=code, status_code=response.status_code)


class SupportService:
    def __init__(
        self,
        mail_queue: MailQueue,
        settings: Optional[SupportSettings] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.mail_queue = mail_queue
        self.settings = settings or SupportSettings()
        self.client = client or httpx.AsyncClient(timeout=self.settings.request_timeout)

    async def _get(self, url: str, **kwargs) -> httpx.Response:
        try:
            return await self.client.get(url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Support API request to {url} failed: {e}")
            raise UpstreamError(str(e), status_code=500)

    async def send_ticket(self, ticket: SupportTicket) -> None:
        response = await self._get(
            str(self.settings.banned_url_check),
            headers={"Content-Type": "application/json", "url": self.settings.site_url},
        )
        if response.status_code != 200:
            logger.warning(f"Support ticket refused by upstream: {response.status_code}")
            raise upstream_error(response)

        body = (
            f"{html.escape(ticket.message)}<br/> From: {html.escape(ticket.name)} "
            f"&lt;{html.escape(ticket.email)}&gt;<br/> Plugin name: {html.escape(self.settings.item_name)}"
        )
        await self.mail_queue.send(self.settings.support_email, ticket.subject, body)
        logger.info(f"Support ticket queued from {ticket.email}")

    async def whats_new(self) -> List[Any]:
        response = await self._get(
            str(self.settings.features_url),
            params={"item": self.settings.item_name},
            headers={"Content-Type": "application/json"},
        )
        if response.status_code != 200:
            raise upstream_error(response)

        data = response.json().get("data") or {}
        return data.get("features") or []

    async def close(self):
        await self.client.aclose()
