from typing import AsyncIterator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.db.database import get_db
from playerstats.services.geolocation import GeoLookup, IpInfoClient
from playerstats.services.mail_queue import MailQueue, get_mail_queue
from playerstats.services.settings_service import SettingsService
from playerstats.services.support_service import SupportService


async def get_geo_lookup(db: AsyncSession = Depends(get_db)) -> AsyncIterator[GeoLookup]:
    api_key = await SettingsService(db).get_api_key()
    client = IpInfoClient(api_key)
    try:
        yield client
    finally:
        await client.close()


async def get_support_service(mail_queue: MailQueue = Depends(get_mail_queue)) -> AsyncIterator[SupportService]:
    service = SupportService(mail_queue)
    try:
        yield service
    finally:
        await service.close()
