from typing import Any, Callable, Dict, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.core.errors import StorageError
from playerstats.models.players import PluginSetting
from playerstats.schemas.settings import PluginSettings
from playerstats.services.geolocation import IpInfoClient

API_KEY = "api_key"


class SettingsService:
    def __init__(self, db: AsyncSession, geo_factory: Optional[Callable[[str], IpInfoClient]] = None):
        self.db = db
        self.geo_factory = geo_factory or IpInfoClient

    async def get_settings(self) -> Dict[str, Any]:
        result = await self.db.execute(select(PluginSetting))
        return {setting.key: setting.value for setting in result.scalars().all()}

    async def get_api_key(self) -> Optional[str]:
        setting = await self.db.get(PluginSetting, API_KEY)
        if setting is None or not setting.value:
            return None
        return str(setting.value)

    async def save_settings(self, payload: PluginSettings) -> Dict[str, Any]:
        values = payload.model_dump()

        api_key = values.get(API_KEY)
        if api_key:
            client = self.geo_factory(api_key)
            try:
                await client.verify_token()
            finally:
                await client.close()

        # Custom CSS is only stored; serving it is up to the front end.
        try:
            for key, value in values.items():
                await self.db.merge(PluginSetting(key=key, value=value))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to save plugin settings: {e}")
            raise StorageError("Problem occurred on saving settings")

        logger.info(f"Plugin settings saved: {sorted(values)}")
        return await self.get_settings()
