from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.api.deps import get_support_service
from playerstats.db.database import get_db
from playerstats.schemas.settings import FeatureFeed, MessageResponse, PluginSettings, SupportTicket
from playerstats.services.settings_service import SettingsService
from playerstats.services.support_service import SupportService

settings_router = APIRouter()


@settings_router.get("/settings")
async def get_settings(db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    return await SettingsService(db).get_settings()


@settings_router.post("/settings")
async def save_settings(payload: PluginSettings, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    return await SettingsService(db).save_settings(payload)


@settings_router.post("/ticket", response_model=MessageResponse)
async def send_ticket(payload: SupportTicket, support: SupportService = Depends(get_support_service)):
    await support.send_ticket(payload)
    return MessageResponse(
        message="Thank you for contacting us. We have received your message and will get back to you as soon as possible."
    )


@settings_router.get("/whats-new", response_model=FeatureFeed)
async def get_whats_new(support: SupportService = Depends(get_support_service)):
    return FeatureFeed(features=await support.whats_new())
