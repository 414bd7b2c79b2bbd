from fastapi import APIRouter
from playerstats.api import comments, notifications, players, public, settings, statistics, users

admin_router = APIRouter()

admin_router.include_router(players.players_router, tags=["players"])
admin_router.include_router(statistics.statistics_router, prefix="/statistics", tags=["statistics"])
admin_router.include_router(notifications.notifications_router, tags=["notifications"])
admin_router.include_router(comments.comments_router, tags=["comments"])
admin_router.include_router(users.users_router, tags=["users"])
admin_router.include_router(settings.settings_router, tags=["settings"])

api_router = APIRouter()

api_router.include_router(admin_router, prefix="/admin")
api_router.include_router(public.public_router, prefix="/public", tags=["public"])

__all__ = ["api_router"]
