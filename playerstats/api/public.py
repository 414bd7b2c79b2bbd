from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.api.deps import get_geo_lookup
from playerstats.core.config import AppSettings
from playerstats.db.database import get_db
from playerstats.schemas.comments import CommentCreate, PublicCommentPage
from playerstats.schemas.players import PublicPlayerResponse
from playerstats.schemas.settings import MessageResponse
from playerstats.schemas.statistics import EventCounts, EventRecorded
from playerstats.schemas.users import BanStatus, UserEmailCreate, ViewerProfile
from playerstats.services.ban_service import BanService
from playerstats.services.comment_service import CommentService
from playerstats.services.email_form_service import EmailFormService
from playerstats.services.geolocation import GeoLookup
from playerstats.services.mail_queue import MailQueue, get_mail_queue
from playerstats.services.player_service import PlayerService
from playerstats.services.statistics_service import StatisticsService
from playerstats.utils.security import Viewer, get_client_info, get_viewer, require_viewer

public_router = APIRouter()


@public_router.get("/player/{player_id}", response_model=PublicPlayerResponse)
async def get_player(
    player_id: int,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
):
    return await PlayerService(db).get_public_player(player_id, viewer.user_id)


@public_router.post("/statistic/player/{player_id}/{statistic_type}", response_model=EventRecorded)
async def add_statistic(
    request: Request,
    player_id: int,
    statistic_type: str,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
    geo: GeoLookup = Depends(get_geo_lookup),
):
    statistic_id, counts = await StatisticsService(db, geo=geo).record_event(
        player_id,
        statistic_type,
        viewer.user_id,
        get_client_info(request),
    )
    return EventRecorded(statistic_id=statistic_id, statistics=counts)


@public_router.delete("/statistic/player/{player_id}/{statistic_id}", response_model=EventCounts)
async def delete_statistic(player_id: int, statistic_id: int, db: AsyncSession = Depends(get_db)):
    counts = await StatisticsService(db).delete_event(player_id, statistic_id)
    return EventCounts(statistics=counts)


@public_router.get("/statistics/player/{player_id}", response_model=EventCounts)
async def get_statistics(player_id: int, db: AsyncSession = Depends(get_db)):
    return EventCounts(statistics=await StatisticsService(db).public_counts(player_id))


@public_router.get("/is-logged-in", response_model=ViewerProfile)
async def is_logged_in(viewer: Viewer = Depends(require_viewer), db: AsyncSession = Depends(get_db)):
    user = viewer.user
    return ViewerProfile(
        user_id=user.id,
        name=user.display_name,
        email=user.email,
        role=user.role,
        avatar=user.avatar_url or AppSettings().default_avatar_url,
        is_banned=await BanService(db).is_user_banned(user.id),
    )


@public_router.get("/is-banned", response_model=BanStatus)
async def is_banned(request: Request, identifier: str = Query(...), db: AsyncSession = Depends(get_db)):
    await BanService(db).check_identifier(identifier, get_client_info(request).ip)
    return BanStatus()


@public_router.post("/comment/player/{player_id}", response_model=MessageResponse)
async def add_comment(
    request: Request,
    player_id: int,
    payload: CommentCreate,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
    geo: GeoLookup = Depends(get_geo_lookup),
):
    await CommentService(db, geo=geo).add_comment(player_id, payload, viewer, get_client_info(request))
    return MessageResponse(message="Comment inserted successfully")


@public_router.get("/comments/player/{player_id}", response_model=PublicCommentPage)
async def get_comments(
    player_id: int,
    limit: int = Query(default=10, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    comments = await CommentService(db).list_public(player_id, limit=limit, offset=offset)
    return PublicCommentPage(comments=comments, count=len(comments))


@public_router.post("/email-form/player/{player_id}", response_model=MessageResponse)
async def submit_email_form(
    player_id: int,
    payload: UserEmailCreate,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_viewer),
    mail_queue: MailQueue = Depends(get_mail_queue),
):
    await EmailFormService(db, mail_queue).submit(player_id, payload.email, registrar=viewer.user_id)
    return MessageResponse(message="Email form submitted successfully")
