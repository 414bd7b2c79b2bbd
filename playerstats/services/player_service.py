import copy
from typing import Any, Dict, List, Optional

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.core.config import AppSettings
from playerstats.core.errors import NotFoundError, StorageError
from playerstats.models.players import Player
from playerstats.models.user_activity import UserActivity
from playerstats.schemas.players import (
    OPTION_SECTIONS,
    THUMBNAIL_SOURCE_TYPES,
    PlayerCreate,
    PlayerSummary,
    PlayerUpdate,
    PublicPlayer,
    PublicPlayerResponse,
    ViewerActivity,
    ViewerInfo,
)
from playerstats.services.aggregator import Aggregator


VIDEO_URL_TEMPLATES = {
    "youtube": ("youtubeId", "youtubeUrl", "https://www.youtube.com/watch?v={}"),
    "vimeo": ("vimeoId", "vimeoUrl", "https://vimeo.com/{}"),
}


def expand_video_urls(videos: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Add watch URLs to hosted videos.

    Channel and playlist sources are resolved by the front end, so only their
    type is returned.
    """
    videos = copy.deepcopy(videos or {})
    source_type = videos.get("type")
    if source_type == "html5":
        return videos
    if source_type in VIDEO_URL_TEMPLATES:
        id_key, url_key, template = VIDEO_URL_TEMPLATES[source_type]
        for video in videos.get("videoLists") or []:
            if video.get(id_key):
                video[url_key] = template.format(video[id_key])
        return videos
    return {"type": source_type, "videoLists": []}


def resolve_player_title(options: Optional[Dict[str, Any]], videos: Optional[Dict[str, Any]]) -> str:
    """A lone video names the player; otherwise the configured player name does."""
    video_list = (videos or {}).get("videoLists") or []
    if len(video_list) == 1:
        return video_list[0].get("title") or ""
    general = (options or {}).get("general") or {}
    return general.get("playerName") or ""


def resolve_player_thumbnail(videos: Optional[Dict[str, Any]], placeholder: Optional[str] = None) -> str:
    if placeholder is None:
        placeholder = AppSettings().default_player_thumbnail
    videos = videos or {}
    video_list = videos.get("videoLists") or []
    if videos.get("type") in THUMBNAIL_SOURCE_TYPES and len(video_list) == 1:
        thumbnails = video_list[0].get("thumbnail") or []
        if thumbnails and thumbnails[0].get("link"):
            return thumbnails[0]["link"]
    return placeholder


class PlayerRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, player_id: int) -> Optional[Player]:
        result = await self.db.execute(select(Player).where(Player.id == player_id))
        return result.scalar_one_or_none()

    async def get_or_404(self, player_id: int) -> Player:
        player = await self.get(player_id)
        if player is None:
            logger.warning(f"Player {player_id} not found")
            raise NotFoundError("No player found with this ID")
        return player

    async def get_many(self, player_ids) -> Dict[int, Player]:
        ids = {int(pid) for pid in player_ids if pid is not None}
        if not ids:
            return {}
        result = await self.db.execute(select(Player).where(Player.id.in_(ids)))
        return {player.id: player for player in result.scalars().all()}

    async def list(self) -> List[Player]:
        result = await self.db.execute(select(Player).order_by(Player.id))
        return list(result.scalars().all())

    async def put(self, player: Player) -> Player:
        try:
            self.db.add(player)
            await self.db.commit()
            await self.db.refresh(player)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to save player: {e}")
            raise StorageError("Problem occurred on saving player")
        return player

    async def delete(self, player: Player) -> None:
        try:
            await self.db.delete(player)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Failed to delete player {player.id}: {e}")
            raise StorageError("Problem occurred on deleting player")


class PlayerService:
    def __init__(self, db: AsyncSession, settings: Optional[AppSettings] = None):
        self.repository = PlayerRepository(db)
        self.settings = settings or AppSettings()

    def _apply_derived_fields(self, player: Player) -> None:
        player.title = resolve_player_title(player.options, player.videos)
        player.thumbnail = resolve_player_thumbnail(player.videos, self.settings.default_player_thumbnail)

    async def create_player(self, payload: PlayerCreate) -> Player:
        data = payload.model_dump()
        player = Player(
            options={section: data[section] for section in OPTION_SECTIONS},
            videos=data["videos"],
        )
        self._apply_derived_fields(player)
        player = await self.repository.put(player)
        logger.info(f"Created player {player.id} ({player.title!r})")
        return player

    async def list_players(self) -> List[PlayerSummary]:
        players = await self.repository.list()
        return [
            PlayerSummary(
                row=row,
                id=player.id,
                title=player.title,
                thumbnail=player.thumbnail,
                shortcode=player.shortcode,
            )
            for row, player in enumerate(players, start=1)
        ]

    async def get_options(self, player_id: int) -> Dict[str, Any]:
        player = await self.repository.get_or_404(player_id)
        return {**(player.options or {}), "videos": player.videos or {}}

    async def get_option(self, player_id: int, section: str) -> Dict[str, Any]:
        player = await self.repository.get_or_404(player_id)
        options = player.options or {}
        data = {section: options[section]} if section in options else {}
        data["videos"] = player.videos or {}
        return data

    async def update_player(self, player_id: int, payload: PlayerUpdate) -> Dict[str, Any]:
        player = await self.repository.get_or_404(player_id)
        changes = {
            name: getattr(payload, name).model_dump()
            for name in payload.model_fields_set
            if getattr(payload, name) is not None
        }

        options = dict(player.options or {})
        for section in OPTION_SECTIONS:
            if section in changes:
                options[section] = changes[section]
        # Reassign so the JSON column is flagged dirty.
        player.options = options
        if "videos" in changes:
            player.videos = changes["videos"]

        self._apply_derived_fields(player)
        await self.repository.put(player)
        logger.info(f"Updated player {player_id}: {sorted(changes)}")
        return {**player.options, "videos": player.videos}

    async def delete_player(self, player_id: int) -> None:
        player = await self.repository.get_or_404(player_id)
        await self.repository.delete(player)
        logger.info(f"Deleted player {player_id}")

    async def get_public_player(self, player_id: int, viewer_id: int = 0) -> PublicPlayerResponse:
        player = await self.repository.get_or_404(player_id)
        counts = await Aggregator(self.repository.db).count_by_type(player_id)

        activity = ViewerActivity()
        if viewer_id:
            result = await self.repository.db.execute(
                select(UserActivity.type).where(
                    UserActivity.player_id == player_id,
                    UserActivity.user_id == viewer_id,
                )
            )
            reactions = set(result.scalars().all())
            activity = ViewerActivity(like="like" in reactions, dislike="dislike" in reactions)

        return PublicPlayerResponse(
            player=PublicPlayer(
                id=player.id,
                creation_date=player.created_at,
                options=player.options or {},
                videos=expand_video_urls(player.videos),
            ),
            statistics=counts,
            user=ViewerInfo(is_logged_in=bool(viewer_id), id=viewer_id),
            activity=activity,
        )
