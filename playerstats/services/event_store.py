from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from loguru import logger
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.core.errors import BadRequestError, ConflictError, NotFoundError, StorageError, UpstreamError
from playerstats.models.notifications import Notification
from playerstats.models.statistics import STATISTIC_TYPES, Statistic, StatisticType
from playerstats.models.user_activity import ReactionType, UserActivity
from playerstats.services.aggregator import Aggregator
from playerstats.services.geolocation import GeoLookup, GeoRecord
from playerstats.utils.user_agent import parse_user_agent

REACTION_TYPES = tuple(reaction.value for reaction in ReactionType)


@dataclass(frozen=True)
class ClientInfo:
    ip: str = "0.0.0.0"
    user_agent: str = ""


class EventStore:
    """Append-only engagement events and their dependent rows.

    A recorded event may produce a notification (everything but views) and a
    user-activity row (likes and dislikes by logged-in viewers). Each step is
    committed on its own; a failing step is reported by name and the steps
    before it are kept.
    """

    def __init__(self, db: AsyncSession, geo: Optional[GeoLookup] = None):
        self.db = db
        self.geo = geo
        self.aggregator = Aggregator(db)

    async def _commit(self, step: str) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Storage failure on {step}: {e}")
            raise StorageError(f"Problem occurred on {step}")

    async def _execute(self, stmt, step: str):
        try:
            return await self.db.execute(stmt)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"Storage failure on {step}: {e}")
            raise StorageError(f"Problem occurred on {step}")

    async def _locate(self, ip: str) -> Optional[GeoRecord]:
        if self.geo is None:
            return None
        try:
            return await self.geo.lookup(ip)
        except UpstreamError as e:
            logger.warning(f"Recording event without location for {ip}: {e.message}")
            return None

    async def add_event(self, player_id: int, statistic_type: str, user_id: int, client: ClientInfo) -> Statistic:
        geo = await self._locate(client.ip) or GeoRecord()
        agent = parse_user_agent(client.user_agent)

        statistic = Statistic(
            type=statistic_type,
            player_id=player_id,
            user_id=user_id,
            ip=client.ip,
            country=geo.country_name,
            country_code=geo.country,
            state=geo.region,
            city=geo.city,
            zip=geo.postal,
            lat=geo.latitude,
            lon=geo.longitude,
            device=agent.device,
            os=agent.os,
            browser=agent.browser,
        )
        self.db.add(statistic)
        await self._commit("inserting statistic")
        await self.db.refresh(statistic)
        return statistic

    async def add_notification(
        self,
        player_id: int,
        notification_type: str,
        registrar: int,
        statistic_id: Optional[int] = None,
    ) -> Notification:
        notification = Notification(
            statistic_id=statistic_id,
            player_id=player_id,
            type=notification_type,
            registrar=registrar,
        )
        self.db.add(notification)
        await self._commit("inserting notification")
        return notification

    async def has_reaction(self, player_id: int, user_id: int, reaction: str) -> bool:
        result = await self._execute(
            select(UserActivity.id).where(
                UserActivity.player_id == player_id,
                UserActivity.user_id == user_id,
                UserActivity.type == reaction,
            ),
            "checking user activity",
        )
        return result.first() is not None

    async def record(
        self,
        player_id: int,
        statistic_type: str,
        user_id: int = 0,
        client: Optional[ClientInfo] = None,
    ) -> Tuple[int, Dict[str, int]]:
        if statistic_type not in STATISTIC_TYPES:
            raise BadRequestError(f"Unknown statistic type: {statistic_type}")
        client = client or ClientInfo()

        is_reaction = bool(user_id) and statistic_type in REACTION_TYPES
        if is_reaction and await self.has_reaction(player_id, user_id, statistic_type):
            raise ConflictError(
                f"User already left a {statistic_type} on this player",
                code="duplicate-reaction",
            )

        statistic = await self.add_event(player_id, statistic_type, user_id, client)
        logger.info(f"Recorded {statistic_type} #{statistic.id} for player {player_id} (user {user_id})")

        if statistic_type != StatisticType.VIEW.value:
            await self.add_notification(player_id, statistic_type, user_id, statistic_id=statistic.id)

        if is_reaction:
            self.db.add(UserActivity(type=statistic_type, player_id=player_id, user_id=user_id))
            await self._commit("inserting user activity")

        counts = await self.aggregator.count_by_type(player_id)
        return statistic.id, counts

    async def delete(self, player_id: int, statistic_id: int) -> Dict[str, int]:
        result = await self._execute(
            select(Statistic).where(
                Statistic.id == statistic_id,
                Statistic.player_id == player_id,
            ),
            "loading statistic",
        )
        statistic = result.scalar_one_or_none()
        if statistic is None:
            raise NotFoundError("No statistic found with this ID")

        statistic_type, user_id = statistic.type, statistic.user_id

        await self.db.delete(statistic)
        await self._commit("deleting statistic")

        await self._execute(
            delete(Notification).where(Notification.statistic_id == statistic_id),
            "deleting notification",
        )
        await self._commit("deleting notification")

        if user_id and statistic_type in REACTION_TYPES:
            await self._execute(
                delete(UserActivity).where(
                    UserActivity.player_id == player_id,
                    UserActivity.user_id == user_id,
                    UserActivity.type == statistic_type,
                ),
                "deleting user activity",
            )
            await self._commit("deleting user activity")

        logger.info(f"Deleted {statistic_type} #{statistic_id} of player {player_id}")
        return await self.aggregator.count_by_type(player_id)
