from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.core.errors import StorageError
from playerstats.models.banned_users import BannedUser
from playerstats.models.comments import Comment, CommentApproval
from playerstats.models.statistics import STATISTIC_TYPES, Statistic
from playerstats.models.users import Users
from playerstats.schemas.statistics import ChartSeries, CommentTotals, Comparison, CountryStatistics, UsersStatistics
from playerstats.services.aggregator import Aggregator, date_key, day_bounds
from playerstats.services.chart_service import ChartService
from playerstats.services.comparator import calendar_month_bounds, compare
from playerstats.services.country_service import CountryService
from playerstats.services.event_store import ClientInfo, EventStore
from playerstats.services.geolocation import GeoLookup
from playerstats.services.player_service import PlayerRepository
from playerstats.utils.clock import utcnow

COMMENT_STATES = (
    ("approved", CommentApproval.APPROVED),
    ("rejected", CommentApproval.REJECTED),
    ("pending", CommentApproval.PENDING),
)


class StatisticsService:
    """Entry point for statistics reads and event writes.

    Every per-player operation resolves the player first so a missing player
    surfaces as not-found before any aggregation runs.
    """

    def __init__(self, db: AsyncSession, geo: Optional[GeoLookup] = None):
        self.db = db
        self.players = PlayerRepository(db)
        self.aggregator = Aggregator(db)
        self.events = EventStore(db, geo=geo)

    async def _scalar(self, stmt) -> int:
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Statistics query failed: {e}")
            raise StorageError("Problem occurred on getting data from DB")
        return int(result.scalar_one() or 0)

    async def player_summary(self, player_id: int, now: Optional[datetime] = None) -> Dict[str, Comparison]:
        """All-time totals per type, trended today against yesterday."""
        await self.players.get_or_404(player_id)
        totals = await self.aggregator.count_by_type(player_id)

        today = (now or utcnow()).date()
        yesterday = today - timedelta(days=1)
        since, _ = day_bounds(yesterday)
        _, until = day_bounds(today)

        day = func.date(Statistic.creation_date)
        stmt = (
            select(Statistic.type, day, func.count(Statistic.id))
            .where(
                Statistic.player_id == player_id,
                Statistic.creation_date >= since,
                Statistic.creation_date < until,
            )
            .group_by(Statistic.type, day)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Daily statistics query failed for player {player_id}: {e}")
            raise StorageError("Problem occurred on getting data from DB")

        daily = {statistic_type: {"this": 0, "last": 0} for statistic_type in STATISTIC_TYPES}
        today_key = today.strftime("%Y-%m-%d")
        for statistic_type, day_value, count in result.all():
            if statistic_type not in daily:
                continue
            bucket = "this" if date_key(day_value) == today_key else "last"
            daily[statistic_type][bucket] += int(count)

        return {
            statistic_type: compare(values["this"], values["last"], count=totals[statistic_type])
            for statistic_type, values in daily.items()
        }

    async def counts_for_user(self, player_id: int, user_id: int) -> Dict[str, int]:
        await self.players.get_or_404(player_id)
        return await self.aggregator.count_by_type_for_user(player_id, user_id)

    async def counts_by_dimension(self, player_id: int, dimension: str, value: str) -> Dict[str, Any]:
        await self.players.get_or_404(player_id)
        return await self.aggregator.count_by_dimension(player_id, dimension, value)

    async def counts_by_range(self, player_id: int, start: str, end: str) -> Dict[str, Any]:
        await self.players.get_or_404(player_id)
        return await self.aggregator.count_by_date_range(player_id, start, end)

    async def year_chart(self, player_id: int, now: Optional[datetime] = None) -> List[ChartSeries]:
        await self.players.get_or_404(player_id)
        return await ChartService(self.db).build_year_chart(player_id, now=now)

    async def countries(
        self,
        player_id: int,
        compare_period: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[CountryStatistics]:
        await self.players.get_or_404(player_id)
        return await CountryService(self.db).by_country(player_id, compare_period, now=now)

    async def record_event(
        self,
        player_id: int,
        statistic_type: str,
        user_id: int = 0,
        client: Optional[ClientInfo] = None,
    ) -> Tuple[int, Dict[str, int]]:
        await self.players.get_or_404(player_id)
        return await self.events.record(player_id, statistic_type, user_id, client)

    async def delete_event(self, player_id: int, statistic_id: int) -> Dict[str, int]:
        await self.players.get_or_404(player_id)
        return await self.events.delete(player_id, statistic_id)

    async def public_counts(self, player_id: int) -> Dict[str, int]:
        await self.players.get_or_404(player_id)
        return await self.aggregator.count_by_type(player_id)

    # Comment statistics

    def _comment_count(self, player_id: Optional[int], *conditions):
        stmt = select(func.count(Comment.id)).where(*conditions)
        if player_id is not None:
            stmt = stmt.where(Comment.player_id == player_id)
        return stmt

    async def comment_totals(self, player_id: Optional[int] = None) -> CommentTotals:
        if player_id is not None:
            await self.players.get_or_404(player_id)

        totals = {"total": await self._scalar(self._comment_count(player_id))}
        for name, state in COMMENT_STATES:
            totals[name] = await self._scalar(self._comment_count(player_id, Comment.approved == int(state)))
        return CommentTotals(**totals)

    async def monthly_comments(
        self,
        player_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Comparison]:
        """This calendar month against the whole previous calendar month."""
        if player_id is not None:
            await self.players.get_or_404(player_id)

        this_first, next_first, last_first, last_last = calendar_month_bounds((now or utcnow()).date())
        this_range = (
            Comment.creation_date >= day_bounds(this_first)[0],
            Comment.creation_date < day_bounds(next_first)[0],
        )
        last_range = (
            Comment.creation_date >= day_bounds(last_first)[0],
            Comment.creation_date < day_bounds(last_last)[1],
        )

        states = [("total", ())] + [(name, (Comment.approved == int(state),)) for name, state in COMMENT_STATES]
        output = {}
        for name, conditions in states:
            this_count = await self._scalar(self._comment_count(player_id, *conditions, *this_range))
            last_count = await self._scalar(self._comment_count(player_id, *conditions, *last_range))
            output[name] = compare(this_count, last_count)
        return output

    async def users_statistics(self, now: Optional[datetime] = None) -> UsersStatistics:
        start, end = day_bounds((now or utcnow()).date())
        return UsersStatistics(
            total=await self._scalar(select(func.count(Users.id))),
            today=await self._scalar(
                select(func.count(Users.id)).where(Users.registered_at >= start, Users.registered_at < end)
            ),
            banned=await self._scalar(select(func.count(BannedUser.id))),
        )
