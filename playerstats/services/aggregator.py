from datetime import date, datetime, timedelta
from typing import Any, Dict, Union

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.core.errors import BadRequestError, StorageError
from playerstats.models.statistics import STATISTIC_TYPES, Statistic

DIMENSIONS = ("country_code", "state", "city", "date", "year")


def zero_counts() -> Dict[str, Any]:
    return {statistic_type: 0 for statistic_type in STATISTIC_TYPES}


def date_key(value: Union[date, datetime, str]) -> str:
    """Normalize a SQL ``date()`` result to ``YYYY-MM-DD``.

    PostgreSQL hands back ``datetime.date`` while SQLite returns text.
    """
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    return str(value)[:10]


def parse_day(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError):
        raise BadRequestError(f"Invalid date: {value}")


def day_bounds(day: date):
    start = datetime(day.year, day.month, day.day)
    return start, start + timedelta(days=1)


class Aggregator:
    """Counts engagement events per type.

    Callers are expected to have resolved the player already; nothing here
    checks that the player exists.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _grouped_counts(self, *conditions) -> Dict[str, Any]:
        stmt = (
            select(Statistic.type, func.count(Statistic.id))
            .where(*conditions)
            .group_by(Statistic.type)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Count query failed: {e}")
            raise StorageError("Problem occurred on getting data from DB")

        counts = zero_counts()
        for statistic_type, count in result.all():
            if statistic_type in counts:
                counts[statistic_type] = int(count)
        logger.debug(f"Grouped counts: {counts}")
        return counts

    async def count_by_type(self, player_id: int) -> Dict[str, int]:
        return await self._grouped_counts(Statistic.player_id == player_id)

    async def count_by_type_for_user(self, player_id: int, user_id: int) -> Dict[str, int]:
        return await self._grouped_counts(
            Statistic.player_id == player_id,
            Statistic.user_id == user_id,
        )

    async def count_by_dimension(self, player_id: int, dimension: str, value: str) -> Dict[str, Any]:
        if dimension not in DIMENSIONS:
            raise BadRequestError(f"Unknown dimension: {dimension}")

        if dimension == "year":
            return await self._count_by_year(player_id, value)

        if dimension == "date":
            start, end = day_bounds(parse_day(value))
            condition = (Statistic.creation_date >= start) & (Statistic.creation_date < end)
        else:
            condition = getattr(Statistic, dimension) == value

        return await self._grouped_counts(Statistic.player_id == player_id, condition)

    async def _count_by_year(self, player_id: int, value: str) -> Dict[str, Any]:
        try:
            year = int(value)
            start, end = datetime(year, 1, 1), datetime(year + 1, 1, 1)
        except (TypeError, ValueError):
            raise BadRequestError(f"Invalid year: {value}")

        stmt = (
            select(Statistic.type, func.count(Statistic.id), func.max(Statistic.creation_date))
            .where(
                Statistic.player_id == player_id,
                Statistic.creation_date >= start,
                Statistic.creation_date < end,
            )
            .group_by(Statistic.type)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Year count query failed: {e}")
            raise StorageError("Problem occurred on getting data from DB")

        # Present types become [formatted count, latest date]; absent ones stay 0.
        counts = zero_counts()
        for statistic_type, count, latest in result.all():
            if statistic_type in counts:
                counts[statistic_type] = [f"{int(count):,}", date_key(latest)]
        return counts

    async def count_by_date_range(
        self,
        player_id: int,
        start: Union[str, date],
        end: Union[str, date],
    ) -> Dict[str, Any]:
        start_day = parse_day(start) if isinstance(start, str) else start
        end_day = parse_day(end) if isinstance(end, str) else end
        range_start, _ = day_bounds(start_day)
        _, range_end = day_bounds(end_day)

        day = func.date(Statistic.creation_date)
        stmt = (
            select(Statistic.type, day, func.count(Statistic.id))
            .where(
                Statistic.player_id == player_id,
                Statistic.creation_date >= range_start,
                Statistic.creation_date < range_end,
            )
            .group_by(Statistic.type, day)
            .order_by(day)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Range count query failed: {e}")
            raise StorageError("Problem occurred on getting data from DB")

        counts: Dict[str, Any] = zero_counts()
        for statistic_type, day_value, count in result.all():
            if statistic_type not in counts:
                continue
            if not isinstance(counts[statistic_type], dict):
                counts[statistic_type] = {}
            counts[statistic_type][date_key(day_value)] = int(count)
        return counts

