from datetime import datetime
from typing import List, Optional

from loguru import logger
from sqlalchemy import extract, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.core.errors import StorageError
from playerstats.models.statistics import STATISTIC_TYPES, Statistic
from playerstats.schemas.statistics import ChartPoint, ChartSeries
from playerstats.utils.clock import utcnow

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


class ChartService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def build_year_chart(self, player_id: int, now: Optional[datetime] = None) -> List[ChartSeries]:
        """Monthly counts per type for the current year, always 4 series of 12 points."""
        year = (now or utcnow()).year
        month = extract("month", Statistic.creation_date)
        stmt = (
            select(Statistic.type, month, func.count(Statistic.id))
            .where(
                Statistic.player_id == player_id,
                Statistic.creation_date >= datetime(year, 1, 1),
                Statistic.creation_date < datetime(year + 1, 1, 1),
            )
            .group_by(Statistic.type, month)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Chart query failed for player {player_id}: {e}")
            raise StorageError("Problem occurred on getting data from DB")

        grid = {statistic_type: [0] * 12 for statistic_type in STATISTIC_TYPES}
        for statistic_type, month_number, count in result.all():
            if statistic_type in grid:
                grid[statistic_type][int(month_number) - 1] = int(count)

        return [
            ChartSeries(
                id=statistic_type,
                data=[ChartPoint(x=label, y=grid[statistic_type][index]) for index, label in enumerate(MONTH_LABELS)],
            )
            for statistic_type in STATISTIC_TYPES
        ]
