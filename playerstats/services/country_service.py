from collections import OrderedDict
from datetime import date, datetime
from typing import Dict, List, Optional

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.core.config import AppSettings
from playerstats.core.errors import ConfigurationIncompleteError, StorageError
from playerstats.models.statistics import STATISTIC_TYPES, Statistic
from playerstats.schemas.statistics import Comparison, CountryCount, CountryStatistics
from playerstats.services.aggregator import date_key
from playerstats.services.comparator import PeriodWindow, compare, parse_period
from playerstats.services.settings_service import SettingsService
from playerstats.utils.clock import utcnow


class CountryService:
    def __init__(self, db: AsyncSession, settings: Optional[AppSettings] = None):
        self.db = db
        self.settings = settings or AppSettings()
        self.plugin_settings = SettingsService(db)

    def flag_url(self, country_code: str) -> str:
        return f"{self.settings.flag_base_url.rstrip('/')}/{country_code}.svg"

    @staticmethod
    def empty_entry() -> CountryStatistics:
        return CountryStatistics(
            country=None,
            flag=None,
            types={statistic_type: Comparison() for statistic_type in STATISTIC_TYPES},
        )

    async def by_country(
        self,
        player_id: int,
        compare_period: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[CountryStatistics]:
        if not await self.plugin_settings.get_api_key():
            raise ConfigurationIncompleteError("No API key found to get countries statistics")

        window = None
        if compare_period is not None:
            window = PeriodWindow.for_period(parse_period(compare_period), (now or utcnow()).date())

        day = func.date(Statistic.creation_date)
        stmt = (
            select(Statistic.country_code, Statistic.country, Statistic.type, day, func.count(Statistic.id))
            .where(
                Statistic.player_id == player_id,
                Statistic.country_code.is_not(None),
                Statistic.country_code != "",
            )
            .group_by(Statistic.country_code, Statistic.country, Statistic.type, day)
            .order_by(Statistic.country_code)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Country statistics query failed for player {player_id}: {e}")
            raise StorageError("Problem occurred on getting data from DB")
        rows = result.all()

        if not rows:
            return [self.empty_entry()]

        # (name, flag) -> type -> {"this", "last"} or {"total"}
        buckets: Dict[tuple, Dict[str, Dict[str, int]]] = OrderedDict()
        for country_code, country, statistic_type, day_value, count in rows:
            key = (country or country_code, self.flag_url(country_code))
            types = buckets.setdefault(
                key,
                {t: {"this": 0, "last": 0, "total": 0} for t in STATISTIC_TYPES},
            )
            if statistic_type not in types:
                continue
            types[statistic_type]["total"] += int(count)
            if window is not None:
                bucket = window.bucket(date.fromisoformat(date_key(day_value)))
                if bucket is not None:
                    types[statistic_type][bucket] += int(count)

        output = []
        for (name, flag), types in buckets.items():
            if window is None:
                entry_types = {t: CountryCount(count=values["total"]) for t, values in types.items()}
            else:
                entry_types = {t: compare(values["this"], values["last"]) for t, values in types.items()}
            output.append(CountryStatistics(country=name, flag=flag, types=entry_types))

        logger.debug(f"Country statistics for player {player_id}: {len(output)} countries")
        return output
