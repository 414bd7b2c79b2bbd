from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.db.database import get_db
from playerstats.schemas.statistics import ChartSeries, CommentTotals, Comparison, CountryStatistics, UsersStatistics
from playerstats.services.statistics_service import StatisticsService

statistics_router = APIRouter()


@statistics_router.get("/player/{player_id}", response_model=Dict[str, Comparison])
async def get_player_statistics(player_id: int, db: AsyncSession = Depends(get_db)):
    return await StatisticsService(db).player_summary(player_id)


@statistics_router.get("/users", response_model=UsersStatistics)
async def get_users_statistics(db: AsyncSession = Depends(get_db)):
    return await StatisticsService(db).users_statistics()


@statistics_router.get("/comments", response_model=CommentTotals)
async def get_comments_statistics(db: AsyncSession = Depends(get_db)):
    return await StatisticsService(db).comment_totals()


@statistics_router.get("/monthly-comments", response_model=Dict[str, Comparison])
async def get_monthly_comments_statistics(db: AsyncSession = Depends(get_db)):
    return await StatisticsService(db).monthly_comments()


@statistics_router.get("/player/{player_id}/comments", response_model=CommentTotals)
async def get_player_comments_statistics(player_id: int, db: AsyncSession = Depends(get_db)):
    return await StatisticsService(db).comment_totals(player_id)


@statistics_router.get("/player/{player_id}/monthly-comments", response_model=Dict[str, Comparison])
async def get_player_monthly_comments_statistics(player_id: int, db: AsyncSession = Depends(get_db)):
    return await StatisticsService(db).monthly_comments(player_id)


@statistics_router.get("/player/{player_id}/chart", response_model=List[ChartSeries])
async def get_player_chart(player_id: int, db: AsyncSession = Depends(get_db)):
    return await StatisticsService(db).year_chart(player_id)


@statistics_router.get("/player/{player_id}/countries", response_model=List[CountryStatistics])
async def get_player_countries(
    player_id: int,
    compare: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
):
    return await StatisticsService(db).countries(player_id, compare)


@statistics_router.get("/player/{player_id}/user/{user_id}")
async def get_player_statistics_by_user(player_id: int, user_id: int, db: AsyncSession = Depends(get_db)) -> Dict[str, int]:
    return await StatisticsService(db).counts_for_user(player_id, user_id)


@statistics_router.get("/player/{player_id}/country/{country}")
async def get_player_statistics_by_country(player_id: int, country: str, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    return await StatisticsService(db).counts_by_dimension(player_id, "country_code", country)


@statistics_router.get("/player/{player_id}/state/{state}")
async def get_player_statistics_by_state(player_id: int, state: str, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    return await StatisticsService(db).counts_by_dimension(player_id, "state", state)


@statistics_router.get("/player/{player_id}/city/{city}")
async def get_player_statistics_by_city(player_id: int, city: str, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    return await StatisticsService(db).counts_by_dimension(player_id, "city", city)


@statistics_router.get("/player/{player_id}/date/{day}")
async def get_player_statistics_by_date(player_id: int, day: str, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    return await StatisticsService(db).counts_by_dimension(player_id, "date", day)


@statistics_router.get("/player/{player_id}/year/{year}")
async def get_player_statistics_by_year(player_id: int, year: str, db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    return await StatisticsService(db).counts_by_dimension(player_id, "year", year)


@statistics_router.get("/player/{player_id}/range/{start}/{end}")
async def get_player_statistics_by_range(
    player_id: int,
    start: str,
    end: str,
    db: AsyncSession = Depends(get_db),
) -> Dict[str, Any]:
    return await StatisticsService(db).counts_by_range(player_id, start, end)
