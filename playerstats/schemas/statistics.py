from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Trend(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"
    EQUAL = "equal"


class Comparison(BaseModel):
    count: int = 0
    rate: float = 0
    trend: Trend = Field(default=Trend.EQUAL, alias="type")

    model_config = ConfigDict(populate_by_name=True)


class ChartPoint(BaseModel):
    x: str
    y: int = 0


class ChartSeries(BaseModel):
    id: str
    data: List[ChartPoint]


class CountryCount(BaseModel):
    count: int = 0


class CountryStatistics(BaseModel):
    country: Optional[str] = None
    flag: Optional[str] = None
    types: Dict[str, Union[Comparison, CountryCount]]


class CommentTotals(BaseModel):
    total: int = 0
    approved: int = 0
    rejected: int = 0
    pending: int = 0


class UsersStatistics(BaseModel):
    total: int = 0
    today: int = 0
    banned: int = 0


class EventCounts(BaseModel):
    statistics: Dict[str, int]


class EventRecorded(EventCounts):
    statistic_id: int
