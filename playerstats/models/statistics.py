from enum import Enum

from sqlalchemy import BigInteger, Column, DateTime, Integer, String

from playerstats.db.database import Base
from playerstats.utils.clock import utcnow


class StatisticType(str, Enum):
    VIEW = "view"
    LIKE = "like"
    DISLIKE = "dislike"
    COMMENT = "comment"


# Order used by every count map and by the year chart.
STATISTIC_TYPES = ("like", "dislike", "comment", "view")


class Statistic(Base):
    __tablename__ = "statistics"

    id = Column(Integer, primary_key=True, autoincrement=True)

    type = Column(
        String(16),
        nullable=False,
        default=StatisticType.VIEW.value,
        index=True,
    )
    player_id = Column(BigInteger, nullable=False, index=True)
    user_id = Column(BigInteger, nullable=False, default=0, index=True)

    ip = Column(String(100), nullable=False, default="0.0.0.0")
    country = Column(String(255), nullable=True)
    country_code = Column(String(4), nullable=True, index=True)
    state = Column(String(255), nullable=True)
    city = Column(String(255), nullable=True)
    zip = Column(String(255), nullable=True)
    lat = Column(String(255), nullable=True)
    lon = Column(String(255), nullable=True)

    device = Column(String(255), nullable=True)
    os = Column(String(255), nullable=True)
    browser = Column(String(255), nullable=True)

    creation_date = Column(DateTime, nullable=False, default=utcnow, index=True)
