from enum import Enum

from sqlalchemy import BigInteger, Column, DateTime, Integer, String, UniqueConstraint

from playerstats.db.database import Base
from playerstats.utils.clock import utcnow


class ReactionType(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"


class UserActivity(Base):
    __tablename__ = "user_activity"
    __table_args__ = (
        UniqueConstraint("player_id", "user_id", "type", name="uq_user_activity_reaction"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)

    type = Column(
        String(16),
        nullable=False,
        default=ReactionType.LIKE.value,
    )
    player_id = Column(BigInteger, nullable=False, index=True)
    user_id = Column(BigInteger, nullable=False, index=True)

    creation_date = Column(DateTime, nullable=False, default=utcnow)
