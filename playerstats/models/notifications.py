from enum import Enum

from sqlalchemy import BigInteger, Column, DateTime, Integer, String

from playerstats.db.database import Base
from playerstats.utils.clock import utcnow


class NotificationType(str, Enum):
    COMMENT = "comment"
    LIKE = "like"
    DISLIKE = "dislike"


class NotificationStatus(str, Enum):
    READ = "read"
    UNREAD = "unread"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Null for comments inserted through the comment endpoint.
    statistic_id = Column(Integer, nullable=True, index=True)
    player_id = Column(BigInteger, nullable=False, index=True)

    type = Column(
        String(16),
        nullable=False,
        default=NotificationType.LIKE.value,
    )
    status = Column(
        String(16),
        nullable=False,
        default=NotificationStatus.UNREAD.value,
        index=True,
    )
    registrar = Column(BigInteger, nullable=False, default=0)

    creation_date = Column(DateTime, nullable=False, default=utcnow, index=True)
