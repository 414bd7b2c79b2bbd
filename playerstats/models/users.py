from sqlalchemy import Column, DateTime, Integer, String

from playerstats.db.database import Base
from playerstats.utils.clock import utcnow


class Users(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    display_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(String(50), nullable=False, default="subscriber")
    avatar_url = Column(String(500), nullable=True)

    registered_at = Column(DateTime, nullable=False, default=utcnow, index=True)
