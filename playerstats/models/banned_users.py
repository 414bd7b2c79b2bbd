from sqlalchemy import BigInteger, Column, DateTime, Integer, String, Text

from playerstats.db.database import Base
from playerstats.utils.clock import utcnow


class BannedUser(Base):
    __tablename__ = "banned_users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    user_id = Column(BigInteger, nullable=False, default=0, index=True)
    email = Column(String(255), nullable=False, default="", index=True)
    ip = Column(String(100), nullable=False, default="0.0.0.0", index=True)

    note = Column(Text, nullable=False, default="")
    banned_for = Column(String(255), nullable=True)
    registrar = Column(BigInteger, nullable=False)

    creation_date = Column(DateTime, nullable=False, default=utcnow)
