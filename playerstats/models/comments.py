from enum import IntEnum

from sqlalchemy import BigInteger, Column, DateTime, Integer, String, Text

from playerstats.db.database import Base
from playerstats.utils.clock import utcnow


class CommentApproval(IntEnum):
    APPROVED = 1
    PENDING = 0
    REJECTED = -1


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)

    player_id = Column(BigInteger, nullable=True, index=True)
    parent_id = Column(Integer, nullable=False, default=0)

    author_name = Column(String(255), nullable=False, default="")
    author_email = Column(String(255), nullable=False, default="", index=True)
    author_ip = Column(String(100), nullable=False, default="0.0.0.0")
    user_id = Column(BigInteger, nullable=False, default=0)

    content = Column(Text, nullable=False)
    approved = Column(Integer, nullable=False, default=int(CommentApproval.PENDING), index=True)
    agent = Column(String(500), nullable=False, default="")

    creation_date = Column(DateTime, nullable=False, default=utcnow, index=True)


class UserEmail(Base):
    __tablename__ = "user_emails"

    id = Column(Integer, primary_key=True, autoincrement=True)

    player_id = Column(BigInteger, nullable=False, index=True)
    email = Column(String(255), nullable=False)
    registrar = Column(BigInteger, nullable=False, default=0)

    creation_date = Column(DateTime, nullable=False, default=utcnow)
