import uuid

from sqlalchemy import JSON, Column, DateTime, Integer, String

from playerstats.db.database import Base
from playerstats.utils.clock import utcnow


class Player(Base):
    __tablename__ = "players"

    id = Column(Integer, primary_key=True, autoincrement=True)

    title = Column(String(500), nullable=False, default="")
    thumbnail = Column(String(1000), nullable=False, default="")
    tag_id = Column(String(36), nullable=False, default=lambda: str(uuid.uuid4()))

    options = Column(JSON, nullable=False, default=dict)
    videos = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    @property
    def shortcode(self) -> str:
        return f"[video-player id='{self.id}']"


class PluginSetting(Base):
    __tablename__ = "plugin_settings"

    key = Column(String(100), primary_key=True)
    value = Column(JSON, nullable=True)
