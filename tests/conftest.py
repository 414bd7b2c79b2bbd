import copy
from datetime import datetime

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import playerstats.models  # noqa: F401
from playerstats.db.database import Base
from playerstats.models.players import Player, PluginSetting
from playerstats.models.statistics import Statistic
from playerstats.utils.clock import utcnow

# Fixed reference time so window arithmetic in tests is predictable.
NOW = datetime(2024, 3, 15, 12, 0, 0)


def player_payload(**sections):
    payload = {
        "general": {"playerName": "Demo playlist"},
        "appearance": {"skin": "default"},
        "playerButtons": {"fullscreen": True},
        "ads": {"enabled": False},
        "comments": {"isClosed": False, "whoCanSubmit": "all", "immediatelyApprove": False},
        "sensitiveContent": {"enabled": False},
        "emailForm": {"show": True, "formAction": "saveEmail", "emailTo": "", "emailContent": ""},
        "callToActionBtn": {"enabled": False},
        "actionBar": {"enabled": True},
        "videos": {
            "type": "html5",
            "videoLists": [
                {"title": "Intro", "thumbnail": [{"link": "https://cdn.example.com/intro.jpg"}]},
            ],
        },
    }
    for name, value in sections.items():
        payload[name] = value
    return copy.deepcopy(payload)


class FakeMailQueue:
    def __init__(self):
        self.sent = []

    async def send(self, to, subject, body):
        self.sent.append({"to": to, "subject": subject, "body": body})


class FakeGeo:
    def __init__(self, record=None, error=None):
        self.record = record
        self.error = error
        self.calls = []

    async def lookup(self, ip):
        self.calls.append(ip)
        if self.error is not None:
            raise self.error
        return self.record


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def payload():
    return player_payload()


@pytest.fixture
def mail_queue():
    return FakeMailQueue()


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def make_player(db):
    async def _make(**sections):
        data = player_payload(**sections)
        videos = data.pop("videos")
        video_list = videos.get("videoLists") or []
        title = video_list[0]["title"] if len(video_list) == 1 else data["general"]["playerName"]
        player = Player(title=title, thumbnail="", options=data, videos=videos)
        db.add(player)
        await db.commit()
        await db.refresh(player)
        return player

    return _make


@pytest_asyncio.fixture
async def add_event(db):
    async def _add(player_id, statistic_type="view", created=None, user_id=0, **fields):
        statistic = Statistic(
            type=statistic_type,
            player_id=player_id,
            user_id=user_id,
            creation_date=created or utcnow(),
            **fields,
        )
        db.add(statistic)
        await db.commit()
        await db.refresh(statistic)
        return statistic

    return _add


@pytest_asyncio.fixture
async def api_key(db):
    db.add(PluginSetting(key="api_key", value="test-token"))
    await db.commit()
    return "test-token"


@pytest_asyncio.fixture
async def client(session_factory, mail_queue):
    from playerstats.api.deps import get_geo_lookup
    from playerstats.db.database import get_db
    from playerstats.main import app
    from playerstats.services.mail_queue import get_mail_queue

    async def override_get_db():
        async with session_factory() as session:
            yield session

    async def override_geo():
        return None

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_geo_lookup] = override_geo
    app.dependency_overrides[get_mail_queue] = lambda: mail_queue

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
