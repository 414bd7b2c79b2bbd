from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Depends, Request
from fastapi.security import APIKeyHeader
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from playerstats.core.config import JWTSettings
from playerstats.core.errors import NotLoggedInError
from playerstats.db.database import get_db
from playerstats.models.users import Users
from playerstats.services.event_store import ClientInfo

auth_scheme = APIKeyHeader(name="Authorization", scheme_name="Bearer", auto_error=False)


@dataclass
class Viewer:
    """Whoever is making the request; ``user_id`` 0 is an anonymous visitor."""

    user_id: int = 0
    user: Optional[Users] = None

    @property
    def is_logged_in(self) -> bool:
        return self.user is not None


def create_access_token(user_id: int, settings: Optional[JWTSettings] = None, expires_minutes: int = 60) -> str:
    settings = settings or JWTSettings()
    payload = {
        "id": str(user_id),
        "type": "access",
        "exp": datetime.now(timezone.utc) + timedelta(minutes=expires_minutes),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_user_id(token: str, settings: Optional[JWTSettings] = None) -> Optional[int]:
    settings = settings or JWTSettings()
    if token.startswith("Bearer "):
        token = token[7:]
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except jwt.InvalidTokenError as e:
        logger.warning(f"Ignoring invalid access token: {e}")
        return None
    if payload.get("type") != "access":
        return None
    try:
        return int(payload.get("id"))
    except (TypeError, ValueError):
        return None


async def get_viewer(token: Optional[str] = Depends(auth_scheme), db: AsyncSession = Depends(get_db)) -> Viewer:
    if not token:
        return Viewer()

    user_id = decode_user_id(token)
    if user_id is None:
        return Viewer()

    user = await db.get(Users, user_id)
    if user is None:
        return Viewer()
    return Viewer(user_id=user.id, user=user)


async def require_viewer(viewer: Viewer = Depends(get_viewer)) -> Viewer:
    if not viewer.is_logged_in:
        raise NotLoggedInError("User not logged in")
    return viewer


def get_client_info(request: Request) -> ClientInfo:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        ip = forwarded.split(",")[0].strip()
    elif request.client is not None:
        ip = request.client.host
    else:
        ip = "0.0.0.0"
    return ClientInfo(ip=ip, user_agent=request.headers.get("User-Agent", ""))
