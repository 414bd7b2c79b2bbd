from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class BanCreate(BaseModel):
    user_id: int
    email: str
    ip: str
    note: str
    banned_for: str


class BannedUserResponse(BaseModel):
    id: int
    user_id: int
    email: str
    ip: str
    note: str
    banned_for: Optional[str] = None
    registrar: int
    creation_date: datetime

    model_config = ConfigDict(from_attributes=True)


class BanStatus(BaseModel):
    banned: bool = False
    message: str = "Not banned"


class ViewerProfile(BaseModel):
    user_id: int
    name: str
    email: str
    role: str
    avatar: str
    is_banned: bool


class UserEmailCreate(BaseModel):
    email: str = Field(..., min_length=3)


class UserEmailResponse(BaseModel):
    id: int
    email: str
    registrar: int
    creation_date: datetime

    model_config = ConfigDict(from_attributes=True)
