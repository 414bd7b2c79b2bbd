from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PluginSettings(BaseModel):
    api_key: Optional[str] = None
    custom_css: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class SupportTicket(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    subject: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)


class FeatureFeed(BaseModel):
    features: List[Any] = Field(default_factory=list)


class MessageResponse(BaseModel):
    code: str = "success"
    message: str
