from pydantic import BaseModel, Field


class NotificationItem(BaseModel):
    id: int
    type: str
    message: str
    status: str
    player_id: int
    player_name: str = Field(default="", description="Resolved player title, empty if the player is gone")
    player_poster: str = ""
    creation_date: str = Field(..., description="Relative age, e.g. '3 hour(s) ago'")
