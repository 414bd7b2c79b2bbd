from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

OPTION_SECTIONS = (
    "general",
    "appearance",
    "playerButtons",
    "ads",
    "comments",
    "sensitiveContent",
    "emailForm",
    "callToActionBtn",
    "actionBar",
)

# Source types whose single video carries its own thumbnail.
THUMBNAIL_SOURCE_TYPES = ("html5", "youtube", "vimeo")


class OptionSection(BaseModel):
    """A player options section; unknown keys are kept as-is."""

    model_config = ConfigDict(extra="allow")


class GeneralOptions(OptionSection):
    playerName: str = ""


class CommentsOptions(OptionSection):
    isClosed: bool = False
    whoCanSubmit: str = Field(default="all", description="'all' or 'loggedin'")
    immediatelyApprove: bool = False


class EmailFormOptions(OptionSection):
    show: bool = False
    formAction: str = Field(default="saveEmail", description="'saveEmail' or 'sendEmail'")
    emailTo: str = ""
    emailContent: str = ""


class VideoThumbnail(OptionSection):
    link: str = ""


class VideoItem(OptionSection):
    title: str = ""
    thumbnail: List[VideoThumbnail] = Field(default_factory=list)


class VideosOptions(OptionSection):
    type: str = "html5"
    videoLists: List[VideoItem] = Field(default_factory=list)


class PlayerCreate(BaseModel):
    general: GeneralOptions
    appearance: OptionSection
    playerButtons: OptionSection
    ads: OptionSection
    comments: CommentsOptions
    sensitiveContent: OptionSection
    emailForm: EmailFormOptions
    callToActionBtn: OptionSection
    actionBar: OptionSection
    videos: VideosOptions


class PlayerUpdate(BaseModel):
    general: Optional[GeneralOptions] = None
    appearance: Optional[OptionSection] = None
    playerButtons: Optional[OptionSection] = None
    ads: Optional[OptionSection] = None
    comments: Optional[CommentsOptions] = None
    sensitiveContent: Optional[OptionSection] = None
    emailForm: Optional[EmailFormOptions] = None
    callToActionBtn: Optional[OptionSection] = None
    actionBar: Optional[OptionSection] = None
    videos: Optional[VideosOptions] = None


class PlayerSummary(BaseModel):
    row: int
    id: int
    title: str
    thumbnail: str
    shortcode: str


class PlayerCreated(BaseModel):
    player_id: int
    shortcode: str
    options: Dict[str, Any]
    videos: Dict[str, Any]
    players: List[PlayerSummary]


class ViewerInfo(BaseModel):
    is_logged_in: bool = False
    id: int = 0


class ViewerActivity(BaseModel):
    like: bool = False
    dislike: bool = False


class PublicPlayer(BaseModel):
    id: int
    creation_date: datetime
    options: Dict[str, Any]
    videos: Dict[str, Any]


class PublicPlayerResponse(BaseModel):
    player: PublicPlayer
    statistics: Dict[str, int]
    user: ViewerInfo
    activity: ViewerActivity
