from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class CommentAuthor(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)


class CommentCreate(BaseModel):
    comment: str = Field(..., min_length=1)
    author: Optional[CommentAuthor] = None


class CommentReply(BaseModel):
    reply: str = ""


class CommentResponse(BaseModel):
    id: int
    player_id: Optional[int] = None
    parent_id: int = 0
    author_name: str
    author_email: str
    author_ip: str
    user_id: int
    content: str
    approved: int
    creation_date: datetime

    model_config = ConfigDict(from_attributes=True)


class PublicComment(CommentResponse):
    avatar: str


class AdminComment(BaseModel):
    id: int
    user_email: str
    user_name: str
    user_ip: str
    submit_date: datetime
    comment: str
    player_id: Optional[int] = None
    player_name: str
    status: int
    user_id: Union[int, str]


class Commenter(BaseModel):
    user_email: str
    user_name: str
    user_ip: str
    comment_date: datetime
    comment_content: str
    user_id: Union[int, str]


class PublicCommentPage(BaseModel):
    comments: List[PublicComment]
    count: int
