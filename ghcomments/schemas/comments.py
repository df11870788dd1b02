from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel


class CommentResponse(BaseModel):
    comment_id: str
    username: str
    userurl: str
    useravatar: str
    create_date: str
    edit_date: str
    comment: str


@dataclass(frozen=True)
class CommentRecord:
    comment_id: str
    blog_id: str
    author_id: int
    comment_text: str
    create_date: datetime
    edit_date: datetime
