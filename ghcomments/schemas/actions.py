from typing import Literal, Optional
from urllib.parse import urlencode

from pydantic import BaseModel, Field, model_validator

ActionName = Literal["do_comment", "edit_comment", "del_comment"]


class PendingAction(BaseModel):
    """A write action to resume once the browser has logged in."""

    action: ActionName
    blog_url: str = Field(min_length=1, max_length=2048)
    blog_id: Optional[str] = Field(default=None, max_length=255)
    comment_id: Optional[str] = Field(default=None, max_length=64)

    @model_validator(mode="after")
    def check_target(self) -> "PendingAction":
        if self.action == "do_comment" and not self.blog_id:
            raise ValueError("do_comment requires blog_id")
        if self.action != "do_comment" and not self.comment_id:
            raise ValueError(f"{self.action} requires comment_id")
        return self

    def to_url(self, base_url: str) -> str:
        if self.action == "do_comment":
            params = {"blog_id": self.blog_id, "blog_url": self.blog_url}
        else:
            params = {"comment_id": self.comment_id, "blog_url": self.blog_url}
        return f"{base_url}/{self.action}?{urlencode(params)}"
