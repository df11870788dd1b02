from dataclasses import dataclass

from ghcomments.config import settings
from ghcomments.schemas.comments import CommentRecord


@dataclass(frozen=True)
class BlogWhitelist:
    blog_ids: frozenset[str]
    url_prefixes: tuple[str, ...] = ()

    def is_allowed(self, blog_id: str | None) -> bool:
        return bool(blog_id) and blog_id in self.blog_ids

    def is_allowed_url(self, blog_url: str | None) -> bool:
        if not blog_url:
            return False
        if not blog_url.startswith(("http://", "https://")):
            return False
        return any(blog_url.startswith(prefix) for prefix in self.url_prefixes)


def can_create(whitelist: BlogWhitelist, blog_id: str | None) -> bool:
    return whitelist.is_allowed(blog_id)


def can_modify(user_id: int | None, comment: CommentRecord) -> bool:
    if user_id is None:
        return False
    return comment.author_id == user_id


whitelist = BlogWhitelist(
    blog_ids=frozenset(settings.allowed_bids),
    url_prefixes=settings.allowed_urls,
)
