from datetime import datetime, timezone

from ghcomments.schemas.comments import CommentRecord
from ghcomments.services.access import BlogWhitelist, can_create, can_modify, whitelist

WHITELIST = BlogWhitelist(
    blog_ids=frozenset({"my_blog_post"}),
    url_prefixes=("https://blog.example.com/",),
)


def _comment(author_id: int) -> CommentRecord:
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    return CommentRecord(
        comment_id="c1",
        blog_id="my_blog_post",
        author_id=author_id,
        comment_text="hello",
        create_date=now,
        edit_date=now,
    )


def test_can_create_only_whitelisted_blog_ids():
    assert can_create(WHITELIST, "my_blog_post")
    for blog_id in ["", None, "other", "my_blog_post ", "MY_BLOG_POST"]:
        assert not can_create(WHITELIST, blog_id)


def test_can_modify_only_author():
    comment = _comment(author_id=42)
    assert can_modify(42, comment)
    assert not can_modify(7, comment)
    assert not can_modify(None, comment)


def test_blog_url_must_match_prefix():
    assert WHITELIST.is_allowed_url("https://blog.example.com/posts/1")
    assert not WHITELIST.is_allowed_url("https://evil.example.com/")
    assert not WHITELIST.is_allowed_url("javascript:alert(1)")
    assert not WHITELIST.is_allowed_url("")
    assert not WHITELIST.is_allowed_url(None)


def test_empty_prefix_list_allows_nothing():
    closed = BlogWhitelist(blog_ids=frozenset({"a"}))
    assert not closed.is_allowed_url("https://blog.example.com/")


def test_whitelist_loaded_from_settings():
    assert whitelist.is_allowed("my_blog_post")
    assert whitelist.is_allowed("other_post")
    assert not whitelist.is_allowed("unknown")
