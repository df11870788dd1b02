"""Pytest configuration and fixtures.

Environment variables are set before any ``ghcomments`` import, since the
settings object and the engine are built at import time.
"""

import os
import re
import tempfile
from datetime import datetime, timedelta, timezone
from urllib.parse import parse_qs, urlparse

_TMP_DIR = tempfile.mkdtemp(prefix="ghcomments-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["BASE_URL"] = "http://testserver"
os.environ["ALLOWED_BIDS"] = "my_blog_post,other_post"
os.environ["ALLOWED_URLS"] = "https://x/,https://blog.example.com/"
os.environ["GITHUB_CLIENT_ID"] = "test-client-id"
os.environ["GITHUB_CLIENT_SECRET"] = "test-client-secret"
os.environ["FORM_TOKEN_SECRET"] = "test-form-token-secret-0123456789abcdef"

import pytest
from fastapi.testclient import TestClient

from ghcomments.database import Base, engine, init_db
from ghcomments.main import app
from ghcomments.schemas.github import GitHubProfile
from ghcomments.services.github import GitHubClient, GitHubError, get_github_client

FORM_TOKEN_RE = re.compile(r'name="form_token" value="([^"]+)"')


class FakeClock:
    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeGitHub(GitHubClient):
    """GitHub stand-in keyed by authorization code."""

    def __init__(self) -> None:
        super().__init__("test-client-id", "test-client-secret", "ghcomments-tests", 1)
        self.profiles: dict[str, GitHubProfile] = {}
        self.exchanged: list[str] = []

    def add_user(self, code: str, github_user_id: int, username: str) -> GitHubProfile:
        profile = GitHubProfile(
            github_user_id=github_user_id,
            username=username,
            profile_url=f"https://github.com/{username}",
            avatar_url=f"https://avatars.githubusercontent.com/u/{github_user_id}",
        )
        self.profiles[code] = profile
        return profile

    def exchange_code(self, code: str, redirect_uri: str) -> str:
        self.exchanged.append(code)
        if code not in self.profiles:
            raise GitHubError("GitHub rejected the authorization code")
        return f"token-{code}"

    def fetch_profile(self, access_token: str) -> GitHubProfile:
        return self.profiles[access_token.removeprefix("token-")]


@pytest.fixture(autouse=True)
def reset_db():
    Base.metadata.drop_all(bind=engine)
    init_db()
    yield


@pytest.fixture
def fake_github():
    fake = FakeGitHub()
    fake.add_user("code-42", 42, "octocat")
    fake.add_user("code-7", 7, "hubot")
    app.dependency_overrides[get_github_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_github_client, None)


@pytest.fixture
def make_client(fake_github):
    def _make() -> TestClient:
        return TestClient(app, follow_redirects=False)

    return _make


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()


def state_from_location(location: str) -> str:
    return parse_qs(urlparse(location).query)["state"][0]


def form_token_from(html: str) -> str:
    match = FORM_TOKEN_RE.search(html)
    assert match, "form_token missing from page"
    return match.group(1)


def login(client: TestClient, code: str, blog_url: str = "https://x/y") -> None:
    """Run the GitHub login round trip for ``code`` on this client."""
    response = client.get(
        "/do_comment", params={"blog_id": "my_blog_post", "blog_url": blog_url}
    )
    assert response.status_code == 302
    state = state_from_location(response.headers["location"])
    response = client.get("/github_authenticated", params={"code": code, "state": state})
    assert response.status_code == 302


def post_comment(
    client: TestClient,
    text: str,
    blog_id: str = "my_blog_post",
    blog_url: str = "https://x/y",
):
    page = client.get("/do_comment", params={"blog_id": blog_id, "blog_url": blog_url})
    assert page.status_code == 200
    return client.post(
        "/do_comment",
        data={
            "blog_id": blog_id,
            "blog_url": blog_url,
            "comment_text": text,
            "form_token": form_token_from(page.text),
        },
    )
