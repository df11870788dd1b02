from __future__ import annotations

import http.client
import json
import logging
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from ghcomments.config import settings
from ghcomments.schemas.github import GitHubProfile

LOGGER = logging.getLogger(__name__)

GITHUB_AUTHORIZE_ENDPOINT = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_ENDPOINT = "https://github.com/login/oauth/access_token"
GITHUB_USER_ENDPOINT = "https://api.github.com/user"
GITHUB_API_VERSION = "2022-11-28"


class GitHubError(RuntimeError):
    pass


class GitHubClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        user_agent: str,
        timeout: float,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._user_agent = user_agent
        self._timeout = timeout

    def authorize_url(self, state: str, redirect_uri: str) -> str:
        params = {
            "client_id": self._client_id,
            "redirect_uri": redirect_uri,
            "scope": "read:user",
            "state": state,
        }
        return f"{GITHUB_AUTHORIZE_ENDPOINT}?{urlencode(params)}"

    def exchange_code(self, code: str, redirect_uri: str) -> str:
        if not self._client_id or not self._client_secret:
            raise GitHubError("GitHub OAuth is not configured")
        payload = urlencode(
            {
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "code": code,
                "redirect_uri": redirect_uri,
            }
        ).encode("utf-8")
        request = Request(
            GITHUB_TOKEN_ENDPOINT,
            data=payload,
            headers={
                "Accept": "application/json",
                "Content-Type": "application/x-www-form-urlencoded",
                "User-Agent": self._user_agent,
            },
            method="POST",
        )
        body = self._send(request)
        # GitHub answers 200 with an "error" field for rejected codes.
        if "error" in body:
            LOGGER.warning(
                "GitHub rejected authorization code: %s", body.get("error")
            )
            raise GitHubError("GitHub rejected the authorization code")
        access_token = body.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise GitHubError("GitHub response is missing access_token")
        return access_token

    def fetch_profile(self, access_token: str) -> GitHubProfile:
        request = Request(
            GITHUB_USER_ENDPOINT,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {access_token}",
                "User-Agent": self._user_agent,
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
            },
            method="GET",
        )
        body = self._send(request)
        return parse_profile(body)

    def _send(self, request: Request) -> dict[str, Any]:
        try:
            with urlopen(request, timeout=self._timeout) as response:
                raw = response.read()
        except HTTPError as exc:
            error_body = exc.read().decode("utf-8", errors="replace")
            LOGGER.error("GitHub API error %s: %s", exc.code, error_body)
            raise GitHubError("GitHub request failed") from exc
        except (URLError, OSError, http.client.HTTPException) as exc:
            raise GitHubError("Failed to reach GitHub") from exc
        try:
            body = json.loads(raw.decode("utf-8"))
        except ValueError as exc:
            raise GitHubError("GitHub returned invalid JSON") from exc
        if not isinstance(body, dict):
            raise GitHubError("GitHub returned an unexpected payload")
        return body


def parse_profile(body: dict[str, Any]) -> GitHubProfile:
    user_id = body.get("id")
    if isinstance(user_id, bool) or not isinstance(user_id, int):
        raise GitHubError("GitHub profile is missing id")
    fields = {}
    for key in ("login", "html_url", "avatar_url"):
        value = body.get(key)
        if not isinstance(value, str) or not value:
            raise GitHubError(f"GitHub profile is missing {key}")
        fields[key] = value
    return GitHubProfile(
        github_user_id=user_id,
        username=fields["login"],
        profile_url=fields["html_url"],
        avatar_url=fields["avatar_url"],
    )


github_client = GitHubClient(
    settings.github_client_id,
    settings.github_client_secret,
    settings.github_user_agent,
    settings.github_timeout_seconds,
)


def get_github_client() -> GitHubClient:
    return github_client
