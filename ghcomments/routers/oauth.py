import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse, Response

from ghcomments.config import settings
from ghcomments.dependencies import (
    clear_session_cookie,
    get_session_token,
    render_message,
    set_session_cookie,
)
from ghcomments.schemas.actions import PendingAction
from ghcomments.services.access import whitelist
from ghcomments.services.github import GitHubClient, GitHubError, get_github_client
from ghcomments.services.oauth_states import InvalidStateError, oauth_state_store
from ghcomments.services.sessions import session_store
from ghcomments.services.users import user_store

LOGGER = logging.getLogger(__name__)

router = APIRouter(tags=["oauth"])

CALLBACK_PATH = "/github_authenticated"


def callback_url() -> str:
    return f"{settings.base_url}{CALLBACK_PATH}"


def begin_login(pending: PendingAction, github: GitHubClient) -> RedirectResponse:
    """Send the browser to GitHub, remembering what it was trying to do."""
    state = oauth_state_store.create_state(pending)
    return RedirectResponse(
        github.authorize_url(state, callback_url()),
        status_code=status.HTTP_302_FOUND,
    )


@router.get(CALLBACK_PATH)
def github_authenticated(
    request: Request,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
    github: GitHubClient = Depends(get_github_client),
) -> Response:
    # The state is burnt before anything else so a failed attempt can't be replayed.
    try:
        pending = oauth_state_store.consume_state(state)
    except InvalidStateError as exc:
        LOGGER.warning("Rejected GitHub callback: %s", exc)
        return render_message(
            request,
            "Login Failed",
            "This login link is invalid or has expired. Please try again.",
            status.HTTP_400_BAD_REQUEST,
        )

    if error or not code:
        LOGGER.info("GitHub login not completed: %s", error or "code missing")
        return render_message(
            request,
            "Login Failed",
            "GitHub did not authorize the login.",
            status.HTTP_400_BAD_REQUEST,
        )

    try:
        access_token = github.exchange_code(code, callback_url())
        profile = github.fetch_profile(access_token)
    except GitHubError as exc:
        LOGGER.warning("GitHub login failed: %s", exc)
        return render_message(
            request,
            "Login Failed",
            "Could not complete the login with GitHub. Please try again later.",
            status.HTTP_502_BAD_GATEWAY,
        )

    user_store.upsert_profile(profile)
    session_token = session_store.create_session(profile.github_user_id)
    response = RedirectResponse(
        pending.to_url(settings.base_url), status_code=status.HTTP_302_FOUND
    )
    set_session_cookie(response, session_token)
    return response


@router.get("/logout")
def logout(request: Request, blog_url: str | None = None) -> Response:
    session_store.revoke_session(get_session_token(request))
    if whitelist.is_allowed_url(blog_url):
        response = RedirectResponse(blog_url, status_code=status.HTTP_302_FOUND)
    else:
        response = render_message(request, "Logged Out", "You have been logged out.")
    clear_session_cookie(response)
    return response
