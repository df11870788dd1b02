import os
from urllib.parse import urlparse

from fastapi import Request
from fastapi.responses import Response
from fastapi.templating import Jinja2Templates

from ghcomments.config import settings
from ghcomments.services.sessions import session_store

templates_dir = os.path.join(os.path.dirname(__file__), "templates")
templates = Jinja2Templates(directory=templates_dir)


def _cookie_path() -> str:
    return urlparse(settings.base_url).path or "/"


def _cookie_secure() -> bool:
    return urlparse(settings.base_url).scheme == "https"


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=session_store.ttl_seconds,
        path=_cookie_path(),
        secure=_cookie_secure(),
        httponly=True,
        samesite="lax",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        settings.session_cookie_name,
        path=_cookie_path(),
        secure=_cookie_secure(),
        httponly=True,
        samesite="lax",
    )


def get_session_token(request: Request) -> str | None:
    return request.cookies.get(settings.session_cookie_name) or None


def render_message(
    request: Request, title: str, message: str, status_code: int = 200
) -> Response:
    return templates.TemplateResponse(
        request,
        "message.html",
        {"title": title, "message": message},
        status_code=status_code,
    )
