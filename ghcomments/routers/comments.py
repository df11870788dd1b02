import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse, Response

from ghcomments.config import settings
from ghcomments.dependencies import get_session_token, templates
from ghcomments.routers.oauth import begin_login
from ghcomments.schemas.actions import PendingAction
from ghcomments.schemas.comments import CommentRecord, CommentResponse
from ghcomments.services.access import can_create, can_modify, whitelist
from ghcomments.services.comments import comment_store
from ghcomments.services.github import GitHubClient, get_github_client
from ghcomments.services.sessions import session_store
from ghcomments.services.tokens import TokenError, create_form_token, verify_form_token
from ghcomments.services.users import user_store

LOGGER = logging.getLogger(__name__)

router = APIRouter(tags=["comments"])


def _require_blog_url(blog_url: str) -> None:
    if not whitelist.is_allowed_url(blog_url):
        LOGGER.info("Rejected blog_url %r", blog_url)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="blog_url is not allowed",
        )


def _require_whitelisted(blog_id: str) -> None:
    if not can_create(whitelist, blog_id):
        LOGGER.info("Rejected comment for blog_id %r", blog_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="blog_id is not allowed",
        )


def _load_comment(comment_id: str) -> CommentRecord:
    comment = comment_store.get_comment(comment_id)
    if comment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found",
        )
    return comment


def _require_owner(user_id: int | None, comment: CommentRecord) -> None:
    if not can_modify(user_id, comment):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not the author of this comment",
        )


def _require_session(request: Request) -> tuple[str, int]:
    session_token = get_session_token(request)
    user_id = session_store.get_user_id(session_token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not logged in",
        )
    return session_token, user_id


def _form_token(user_id: int, session_token: str, action: str, target: str) -> str:
    try:
        return create_form_token(user_id, session_token, action, target)
    except TokenError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc),
        ) from exc


def _check_form_token(
    token: str, user_id: int, session_token: str, action: str, target: str
) -> None:
    try:
        verify_form_token(token, user_id, session_token, action, target)
    except TokenError as exc:
        LOGGER.info("Rejected %s form token: %s", action, exc)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=str(exc),
        ) from exc


def _check_text(comment_text: str) -> str:
    if not comment_text.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Comment text is required",
        )
    if len(comment_text) > settings.max_comment_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Comment text is too long",
        )
    return comment_text


def _redirect(blog_url: str) -> RedirectResponse:
    return RedirectResponse(blog_url, status_code=status.HTTP_302_FOUND)


def _render_form(
    request: Request,
    *,
    user_id: int,
    session_token: str,
    action: str,
    target: str,
    heading: str,
    hidden: dict[str, str],
    blog_url: str,
    comment_text: str = "",
) -> Response:
    return templates.TemplateResponse(
        request,
        "comment_form.html",
        {
            "heading": heading,
            "user": user_store.get_user(user_id),
            "action_url": f"{settings.base_url}/{action}",
            "hidden": hidden,
            "form_token": _form_token(user_id, session_token, action, target),
            "comment_text": comment_text,
            "blog_url": blog_url,
            "max_length": settings.max_comment_length,
        },
    )


@router.get("/get_comment", response_model=CommentResponse)
def get_comment(
    comment_id: str = Query(min_length=1, max_length=64),
) -> CommentResponse:
    comment = comment_store.get_public_comment(comment_id)
    if comment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found",
        )
    return comment


@router.get("/get_comments", response_model=list[CommentResponse])
def get_comments(
    blog_id: str = Query(min_length=1, max_length=255),
) -> list[CommentResponse]:
    return comment_store.list_comments(blog_id)


@router.get("/do_comment")
def do_comment_page(
    request: Request,
    blog_id: str = Query(min_length=1, max_length=255),
    blog_url: str = Query(min_length=1, max_length=2048),
    github: GitHubClient = Depends(get_github_client),
) -> Response:
    _require_blog_url(blog_url)
    _require_whitelisted(blog_id)
    session_token = get_session_token(request)
    user_id = session_store.get_user_id(session_token)
    if user_id is None:
        pending = PendingAction(action="do_comment", blog_id=blog_id, blog_url=blog_url)
        return begin_login(pending, github)
    return _render_form(
        request,
        user_id=user_id,
        session_token=session_token,
        action="do_comment",
        target=blog_id,
        heading=f"Write a Comment - {blog_id}",
        hidden={"blog_id": blog_id, "blog_url": blog_url},
        blog_url=blog_url,
    )


@router.post("/do_comment")
def do_comment(
    request: Request,
    blog_id: str = Form(min_length=1, max_length=255),
    blog_url: str = Form(min_length=1, max_length=2048),
    comment_text: str = Form(default=""),
    form_token: str = Form(default=""),
) -> Response:
    _require_blog_url(blog_url)
    _require_whitelisted(blog_id)
    session_token, user_id = _require_session(request)
    _check_form_token(form_token, user_id, session_token, "do_comment", blog_id)
    comment_store.create_comment(blog_id, user_id, _check_text(comment_text))
    return _redirect(blog_url)


@router.get("/edit_comment")
def edit_comment_page(
    request: Request,
    comment_id: str = Query(min_length=1, max_length=64),
    blog_url: str = Query(min_length=1, max_length=2048),
    github: GitHubClient = Depends(get_github_client),
) -> Response:
    _require_blog_url(blog_url)
    comment = _load_comment(comment_id)
    session_token = get_session_token(request)
    user_id = session_store.get_user_id(session_token)
    if user_id is None:
        pending = PendingAction(
            action="edit_comment", comment_id=comment_id, blog_url=blog_url
        )
        return begin_login(pending, github)
    _require_owner(user_id, comment)
    return _render_form(
        request,
        user_id=user_id,
        session_token=session_token,
        action="edit_comment",
        target=comment_id,
        heading="Edit Comment",
        hidden={"comment_id": comment_id, "blog_url": blog_url},
        blog_url=blog_url,
        comment_text=comment.comment_text,
    )


@router.post("/edit_comment")
def edit_comment(
    request: Request,
    comment_id: str = Form(min_length=1, max_length=64),
    blog_url: str = Form(min_length=1, max_length=2048),
    comment_text: str = Form(default=""),
    form_token: str = Form(default=""),
) -> Response:
    _require_blog_url(blog_url)
    comment = _load_comment(comment_id)
    session_token, user_id = _require_session(request)
    _require_owner(user_id, comment)
    _check_form_token(form_token, user_id, session_token, "edit_comment", comment_id)
    if not comment_store.update_comment(comment_id, user_id, _check_text(comment_text)):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found",
        )
    return _redirect(blog_url)


@router.get("/del_comment")
def del_comment_page(
    request: Request,
    comment_id: str = Query(min_length=1, max_length=64),
    blog_url: str = Query(min_length=1, max_length=2048),
    github: GitHubClient = Depends(get_github_client),
) -> Response:
    _require_blog_url(blog_url)
    comment = _load_comment(comment_id)
    session_token = get_session_token(request)
    user_id = session_store.get_user_id(session_token)
    if user_id is None:
        pending = PendingAction(
            action="del_comment", comment_id=comment_id, blog_url=blog_url
        )
        return begin_login(pending, github)
    _require_owner(user_id, comment)
    return templates.TemplateResponse(
        request,
        "delete_confirm.html",
        {
            "user": user_store.get_user(user_id),
            "action_url": f"{settings.base_url}/del_comment",
            "comment_id": comment_id,
            "comment_text": comment.comment_text,
            "blog_url": blog_url,
            "form_token": _form_token(user_id, session_token, "del_comment", comment_id),
        },
    )


@router.post("/del_comment")
def del_comment(
    request: Request,
    comment_id: str = Form(min_length=1, max_length=64),
    blog_url: str = Form(min_length=1, max_length=2048),
    form_token: str = Form(default=""),
) -> Response:
    _require_blog_url(blog_url)
    comment = _load_comment(comment_id)
    session_token, user_id = _require_session(request)
    _require_owner(user_id, comment)
    _check_form_token(form_token, user_id, session_token, "del_comment", comment_id)
    if not comment_store.delete_comment(comment_id, user_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found",
        )
    return _redirect(blog_url)
