from dataclasses import dataclass
from datetime import timedelta
import hashlib

import jwt

from ghcomments.clock import Clock, utcnow
from ghcomments.config import settings


class TokenError(ValueError):
    pass


@dataclass(frozen=True)
class FormTokenData:
    user_id: int
    action: str
    target: str


def _session_digest(session_token: str) -> str:
    return hashlib.sha256(session_token.encode("utf-8")).hexdigest()


def create_form_token(
    user_id: int,
    session_token: str,
    action: str,
    target: str,
    clock: Clock = utcnow,
) -> str:
    """Sign a token proving a form was rendered for this session and target."""
    if not settings.form_token_secret:
        raise TokenError("Form token secret is not configured")
    now = clock()
    expires_at = now + timedelta(seconds=settings.form_token_ttl_seconds)
    payload = {
        "sub": str(user_id),
        "sid": _session_digest(session_token),
        "act": action,
        "tgt": target,
        "type": "form",
        "iat": int(now.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(
        payload, settings.form_token_secret, algorithm=settings.form_token_algorithm
    )


def verify_form_token(
    token: str | None, user_id: int, session_token: str, action: str, target: str
) -> FormTokenData:
    payload = _decode_token(token)
    if payload.get("sid") != _session_digest(session_token):
        raise TokenError("Form token belongs to another session")
    if _parse_subject(payload) != user_id:
        raise TokenError("Form token belongs to another user")
    if payload.get("act") != action or payload.get("tgt") != target:
        raise TokenError("Form token was issued for another action")
    return FormTokenData(user_id=user_id, action=action, target=target)


def _decode_token(token: str | None) -> dict:
    if not token:
        raise TokenError("Token is missing")
    if not settings.form_token_secret:
        raise TokenError("Form token secret is not configured")
    try:
        payload = jwt.decode(
            token,
            settings.form_token_secret,
            algorithms=[settings.form_token_algorithm],
        )
    except jwt.ExpiredSignatureError as exc:
        raise TokenError("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise TokenError("Invalid token") from exc
    if payload.get("type") != "form":
        raise TokenError("Invalid token type")
    return payload


def _parse_subject(payload: dict) -> int:
    subject = payload.get("sub")
    if not subject:
        raise TokenError("Token subject is missing")
    try:
        return int(subject)
    except (TypeError, ValueError) as exc:
        raise TokenError("Invalid token subject") from exc
