from datetime import timedelta
import logging
import secrets

from pydantic import ValidationError
from sqlalchemy import delete, select

from ghcomments.clock import Clock, utcnow
from ghcomments.config import settings
from ghcomments.database import session_scope
from ghcomments.models.oauth_state import OAuthStateEntry
from ghcomments.schemas.actions import PendingAction

LOGGER = logging.getLogger(__name__)


class InvalidStateError(ValueError):
    pass


class OAuthStateStore:
    """Single-use anti-forgery tokens for the GitHub login round trip.

    Each token carries the write action the browser was attempting, so the
    callback can resume it without any state held by the browser.
    """

    def __init__(self, ttl_seconds: int, clock: Clock = utcnow) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock

    def create_state(self, pending: PendingAction) -> str:
        now = self._clock()
        state = secrets.token_urlsafe(32)
        with session_scope() as session:
            session.execute(
                delete(OAuthStateEntry)
                .where(OAuthStateEntry.expires_at <= now)
                .execution_options(synchronize_session=False)
            )
            session.add(
                OAuthStateEntry(
                    state=state,
                    pending_action=pending.model_dump_json(),
                    created_at=now,
                    expires_at=now + timedelta(seconds=self._ttl_seconds),
                )
            )
        return state

    def consume_state(self, state: str | None) -> PendingAction:
        if not state:
            raise InvalidStateError("state is missing")
        now = self._clock()
        with session_scope() as session:
            pending_raw = session.execute(
                select(OAuthStateEntry.pending_action).where(
                    OAuthStateEntry.state == state
                )
            ).scalar_one_or_none()
            if pending_raw is None:
                raise InvalidStateError("state is unknown or already used")
            live = session.execute(
                delete(OAuthStateEntry).where(
                    OAuthStateEntry.state == state,
                    OAuthStateEntry.expires_at > now,
                )
                .execution_options(synchronize_session=False)
            ).rowcount
            if live != 1:
                # Expired (or raced away); drop it either way.
                session.execute(
                    delete(OAuthStateEntry).where(OAuthStateEntry.state == state)
                )
        if live != 1:
            raise InvalidStateError("state has expired or was already used")
        try:
            return PendingAction.model_validate_json(pending_raw)
        except ValidationError as exc:
            raise InvalidStateError("pending action is corrupt") from exc


oauth_state_store = OAuthStateStore(settings.oauth_state_ttl_seconds)
