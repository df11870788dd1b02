from datetime import timedelta
import logging
import secrets

from sqlalchemy import delete, select, update

from ghcomments.clock import Clock, utcnow
from ghcomments.config import settings
from ghcomments.database import session_scope
from ghcomments.models.session import SessionEntry

LOGGER = logging.getLogger(__name__)


class SessionStore:
    def __init__(self, ttl_seconds: int, clock: Clock = utcnow) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    def create_session(self, github_user_id: int) -> str:
        now = self._clock()
        token = secrets.token_urlsafe(32)
        expires_at = now + timedelta(seconds=self._ttl_seconds)
        with session_scope() as session:
            session.execute(
                delete(SessionEntry)
                .where(SessionEntry.expires_at <= now)
                .execution_options(synchronize_session=False)
            )
            session.add(
                SessionEntry(
                    token=token,
                    github_user_id=github_user_id,
                    created_at=now,
                    expires_at=expires_at,
                    revoked_at=None,
                )
            )
        LOGGER.info("Session issued for github user %s", github_user_id)
        return token

    def revoke_session(self, token: str | None) -> bool:
        if not token:
            return False
        now = self._clock()
        with session_scope() as session:
            result = session.execute(
                update(SessionEntry)
                .where(SessionEntry.token == token, SessionEntry.revoked_at.is_(None))
                .values(revoked_at=now)
            )
            return result.rowcount > 0

    def get_user_id(self, token: str | None) -> int | None:
        if not token:
            return None
        now = self._clock()
        with session_scope() as session:
            result = session.execute(
                select(SessionEntry.github_user_id).where(
                    SessionEntry.token == token,
                    SessionEntry.revoked_at.is_(None),
                    SessionEntry.expires_at > now,
                )
            )
            return result.scalar_one_or_none()

    def purge_expired(self) -> int:
        now = self._clock()
        with session_scope() as session:
            result = session.execute(
                delete(SessionEntry).where(SessionEntry.expires_at <= now)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount


session_store = SessionStore(settings.session_ttl_seconds)
