from sqlalchemy import select

from ghcomments.clock import Clock, utcnow
from ghcomments.database import session_scope
from ghcomments.models.user import UserEntry
from ghcomments.schemas.github import GitHubProfile


class UserStore:
    def __init__(self, clock: Clock = utcnow) -> None:
        self._clock = clock

    def upsert_profile(self, profile: GitHubProfile) -> tuple[UserEntry, bool]:
        """Store the profile GitHub just returned.

        Every field is overwritten on each login; the returned flag tells
        whether the user already existed.
        """
        now = self._clock()
        with session_scope() as session:
            entry = session.execute(
                select(UserEntry).where(
                    UserEntry.github_user_id == profile.github_user_id
                )
            ).scalar_one_or_none()
            if entry is not None:
                entry.username = profile.username
                entry.profile_url = profile.profile_url
                entry.avatar_url = profile.avatar_url
                entry.updated_at = now
                session.flush()
                return entry, True

            entry = UserEntry(
                github_user_id=profile.github_user_id,
                username=profile.username,
                profile_url=profile.profile_url,
                avatar_url=profile.avatar_url,
                created_at=now,
                updated_at=now,
            )
            session.add(entry)
            session.flush()
            return entry, False

    def get_user(self, github_user_id: int) -> UserEntry | None:
        with session_scope() as session:
            return session.get(UserEntry, github_user_id)


user_store = UserStore()
