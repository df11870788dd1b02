import logging
import uuid

from sqlalchemy import delete, select, update

from ghcomments.clock import Clock, as_utc, format_date, utcnow
from ghcomments.database import session_scope
from ghcomments.models.comment import CommentEntry
from ghcomments.models.user import UserEntry
from ghcomments.schemas.comments import CommentRecord, CommentResponse

LOGGER = logging.getLogger(__name__)


def _to_record(entry: CommentEntry) -> CommentRecord:
    return CommentRecord(
        comment_id=entry.comment_id,
        blog_id=entry.blog_id,
        author_id=entry.author_id,
        comment_text=entry.comment_text,
        create_date=as_utc(entry.create_date),
        edit_date=as_utc(entry.edit_date),
    )


def _to_response(entry: CommentEntry, author: UserEntry) -> CommentResponse:
    return CommentResponse(
        comment_id=entry.comment_id,
        username=author.username,
        userurl=author.profile_url,
        useravatar=author.avatar_url,
        create_date=format_date(entry.create_date),
        edit_date=format_date(entry.edit_date),
        comment=entry.comment_text,
    )


def _public_query():
    return select(CommentEntry, UserEntry).join(
        UserEntry, CommentEntry.author_id == UserEntry.github_user_id
    )


class CommentStore:
    def __init__(self, clock: Clock = utcnow) -> None:
        self._clock = clock

    def create_comment(
        self, blog_id: str, author_id: int, comment_text: str
    ) -> CommentRecord:
        now = self._clock()
        entry = CommentEntry(
            comment_id=str(uuid.uuid4()),
            blog_id=blog_id,
            author_id=author_id,
            comment_text=comment_text,
            create_date=now,
            edit_date=now,
        )
        with session_scope() as session:
            session.add(entry)
            session.flush()
            record = _to_record(entry)
        LOGGER.info(
            "Comment %s created on %s by github user %s",
            record.comment_id,
            blog_id,
            author_id,
        )
        return record

    def get_comment(self, comment_id: str) -> CommentRecord | None:
        with session_scope() as session:
            entry = session.get(CommentEntry, comment_id)
            if entry is None:
                return None
            return _to_record(entry)

    def get_public_comment(self, comment_id: str) -> CommentResponse | None:
        with session_scope() as session:
            row = session.execute(
                _public_query().where(CommentEntry.comment_id == comment_id)
            ).one_or_none()
            if row is None:
                return None
            return _to_response(*row)

    def list_comments(self, blog_id: str) -> list[CommentResponse]:
        with session_scope() as session:
            rows = session.execute(
                _public_query()
                .where(CommentEntry.blog_id == blog_id)
                .order_by(CommentEntry.create_date, CommentEntry.comment_id)
            ).all()
            return [_to_response(entry, author) for entry, author in rows]

    def update_comment(self, comment_id: str, author_id: int, comment_text: str) -> bool:
        """Replace the text of a comment owned by ``author_id``.

        The ownership condition is part of the UPDATE itself, so a comment
        that changed hands or vanished in between is simply not touched.
        """
        now = self._clock()
        with session_scope() as session:
            result = session.execute(
                update(CommentEntry)
                .where(
                    CommentEntry.comment_id == comment_id,
                    CommentEntry.author_id == author_id,
                )
                .values(comment_text=comment_text, edit_date=now)
            )
            updated = result.rowcount == 1
        if updated:
            LOGGER.info("Comment %s edited by github user %s", comment_id, author_id)
        return updated

    def delete_comment(self, comment_id: str, author_id: int) -> bool:
        with session_scope() as session:
            result = session.execute(
                delete(CommentEntry).where(
                    CommentEntry.comment_id == comment_id,
                    CommentEntry.author_id == author_id,
                )
            )
            deleted = result.rowcount == 1
        if deleted:
            LOGGER.info("Comment %s deleted by github user %s", comment_id, author_id)
        return deleted


comment_store = CommentStore()
