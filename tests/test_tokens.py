from datetime import datetime, timedelta, timezone

import jwt
import pytest

from conftest import FakeClock
from ghcomments.config import settings
from ghcomments.services.tokens import TokenError, create_form_token, verify_form_token


def test_form_token_round_trip():
    token = create_form_token(42, "session-a", "edit_comment", "c1")
    data = verify_form_token(token, 42, "session-a", "edit_comment", "c1")
    assert (data.user_id, data.action, data.target) == (42, "edit_comment", "c1")


@pytest.mark.parametrize(
    "user_id, session_token, action, target",
    [
        (7, "session-a", "edit_comment", "c1"),
        (42, "session-b", "edit_comment", "c1"),
        (42, "session-a", "del_comment", "c1"),
        (42, "session-a", "edit_comment", "c2"),
    ],
)
def test_form_token_bound_to_session_and_target(user_id, session_token, action, target):
    token = create_form_token(42, "session-a", "edit_comment", "c1")
    with pytest.raises(TokenError):
        verify_form_token(token, user_id, session_token, action, target)


def test_form_token_missing_or_garbage():
    with pytest.raises(TokenError):
        verify_form_token("", 42, "session-a", "do_comment", "b")
    with pytest.raises(TokenError):
        verify_form_token("not.a.jwt", 42, "session-a", "do_comment", "b")


def test_form_token_expired():
    issued = FakeClock(datetime.now(timezone.utc) - timedelta(hours=2))
    token = create_form_token(42, "session-a", "do_comment", "b", clock=issued)
    with pytest.raises(TokenError, match="expired"):
        verify_form_token(token, 42, "session-a", "do_comment", "b")


def test_form_token_issued_recently_is_valid():
    issued = FakeClock(datetime.now(timezone.utc) - timedelta(minutes=5))
    token = create_form_token(42, "session-a", "do_comment", "b", clock=issued)
    assert verify_form_token(token, 42, "session-a", "do_comment", "b").user_id == 42


def test_form_token_wrong_type():
    token = jwt.encode(
        {"sub": "42", "type": "access"},
        settings.form_token_secret,
        algorithm=settings.form_token_algorithm,
    )
    with pytest.raises(TokenError, match="type"):
        verify_form_token(token, 42, "session-a", "do_comment", "b")
