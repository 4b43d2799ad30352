"""Tests for password hashing and session tokens."""
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import jwt
import pytest
from hypothesis import given, settings as hyp_settings, strategies as st

from app.core.config import settings
from app.core.exceptions import InternalError, InvalidSession
from app.core.security import (
    hash_password, issue_session, validate_session, verify_password
)


def make_user(user_id=1, email="ada@example.com", user_type="employer"):
    return SimpleNamespace(id=user_id, email=email, user_type=user_type)


class TestPasswordHashing:

    def test_hash_is_salted_and_verifiable(self):
        first = hash_password("correct horse")
        second = hash_password("correct horse")

        assert first != second
        assert first != "correct horse"
        assert verify_password("correct horse", first)
        assert verify_password("correct horse", second)

    def test_wrong_password_is_rejected(self):
        hashed = hash_password("correct horse")
        assert not verify_password("battery staple", hashed)

    def test_cost_factor_is_at_least_ten(self):
        hashed = hash_password("pw")
        # $2b$<rounds>$...
        assert int(hashed.split("$")[2]) >= 10

    def test_garbage_hash_does_not_verify(self):
        assert not verify_password("pw", "not-a-bcrypt-hash")


class TestSessions:

    @given(
        user_id=st.integers(min_value=1, max_value=2**31),
        user_type=st.sampled_from(["employer", "job_seeker"]),
    )
    @hyp_settings(max_examples=25)
    def test_token_decodes_to_same_identity(self, user_id, user_type):
        token = issue_session(make_user(user_id, "x@example.com", user_type))
        identity = validate_session(token)

        assert identity.id == user_id
        assert identity.email == "x@example.com"
        assert identity.role == user_type

    def test_token_expires_after_24_hours(self):
        issued = datetime.now(timezone.utc) - timedelta(hours=24, minutes=1)
        token = issue_session(make_user(), now=issued)

        with pytest.raises(InvalidSession):
            validate_session(token)

    def test_token_just_inside_window_is_valid(self):
        issued = datetime.now(timezone.utc) - timedelta(hours=23, minutes=59)
        token = issue_session(make_user(), now=issued)

        assert validate_session(token).id == 1

    def test_token_signed_with_other_secret_is_invalid(self):
        token = jwt.encode(
            {"id": 1, "email": "a@b.c", "userType": "employer",
             "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            "some-other-secret",
            algorithm=settings.JWT_ALGORITHM,
        )
        with pytest.raises(InvalidSession):
            validate_session(token)

    def test_tampered_token_is_invalid(self):
        token = issue_session(make_user())
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, signature[::-1]])

        with pytest.raises(InvalidSession):
            validate_session(tampered)

    @pytest.mark.parametrize("token", ["", "abc", "a.b.c", "Bearer x"])
    def test_malformed_token_is_invalid(self, token):
        with pytest.raises(InvalidSession):
            validate_session(token)

    def test_token_without_role_is_invalid(self):
        token = jwt.encode(
            {"id": 1, "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        with pytest.raises(InvalidSession):
            validate_session(token)

    def test_signing_failure_is_internal_error(self, monkeypatch):
        monkeypatch.setattr(settings, "JWT_ALGORITHM", "NOT-AN-ALGORITHM")

        with pytest.raises(InternalError):
            issue_session(make_user())
