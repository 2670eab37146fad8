"""Model-level tests for User and RefreshToken."""

from datetime import UTC, datetime, timedelta

import pytest
from authkit.models import RefreshToken, User
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import UserFactory


def test_user_requires_email_with_at_sign():
    with pytest.raises(ValueError):
        User(email="not-an-email", password_hash="h")


def test_user_requires_password_hash():
    with pytest.raises(ValueError):
        User(email="a@x.com", password_hash="")


def test_user_owns_refresh_tokens(session):
    token = RefreshTokenFactory()
    session.commit()

    assert token.user.refresh_tokens == [token]


def test_refresh_token_is_expired_boundary():
    expires = datetime(2026, 1, 1, tzinfo=UTC)
    token = RefreshToken(user_id="u", token="t", expires_at=expires, revoked=False)

    assert not token.is_expired(expires)
    assert token.is_expired(expires + timedelta(microseconds=1))


def test_repr_mentions_id(session):
    user = UserFactory()
    assert user.id in repr(user)
