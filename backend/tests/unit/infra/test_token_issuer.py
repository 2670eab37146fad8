"""Unit tests for the PyJWT token issuer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

import jwt
import pytest
from authkit.infra.jwt.pyjwt_token_issuer import JWTTokenIssuer
from authkit.services._shared.errors import ConfigInvalid, InvalidToken
from freezegun import freeze_time


@dataclass(frozen=True)
class _Subject:
    id: str = "u" * 32
    email: str = "a@x.com"


@pytest.fixture()
def issuer() -> JWTTokenIssuer:
    return JWTTokenIssuer(
        access_secret="access-key",
        refresh_secret="refresh-key",
        issuer="authkit-test",
        access_ttl=timedelta(minutes=30),
        refresh_ttl=timedelta(days=7),
    )


def test_access_token_round_trip_claims(issuer):
    with freeze_time("2026-03-01 10:00:00"):
        claims = issuer.verify_access_token(issuer.issue_access_token(_Subject()))

    assert claims.user_id == "u" * 32
    assert claims.subject == claims.user_id
    assert claims.email == "a@x.com"
    assert claims.issuer == "authkit-test"
    assert claims.expires_at - claims.issued_at == timedelta(minutes=30)
    assert claims.token_id


def test_refresh_token_lifetime(issuer):
    claims = issuer.verify_refresh_token(issuer.issue_refresh_token(_Subject()))

    assert claims.expires_at - claims.issued_at == timedelta(days=7)


def test_keys_are_separated(issuer):
    access = issuer.issue_access_token(_Subject())
    refresh = issuer.issue_refresh_token(_Subject())

    with pytest.raises(InvalidToken):
        issuer.verify_refresh_token(access)
    with pytest.raises(InvalidToken):
        issuer.verify_access_token(refresh)


def test_type_claim_is_checked_even_with_the_right_key(issuer):
    forged = jwt.encode(
        {"sub": "x", "iss": "authkit-test", "iat": 1, "exp": 4102444800, "jti": "j", "type": "access"},
        "refresh-key",
        algorithm="HS256",
    )

    with pytest.raises(InvalidToken):
        issuer.verify_refresh_token(forged)


def test_tokens_are_unique_per_issue(issuer):
    with freeze_time("2026-03-01 10:00:00"):
        first = issuer.issue_refresh_token(_Subject())
        second = issuer.issue_refresh_token(_Subject())

    assert first != second


def test_expired_access_token_is_invalid(issuer):
    with freeze_time("2026-03-01 10:00:00"):
        token = issuer.issue_access_token(_Subject())

    with freeze_time("2026-03-01 10:31:00"), pytest.raises(InvalidToken):
        issuer.verify_access_token(token)


def test_wrong_issuer_is_invalid(issuer):
    other = JWTTokenIssuer(access_secret="access-key", refresh_secret="refresh-key", issuer="someone-else")

    with pytest.raises(InvalidToken):
        issuer.verify_access_token(other.issue_access_token(_Subject()))


@pytest.mark.parametrize("token", ["", "abc", "a.b.c"])
def test_malformed_tokens_are_invalid(issuer, token):
    with pytest.raises(InvalidToken):
        issuer.verify_access_token(token)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"access_secret": "", "refresh_secret": "r"},
        {"access_secret": "a", "refresh_secret": ""},
        {"access_secret": "same", "refresh_secret": "same"},
        {"access_secret": "a", "refresh_secret": "r", "access_ttl": timedelta(0)},
        {"access_secret": "a", "refresh_secret": "r", "refresh_ttl": timedelta(seconds=-5)},
    ],
)
def test_construction_fails_fast_on_bad_config(kwargs):
    with pytest.raises(ConfigInvalid):
        JWTTokenIssuer(**kwargs)
