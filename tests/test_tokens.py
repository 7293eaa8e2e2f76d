from datetime import datetime, timedelta, timezone

import pytest

from planitech.core.errors import AuthError
from planitech.security.tokens import JWTSettings, create_access_token, decode_token, verify_token

SETTINGS = JWTSettings(secret="unit-secret")


def issue(**overrides):
    params = dict(user_id=7, username="tom", email="tom@test.local", settings=SETTINGS)
    params.update(overrides)
    return create_access_token(**params)


def test_verify_returns_identity():
    identity = verify_token(issue(), SETTINGS)
    assert (identity.user_id, identity.username, identity.email) == (7, "tom", "tom@test.local")


def test_token_lifetime_is_24_hours():
    decoded = decode_token(issue(now=datetime.now(timezone.utc)), SETTINGS)
    assert decoded["exp"] - decoded["iat"] == 24 * 3600


def test_expired_token_is_rejected():
    token = issue(now=datetime.now(timezone.utc) - timedelta(hours=25))
    with pytest.raises(AuthError):
        verify_token(token, SETTINGS)


def test_wrong_secret_is_rejected():
    with pytest.raises(AuthError):
        verify_token(issue(), JWTSettings(secret="other-secret"))


def test_wrong_issuer_is_rejected():
    with pytest.raises(AuthError):
        verify_token(issue(), JWTSettings(secret="unit-secret", issuer="someone-else"))


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_malformed_token_is_rejected(token):
    with pytest.raises(AuthError):
        verify_token(token, SETTINGS)


def test_each_token_has_a_unique_jti():
    assert decode_token(issue(), SETTINGS)["jti"] != decode_token(issue(), SETTINGS)["jti"]
