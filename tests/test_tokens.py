from datetime import timedelta

import jwt
import pytest

from tests.conftest import ACCESS_SECRET, REFRESH_SECRET
from utils.tokens import ACCESS, REFRESH, TokenCodec, TokenExpiredError, TokenInvalidError


def test_codec_rejects_shared_secret(clock):
    with pytest.raises(ValueError):
        TokenCodec("same-secret", "same-secret", clock=clock)


def test_issue_and_verify_access_claims(codec):
    token = codec.issue({"sub": "user-1", "role": "admin"}, ACCESS, timedelta(minutes=15))
    claims = codec.verify(token, ACCESS)
    assert claims["sub"] == "user-1"
    assert claims["role"] == "admin"
    assert claims["type"] == ACCESS
    assert claims["exp"] - claims["iat"] == 15 * 60


def test_each_issue_yields_a_distinct_token(codec):
    a = codec.issue({"sub": "user-1"}, REFRESH, timedelta(days=7))
    b = codec.issue({"sub": "user-1"}, REFRESH, timedelta(days=7))
    assert a != b


def test_kinds_do_not_cross_verify(codec):
    access = codec.issue({"sub": "user-1", "role": "user"}, ACCESS, timedelta(minutes=15))
    refresh = codec.issue({"sub": "user-1"}, REFRESH, timedelta(days=7))
    with pytest.raises(TokenInvalidError):
        codec.verify(access, REFRESH)
    with pytest.raises(TokenInvalidError):
        codec.verify(refresh, ACCESS)


def test_foreign_secret_is_invalid(codec, clock):
    other = TokenCodec("another-access-secret-0123456789abcdef", REFRESH_SECRET, clock=clock)
    token = other.issue({"sub": "user-1", "role": "user"}, ACCESS, timedelta(minutes=15))
    with pytest.raises(TokenInvalidError):
        codec.verify(token, ACCESS)


def test_tampered_token_is_invalid(codec):
    token = codec.issue({"sub": "user-1", "role": "user"}, ACCESS, timedelta(minutes=15))
    header, payload, signature = token.split(".")
    forged = jwt.encode({"sub": "user-2", "role": "admin"}, "guess", algorithm="HS256").split(".")[1]
    with pytest.raises(TokenInvalidError):
        codec.verify(".".join([header, forged, signature]), ACCESS)


def test_garbage_is_invalid(codec):
    with pytest.raises(TokenInvalidError):
        codec.verify("not-a-jwt", ACCESS)


def test_wrong_type_claim_with_right_secret_is_invalid(codec, clock):
    token = jwt.encode(
        {"sub": "user-1", "iat": 0, "exp": 4102444800, "jti": "x", "iss": "storefront-api", "type": REFRESH},
        ACCESS_SECRET,
        algorithm="HS256",
    )
    with pytest.raises(TokenInvalidError):
        codec.verify(token, ACCESS)


def test_expired_token_carries_claims(codec, clock):
    token = codec.issue({"sub": "user-1", "role": "user"}, ACCESS, timedelta(minutes=15))
    clock.advance(minutes=15)
    with pytest.raises(TokenExpiredError) as info:
        codec.verify(token, ACCESS)
    assert info.value.claims["sub"] == "user-1"


def test_token_valid_just_before_expiry(codec, clock):
    token = codec.issue({"sub": "user-1", "role": "user"}, ACCESS, timedelta(minutes=15))
    clock.advance(minutes=14, seconds=59)
    assert codec.verify(token, ACCESS)["sub"] == "user-1"
