"""
Token codec: JWT creation/verification via PyJWT.

Access and refresh tokens are signed with different secrets, so a token of one
kind never verifies as the other. Expiry is checked against an injected clock
after the signature, and an expired token still hands back its claims so the
caller can find and retire the matching session row.
"""
from __future__ import annotations

import calendar
from datetime import datetime, timedelta
from typing import Any, Callable, Dict

import jwt

from models.base_model import utcnow
from utils.security import generate_jti

ACCESS = "access"
REFRESH = "refresh"


class TokenError(Exception):
    pass


class TokenInvalidError(TokenError):
    """Bad signature, malformed token, foreign issuer or wrong kind."""


class TokenExpiredError(TokenError):
    def __init__(self, claims: Dict[str, Any]):
        super().__init__("Token expired")
        self.claims = claims


def to_timestamp(dt: datetime) -> int:
    """Naive UTC datetime -> POSIX seconds."""
    return calendar.timegm(dt.timetuple())


class TokenCodec:
    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        algorithm: str = "HS256",
        issuer: str = "storefront-api",
        clock: Callable[[], datetime] = utcnow,
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("Both access and refresh secrets are required")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh tokens must use different secrets")
        self._secrets = {ACCESS: access_secret, REFRESH: refresh_secret}
        self.algorithm = algorithm
        self.issuer = issuer
        self.clock = clock

    def _secret(self, kind: str) -> str:
        try:
            return self._secrets[kind]
        except KeyError:
            raise ValueError(f"Unknown token kind: {kind}")

    def issue(self, claims: Dict[str, Any], kind: str, ttl: timedelta) -> str:
        """Sign `claims` as a `kind` token valid for `ttl` from now."""
        now = self.clock()
        payload = dict(claims)
        payload.update(
            {
                "iss": self.issuer,
                "iat": to_timestamp(now),
                "exp": to_timestamp(now + ttl),
                "jti": generate_jti(),
                "type": kind,
            }
        )
        return jwt.encode(payload, self._secret(kind), algorithm=self.algorithm)

    def verify(self, token: str, kind: str) -> Dict[str, Any]:
        """
        Decode and validate a JWT of the expected kind.
        Raises TokenInvalidError on any signature/format problem and
        TokenExpiredError (carrying the claims) once `exp` has passed.
        """
        try:
            claims = jwt.decode(
                token,
                self._secret(kind),
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={
                    "require": ["sub", "exp", "iat", "jti"],
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                },
            )
        except jwt.InvalidTokenError as exc:
            raise TokenInvalidError(str(exc)) from exc

        if claims.get("type") != kind:
            raise TokenInvalidError("Wrong token type")
        if claims["exp"] <= to_timestamp(self.clock()):
            raise TokenExpiredError(claims)
        return claims
