"""
Closed set of authentication failure kinds and the exception that carries them.

Every kind maps to exactly one HTTP status and (optionally) one machine code,
so handlers switch on the kind rather than on messages or exception names.
"""
from __future__ import annotations

from enum import Enum
from typing import Optional


class AuthErrorKind(str, Enum):
    MISSING_TOKEN = "MISSING_TOKEN"
    INVALID = "INVALID"
    EXPIRED = "EXPIRED"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INVALID_REFRESH = "INVALID_REFRESH"
    FORBIDDEN = "FORBIDDEN"


TOKEN_EXPIRED = "TOKEN_EXPIRED"
AUTH_FAILED = "AUTH_FAILED"
REFRESH_FAILED = "REFRESH_FAILED"

# kind -> (status, code, default message)
_RESPONSES = {
    AuthErrorKind.MISSING_TOKEN: (401, AUTH_FAILED, "Authentication required. No token found."),
    AuthErrorKind.INVALID: (401, AUTH_FAILED, "Invalid authentication token"),
    AuthErrorKind.EXPIRED: (401, TOKEN_EXPIRED, "Session expired. Please refresh your token."),
    AuthErrorKind.SESSION_NOT_FOUND: (401, AUTH_FAILED, "Invalid session. Please login again."),
    AuthErrorKind.INVALID_REFRESH: (401, REFRESH_FAILED, "Invalid refresh token"),
    AuthErrorKind.FORBIDDEN: (403, None, "Access denied. Admins only."),
}


class AuthError(Exception):
    def __init__(self, kind: AuthErrorKind, message: Optional[str] = None):
        status, code, default = _RESPONSES[kind]
        self.kind = kind
        self.status = status
        self.code = code
        self.message = message or default
        super().__init__(self.message)

    def __repr__(self):
        return f"AuthError({self.kind.value!r}, {self.message!r})"
