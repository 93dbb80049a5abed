"""
Request authentication gate.

`jwt_required()` validates the bearer access token against the session store
and exposes the caller as `g.auth` (subject_id, role, session_id).
`roles_required([...])` / `admin_required()` additionally check the role and
answer 403, never 401, for a valid session that lacks it.
"""
from __future__ import annotations

import logging
from functools import wraps
from typing import Optional

from flask import request, g, current_app

from utils.auth_errors import AuthError, AuthErrorKind

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def get_bearer_token() -> Optional[str]:
    """Token from `Authorization: Bearer <token>`, or None if absent/malformed."""
    auth = request.headers.get("Authorization", "")
    if not auth.startswith(BEARER_PREFIX):
        return None
    token = auth[len(BEARER_PREFIX):].strip()
    return token or None


def jwt_required():
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            manager = current_app.extensions["session_manager"]
            try:
                g.auth = manager.authenticate(get_bearer_token())
            except AuthError as exc:
                logger.info("Auth gate rejected %s %s: %s", request.method, request.path, exc.kind.value)
                raise
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(required_roles: list[str]):
    """
    Allow access if the caller's role is one of required_roles.
    """
    req = set(required_roles or [])

    def decorator(fn):
        @wraps(fn)
        @jwt_required()
        def wrapper(*args, **kwargs):
            if g.auth.role not in req:
                logger.info("User %s with role %s denied %s", g.auth.subject_id, g.auth.role, request.path)
                raise AuthError(AuthErrorKind.FORBIDDEN)
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def admin_required():
    return roles_required(["admin"])
