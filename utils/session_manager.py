"""
Session lifecycle: issue, validate, touch, rotate and revoke bearer sessions.

Each issued token is persisted as a SessionRecord. A token is usable only while
its signature and claims check out *and* its row is live, which is what lets
logout and rotation take effect immediately.

Record states:
    ISSUED -> ISSUED        validated while live
    ISSUED -> BLACKLISTED   logout, revoke, rotation, or claim expiry seen at validation
    ISSUED -> PURGED        TTL sweep (purge_expired)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple

from models.base_model import utcnow
from models.db_storage import DBStorage
from models.session_record import SessionRecord
from models.session_store import SessionStore
from models.user import User, Role
from models.user_store import UserStore
from utils.auth_errors import AuthError, AuthErrorKind
from utils.security import generate_jti
from utils.tokens import ACCESS, REFRESH, TokenCodec, TokenExpiredError, TokenInvalidError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IssuedTokens:
    access_token: str
    refresh_token: str
    expires_in: int
    refresh_expires_in: int
    user: User


@dataclass(frozen=True)
class AuthContext:
    """Identity attached to a request by the authentication gate."""
    subject_id: str
    role: str
    session_id: str


class SessionManager:
    def __init__(
        self,
        codec: TokenCodec,
        storage: DBStorage,
        sessions: SessionStore,
        users: UserStore,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        touch_interval: timedelta = timedelta(seconds=60),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.codec = codec
        self.storage = storage
        self.sessions = sessions
        self.users = users
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.touch_interval = touch_interval
        self.clock = clock

    # issuance

    def _mint_pair(self, user: User) -> IssuedTokens:
        now = self.clock()
        access = self.codec.issue({"sub": str(user.id), "role": Role(user.role).value}, ACCESS, self.access_ttl)
        refresh = self.codec.issue({"sub": str(user.id)}, REFRESH, self.refresh_ttl)
        pair_id = generate_jti()
        self.sessions.add(user.id, access, is_refresh_token=False, now=now, pair_id=pair_id)
        self.sessions.add(user.id, refresh, is_refresh_token=True, now=now, pair_id=pair_id)
        return IssuedTokens(
            access_token=access,
            refresh_token=refresh,
            expires_in=int(self.access_ttl.total_seconds()),
            refresh_expires_in=int(self.refresh_ttl.total_seconds()),
            user=user,
        )

    def issue(self, user: User) -> IssuedTokens:
        """Open a new session (access + refresh) for `user`.

        Existing sessions of the same user are left alone.
        """
        pair = self._mint_pair(user)
        self.storage.save()
        logger.info("Issued session pair for user %s", user.id)
        return pair

    # validation

    def validate(self, raw_token: str, kind: str) -> Tuple[Dict[str, Any], SessionRecord]:
        expired = False
        try:
            claims = self.codec.verify(raw_token, kind)
        except TokenExpiredError as exc:
            claims = exc.claims
            expired = True
        except TokenInvalidError as exc:
            logger.info("Rejected %s token: %s", kind, exc)
            raise AuthError(AuthErrorKind.INVALID)

        now = self.clock()
        record = self.sessions.find_active(raw_token, str(claims["sub"]), kind == REFRESH, now)
        if record is None and expired:
            # Row already retired or aged out; the token itself says why it is dead
            logger.info("Expired %s token with no live session for user %s", kind, claims.get("sub"))
            raise AuthError(AuthErrorKind.EXPIRED)
        if record is None:
            logger.info("No live %s session for user %s", kind, claims.get("sub"))
            raise AuthError(AuthErrorKind.SESSION_NOT_FOUND)

        if expired:
            self.sessions.blacklist(record, now)
            self.storage.save()
            logger.info("Blacklisted expired %s session %s", kind, record.id)
            raise AuthError(AuthErrorKind.EXPIRED)

        return claims, record

    def touch(self, record: SessionRecord) -> bool:
        """Record use of a session, at most once per touch_interval.

        Returns True when a write was persisted.
        """
        now = self.clock()
        if record.last_used_at is not None and now - record.last_used_at < self.touch_interval:
            return False
        self.sessions.mark_used(record, now)
        self.storage.save()
        return True

    def authenticate(self, raw_token: Optional[str]) -> AuthContext:
        """Validate an access token presented on a request and touch its session."""
        if not raw_token:
            raise AuthError(AuthErrorKind.MISSING_TOKEN)
        claims, record = self.validate(raw_token, ACCESS)
        self.touch(record)
        return AuthContext(subject_id=str(claims["sub"]), role=claims.get("role", Role.USER.value), session_id=record.id)

    # rotation and revocation

    def rotate(self, raw_refresh_token: str) -> IssuedTokens:
        """Trade a live refresh token for a brand-new pair.

        The old refresh record is blacklisted for good; the role placed in the
        new access token is read from the user record, not from old claims.
        """
        try:
            claims, record = self.validate(raw_refresh_token, REFRESH)
        except AuthError as exc:
            message = "Refresh token expired" if exc.kind is AuthErrorKind.EXPIRED else "Invalid refresh token"
            raise AuthError(AuthErrorKind.INVALID_REFRESH, message) from exc

        user = self.users.get_active(str(claims["sub"]))
        if user is None:
            logger.info("Refresh for unknown or inactive user %s", claims.get("sub"))
            raise AuthError(AuthErrorKind.INVALID_REFRESH)

        now = self.clock()
        if not self.sessions.consume(record, now):
            self.storage.rollback()
            logger.info("Refresh session %s already consumed", record.id)
            raise AuthError(AuthErrorKind.INVALID_REFRESH)

        try:
            pair = self._mint_pair(user)
            self.storage.save()
        except Exception:
            self.storage.rollback()
            raise
        logger.info("Rotated refresh session %s for user %s", record.id, user.id)
        return pair

    def revoke(self, raw_token: Optional[str]) -> None:
        """Blacklist whatever session holds `raw_token`. Never fails on a miss."""
        if not raw_token:
            return
        count = self.sessions.blacklist_token(raw_token, self.clock())
        self.storage.save()
        if count:
            logger.info("Revoked %d session(s) by token", count)

    def revoke_session(self, user_id: str, record_id: str) -> bool:
        """Revoke one device: the record and the other half of its pair."""
        record = self.sessions.get_for_user(record_id, user_id)
        if record is None:
            return False
        self.sessions.blacklist_pair(user_id, record.pair_id, self.clock())
        self.storage.save()
        return True

    def revoke_all(self, user_id: str, keep_session_id: Optional[str] = None) -> int:
        count = self.sessions.blacklist_all_for_user(user_id, self.clock(), keep_id=keep_session_id)
        self.storage.save()
        logger.info("Revoked %d session(s) for user %s", count, user_id)
        return count

    def active_sessions(self, user_id: str) -> List[SessionRecord]:
        return self.sessions.list_active_for_user(user_id, self.clock())

    def purge_expired(self) -> int:
        count = self.sessions.purge_expired(self.clock())
        self.storage.save()
        logger.info("Purged %d expired session record(s)", count)
        return count
