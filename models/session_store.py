"""
Session record store.

Thin query layer over the session_records table. Methods stage changes on the
scoped session and leave the commit to the caller, so that a rotation (old
record consumed, new pair inserted) lands in one transaction.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional

from models.db_storage import DBStorage
from models.session_record import SessionRecord


class SessionStore:
    def __init__(self, storage: DBStorage, ttl: timedelta):
        self.storage = storage
        self.ttl = ttl

    def _query(self):
        return self.storage.get_session().query(SessionRecord)

    def _cutoff(self, now: datetime) -> datetime:
        return now - self.ttl

    def add(self, user_id: str, token: str, is_refresh_token: bool, now: datetime, pair_id: str) -> SessionRecord:
        record = SessionRecord(
            user_id=user_id,
            token=token,
            pair_id=pair_id,
            is_refresh_token=is_refresh_token,
            blacklisted=False,
            created_at=now,
            updated_at=now,
            last_used_at=now,
        )
        self.storage.new(record)
        return record

    def find_active(self, token: str, user_id: str, is_refresh_token: bool, now: datetime) -> Optional[SessionRecord]:
        """Exact-token lookup restricted to live rows of the given owner and kind.

        Rows past the TTL count as gone even before the purge removes them.
        """
        return (
            self._query()
            .filter(
                SessionRecord.token == token,
                SessionRecord.user_id == user_id,
                SessionRecord.is_refresh_token == is_refresh_token,
                SessionRecord.blacklisted.is_(False),
                SessionRecord.created_at > self._cutoff(now),
            )
            .first()
        )

    def list_active_for_user(self, user_id: str, now: datetime) -> List[SessionRecord]:
        return (
            self._query()
            .filter(
                SessionRecord.user_id == user_id,
                SessionRecord.blacklisted.is_(False),
                SessionRecord.created_at > self._cutoff(now),
            )
            .order_by(SessionRecord.created_at.desc())
            .all()
        )

    def get_for_user(self, record_id: str, user_id: str) -> Optional[SessionRecord]:
        return self._query().filter(SessionRecord.id == record_id, SessionRecord.user_id == user_id).first()

    def mark_used(self, record: SessionRecord, now: datetime) -> None:
        record.last_used_at = now
        self.storage.new(record)

    def blacklist(self, record: SessionRecord, now: datetime) -> None:
        record.blacklisted = True
        record.updated_at = now
        self.storage.new(record)

    def consume(self, record: SessionRecord, now: datetime) -> bool:
        """Blacklist the record only if it is still live.

        Returns False when another caller got there first.
        """
        updated = (
            self._query()
            .filter(SessionRecord.id == record.id, SessionRecord.blacklisted.is_(False))
            .update(
                {SessionRecord.blacklisted: True, SessionRecord.last_used_at: now, SessionRecord.updated_at: now},
                synchronize_session="fetch",
            )
        )
        return updated == 1

    def blacklist_token(self, token: str, now: datetime) -> int:
        return (
            self._query()
            .filter(SessionRecord.token == token, SessionRecord.blacklisted.is_(False))
            .update({SessionRecord.blacklisted: True, SessionRecord.updated_at: now}, synchronize_session="fetch")
        )

    def blacklist_pair(self, user_id: str, pair_id: str, now: datetime) -> int:
        return (
            self._query()
            .filter(
                SessionRecord.user_id == user_id,
                SessionRecord.pair_id == pair_id,
                SessionRecord.blacklisted.is_(False),
            )
            .update({SessionRecord.blacklisted: True, SessionRecord.updated_at: now}, synchronize_session="fetch")
        )

    def blacklist_all_for_user(self, user_id: str, now: datetime, keep_id: Optional[str] = None) -> int:
        """Blacklist every live row of the user.

        With `keep_id`, that row and the other half of its pair survive.
        """
        query = self._query().filter(SessionRecord.user_id == user_id, SessionRecord.blacklisted.is_(False))
        if keep_id:
            kept = self.get_for_user(keep_id, user_id)
            if kept is not None:
                query = query.filter(SessionRecord.pair_id != kept.pair_id)
            else:
                query = query.filter(SessionRecord.id != keep_id)
        return query.update({SessionRecord.blacklisted: True, SessionRecord.updated_at: now}, synchronize_session="fetch")

    def purge_expired(self, now: datetime) -> int:
        """Physically delete rows older than the TTL, whatever their state."""
        return (
            self._query()
            .filter(SessionRecord.created_at <= self._cutoff(now))
            .delete(synchronize_session="fetch")
        )
