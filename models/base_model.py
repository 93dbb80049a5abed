"""
Declarative base and the columns every storefront table shares.

Timestamps are naive UTC and filled in Python (utcnow) rather than by the
database, so that session expiry can be compared against an injected clock.
"""
from __future__ import annotations

from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Current time as a naive UTC datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _uuid_str() -> str:
    return str(uuid.uuid4())


class BaseModel:
    """Mixin: string UUID primary key plus created_at / updated_at."""

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __init__(self, **kwargs):
        for key, value in kwargs.items():
            setattr(self, key, value)
        # ids are assigned up front so callers can log or link them before flush
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.id}>"
