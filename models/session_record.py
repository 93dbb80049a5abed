"""
SessionRecord model: one row per issued bearer token (access or refresh).
Fields:
- user_id (String(36)) - FK to users.id, indexed for per-user enumeration
- token - the raw signed token, unique across all rows
- pair_id - links the access and refresh rows issued by one login or refresh
- is_refresh_token - distinguishes refresh sessions from access sessions
- blacklisted - revocation flag; rows are never un-blacklisted
- created_at (indexed, drives the 7 day purge), last_used_at
"""
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from models.base_model import BaseModel, Base, utcnow


class SessionRecord(BaseModel, Base):
    __tablename__ = "session_records"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(String(1024), nullable=False, unique=True)
    # Shared by the access and refresh records minted together
    pair_id = Column(String(36), nullable=False, index=True)
    is_refresh_token = Column(Boolean, nullable=False, default=False)
    blacklisted = Column(Boolean, nullable=False, default=False)
    last_used_at = Column(DateTime, nullable=False, default=utcnow)

    user = relationship("User", back_populates="sessions")

    __table_args__ = (
        Index("ix_session_records_created_at", "created_at"),
    )

    @property
    def kind(self) -> str:
        return "refresh" if self.is_refresh_token else "access"

    def __repr__(self):
        return f"<SessionRecord id={self.id} user={self.user_id} kind={self.kind} blacklisted={self.blacklisted}>"
