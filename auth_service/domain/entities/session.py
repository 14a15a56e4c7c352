"""
Session Entity

Server-side record binding a user to a pair of credentials and their
validity window.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Column, DateTime, Field, Index, SQLModel

from ..base import utc_now
from .enums import SessionType


class Session(SQLModel, table=True):
    """
    Session entity - one row per login.

    Business Rules:
    - Credential material is never stored, only HMAC-SHA256 digests
    - Refresh rotation keeps the same session id
    - revoked never goes back to False; revoked_at/revoked_reason are
      written once, on the first revocation
    - Usable for access iff not revoked and now < access_expires_at
    - Usable for refresh iff not revoked and now < refresh_expires_at
    - Both horizons are fixed at creation; recording credentials never moves them
    - Hard-deleted only by the janitor once refresh_expires_at has passed
    """

    __tablename__ = "sessions"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    owner_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)

    # Set after issuance, NULL until then
    access_credential_hash: Optional[str] = Field(default=None, max_length=64)
    refresh_credential_hash: Optional[str] = Field(
        default=None, max_length=64, unique=True, index=True
    )

    # Request context captured at login
    device_info: Optional[str] = Field(default=None, max_length=50)
    ip_address: Optional[str] = Field(default=None, max_length=45)
    user_agent: Optional[str] = Field(default=None, max_length=512)
    session_type: str = Field(default=SessionType.web.value, max_length=20)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, sa_column=Column(DateTime))
    last_accessed_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime)
    )
    access_expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))
    refresh_expires_at: datetime = Field(sa_column=Column(DateTime, nullable=False))

    # Revocation
    revoked: bool = Field(default=False)
    revoked_at: Optional[datetime] = Field(default=None, sa_column=Column(DateTime))
    revoked_reason: Optional[str] = Field(default=None, max_length=255)

    __table_args__ = (
        Index("idx_session_refresh_expires_at", "refresh_expires_at"),
        Index("idx_session_owner_revoked", "owner_id", "revoked"),
    )

    def is_access_usable(self, now: datetime) -> bool:
        # Revocation wins over expiry
        if self.revoked:
            return False
        return now < self.access_expires_at

    def is_refresh_usable(self, now: datetime) -> bool:
        if self.revoked:
            return False
        return now < self.refresh_expires_at
