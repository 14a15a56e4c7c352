from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from auth_service.domain.entities import Session


class StoreUnavailableError(Exception):
    """Transient failure of the session store (connection lost, timeout, pool exhausted)"""


class ISessionRepository(ABC):
    """
    Session repository interface - application layer

    Every method is a single atomic store operation. Implementations raise
    StoreUnavailableError for infrastructure failures.
    """

    @abstractmethod
    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        pass

    @abstractmethod
    async def get_by_refresh_hash(self, refresh_hash: str) -> Optional[Session]:
        """Get the non-revoked session holding this refresh credential digest"""
        pass

    @abstractmethod
    async def list_active_by_owner(
        self, owner_id: UUID, newest_first: bool = True
    ) -> List[Session]:
        """Get all non-revoked sessions for an owner"""
        pass

    @abstractmethod
    async def count_active_by_owner(self, owner_id: UUID) -> int:
        """Count non-revoked sessions for an owner"""
        pass

    @abstractmethod
    async def create(self, session: Session) -> Session:
        """Create a new session"""
        pass

    @abstractmethod
    async def set_access_credential_hash(
        self, session_id: UUID, access_hash: str
    ) -> bool:
        """Store the access credential digest. Returns False if session doesn't exist."""
        pass

    @abstractmethod
    async def set_refresh_credential_hash(
        self, session_id: UUID, refresh_hash: str
    ) -> bool:
        """Store the refresh credential digest. Returns False if session doesn't exist."""
        pass

    @abstractmethod
    async def touch(self, session_id: UUID, accessed_at: datetime) -> None:
        """Update last_accessed_at"""
        pass

    @abstractmethod
    async def revoke_by_id(
        self, session_id: UUID, revoked_at: datetime, reason: str
    ) -> bool:
        """
        Revoke a session if it is not revoked yet.

        Returns True only when this call flipped revoked from False to True.
        """
        pass

    @abstractmethod
    async def revoke_all_by_owner(
        self, owner_id: UUID, revoked_at: datetime, reason: str
    ) -> int:
        """Revoke all non-revoked sessions of an owner. Returns count of revoked sessions."""
        pass

    @abstractmethod
    async def delete_by_id(self, session_id: UUID) -> bool:
        """Hard-delete a session. Returns True if a row was deleted."""
        pass

    @abstractmethod
    async def delete_refresh_expired_before(self, cutoff: datetime) -> int:
        """Hard-delete sessions with refresh_expires_at < cutoff, revoked or not"""
        pass
