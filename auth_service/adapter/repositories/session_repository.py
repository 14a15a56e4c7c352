import functools
import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, func
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlmodel import select, update
from sqlmodel.ext.asyncio.session import AsyncSession

from auth_service.app.repositories.session_repository import (
    ISessionRepository,
    StoreUnavailableError,
)
from auth_service.domain.entities import Session

logger = logging.getLogger(__name__)

TRANSIENT_DB_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError)


def translate_store_errors(method):
    """Re-raise driver/pool failures as StoreUnavailableError"""

    @functools.wraps(method)
    async def wrapper(*args, **kwargs):
        try:
            return await method(*args, **kwargs)
        except TRANSIENT_DB_ERRORS as exc:
            logger.warning(f"Session store failure in {method.__name__}: {exc}")
            raise StoreUnavailableError(str(exc)) from exc

    return wrapper


class SessionRepository(ISessionRepository):
    """Session repository implementation using SQLModel"""

    def __init__(self, session: AsyncSession):
        self.session = session

    @translate_store_errors
    async def get_by_id(self, session_id: UUID) -> Optional[Session]:
        """Get session by ID"""
        stmt = select(Session).where(Session.id == session_id)
        result = await self.session.exec(stmt)
        return result.one_or_none()

    @translate_store_errors
    async def get_by_refresh_hash(self, refresh_hash: str) -> Optional[Session]:
        """Point lookup on the indexed refresh digest, revoked sessions excluded"""
        stmt = select(Session).where(
            Session.refresh_credential_hash == refresh_hash,
            Session.revoked == False,
        )
        result = await self.session.exec(stmt)
        return result.one_or_none()

    @translate_store_errors
    async def list_active_by_owner(
        self, owner_id: UUID, newest_first: bool = True
    ) -> List[Session]:
        """Get all non-revoked sessions for an owner"""
        order = Session.created_at.desc() if newest_first else Session.created_at.asc()
        stmt = (
            select(Session)
            .where(Session.owner_id == owner_id, Session.revoked == False)
            .order_by(order)
        )
        result = await self.session.exec(stmt)
        return list(result.all())

    @translate_store_errors
    async def count_active_by_owner(self, owner_id: UUID) -> int:
        """Count non-revoked sessions for an owner"""
        stmt = (
            select(func.count())
            .select_from(Session)
            .where(Session.owner_id == owner_id, Session.revoked == False)
        )
        result = await self.session.exec(stmt)
        return result.one()

    @translate_store_errors
    async def create(self, session_obj: Session) -> Session:
        """Create a new session"""
        self.session.add(session_obj)
        await self.session.flush()
        await self.session.refresh(session_obj)
        return session_obj

    @translate_store_errors
    async def set_access_credential_hash(
        self, session_id: UUID, access_hash: str
    ) -> bool:
        stmt = (
            update(Session)
            .where(Session.id == session_id)
            .values(access_credential_hash=access_hash)
        )
        result = await self.session.exec(stmt)
        await self.session.flush()
        return result.rowcount > 0

    @translate_store_errors
    async def set_refresh_credential_hash(
        self, session_id: UUID, refresh_hash: str
    ) -> bool:
        stmt = (
            update(Session)
            .where(Session.id == session_id)
            .values(refresh_credential_hash=refresh_hash)
        )
        result = await self.session.exec(stmt)
        await self.session.flush()
        return result.rowcount > 0

    @translate_store_errors
    async def touch(self, session_id: UUID, accessed_at: datetime) -> None:
        stmt = (
            update(Session)
            .where(Session.id == session_id)
            .values(last_accessed_at=accessed_at)
        )
        await self.session.exec(stmt)
        await self.session.flush()

    @translate_store_errors
    async def revoke_by_id(
        self, session_id: UUID, revoked_at: datetime, reason: str
    ) -> bool:
        """Conditional update: only a not-yet-revoked row is written"""
        stmt = (
            update(Session)
            .where(Session.id == session_id, Session.revoked == False)
            .values(revoked=True, revoked_at=revoked_at, revoked_reason=reason)
        )
        result = await self.session.exec(stmt)
        await self.session.flush()
        return result.rowcount > 0

    @translate_store_errors
    async def revoke_all_by_owner(
        self, owner_id: UUID, revoked_at: datetime, reason: str
    ) -> int:
        """Revoke all active sessions for an owner in one statement"""
        stmt = (
            update(Session)
            .where(Session.owner_id == owner_id, Session.revoked == False)
            .values(revoked=True, revoked_at=revoked_at, revoked_reason=reason)
        )
        result = await self.session.exec(stmt)
        await self.session.flush()
        return result.rowcount

    @translate_store_errors
    async def delete_by_id(self, session_id: UUID) -> bool:
        stmt = delete(Session).where(Session.id == session_id)
        result = await self.session.exec(stmt)
        await self.session.flush()
        return result.rowcount > 0

    @translate_store_errors
    async def delete_refresh_expired_before(self, cutoff: datetime) -> int:
        stmt = delete(Session).where(Session.refresh_expires_at < cutoff)
        result = await self.session.exec(stmt)
        await self.session.flush()
        return result.rowcount
