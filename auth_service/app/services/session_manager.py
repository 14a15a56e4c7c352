"""
Session Lifecycle Manager

Creates, validates, rotates and revokes sessions.

State machine per session:
    ACTIVE -> REVOKED             (revoke / revoke_all_for_owner)
    ACTIVE|REVOKED -> RECLAIMED   (janitor, once refresh_expires_at passed)
Nothing leaves REVOKED or RECLAIMED.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, List, Optional, TypeVar
from uuid import UUID, uuid4

from auth_service.app.repositories.session_repository import StoreUnavailableError
from auth_service.app.services.credential_hashing import hash_credential
from auth_service.app.services.unit_of_work import UnitOfWork
from auth_service.domain.base import utc_now
from auth_service.domain.entities import Session, SessionType

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class SessionSettings:
    access_ttl: timedelta
    refresh_ttl: timedelta
    hash_secret: str
    store_timeout_seconds: float = 5.0


class SessionLifecycleManager:
    """
    Orchestrates the session state machine on top of the session store.

    Business Rules:
    - Revocation is checked before expiry
    - validate_access/validate_refresh answer a plain bool; callers are not
      told whether the session was missing, revoked or expired
    - Reads are retried once on a transient store failure, then
      StoreUnavailableError is raised
    - Writes (create, record, revoke) are never retried
    - Each public call is its own transaction
    """

    def __init__(
        self,
        uow: UnitOfWork,
        settings: SessionSettings,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.uow = uow
        self.settings = settings
        self.clock = clock

    async def create_session(
        self,
        owner_id: UUID,
        device_info: Optional[str],
        ip_address: Optional[str],
        user_agent: Optional[str],
        session_type: str = SessionType.web.value,
    ) -> Session:
        """
        Create a live session with no credential digests yet.

        The session id has to exist before credentials can reference it, so
        callers issue credentials afterwards and call record_*_credential.
        """
        now = self.clock()
        session = Session(
            id=uuid4(),
            owner_id=owner_id,
            device_info=device_info,
            ip_address=ip_address,
            user_agent=user_agent,
            session_type=session_type,
            created_at=now,
            last_accessed_at=now,
            access_expires_at=now + self.settings.access_ttl,
            refresh_expires_at=now + self.settings.refresh_ttl,
            revoked=False,
        )

        async with self.uow:
            session = await self._write(self.uow.sessions.create(session))
            await self._write(self.uow.commit())

        logger.info(f"Created session {session.id} for owner {owner_id}")
        return session

    async def record_access_credential(
        self, session_id: UUID, raw_access_credential: str
    ) -> None:
        """
        Store the digest of a freshly issued access credential.

        The access horizon is left alone: a session that stopped validating
        never validates again. Missing session is a no-op.
        """
        digest = hash_credential(raw_access_credential, self.settings.hash_secret)

        async with self.uow:
            updated = await self._write(
                self.uow.sessions.set_access_credential_hash(session_id, digest)
            )
            if not updated:
                logger.debug(f"Access credential for unknown session {session_id} ignored")
                return
            await self._write(self.uow.commit())

    async def record_refresh_credential(
        self, session_id: UUID, raw_refresh_credential: str
    ) -> None:
        """Store the digest of the refresh credential. Missing session is a no-op."""
        digest = hash_credential(raw_refresh_credential, self.settings.hash_secret)

        async with self.uow:
            updated = await self._write(
                self.uow.sessions.set_refresh_credential_hash(session_id, digest)
            )
            if not updated:
                logger.debug(f"Refresh credential for unknown session {session_id} ignored")
                return
            await self._write(self.uow.commit())

    async def validate_access(self, session_id: UUID) -> bool:
        """
        Hot path: one lookup, one write.

        Returns False if the session is absent, revoked or past its access
        horizon. On success last_accessed_at is touched; losing that touch
        does not affect the answer.
        """
        now = self.clock()

        async with self.uow:
            session = await self._read(lambda: self.uow.sessions.get_by_id(session_id))
            if session is None or not session.is_access_usable(now):
                return False

            try:
                await self._write(self.uow.sessions.touch(session_id, now))
                await self._write(self.uow.commit())
            except StoreUnavailableError as e:
                logger.warning(f"Could not touch session {session_id}: {e}")

        return True

    async def validate_refresh(self, raw_refresh_credential: str) -> bool:
        """False if no live session holds this refresh credential or its horizon has passed"""
        session = await self.lookup_by_refresh(raw_refresh_credential)
        if session is None:
            return False
        return session.is_refresh_usable(self.clock())

    async def lookup_by_refresh(self, raw_refresh_credential: str) -> Optional[Session]:
        """Session holding this refresh credential, None if unknown or revoked"""
        if not raw_refresh_credential:
            return None
        digest = hash_credential(raw_refresh_credential, self.settings.hash_secret)

        async with self.uow:
            return await self._read(
                lambda: self.uow.sessions.get_by_refresh_hash(digest)
            )

    async def revoke(self, session_id: UUID, reason: str) -> bool:
        """
        Idempotent revoke.

        Returns True only for the call that moved the session to REVOKED;
        later calls (or calls for unknown sessions) change nothing.
        """
        async with self.uow:
            revoked = await self._write(
                self.uow.sessions.revoke_by_id(session_id, self.clock(), reason)
            )
            await self._write(self.uow.commit())

        if revoked:
            logger.info(f"Revoked session {session_id}: {reason}")
        return revoked

    async def revoke_all_for_owner(self, owner_id: UUID, reason: str) -> int:
        """Revoke every live session of an owner in one atomic statement"""
        async with self.uow:
            count = await self._write(
                self.uow.sessions.revoke_all_by_owner(owner_id, self.clock(), reason)
            )
            await self._write(self.uow.commit())

        logger.info(f"Revoked {count} session(s) for owner {owner_id}: {reason}")
        return count

    async def list_active_sessions(self, owner_id: UUID) -> List[Session]:
        """
        Non-revoked sessions, newest first.

        A session past its access horizon but not revoked is still listed.
        """
        async with self.uow:
            return await self._read(
                lambda: self.uow.sessions.list_active_by_owner(owner_id, newest_first=True)
            )

    async def active_session_count(self, owner_id: UUID) -> int:
        async with self.uow:
            return await self._read(
                lambda: self.uow.sessions.count_active_by_owner(owner_id)
            )

    async def _read(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run a read with a timeout, retrying once on a transient failure"""
        last_error: Optional[BaseException] = None
        for attempt in (1, 2):
            try:
                return await asyncio.wait_for(
                    operation(), timeout=self.settings.store_timeout_seconds
                )
            except (StoreUnavailableError, asyncio.TimeoutError) as e:
                last_error = e
                logger.warning(f"Session store read failed (attempt {attempt}/2): {e!r}")
                try:
                    await self.uow.rollback()
                except StoreUnavailableError as rollback_error:
                    logger.warning(f"Rollback before retry failed: {rollback_error}")
        raise StoreUnavailableError("Session store unavailable") from last_error

    async def _write(self, operation: Awaitable[T]) -> T:
        """Run a write with a timeout. Never retried: an ambiguous write is surfaced."""
        try:
            return await asyncio.wait_for(
                operation, timeout=self.settings.store_timeout_seconds
            )
        except asyncio.TimeoutError as e:
            raise StoreUnavailableError("Session store write timed out") from e
