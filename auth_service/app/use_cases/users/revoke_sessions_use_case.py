"""
Revoke Sessions Use Case

Handles session revocation for security and session management.
"""

import logging
from uuid import UUID

from auth_service.app.repositories.session_repository import StoreUnavailableError
from auth_service.app.services.session_manager import SessionLifecycleManager
from auth_service.app.services.unit_of_work import UnitOfWork
from auth_service.domain.entities import AuditEvent
from auth_service.libs.result import Error, Result, Return
from .dtos import RevokeSessionResponse, RevokeSessionsResponse

logger = logging.getLogger(__name__)

REVOKE_ALL_REASON = "User logout from all devices"
REVOKE_ONE_REASON = "Revoked by user"


class RevokeSessionsUseCase:
    """
    Use case for revoking user sessions.

    Business Rules:
    - Users can only revoke their own sessions
    - Revoking an already revoked session is a no-op, not an error
    - Revocation is audit-logged for security compliance
    - Two revocation modes: all, specific
    """

    def __init__(self, uow: UnitOfWork, session_manager: SessionLifecycleManager):
        self.uow = uow
        self.session_manager = session_manager

    async def revoke_all_sessions(
        self, owner_id: UUID, reason: str = REVOKE_ALL_REASON
    ) -> Result[RevokeSessionsResponse]:
        """
        Revoke every live session of the owner ("log out everywhere").

        Args:
            owner_id: User whose sessions will be revoked
            reason: Revocation reason stored on each session

        Returns:
            Result with count of revoked sessions, or Error
        """
        try:
            count = await self.session_manager.revoke_all_for_owner(owner_id, reason)

            async with self.uow:
                audit = AuditEvent(
                    user_id=owner_id,
                    action="revoke_all_sessions",
                    event_metadata={"revoked_count": count, "reason": reason},
                )
                await self.uow.audit_events.create(audit)
                await self.uow.commit()
        except StoreUnavailableError as e:
            logger.error(f"Revoking all sessions for {owner_id} failed: {e}")
            return Return.err(
                Error("STORE_UNAVAILABLE", "Session store temporarily unavailable")
            )

        return Return.ok(RevokeSessionsResponse(revoked_count=count))

    async def revoke_specific_session(
        self, session_id: UUID, requesting_user_id: UUID
    ) -> Result[RevokeSessionResponse]:
        """
        Revoke one session by ID.

        Args:
            session_id: Session to revoke
            requesting_user_id: User requesting the revocation

        Returns:
            Result with whether this call revoked the session, or Error
        """
        try:
            async with self.uow:
                session = await self.uow.sessions.get_by_id(session_id)

            if session is None:
                return Return.err(Error("SESSION_NOT_FOUND", "Session not found"))

            if session.owner_id != requesting_user_id:
                return Return.err(
                    Error("FORBIDDEN", "Session does not belong to current user")
                )

            revoked = await self.session_manager.revoke(session_id, REVOKE_ONE_REASON)

            if revoked:
                async with self.uow:
                    audit = AuditEvent(
                        user_id=requesting_user_id,
                        action="revoke_session",
                        event_metadata={"session_id": str(session_id)},
                    )
                    await self.uow.audit_events.create(audit)
                    await self.uow.commit()
        except StoreUnavailableError as e:
            logger.error(f"Revoking session {session_id} failed: {e}")
            return Return.err(
                Error("STORE_UNAVAILABLE", "Session store temporarily unavailable")
            )

        return Return.ok(RevokeSessionResponse(session_id=str(session_id), revoked=revoked))
