"""
List Sessions Use Case

Server-side session enumeration for the current user.
"""

import logging
from uuid import UUID

from auth_service.app.repositories.session_repository import StoreUnavailableError
from auth_service.app.services.session_manager import SessionLifecycleManager
from auth_service.libs.result import Error, Result, Return
from .dtos import SessionListResponse, SessionSummary

logger = logging.getLogger(__name__)


class ListSessionsUseCase:
    """
    Use case for listing a user's sessions.

    Business Rules:
    - Newest session first
    - Only revoked sessions are filtered out; a session past its access
      horizon is still listed until revoked or reclaimed
    - The session of the calling credential is flagged as current
    """

    def __init__(self, session_manager: SessionLifecycleManager):
        self.session_manager = session_manager

    async def execute(
        self, owner_id: UUID, current_session_id: UUID
    ) -> Result[SessionListResponse]:
        try:
            sessions = await self.session_manager.list_active_sessions(owner_id)
            active_count = await self.session_manager.active_session_count(owner_id)
        except StoreUnavailableError as e:
            logger.error(f"Listing sessions for {owner_id} failed: {e}")
            return Return.err(
                Error("STORE_UNAVAILABLE", "Session store temporarily unavailable")
            )

        summaries = [
            SessionSummary(
                id=str(s.id),
                device_info=s.device_info,
                ip_address=s.ip_address,
                user_agent=s.user_agent,
                session_type=s.session_type,
                created_at=s.created_at,
                last_accessed_at=s.last_accessed_at,
                access_expires_at=s.access_expires_at,
                refresh_expires_at=s.refresh_expires_at,
                current=s.id == current_session_id,
            )
            for s in sessions
        ]
        return Return.ok(SessionListResponse(sessions=summaries, active_count=active_count))
