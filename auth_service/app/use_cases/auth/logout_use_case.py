"""
Logout Use Case

Revokes the session that owns the presented access credential.
"""

import logging

from auth_service.app.repositories.session_repository import StoreUnavailableError
from auth_service.app.services.credential_codec import CredentialClaims
from auth_service.app.services.session_manager import SessionLifecycleManager
from auth_service.app.services.unit_of_work import UnitOfWork
from auth_service.domain.entities import AuditEvent
from auth_service.libs.result import Error, Result, Return
from .dtos import LogoutResponse

logger = logging.getLogger(__name__)

LOGOUT_REASON = "User logout"


class LogoutUseCase:
    """
    Use case for logging out the current session.

    Business Rules:
    - Revocation reason is "User logout"
    - Idempotent: a second logout leaves the first revocation record intact
    - A failed revocation write is reported, never swallowed
    """

    def __init__(self, uow: UnitOfWork, session_manager: SessionLifecycleManager):
        self.uow = uow
        self.session_manager = session_manager

    async def execute(self, claims: CredentialClaims) -> Result[LogoutResponse]:
        try:
            revoked = await self.session_manager.revoke(claims.session_id, LOGOUT_REASON)

            if revoked:
                async with self.uow:
                    audit = AuditEvent(
                        user_id=claims.subject_id,
                        action="logout",
                        event_metadata={"session_id": str(claims.session_id)},
                    )
                    await self.uow.audit_events.create(audit)
                    await self.uow.commit()
        except StoreUnavailableError as e:
            logger.error(f"Logout of session {claims.session_id} failed: {e}")
            return Return.err(
                Error("STORE_UNAVAILABLE", "Session store temporarily unavailable")
            )

        return Return.ok(
            LogoutResponse(session_id=str(claims.session_id), revoked=revoked)
        )
