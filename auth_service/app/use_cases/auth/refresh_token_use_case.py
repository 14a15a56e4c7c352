"""
Refresh Token Use Case

Issues a new access credential for an existing session.
"""

import logging

from auth_service.app.repositories.session_repository import StoreUnavailableError
from auth_service.app.services.credential_codec import (
    REFRESH_TOKEN_TYPE,
    CredentialCodec,
)
from auth_service.app.services.session_manager import SessionLifecycleManager
from auth_service.app.services.unit_of_work import UnitOfWork
from auth_service.domain.entities import AuditEvent, UserStatus
from auth_service.libs.result import Error, Result, Return
from .dtos import RefreshTokenResponse

logger = logging.getLogger(__name__)


class RefreshTokenUseCase:
    """
    Use case for refreshing access credentials.

    Business Rules:
    - Refresh credential must verify (signature, expiry, type)
    - Session must be live: not revoked, refresh horizon not passed
    - The new access credential is bound to the same session, so revoking
      the session kills every credential derived from it
    - Claims are re-read from the owner, never copied from old credentials
    - The refresh credential itself is returned unchanged
    - expires_in reports what is left of the session access horizon, which
      refreshing does not extend
    """

    def __init__(
        self,
        uow: UnitOfWork,
        session_manager: SessionLifecycleManager,
        codec: CredentialCodec,
    ):
        self.uow = uow
        self.session_manager = session_manager
        self.codec = codec

    async def execute(self, refresh_token: str) -> Result[RefreshTokenResponse]:
        """
        Execute refresh token use case.

        Args:
            refresh_token: Raw refresh credential presented by the client

        Returns:
            Result with RefreshTokenResponse, or Error
        """
        verified = self.codec.verify(refresh_token, expected_type=REFRESH_TOKEN_TYPE)
        if verified.is_err():
            return Return.err(verified.error)
        claims = verified.value

        try:
            if not await self.session_manager.validate_refresh(refresh_token):
                return Return.err(
                    Error("INVALID_CREDENTIAL", "Invalid or expired refresh credential")
                )

            session = await self.session_manager.lookup_by_refresh(refresh_token)
            if session is None or session.id != claims.session_id:
                return Return.err(
                    Error("INVALID_CREDENTIAL", "Invalid or expired refresh credential")
                )

            async with self.uow:
                user = await self.uow.users.get_by_id(session.owner_id)

            if user is None:
                return Return.err(
                    Error("INVALID_CREDENTIAL", "Invalid or expired refresh credential")
                )
            if user.status == UserStatus.disabled:
                return Return.err(Error("USER_DISABLED", "User account is disabled"))

            access_token = self.codec.issue_access_credential(
                user.id, {"email": user.email, "roles": user.roles}, session.id
            )
            await self.session_manager.record_access_credential(session.id, access_token)

            async with self.uow:
                audit = AuditEvent(
                    user_id=user.id,
                    action="token_refresh",
                    event_metadata={"session_id": str(session.id)},
                )
                await self.uow.audit_events.create(audit)
                await self.uow.commit()
        except StoreUnavailableError as e:
            logger.error(f"Refresh aborted, session store unavailable: {e}")
            return Return.err(
                Error("STORE_UNAVAILABLE", "Session store temporarily unavailable")
            )

        now = self.session_manager.clock()
        access_remaining = min(session.access_expires_at - now, self.codec.access_ttl)
        refresh_remaining = session.refresh_expires_at - now
        return Return.ok(
            RefreshTokenResponse(
                access_token=access_token,
                refresh_token=refresh_token,
                expires_in=max(int(access_remaining.total_seconds()), 0),
                refresh_expires_in=max(int(refresh_remaining.total_seconds()), 0),
                session_id=str(session.id),
            )
        )
