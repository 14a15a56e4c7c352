"""
Login Use Case

Authenticates a user and opens a new session with a fresh credential pair.
"""

import logging

import bcrypt

from auth_service.app.repositories.session_repository import StoreUnavailableError
from auth_service.app.services.credential_codec import CredentialCodec
from auth_service.app.services.session_manager import SessionLifecycleManager
from auth_service.app.services.unit_of_work import UnitOfWork
from auth_service.domain.base import utc_now
from auth_service.domain.entities import AuditEvent, DeviceType, SessionType, UserStatus
from auth_service.libs.result import Error, Result, Return
from .dtos import LoginCommand, LoginResponse

logger = logging.getLogger(__name__)


class LoginUseCase:
    """
    Use case for user login and credential issuance.

    Business Rules:
    - Constant-time password comparison to prevent timing attacks
    - User must have status=active
    - One new session per successful login
    - Credentials are issued after the session exists (they carry its id),
      then their digests are recorded on the session
    - Stamps user.last_login_at
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

    async def execute(self, command: LoginCommand) -> Result[LoginResponse]:
        """
        Execute login use case.

        Args:
            command: LoginCommand with credentials and request context

        Returns:
            Result with LoginResponse containing the credential pair, or Error
        """
        try:
            async with self.uow:
                user = await self.uow.users.get_by_email(command.email)

                # Always perform a hash check even if user not found
                if user is None:
                    bcrypt.checkpw(b"dummy_password", bcrypt.gensalt(12))
                    return Return.err(
                        Error("INVALID_CREDENTIALS", "Invalid email or password")
                    )

                password_valid = bcrypt.checkpw(
                    command.password.encode(), user.password_hash.encode()
                )
                if not password_valid:
                    return Return.err(
                        Error("INVALID_CREDENTIALS", "Invalid email or password")
                    )

                if user.status == UserStatus.disabled:
                    return Return.err(Error("USER_DISABLED", "User account is disabled"))

                await self.uow.users.record_login(user.id, utc_now())
                await self.uow.commit()

            session = await self.session_manager.create_session(
                owner_id=user.id,
                device_info=command.device_info,
                ip_address=command.ip_address,
                user_agent=command.user_agent,
                session_type=_session_type_for(command.device_info),
            )

            access_token = self.codec.issue_access_credential(
                user.id, {"email": user.email, "roles": user.roles}, session.id
            )
            refresh_token = self.codec.issue_refresh_credential(session.id)

            await self.session_manager.record_access_credential(session.id, access_token)
            await self.session_manager.record_refresh_credential(session.id, refresh_token)

            async with self.uow:
                audit = AuditEvent(
                    user_id=user.id,
                    action="login",
                    event_metadata={
                        "session_id": str(session.id),
                        "ip_address": command.ip_address,
                        "device_info": command.device_info,
                    },
                )
                await self.uow.audit_events.create(audit)
                await self.uow.commit()
        except StoreUnavailableError as e:
            logger.error(f"Login aborted, session store unavailable: {e}")
            return Return.err(
                Error("STORE_UNAVAILABLE", "Session store temporarily unavailable")
            )

        return Return.ok(
            LoginResponse(
                access_token=access_token,
                refresh_token=refresh_token,
                expires_in=int(self.codec.access_ttl.total_seconds()),
                refresh_expires_in=int(self.codec.refresh_ttl.total_seconds()),
                session_id=str(session.id),
            )
        )


def _session_type_for(device_info) -> str:
    if device_info in (DeviceType.mobile.value, DeviceType.tablet.value):
        return SessionType.mobile.value
    return SessionType.web.value
