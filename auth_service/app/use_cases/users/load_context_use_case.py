"""
Load Context Use Case

Loads the current user's profile for an already validated access credential.
"""

from auth_service.app.services.credential_codec import CredentialClaims
from auth_service.app.services.unit_of_work import UnitOfWork
from auth_service.domain.entities import UserStatus
from auth_service.libs.result import Error, Result, Return
from .dtos import CurrentIdentityResponse


class LoadContextUseCase:
    """
    Use case for loading the current identity.

    Business Rules:
    - Claims come from a credential whose session passed validate_access
    - User must still exist and be active
    - Roles are read from the user record, not from the credential
    """

    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self, claims: CredentialClaims) -> Result[CurrentIdentityResponse]:
        async with self.uow:
            user = await self.uow.users.get_by_id(claims.subject_id)
            if user is None:
                return Return.err(Error("USER_NOT_FOUND", "User not found"))

            if user.status == UserStatus.disabled:
                return Return.err(Error("USER_DISABLED", "User account is disabled"))

            return Return.ok(
                CurrentIdentityResponse(
                    id=str(user.id),
                    email=user.email,
                    full_name=user.full_name,
                    roles=list(user.roles),
                    status=user.status.value,
                    session_id=str(claims.session_id),
                )
            )
