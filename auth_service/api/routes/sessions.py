from uuid import UUID

from fastapi import APIRouter, Depends, status

from auth_service.api.error import ClientError, ServerError, TransientError
from auth_service.app.services.credential_codec import CredentialClaims
from auth_service.app.services.session_manager import SessionLifecycleManager
from auth_service.app.services.unit_of_work import UnitOfWork
from auth_service.app.use_cases.users import (
    ListSessionsUseCase,
    RevokeSessionResponse,
    RevokeSessionsResponse,
    RevokeSessionsUseCase,
    SessionListResponse,
)
from auth_service.depends import get_current_claims, get_session_manager, get_unit_of_work

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.get("", status_code=status.HTTP_200_OK, response_model=SessionListResponse)
async def list_sessions(
    claims: CredentialClaims = Depends(get_current_claims),
    session_manager: SessionLifecycleManager = Depends(get_session_manager),
):
    """
    List Sessions

    Returns the caller's non-revoked sessions, newest first. Sessions whose
    access horizon has passed are still listed until revoked or reclaimed.

    Raises:
        - 401 Unauthorized: Invalid token or dead session
        - 503 Service Unavailable: Session store unavailable
    """
    use_case = ListSessionsUseCase(session_manager)
    result = await use_case.execute(claims.subject_id, claims.session_id)

    if result.is_err():
        error = result.error
        if error.code == "STORE_UNAVAILABLE":
            raise TransientError(error)
        raise ServerError(error)

    return result.value


@router.post(
    "/revoke-all",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSessionsResponse,
)
async def revoke_all_sessions(
    claims: CredentialClaims = Depends(get_current_claims),
    uow: UnitOfWork = Depends(get_unit_of_work),
    session_manager: SessionLifecycleManager = Depends(get_session_manager),
):
    """
    Revoke All Sessions

    Logs the caller out everywhere, including the current session. Useful
    for security incidents and lost devices.

    Raises:
        - 401 Unauthorized: Invalid token or dead session
        - 503 Service Unavailable: Revocation could not be written
    """
    use_case = RevokeSessionsUseCase(uow, session_manager)
    result = await use_case.revoke_all_sessions(claims.subject_id)

    if result.is_err():
        error = result.error
        if error.code == "STORE_UNAVAILABLE":
            raise TransientError(error)
        raise ServerError(error)

    return result.value


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_200_OK,
    response_model=RevokeSessionResponse,
)
async def revoke_specific_session(
    session_id: UUID,
    claims: CredentialClaims = Depends(get_current_claims),
    uow: UnitOfWork = Depends(get_unit_of_work),
    session_manager: SessionLifecycleManager = Depends(get_session_manager),
):
    """
    Revoke Specific Session

    Logs out one of the caller's devices. Revoking an already revoked
    session succeeds with revoked=false.

    Raises:
        - 403 Forbidden: Session belongs to another user
        - 404 Not Found: Session not found
        - 503 Service Unavailable: Session store unavailable
    """
    use_case = RevokeSessionsUseCase(uow, session_manager)
    result = await use_case.revoke_specific_session(session_id, claims.subject_id)

    if result.is_err():
        error = result.error
        if error.code == "FORBIDDEN":
            raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
        elif error.code == "SESSION_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        elif error.code == "STORE_UNAVAILABLE":
            raise TransientError(error)
        raise ServerError(error)

    return result.value
