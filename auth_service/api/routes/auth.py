from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, EmailStr, Field

from auth_service.api.error import ClientError, ServerError, TransientError
from auth_service.api.utils.request_context import classify_device, get_client_ip
from auth_service.app.services.credential_codec import CredentialClaims, CredentialCodec
from auth_service.app.services.session_manager import SessionLifecycleManager
from auth_service.app.services.unit_of_work import UnitOfWork
from auth_service.app.use_cases.auth import (
    LoginCommand,
    LoginResponse,
    LoginUseCase,
    LogoutResponse,
    LogoutUseCase,
    RefreshTokenResponse,
    RefreshTokenUseCase,
    RegisterCommand,
    RegisterResponse,
    RegisterUseCase,
)
from auth_service.app.use_cases.users import CurrentIdentityResponse, LoadContextUseCase
from auth_service.depends import (
    get_credential_codec,
    get_current_claims,
    get_session_manager,
    get_unit_of_work,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])

UNAUTHORIZED_CODES = ("INVALID_CREDENTIAL", "EXPIRED_CREDENTIAL", "INVALID_CREDENTIALS")


def raise_for_error(error):
    """Map a use case error onto the HTTP error hierarchy"""
    if error.code in UNAUTHORIZED_CODES:
        raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
    if error.code == "USER_DISABLED":
        raise ClientError(error, status_code=status.HTTP_403_FORBIDDEN)
    if error.code == "STORE_UNAVAILABLE":
        raise TransientError(error)
    raise ServerError(error)


class RegisterRequest(BaseModel):
    """
    Register HTTP request payload

    Validates incoming HTTP request before converting to RegisterCommand.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=8, description="User password (min 8 chars)")
    full_name: str | None = Field(None, max_length=255, description="Display name")


@router.post(
    "/register", status_code=status.HTTP_201_CREATED, response_model=RegisterResponse
)
async def register(request: RegisterRequest, uow: UnitOfWork = Depends(get_unit_of_work)):
    """
    User Registration

    Raises:
        - 409 Conflict: Email already exists
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
    """
    command = RegisterCommand(
        email=request.email, password=request.password, full_name=request.full_name
    )

    use_case = RegisterUseCase(uow)
    result = await use_case.execute(command)

    if result.is_err():
        error = result.error
        if error.code == "EMAIL_ALREADY_EXISTS":
            raise ClientError(error, status_code=status.HTTP_409_CONFLICT)
        raise ServerError(error)

    return result.value


class LoginRequest(BaseModel):
    """
    Login HTTP request payload

    Validates incoming login request.
    """

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


@router.post("/login", status_code=status.HTTP_200_OK, response_model=LoginResponse)
async def login(
    request: LoginRequest,
    http_request: Request,
    uow: UnitOfWork = Depends(get_unit_of_work),
    session_manager: SessionLifecycleManager = Depends(get_session_manager),
    codec: CredentialCodec = Depends(get_credential_codec),
):
    """
    User Login

    Opens a new session and returns an access/refresh credential pair.

    Raises:
        - 401 Unauthorized: Invalid credentials
        - 403 Forbidden: User disabled
        - 503 Service Unavailable: Session store unavailable
    """
    user_agent = http_request.headers.get("User-Agent")
    command = LoginCommand(
        email=request.email,
        password=request.password,
        device_info=classify_device(user_agent),
        ip_address=get_client_ip(http_request),
        user_agent=user_agent,
    )

    use_case = LoginUseCase(uow, session_manager, codec)
    result = await use_case.execute(command)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


class RefreshRequest(BaseModel):
    """
    Refresh token HTTP request payload

    Validates incoming refresh request.
    """

    refresh_token: str = Field(..., description="Refresh token")


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=RefreshTokenResponse)
async def refresh(
    request: RefreshRequest,
    uow: UnitOfWork = Depends(get_unit_of_work),
    session_manager: SessionLifecycleManager = Depends(get_session_manager),
    codec: CredentialCodec = Depends(get_credential_codec),
):
    """
    Refresh Access Token

    Issues a new access token for the same session; the refresh token is
    returned unchanged.

    Raises:
        - 401 Unauthorized: Invalid/expired refresh token or revoked session
        - 403 Forbidden: User disabled
        - 503 Service Unavailable: Session store unavailable
    """
    use_case = RefreshTokenUseCase(uow, session_manager, codec)
    result = await use_case.execute(request.refresh_token)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    claims: CredentialClaims = Depends(get_current_claims),
    uow: UnitOfWork = Depends(get_unit_of_work),
    session_manager: SessionLifecycleManager = Depends(get_session_manager),
):
    """
    Logout

    Revokes the session behind the bearer access token.

    Raises:
        - 401 Unauthorized: Missing, invalid or expired token
        - 503 Service Unavailable: Revocation could not be written
    """
    use_case = LogoutUseCase(uow, session_manager)
    result = await use_case.execute(claims)

    if result.is_err():
        raise_for_error(result.error)

    return result.value


@router.get("/me", status_code=status.HTTP_200_OK, response_model=CurrentIdentityResponse)
async def get_me(
    claims: CredentialClaims = Depends(get_current_claims),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    """
    Current Identity

    Raises:
        - 401 Unauthorized: Invalid token, dead session or unknown user
        - 403 Forbidden: User disabled
    """
    use_case = LoadContextUseCase(uow)
    result = await use_case.execute(claims)

    if result.is_err():
        error = result.error
        if error.code == "USER_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        raise_for_error(error)

    return result.value
