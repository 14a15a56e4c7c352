from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator

from fastapi import Depends, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from auth_service.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from auth_service.api.error import ClientError, TransientError
from auth_service.app.repositories.session_repository import StoreUnavailableError
from auth_service.app.services.credential_codec import (
    ACCESS_TOKEN_TYPE,
    CredentialClaims,
    CredentialCodec,
)
from auth_service.app.services.session_janitor import SessionJanitor
from auth_service.app.services.session_manager import (
    SessionLifecycleManager,
    SessionSettings,
)
from auth_service.app.services.unit_of_work import UnitOfWork
from auth_service.libs.result import Error

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

security = HTTPBearer(auto_error=False)


@asynccontextmanager
async def unit_of_work_scope() -> AsyncIterator[SqlAlchemyUnitOfWork]:
    async with AsyncSessionLocal() as session:
        yield SqlAlchemyUnitOfWork(session)


async def get_unit_of_work():
    async with unit_of_work_scope() as uow:
        yield uow


def session_settings() -> SessionSettings:
    return SessionSettings(
        access_ttl=timedelta(minutes=ApplicationConfig.ACCESS_TOKEN_MINUTES),
        refresh_ttl=timedelta(days=ApplicationConfig.REFRESH_TOKEN_DAYS),
        hash_secret=ApplicationConfig.TOKEN_HASH_SECRET,
        store_timeout_seconds=ApplicationConfig.STORE_TIMEOUT_SECONDS,
    )


def get_credential_codec() -> CredentialCodec:
    return CredentialCodec(
        secret=ApplicationConfig.JWT_SECRET,
        previous_secrets=ApplicationConfig.JWT_PREVIOUS_SECRETS,
        algorithm=ApplicationConfig.JWT_ALGORITHM,
        access_ttl=timedelta(minutes=ApplicationConfig.ACCESS_TOKEN_MINUTES),
        refresh_ttl=timedelta(days=ApplicationConfig.REFRESH_TOKEN_DAYS),
    )


def get_session_manager(
    uow: UnitOfWork = Depends(get_unit_of_work),
) -> SessionLifecycleManager:
    return SessionLifecycleManager(uow, session_settings())


def build_session_janitor() -> SessionJanitor:
    return SessionJanitor(
        uow_scope=unit_of_work_scope,
        interval=timedelta(minutes=ApplicationConfig.SESSION_JANITOR_INTERVAL_MINUTES),
    )


async def get_current_claims(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    codec: CredentialCodec = Depends(get_credential_codec),
    session_manager: SessionLifecycleManager = Depends(get_session_manager),
) -> CredentialClaims:
    """
    Dependency to verify the bearer access credential and its session.

    Args:
        credentials: Bearer token from Authorization header

    Returns:
        Verified claims (subject_id, session_id, roles)

    Raises:
        ClientError: 401 if header missing, credential invalid/expired or
            session revoked/expired/unknown
        TransientError: 503 if the session store is unavailable
    """
    if credentials is None or not credentials.credentials:
        raise ClientError(
            Error("MISSING_CREDENTIAL", "Bearer credential required"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    verified = codec.verify(credentials.credentials, expected_type=ACCESS_TOKEN_TYPE)
    if verified.is_err():
        raise ClientError(verified.error, status_code=status.HTTP_401_UNAUTHORIZED)
    claims = verified.value

    try:
        valid = await session_manager.validate_access(claims.session_id)
    except StoreUnavailableError:
        raise TransientError(
            Error("STORE_UNAVAILABLE", "Session store temporarily unavailable")
        )

    if not valid:
        raise ClientError(
            Error("INVALID_CREDENTIAL", "Invalid or expired credential"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return claims
