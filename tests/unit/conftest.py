from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from auth_service.app.services.credential_codec import CredentialCodec
from auth_service.app.services.session_manager import SessionSettings

NOW = datetime(2025, 1, 15, 12, 0, 0)
HASH_SECRET = "unit-test-hash-secret"
SIGNING_SECRET = "unit-test-signing-secret"


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()

    uow.users = MagicMock()
    uow.users.get_by_email = AsyncMock()
    uow.users.get_by_id = AsyncMock()
    uow.users.create = AsyncMock()
    uow.users.record_login = AsyncMock()

    uow.sessions = MagicMock()
    uow.sessions.get_by_id = AsyncMock()
    uow.sessions.get_by_refresh_hash = AsyncMock()
    uow.sessions.list_active_by_owner = AsyncMock(return_value=[])
    uow.sessions.count_active_by_owner = AsyncMock(return_value=0)
    uow.sessions.create = AsyncMock(side_effect=lambda session: session)
    uow.sessions.set_access_credential_hash = AsyncMock(return_value=True)
    uow.sessions.set_refresh_credential_hash = AsyncMock(return_value=True)
    uow.sessions.touch = AsyncMock()
    uow.sessions.revoke_by_id = AsyncMock(return_value=True)
    uow.sessions.revoke_all_by_owner = AsyncMock(return_value=0)
    uow.sessions.delete_refresh_expired_before = AsyncMock(return_value=0)

    uow.audit_events = MagicMock()
    uow.audit_events.create = AsyncMock()
    return uow


@pytest.fixture
def session_settings():
    return SessionSettings(
        access_ttl=timedelta(minutes=30),
        refresh_ttl=timedelta(days=7),
        hash_secret=HASH_SECRET,
        store_timeout_seconds=0.5,
    )


@pytest.fixture
def codec():
    return CredentialCodec(
        secret=SIGNING_SECRET,
        access_ttl=timedelta(minutes=30),
        refresh_ttl=timedelta(days=7),
    )


@pytest.fixture
def mock_session_manager():
    manager = MagicMock()
    manager.create_session = AsyncMock()
    manager.record_access_credential = AsyncMock()
    manager.record_refresh_credential = AsyncMock()
    manager.validate_access = AsyncMock(return_value=True)
    manager.validate_refresh = AsyncMock(return_value=True)
    manager.lookup_by_refresh = AsyncMock()
    manager.revoke = AsyncMock(return_value=True)
    manager.revoke_all_for_owner = AsyncMock(return_value=0)
    manager.list_active_sessions = AsyncMock(return_value=[])
    manager.active_session_count = AsyncMock(return_value=0)
    manager.clock = MagicMock(return_value=NOW)
    return manager
