"""
Unit tests for Session Lifecycle Manager
"""

import asyncio
from datetime import datetime, timedelta
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from auth_service.app.repositories.session_repository import StoreUnavailableError
from auth_service.app.services.credential_hashing import hash_credential
from auth_service.app.services.session_manager import SessionLifecycleManager
from auth_service.domain.entities import Session

NOW = datetime(2025, 1, 15, 12, 0, 0)


def make_session(**overrides) -> Session:
    values = dict(
        id=uuid4(),
        owner_id=uuid4(),
        created_at=NOW - timedelta(minutes=5),
        last_accessed_at=NOW - timedelta(minutes=5),
        access_expires_at=NOW + timedelta(minutes=25),
        refresh_expires_at=NOW + timedelta(days=7),
        revoked=False,
    )
    values.update(overrides)
    return Session(**values)


@pytest.fixture
def manager(mock_uow, session_settings):
    return SessionLifecycleManager(mock_uow, session_settings, clock=lambda: NOW)


@pytest.mark.asyncio
async def test_create_session_sets_horizons(manager, mock_uow):
    owner_id = uuid4()

    session = await manager.create_session(
        owner_id=owner_id,
        device_info="DESKTOP",
        ip_address="203.0.113.7",
        user_agent="Mozilla/5.0",
    )

    assert session.owner_id == owner_id
    assert session.created_at == NOW
    assert session.last_accessed_at == NOW
    assert session.access_expires_at == NOW + timedelta(minutes=30)
    assert session.refresh_expires_at == NOW + timedelta(days=7)
    assert session.revoked is False
    assert session.access_credential_hash is None
    assert session.refresh_credential_hash is None
    assert session.session_type == "WEB"
    mock_uow.sessions.create.assert_awaited_once()
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_create_session_write_failure_is_not_retried(manager, mock_uow):
    mock_uow.sessions.create = AsyncMock(side_effect=StoreUnavailableError("down"))

    with pytest.raises(StoreUnavailableError):
        await manager.create_session(uuid4(), None, None, None)

    assert mock_uow.sessions.create.await_count == 1
    mock_uow.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_record_access_credential_stores_digest_only(
    manager, mock_uow, session_settings
):
    session_id = uuid4()

    await manager.record_access_credential(session_id, "raw-access")

    mock_uow.sessions.set_access_credential_hash.assert_awaited_once_with(
        session_id, hash_credential("raw-access", session_settings.hash_secret)
    )
    mock_uow.sessions.get_by_id.assert_not_awaited()
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_record_access_credential_unknown_session_is_noop(manager, mock_uow):
    mock_uow.sessions.set_access_credential_hash.return_value = False

    await manager.record_access_credential(uuid4(), "raw-access")

    mock_uow.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_record_refresh_credential(manager, mock_uow, session_settings):
    session_id = uuid4()

    await manager.record_refresh_credential(session_id, "raw-refresh")

    mock_uow.sessions.set_refresh_credential_hash.assert_awaited_once_with(
        session_id, hash_credential("raw-refresh", session_settings.hash_secret)
    )
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_record_refresh_credential_unknown_session_is_noop(manager, mock_uow):
    mock_uow.sessions.set_refresh_credential_hash.return_value = False

    await manager.record_refresh_credential(uuid4(), "raw-refresh")

    mock_uow.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_validate_access_live_session_touches(manager, mock_uow):
    session = make_session()
    mock_uow.sessions.get_by_id.return_value = session

    assert await manager.validate_access(session.id) is True
    mock_uow.sessions.touch.assert_awaited_once_with(session.id, NOW)


@pytest.mark.asyncio
async def test_validate_access_missing_session(manager, mock_uow):
    mock_uow.sessions.get_by_id.return_value = None

    assert await manager.validate_access(uuid4()) is False
    mock_uow.sessions.touch.assert_not_awaited()


@pytest.mark.asyncio
async def test_validate_access_revoked_session_within_horizon(manager, mock_uow):
    session = make_session(revoked=True, revoked_at=NOW, revoked_reason="logout")
    mock_uow.sessions.get_by_id.return_value = session

    assert await manager.validate_access(session.id) is False
    mock_uow.sessions.touch.assert_not_awaited()


@pytest.mark.asyncio
async def test_validate_access_at_exact_horizon_fails(manager, mock_uow):
    session = make_session(access_expires_at=NOW)
    mock_uow.sessions.get_by_id.return_value = session

    assert await manager.validate_access(session.id) is False


@pytest.mark.asyncio
async def test_validate_access_touch_failure_is_swallowed(manager, mock_uow):
    session = make_session()
    mock_uow.sessions.get_by_id.return_value = session
    mock_uow.sessions.touch = AsyncMock(side_effect=StoreUnavailableError("down"))

    assert await manager.validate_access(session.id) is True


@pytest.mark.asyncio
async def test_read_is_retried_once(manager, mock_uow):
    session = make_session()
    mock_uow.sessions.get_by_id = AsyncMock(
        side_effect=[StoreUnavailableError("blip"), session]
    )

    assert await manager.validate_access(session.id) is True
    assert mock_uow.sessions.get_by_id.await_count == 2
    mock_uow.rollback.assert_awaited_once()


@pytest.mark.asyncio
async def test_read_failing_twice_surfaces_store_unavailable(manager, mock_uow):
    mock_uow.sessions.get_by_id = AsyncMock(side_effect=StoreUnavailableError("down"))

    with pytest.raises(StoreUnavailableError):
        await manager.validate_access(uuid4())

    assert mock_uow.sessions.get_by_id.await_count == 2


@pytest.mark.asyncio
async def test_slow_read_times_out(mock_uow, session_settings):
    async def hang(*args, **kwargs):
        await asyncio.sleep(5)

    mock_uow.sessions.list_active_by_owner = AsyncMock(side_effect=hang)
    settings = type(session_settings)(
        access_ttl=session_settings.access_ttl,
        refresh_ttl=session_settings.refresh_ttl,
        hash_secret=session_settings.hash_secret,
        store_timeout_seconds=0.05,
    )
    manager = SessionLifecycleManager(mock_uow, settings, clock=lambda: NOW)

    with pytest.raises(StoreUnavailableError):
        await manager.list_active_sessions(uuid4())


@pytest.mark.asyncio
async def test_validate_refresh(manager, mock_uow, session_settings):
    session = make_session()
    mock_uow.sessions.get_by_refresh_hash.return_value = session

    assert await manager.validate_refresh("raw-refresh") is True
    mock_uow.sessions.get_by_refresh_hash.assert_awaited_once_with(
        hash_credential("raw-refresh", session_settings.hash_secret)
    )


@pytest.mark.asyncio
async def test_validate_refresh_unknown_or_expired(manager, mock_uow):
    mock_uow.sessions.get_by_refresh_hash.return_value = None
    assert await manager.validate_refresh("raw-refresh") is False

    mock_uow.sessions.get_by_refresh_hash.return_value = make_session(
        refresh_expires_at=NOW - timedelta(seconds=1)
    )
    assert await manager.validate_refresh("raw-refresh") is False


@pytest.mark.asyncio
async def test_lookup_by_refresh_empty_credential(manager, mock_uow):
    assert await manager.lookup_by_refresh("") is None
    mock_uow.sessions.get_by_refresh_hash.assert_not_awaited()


@pytest.mark.asyncio
async def test_revoke_reports_transition_only_once(manager, mock_uow):
    session_id = uuid4()
    mock_uow.sessions.revoke_by_id = AsyncMock(side_effect=[True, False])

    assert await manager.revoke(session_id, "logout") is True
    assert await manager.revoke(session_id, "other") is False
    mock_uow.sessions.revoke_by_id.assert_any_await(session_id, NOW, "logout")


@pytest.mark.asyncio
async def test_revoke_write_failure_is_surfaced(manager, mock_uow):
    mock_uow.sessions.revoke_by_id = AsyncMock(side_effect=StoreUnavailableError("down"))

    with pytest.raises(StoreUnavailableError):
        await manager.revoke(uuid4(), "logout")

    assert mock_uow.sessions.revoke_by_id.await_count == 1


@pytest.mark.asyncio
async def test_revoke_all_for_owner(manager, mock_uow):
    owner_id = uuid4()
    mock_uow.sessions.revoke_all_by_owner.return_value = 3

    assert await manager.revoke_all_for_owner(owner_id, "breach") == 3
    mock_uow.sessions.revoke_all_by_owner.assert_awaited_once_with(owner_id, NOW, "breach")
    mock_uow.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_list_active_sessions_newest_first(manager, mock_uow):
    owner_id = uuid4()
    sessions = [make_session(owner_id=owner_id), make_session(owner_id=owner_id)]
    mock_uow.sessions.list_active_by_owner.return_value = sessions
    mock_uow.sessions.count_active_by_owner.return_value = 2

    assert await manager.list_active_sessions(owner_id) == sessions
    assert await manager.active_session_count(owner_id) == 2
    mock_uow.sessions.list_active_by_owner.assert_awaited_once_with(
        owner_id, newest_first=True
    )


@pytest.mark.asyncio
async def test_failed_rollback_between_read_attempts_still_retries(manager, mock_uow):
    session = make_session()
    mock_uow.sessions.get_by_id = AsyncMock(
        side_effect=[StoreUnavailableError("blip"), session]
    )
    mock_uow.rollback = AsyncMock(side_effect=StoreUnavailableError("rollback failed"))

    assert await manager.validate_access(session.id) is True
    assert mock_uow.sessions.get_by_id.await_count == 2


@pytest.mark.asyncio
async def test_failed_rollback_with_dead_store_surfaces_store_unavailable(
    manager, mock_uow
):
    mock_uow.sessions.get_by_id = AsyncMock(side_effect=StoreUnavailableError("down"))
    mock_uow.rollback = AsyncMock(side_effect=StoreUnavailableError("rollback failed"))

    with pytest.raises(StoreUnavailableError):
        await manager.validate_access(uuid4())
