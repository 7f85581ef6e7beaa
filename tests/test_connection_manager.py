"""
Unit Tests for ConnectionManager

Tests for:
- Idempotent ensure_connection (existing and in-flight joins)
- Connect failures reported as None
- Teardown through the destroy observer, exactly once
- disconnect / disconnect_all
"""

import asyncio

import pytest
from conftest import CHANNEL_ID, GUILD_ID, FakeTransport, drain

from jellyfin_music_bot.application.services.connection_manager import ConnectionManager
from jellyfin_music_bot.domain.music.value_objects import ConnectionState, SessionPhase
from jellyfin_music_bot.domain.shared.exceptions import ConnectError

ADAPTER = object()
OTHER_GUILD_ID = 333333333333333333


@pytest.fixture
def destroyed():
    return []


@pytest.fixture
def manager(registry, transport, playback_settings, destroyed):
    cm = ConnectionManager(registry=registry, transport=transport, settings=playback_settings)
    cm.set_on_destroy_callback(destroyed.append)
    return cm


class TestEnsureConnection:
    @pytest.mark.asyncio
    async def test_connects_and_marks_session_ready(self, manager, transport, registry):
        connection = await manager.ensure_connection(GUILD_ID, CHANNEL_ID, ADAPTER)

        assert connection is transport.connections[0]
        assert connection.state == ConnectionState.READY
        assert manager.get_connection(GUILD_ID) is connection
        assert registry.get(GUILD_ID).phase == SessionPhase.READY

    @pytest.mark.asyncio
    async def test_returns_existing_connection(self, manager, transport):
        """A second call should return the same handle without joining again."""
        first = await manager.ensure_connection(GUILD_ID, CHANNEL_ID, ADAPTER)
        second = await manager.ensure_connection(GUILD_ID, 999, ADAPTER)

        assert second is first
        assert len(transport.connections) == 1

    @pytest.mark.asyncio
    async def test_concurrent_calls_share_one_join(self, manager, transport):
        results = await asyncio.gather(
            manager.ensure_connection(GUILD_ID, CHANNEL_ID, ADAPTER),
            manager.ensure_connection(GUILD_ID, CHANNEL_ID, ADAPTER),
        )

        assert results[0] is results[1]
        assert len(transport.connections) == 1

    @pytest.mark.asyncio
    async def test_missing_adapter_raises(self, manager):
        with pytest.raises(ValueError):
            await manager.ensure_connection(GUILD_ID, CHANNEL_ID, None)

    @pytest.mark.asyncio
    async def test_timeout_returns_none_and_abandons_session(
        self, registry, playback_settings, destroyed
    ):
        """A connection that never becomes ready is destroyed and reported as None."""
        transport = FakeTransport(auto_ready=False)
        cm = ConnectionManager(registry=registry, transport=transport, settings=playback_settings)
        cm.set_on_destroy_callback(destroyed.append)

        result = await cm.ensure_connection(GUILD_ID, CHANNEL_ID, ADAPTER)

        assert result is None
        assert transport.connections[0].is_destroyed
        assert GUILD_ID not in registry
        assert destroyed == []

    @pytest.mark.asyncio
    async def test_join_error_returns_none(self, registry, playback_settings):
        transport = FakeTransport(join_error=ConnectError(GUILD_ID, "no permission"))
        cm = ConnectionManager(registry=registry, transport=transport, settings=playback_settings)

        result = await cm.ensure_connection(GUILD_ID, CHANNEL_ID, ADAPTER)

        assert result is None
        assert GUILD_ID not in registry

    @pytest.mark.asyncio
    async def test_retry_after_failed_connect(self, registry, playback_settings):
        transport = FakeTransport(auto_ready=False)
        cm = ConnectionManager(registry=registry, transport=transport, settings=playback_settings)
        assert await cm.ensure_connection(GUILD_ID, CHANNEL_ID, ADAPTER) is None

        transport.auto_ready = True
        connection = await cm.ensure_connection(GUILD_ID, CHANNEL_ID, ADAPTER)

        assert connection is transport.connections[1]
        assert connection.state == ConnectionState.READY


class TestTeardown:
    @pytest.mark.asyncio
    async def test_disconnect_runs_cleanup_once(self, manager, registry, destroyed):
        connection = await manager.ensure_connection(GUILD_ID, CHANNEL_ID, ADAPTER)

        assert manager.disconnect(GUILD_ID) is True
        connection.destroy()

        assert destroyed == [GUILD_ID]
        assert connection.released == 1
        assert GUILD_ID not in registry
        assert manager.get_connection(GUILD_ID) is None

    @pytest.mark.asyncio
    async def test_disconnect_unknown_guild_returns_false(self, manager):
        assert manager.disconnect(GUILD_ID) is False

    @pytest.mark.asyncio
    async def test_cleanup_error_does_not_block_teardown(self, registry, transport, playback_settings):
        def boom(guild_id):
            raise RuntimeError("cleanup failed")

        cm = ConnectionManager(registry=registry, transport=transport, settings=playback_settings)
        cm.set_on_destroy_callback(boom)
        await cm.ensure_connection(GUILD_ID, CHANNEL_ID, ADAPTER)

        assert cm.disconnect(GUILD_ID) is True
        assert GUILD_ID not in registry

    @pytest.mark.asyncio
    async def test_grace_period_expiry_destroys_connection(self, manager, registry, destroyed):
        connection = await manager.ensure_connection(GUILD_ID, CHANNEL_ID, ADAPTER)

        connection.set_state(ConnectionState.DISCONNECTED)
        await asyncio.sleep(0.15)

        assert connection.is_destroyed
        assert destroyed == [GUILD_ID]
        assert GUILD_ID not in registry

    @pytest.mark.asyncio
    async def test_signalling_within_grace_keeps_connection(self, manager, destroyed):
        connection = await manager.ensure_connection(GUILD_ID, CHANNEL_ID, ADAPTER)

        connection.set_state(ConnectionState.DISCONNECTED)
        await drain()
        connection.set_state(ConnectionState.SIGNALLING)
        await asyncio.sleep(0.15)

        assert not connection.is_destroyed
        assert destroyed == []

    @pytest.mark.asyncio
    async def test_disconnect_all(self, manager, registry, transport, destroyed):
        await manager.ensure_connection(GUILD_ID, CHANNEL_ID, ADAPTER)
        await manager.ensure_connection(OTHER_GUILD_ID, CHANNEL_ID, ADAPTER)

        assert manager.disconnect_all() == 2
        assert all(c.is_destroyed for c in transport.connections)
        assert sorted(destroyed) == [GUILD_ID, OTHER_GUILD_ID]
        assert len(registry) == 0
