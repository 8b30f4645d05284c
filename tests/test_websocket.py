# =============================================================================
# tests/test_websocket.py - Realtime Thread Update Tests
# =============================================================================

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import redis

from app.websocket.broadcast import (
    WEBSOCKET_CHANNEL,
    publish_event,
    publish_messages_read,
    publish_new_message,
)
from app.websocket.manager import ConnectionManager


def socket(fail=False):
    ws = MagicMock()
    ws.accept = AsyncMock()
    ws.send_json = AsyncMock(side_effect=RuntimeError("closed") if fail else None)
    return ws


# =============================================================================
# Connection Manager
# =============================================================================

class TestConnectionManager:

    def test_connect_and_disconnect(self):
        manager = ConnectionManager()
        portal, admin_tab = socket(), socket()

        asyncio.run(manager.connect("c1", portal))
        asyncio.run(manager.connect("c1", admin_tab))
        asyncio.run(manager.connect("c2", socket()))

        portal.accept.assert_awaited_once()
        assert manager.get_connection_count() == 3
        assert manager.get_connection_count("c1") == 2
        assert sorted(manager.get_active_clients()) == ["c1", "c2"]

        manager.disconnect("c1", portal)
        manager.disconnect("c1", admin_tab)
        manager.disconnect("c1", admin_tab)

        assert manager.get_connection_count() == 1
        assert manager.get_active_clients() == ["c2"]

    def test_broadcast_reaches_only_that_thread(self):
        manager = ConnectionManager()
        mine, other = socket(), socket()
        asyncio.run(manager.connect("c1", mine))
        asyncio.run(manager.connect("c2", other))

        sent = asyncio.run(manager.broadcast("c1", {"type": "message_created"}))

        assert sent == 1
        mine.send_json.assert_awaited_once_with({"type": "message_created"})
        other.send_json.assert_not_awaited()

    def test_broadcast_drops_dead_sockets(self):
        manager = ConnectionManager()
        alive, dead = socket(), socket(fail=True)
        asyncio.run(manager.connect("c1", alive))
        asyncio.run(manager.connect("c1", dead))

        assert asyncio.run(manager.broadcast("c1", {"type": "x"})) == 1
        assert manager.get_connection_count("c1") == 1
        assert manager.get_connection_count() == 1

    def test_broadcast_without_listeners(self):
        assert asyncio.run(ConnectionManager().broadcast("nobody", {"type": "x"})) == 0


# =============================================================================
# Redis Publishing
# =============================================================================

class TestPublish:

    def test_publish_event(self):
        fake_redis = MagicMock()

        with patch("app.websocket.broadcast.get_redis_client", return_value=fake_redis):
            assert publish_event("c1", "message_created", {"message": {"id": "m1"}}) is True

        channel, payload = fake_redis.publish.call_args.args
        assert channel == WEBSOCKET_CHANNEL
        assert json.loads(payload) == {"client_id": "c1", "type": "message_created", "message": {"id": "m1"}}

    def test_redis_failure_returns_false(self):
        fake_redis = MagicMock()
        fake_redis.publish.side_effect = redis.ConnectionError("refused")

        with patch("app.websocket.broadcast.get_redis_client", return_value=fake_redis):
            assert publish_event("c1", "messages_read", {}) is False

    def test_helpers(self):
        fake_redis = MagicMock()

        with patch("app.websocket.broadcast.get_redis_client", return_value=fake_redis):
            publish_new_message({"id": "m1", "client_id": "c1", "message": "hi"})
            publish_messages_read("c1", "admin", 3)

        first, second = [json.loads(c.args[1]) for c in fake_redis.publish.call_args_list]
        assert first["type"] == "message_created"
        assert first["message"]["message"] == "hi"
        assert second == {"client_id": "c1", "type": "messages_read", "reader_type": "admin", "count": 3}
