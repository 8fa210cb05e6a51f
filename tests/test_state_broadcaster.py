"""Behavior-focused tests for StateBroadcaster."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from now_departing.adapters.broadcasters import StateBroadcaster


class TestStateBroadcaster:
    """Tests for state broadcast behavior."""

    @pytest.mark.asyncio
    async def test_when_broadcasting_then_calls_listeners_of_that_topic(self) -> None:
        """Given listeners on two topics, when broadcasting one, then only its listeners run."""
        broadcaster = StateBroadcaster()
        nearby_listener = MagicMock(return_value=None)
        clock_listener = AsyncMock()
        broadcaster.subscribe("nearby", nearby_listener)
        broadcaster.subscribe("arrivals:1:Times Sq-42 St:N", clock_listener)

        await broadcaster.broadcast_update("arrivals:1:Times Sq-42 St:N")

        clock_listener.assert_awaited_once_with("arrivals:1:Times Sq-42 St:N")
        nearby_listener.assert_not_called()

    @pytest.mark.asyncio
    async def test_when_listener_fails_then_logs_error_and_continues(self) -> None:
        """Given a failing listener, when broadcasting, then later listeners still run."""
        broadcaster = StateBroadcaster()
        failing = MagicMock(side_effect=RuntimeError("display gone"))
        healthy = MagicMock(return_value=None)
        broadcaster.subscribe("nearby", failing)
        broadcaster.subscribe("nearby", healthy)

        with patch("now_departing.adapters.broadcasters.state_broadcaster.logger") as mock_logger:
            await broadcaster.broadcast_update("nearby")

            mock_logger.error.assert_called_once()
            assert "display gone" in mock_logger.error.call_args[0][0]

        healthy.assert_called_once_with("nearby")

    @pytest.mark.asyncio
    async def test_when_unsubscribed_then_listener_is_not_called(self) -> None:
        broadcaster = StateBroadcaster()
        listener = MagicMock(return_value=None)
        unsubscribe = broadcaster.subscribe("nearby", listener)
        assert broadcaster.listener_count("nearby") == 1

        unsubscribe()
        unsubscribe()
        await broadcaster.broadcast_update("nearby")

        listener.assert_not_called()
        assert broadcaster.listener_count("nearby") == 0

    @pytest.mark.asyncio
    async def test_when_no_listeners_then_broadcast_is_a_no_op(self) -> None:
        await StateBroadcaster().broadcast_update("nobody")
