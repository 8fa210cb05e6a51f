"""In-process broadcaster for state updates."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable

from now_departing.domain.contracts.state_broadcaster import StateBroadcasterProtocol

logger = logging.getLogger(__name__)

Listener = Callable[[str], Awaitable[None] | None]


class StateBroadcaster(StateBroadcasterProtocol):
    """Calls registered listeners when a topic's state changes.

    Listener failures are logged and never reach the component that published.
    """

    def __init__(self) -> None:
        self._listeners: dict[str, list[Listener]] = {}

    def subscribe(self, topic: str, listener: Listener) -> Callable[[], None]:
        """Register a listener and return a function that unregisters it."""
        self._listeners.setdefault(topic, []).append(listener)

        def unsubscribe() -> None:
            listeners = self._listeners.get(topic, [])
            if listener in listeners:
                listeners.remove(listener)

        return unsubscribe

    def listener_count(self, topic: str) -> int:
        return len(self._listeners.get(topic, []))

    async def broadcast_update(self, topic: str) -> None:
        """Broadcast an update signal to all subscribers on the topic.

        Args:
            topic: The topic to broadcast to.
        """
        for listener in list(self._listeners.get(topic, [])):
            try:
                result = listener(topic)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Listener for topic {topic} failed: {e}", exc_info=True)
        logger.debug(f"Broadcasted update to topic: {topic}")
