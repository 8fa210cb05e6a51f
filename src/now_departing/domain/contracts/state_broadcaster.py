"""Protocol for broadcasting state updates."""

from typing import Protocol


class StateBroadcasterProtocol(Protocol):
    """Protocol for notifying observers that component state changed."""

    async def broadcast_update(self, topic: str) -> None:
        """Broadcast an update signal to all subscribers on the topic.

        Args:
            topic: The topic to broadcast to.
        """
        ...
