"""State change broadcasting."""

from now_departing.adapters.broadcasters.state_broadcaster import StateBroadcaster

__all__ = ["StateBroadcaster"]
