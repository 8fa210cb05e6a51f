"""Observable component state."""

from now_departing.adapters.state.clock_state import ClockState
from now_departing.adapters.state.feed_status import FeedStatus
from now_departing.adapters.state.nearby_state import NearbyState

__all__ = ["ClockState", "FeedStatus", "NearbyState"]
