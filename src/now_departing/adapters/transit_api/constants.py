"""Constants for the arrivals API."""

DEFAULT_API_BASE_URL = "https://api.wheresthefuckingtrain.com"

BY_ROUTE_PATH = "/by-route/{line_id}"
BY_LOCATION_PATH = "/by-location"

RATE_LIMITER_NAME = "arrivals_api"

# Coordinates are sent with this many decimals (~10 cm)
COORDINATE_PRECISION = 6
