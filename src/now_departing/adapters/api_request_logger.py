"""Verbose logging of upstream requests, enabled with NOW_DEPARTING_LOG_REQUESTS=true."""

import logging
import os
from typing import Any

logger = logging.getLogger(__name__)

LOG_REQUESTS_ENV = "NOW_DEPARTING_LOG_REQUESTS"


def should_log_requests() -> bool:
    """Check if request logging is enabled via the environment."""
    return os.getenv(LOG_REQUESTS_ENV, "").strip().lower() in ("true", "1", "yes")


def build_url_with_params(url: str, params: dict[str, Any] | None) -> str:
    """Build full URL with query parameters in a stable order."""
    if not params:
        return url
    param_str = "&".join(f"{k}={v}" for k, v in sorted(params.items()))
    return f"{url}&{param_str}" if "?" in url else f"{url}?{param_str}"


def log_api_request(method: str, url: str, params: dict[str, Any] | None = None) -> None:
    """Log an outgoing request if request logging is enabled."""
    if not should_log_requests():
        return
    logger.info(f"API Request: {method} {build_url_with_params(url, params)}")


def log_api_response(url: str, status: int, elapsed_seconds: float, size: int | None = None) -> None:
    """Log the outcome of a request if request logging is enabled."""
    if not should_log_requests():
        return
    size_part = f", {size} bytes" if size is not None else ""
    logger.info(f"API Response: {status} from {url} in {elapsed_seconds * 1000:.0f}ms{size_part}")
