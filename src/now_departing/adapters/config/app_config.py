"""12-factor configuration adapter using environment variables and TOML config."""

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# TOML section -> settings it may override
_TOML_SECTIONS: dict[str, tuple[str, ...]] = {
    "api": (
        "api_base_url",
        "api_timeout_seconds",
        "location_timeout_seconds",
        "api_min_delay_seconds",
    ),
    "catalog": (
        "catalog_url",
        "catalog_cache_file",
        "catalog_ttl_seconds",
        "availability_miss_threshold",
    ),
    "arrivals": (
        "arrival_cache_ttl_seconds",
        "active_refresh_interval_seconds",
        "inactive_refresh_interval_seconds",
        "subscription_stagger_seconds",
        "background_stop_after_seconds",
    ),
    "nearby": (
        "nearby_horizon_minutes",
        "nearby_tie_window_seconds",
        "nearby_refresh_interval_seconds",
    ),
    "display": ("display_tick_seconds", "countdown_style"),
}


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Arrival API configuration
    api_base_url: str = Field(
        default="https://api.wheresthefuckingtrain.com",
        description="Base URL of the real-time arrivals API",
    )
    api_timeout_seconds: float = Field(
        default=30, description="Timeout for by-route arrival requests in seconds"
    )
    location_timeout_seconds: float = Field(
        default=15, description="Timeout for by-location arrival requests in seconds"
    )
    api_min_delay_seconds: float = Field(
        default=0.0,
        description="Minimum delay between requests to the arrivals API in seconds",
    )

    # Station catalog
    catalog_url: str = Field(
        default=(
            "https://raw.githubusercontent.com/jbobrow/Now-Departing-WatchOS/"
            "refs/heads/main/Shared/stations.json"
        ),
        description="URL of the remote station catalog document",
    )
    catalog_cache_file: str = Field(
        default="~/.cache/now-departing/stations.json",
        description="Where the last successfully fetched remote catalog is cached",
    )
    bundled_catalog_file: str | None = Field(
        default=None,
        description="Override for the bundled catalog snapshot (defaults to the packaged one)",
    )
    catalog_ttl_seconds: float = Field(
        default=3600, description="Minimum age of the catalog before a remote refresh"
    )
    availability_miss_threshold: int = Field(
        default=2,
        description="Consecutive probe misses before a station is flagged as not served",
    )

    # Arrivals and clocks
    arrival_cache_ttl_seconds: float = Field(
        default=30, description="How long fetched arrivals are served from cache"
    )
    active_refresh_interval_seconds: float = Field(
        default=30, description="Network refresh interval while the app is active"
    )
    inactive_refresh_interval_seconds: float = Field(
        default=120,
        description="Network refresh interval while inactive (0 suspends network refresh)",
    )
    display_tick_seconds: float = Field(
        default=1, description="Interval at which countdowns are recomputed"
    )
    subscription_stagger_seconds: float = Field(
        default=0.5, description="Start delay between consecutive favorite subscriptions"
    )
    background_stop_after_seconds: float = Field(
        default=600,
        description="Stop subscriptions after this long inactive (0 never stops)",
    )

    # Nearby
    nearby_horizon_minutes: float = Field(
        default=30, description="Arrivals further out than this are not shown"
    )
    nearby_tie_window_seconds: float = Field(
        default=60, description="Arrivals closer in time than this are ranked by distance"
    )
    nearby_refresh_interval_seconds: float = Field(
        default=60, description="Refresh interval for nearby arrivals"
    )

    # Presentation and storage
    countdown_style: str = Field(
        default="full", description="Countdown text style: 'full' or 'compact'"
    )
    favorites_file: str = Field(
        default="~/.config/now-departing/favorites.json",
        description="Path of the favorites JSON document",
    )
    log_level: str = Field(default="INFO", description="Root logging level")

    # TOML config file path
    config_file: str | None = Field(
        default=None,
        description="Path to TOML configuration file with tuning overrides and favorites",
    )

    @classmethod
    def for_testing(cls, **overrides: Any) -> "AppConfig":
        """Build a config that ignores any .env file in the working directory."""
        return cls(_env_file=None, **overrides)

    @field_validator(
        "api_timeout_seconds",
        "location_timeout_seconds",
        "catalog_ttl_seconds",
        "arrival_cache_ttl_seconds",
        "active_refresh_interval_seconds",
        "display_tick_seconds",
        "nearby_horizon_minutes",
        "nearby_refresh_interval_seconds",
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Validate durations that must be strictly positive."""
        if v <= 0:
            raise ValueError("value must be greater than 0")
        return v

    @field_validator(
        "api_min_delay_seconds",
        "inactive_refresh_interval_seconds",
        "subscription_stagger_seconds",
        "background_stop_after_seconds",
        "nearby_tie_window_seconds",
    )
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        """Validate durations where 0 means disabled."""
        if v < 0:
            raise ValueError("value must not be negative")
        return v

    @field_validator("availability_miss_threshold")
    @classmethod
    def validate_miss_threshold(cls, v: int) -> int:
        if v < 1:
            raise ValueError("availability_miss_threshold must be at least 1")
        return v

    @field_validator("countdown_style")
    @classmethod
    def validate_countdown_style(cls, v: str) -> str:
        """Validate countdown style is either 'full' or 'compact'."""
        if v.lower() not in ("full", "compact"):
            raise ValueError("countdown_style must be either 'full' or 'compact'")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"log_level must be a logging level name, got {v!r}")
        return level

    def _load_toml_data(self) -> dict[str, Any]:
        """Load and parse the TOML file, applying tuning overrides from its sections."""
        if not self.config_file:
            return {}

        config_path = Path(self.config_file).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)

        for section, keys in _TOML_SECTIONS.items():
            values = toml_data.get(section, {})
            if not isinstance(values, dict):
                raise ValueError(f"TOML config '{section}' must be a table")
            for key in keys:
                if key in values:
                    # Re-validate through the model so TOML values obey the same rules
                    validated = type(self).model_validate(
                        {**self.model_dump(), key: values[key], "config_file": None}
                    )
                    setattr(self, key, getattr(validated, key))

        return toml_data

    def apply_toml_overrides(self) -> "AppConfig":
        """Apply overrides from ``config_file`` if one is configured."""
        self._load_toml_data()
        return self

    def get_favorites_config(self) -> list[dict[str, Any]]:
        """Return ``[[favorites]]`` entries from the TOML file (empty without a file)."""
        toml_data = self._load_toml_data()
        favorites = toml_data.get("favorites", [])
        if not isinstance(favorites, list):
            raise ValueError("TOML config 'favorites' must be a list")
        return [f for f in favorites if isinstance(f, dict)]

    def resolved_path(self, value: str) -> Path:
        return Path(value).expanduser()
