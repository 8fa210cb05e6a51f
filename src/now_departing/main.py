"""Main entry point: watches favorite arrivals and logs their countdowns."""

import asyncio
import logging
import sys
from dataclasses import dataclass

import aiohttp

from now_departing.adapters.broadcasters import StateBroadcaster
from now_departing.adapters.cache import ArrivalCache
from now_departing.adapters.catalog import (
    JsonFileCatalogSource,
    RemoteCatalogSource,
    bundled_catalog_source,
)
from now_departing.adapters.config import AppConfig, LineDirectory
from now_departing.adapters.formatters import ArrivalFormatter
from now_departing.adapters.pollers import ArrivalClock, FavoritesMonitor, NearbyAggregator
from now_departing.adapters.storage import JsonFavoritesStore
from now_departing.adapters.system_time_source import SystemTimeSource
from now_departing.adapters.transit_api import ArrivalClient
from now_departing.application.services import (
    FavoritesService,
    NearbyRankingService,
    StationCatalog,
)
from now_departing.domain.models import Direction, Selection

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


@dataclass
class Services:
    """Wired components sharing one HTTP session, cache and broadcaster."""

    config: AppConfig
    time_source: SystemTimeSource
    line_directory: LineDirectory
    client: ArrivalClient
    cache: ArrivalCache
    catalog: StationCatalog
    ranking_service: NearbyRankingService
    favorites_service: FavoritesService
    broadcaster: StateBroadcaster
    formatter: ArrivalFormatter

    def new_clock(self, selection: Selection) -> ArrivalClock:
        return ArrivalClock(
            self.client,
            self.cache,
            time_source=self.time_source,
            broadcaster=self.broadcaster,
            topic=f"arrivals:{selection.key}",
            active_interval_seconds=self.config.active_refresh_interval_seconds,
            inactive_interval_seconds=self.config.inactive_refresh_interval_seconds,
            display_tick_seconds=self.config.display_tick_seconds,
            background_stop_after_seconds=self.config.background_stop_after_seconds,
        )

    def new_nearby_aggregator(self) -> NearbyAggregator:
        return NearbyAggregator(
            self.client,
            self.ranking_service,
            time_source=self.time_source,
            broadcaster=self.broadcaster,
            refresh_interval_seconds=self.config.nearby_refresh_interval_seconds,
        )

    def new_favorites_monitor(self) -> FavoritesMonitor:
        return FavoritesMonitor(self.new_clock, self.config.subscription_stagger_seconds)


def build_services(config: AppConfig, session: aiohttp.ClientSession) -> Services:
    """Wire all components for one session."""
    time_source = SystemTimeSource()
    line_directory = LineDirectory()
    client = ArrivalClient(
        session,
        base_url=config.api_base_url,
        timeout_seconds=config.api_timeout_seconds,
        location_timeout_seconds=config.location_timeout_seconds,
        min_delay_seconds=config.api_min_delay_seconds,
        time_source=time_source,
    )
    catalog = StationCatalog(
        cache_source=JsonFileCatalogSource(config.catalog_cache_file, name="cache"),
        bundled_source=bundled_catalog_source(config.bundled_catalog_file),
        remote_source=RemoteCatalogSource(
            session, config.catalog_url, timeout_seconds=config.api_timeout_seconds
        ),
        time_source=time_source,
        arrival_repository=client,
        ttl_seconds=config.catalog_ttl_seconds,
        availability_miss_threshold=config.availability_miss_threshold,
    )
    return Services(
        config=config,
        time_source=time_source,
        line_directory=line_directory,
        client=client,
        cache=ArrivalCache(config.arrival_cache_ttl_seconds, time_source),
        catalog=catalog,
        ranking_service=NearbyRankingService(
            line_directory,
            horizon_minutes=config.nearby_horizon_minutes,
            tie_window_seconds=config.nearby_tie_window_seconds,
            display_name_lookup=catalog.display_name_for,
        ),
        favorites_service=FavoritesService(JsonFavoritesStore(config.favorites_file)),
        broadcaster=StateBroadcaster(),
        formatter=ArrivalFormatter(config.countdown_style),
    )


def load_favorites(services: Services) -> list[Selection]:
    """Stored favorites followed by any ``[[favorites]]`` from the TOML file."""
    favorites = services.favorites_service.get_all()
    known = {favorite.key for favorite in favorites}
    for entry in services.config.get_favorites_config():
        try:
            selection = Selection(
                line_id=str(entry["line_id"]),
                station_name=str(entry["station_name"]),
                direction=Direction.parse(str(entry.get("direction", "N"))),
                station_display=str(entry.get("station_display", "")),
            )
        except (KeyError, ValueError) as e:
            logger.warning(f"Ignoring invalid favorite in config: {entry} ({e})")
            continue
        if selection.key not in known:
            known.add(selection.key)
            favorites.append(selection)
    return favorites


async def main() -> None:
    """Watch favorites until interrupted."""
    config = AppConfig().apply_toml_overrides()
    configure_logging(config.log_level)

    async with aiohttp.ClientSession() as session:
        services = build_services(config, session)
        favorites = load_favorites(services)
        if not favorites:
            logger.error("No favorites configured.")
            logger.error("Add one with: now-departing favorites add LINE STATION N|S")
            sys.exit(1)

        monitor = services.new_favorites_monitor()
        last_lines: dict[str, str] = {}

        def log_board(topic: str) -> None:
            # Display ticks fire every second; only log when the text changes
            for key, state in monitor.states().items():
                if topic != f"arrivals:{key}" or state.selection is None:
                    continue
                text = services.formatter.format_countdowns(state.countdowns) or (
                    state.message or state.status.value
                )
                line = f"{state.selection.display_name} {key.line_id} {key.direction}: {text}"
                if last_lines.get(topic) != line:
                    last_lines[topic] = line
                    logger.info(line)

        for favorite in favorites:
            services.broadcaster.subscribe(f"arrivals:{favorite.key}", log_board)

        await monitor.start(favorites)
        try:
            await asyncio.Event().wait()
        finally:
            logger.info("Shutting down...")
            await monitor.stop()


def run() -> None:
    """Synchronous entry point for the watch command."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
