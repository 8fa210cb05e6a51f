"""Tests for the CLI commands and service wiring."""

from dataclasses import replace
from pathlib import Path
from unittest.mock import MagicMock

import aiohttp
import pytest

from now_departing.adapters.config import AppConfig
from now_departing.cli import (
    build_parser,
    main,
    manage_favorites,
    show_lines,
    show_nearby,
    show_stations,
    show_times,
)
from now_departing.domain.models import Direction, Selection, StationFeed
from now_departing.main import Services, build_services, load_favorites
from tests.fakes import FakeArrivalRepository, FakeTimeSource, record


def offline_session() -> MagicMock:
    session = MagicMock()
    session.get.side_effect = aiohttp.ClientConnectionError("offline")
    return session


def make_services(
    tmp_path: Path,
    repository: FakeArrivalRepository | None = None,
    time_source: FakeTimeSource | None = None,
    **overrides,
) -> Services:
    config = AppConfig.for_testing(
        catalog_cache_file=str(tmp_path / "cache" / "stations.json"),
        favorites_file=str(tmp_path / "favorites.json"),
        **overrides,
    )
    services = build_services(config, offline_session())
    return replace(
        services,
        client=repository or FakeArrivalRepository(),
        time_source=time_source or FakeTimeSource(),
    )


class TestParser:
    """Tests for argument parsing."""

    def test_times_command(self) -> None:
        args = build_parser().parse_args(["times", "1", "Times Sq-42 St", "N", "--watch", "5"])

        assert args.command == "times"
        assert args.station == "Times Sq-42 St"
        assert args.watch == 5
        assert args.json is False

    def test_nearby_command_parses_floats(self) -> None:
        args = build_parser().parse_args(["nearby", "40.7557", "-73.987", "--json"])

        assert (args.latitude, args.longitude) == (40.7557, -73.987)
        assert args.json is True

    def test_favorites_requires_action(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["favorites"])

    @pytest.mark.asyncio
    async def test_main_without_command_prints_help(self, capsys: pytest.CaptureFixture) -> None:
        with pytest.raises(SystemExit) as exc_info:
            await main([])

        assert exc_info.value.code == 1
        assert "Real-time subway arrivals" in capsys.readouterr().out


class TestCommands:
    """Tests for the command handlers."""

    def test_show_lines(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        show_lines(make_services(tmp_path))

        out = capsys.readouterr().out
        assert "   1  Van Cortlandt Park <-> South Ferry" in out
        assert "   L  8 Av <-> Canarsie" in out

    @pytest.mark.asyncio
    async def test_show_stations_uses_bundled_catalog_when_offline(
        self, tmp_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        """Given no cache and no network, when listing stations, then the bundled snapshot is shown."""
        await show_stations(make_services(tmp_path), "1")

        out = capsys.readouterr().out
        assert "Line 1:" in out
        assert "Times Square-42nd St (Times Sq-42 St)" in out

    @pytest.mark.asyncio
    async def test_show_stations_unknown_line_exits(self, tmp_path: Path) -> None:
        with pytest.raises(SystemExit):
            await show_stations(make_services(tmp_path), "GS")

    @pytest.mark.asyncio
    async def test_show_times(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        """Given arrivals at +90s and +620s, when showing times, then both countdowns are printed."""
        repository = FakeArrivalRepository(
            route_feeds=[
                StationFeed(name="Times Sq-42 St", arrivals=(record("1", 90), record("1", 620)))
            ]
        )
        services = make_services(tmp_path, repository)

        await show_times(services, "1", "times square-42nd st", Direction.NORTH)

        out = capsys.readouterr().out
        assert "1 to Uptown at Times Square-42nd St" in out
        assert "  1 min, 10 min" in out

    @pytest.mark.asyncio
    async def test_show_times_without_data(
        self, tmp_path: Path, capsys: pytest.CaptureFixture
    ) -> None:
        await show_times(make_services(tmp_path), "1", "Times Sq-42 St", Direction.SOUTH)

        assert "No times found" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_show_nearby(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        repository = FakeArrivalRepository(
            location_feeds=[
                StationFeed(
                    name="Times Sq-42 St",
                    station_id="127",
                    latitude=40.7557,
                    longitude=-73.9870,
                    arrivals=(record("1", 90), record("1", 300)),
                )
            ]
        )
        services = make_services(tmp_path, repository)

        await show_nearby(services, 40.7557, -73.9870)

        out = capsys.readouterr().out
        assert "Times Square (0ft)" in out
        assert "  1 Uptown: 1, 5 min" in out

    @pytest.mark.asyncio
    async def test_show_nearby_empty(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        await show_nearby(make_services(tmp_path), 40.7557, -73.9870)

        assert "No trains found within 30 minutes" in capsys.readouterr().err


class TestFavorites:
    """Tests for favorites commands and loading."""

    @pytest.mark.asyncio
    async def test_add_list_remove(self, tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
        """Given a display name, when adding a favorite, then it is stored under the canonical name."""
        services = make_services(tmp_path)
        await services.catalog.load()
        parser = build_parser()

        def run(*argv: str) -> None:
            manage_favorites(services, parser.parse_args(["favorites", *argv]))

        run("add", "1", "Times Square-42nd St", "n")
        run("add", "1", "Times Sq-42 St", "N")
        run("list")

        out = capsys.readouterr().out
        assert "Added." in out
        assert "Already a favorite." in out
        assert "  1 N Times Square-42nd St" in out
        [favorite] = services.favorites_service.get_all()
        assert favorite.station_name == "Times Sq-42 St"

        run("remove", "1", "Times Sq-42 St", "N")
        assert "Removed." in capsys.readouterr().out
        assert services.favorites_service.get_all() == []

    def test_load_favorites_merges_config_entries(self, tmp_path: Path) -> None:
        """Given stored favorites and TOML favorites, when loading, then duplicates and invalid entries are dropped."""
        config_path = tmp_path / "config.toml"
        config_path.write_text(
            """
[[favorites]]
line_id = "1"
station_name = "Times Sq-42 St"
direction = "N"

[[favorites]]
line_id = "L"
station_name = "8 Av"
direction = "downtown"

[[favorites]]
line_id = "7"
station_name = "Times Sq-42 St"
direction = "sideways"

[[favorites]]
station_name = "No line"
""",
            encoding="utf-8",
        )
        services = make_services(tmp_path, config_file=str(config_path))
        services.favorites_service.add(
            Selection("1", "Times Sq-42 St", Direction.NORTH, "Times Square-42nd St")
        )

        favorites = load_favorites(services)

        assert [(f.line_id, f.station_name, f.direction) for f in favorites] == [
            ("1", "Times Sq-42 St", Direction.NORTH),
            ("L", "8 Av", Direction.SOUTH),
        ]
