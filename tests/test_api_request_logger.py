"""Tests for API request logger."""

from unittest.mock import MagicMock, patch

import pytest

from now_departing.adapters.api_request_logger import (
    LOG_REQUESTS_ENV,
    build_url_with_params,
    log_api_request,
    log_api_response,
    should_log_requests,
)


class TestShouldLogRequests:
    """Tests for should_log_requests function."""

    def test_when_env_not_set_then_returns_false(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Given NOW_DEPARTING_LOG_REQUESTS not set, when checking, then returns False."""
        monkeypatch.delenv(LOG_REQUESTS_ENV, raising=False)

        assert should_log_requests() is False

    @pytest.mark.parametrize("value", ["true", "True", "1", "yes", " YES "])
    def test_when_env_enabled_then_returns_true(
        self, monkeypatch: pytest.MonkeyPatch, value: str
    ) -> None:
        monkeypatch.setenv(LOG_REQUESTS_ENV, value)

        assert should_log_requests() is True

    def test_when_env_set_to_false_then_returns_false(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(LOG_REQUESTS_ENV, "false")

        assert should_log_requests() is False


class TestBuildUrlWithParams:
    """Tests for build_url_with_params function."""

    def test_without_params_returns_url(self) -> None:
        assert build_url_with_params("https://example.com/by-route/1", None) == (
            "https://example.com/by-route/1"
        )

    def test_params_are_sorted(self) -> None:
        """Given unordered params, when building, then they appear sorted by name."""
        url = build_url_with_params(
            "https://example.com/by-location", {"lon": "-73.987000", "lat": "40.755700"}
        )

        assert url == "https://example.com/by-location?lat=40.755700&lon=-73.987000"

    def test_existing_query_is_extended(self) -> None:
        url = build_url_with_params("https://example.com/api?existing=1", {"new": 2})

        assert url == "https://example.com/api?existing=1&new=2"


class TestLogApiRequest:
    """Tests for log_api_request function."""

    @patch("now_departing.adapters.api_request_logger.should_log_requests")
    @patch("now_departing.adapters.api_request_logger.logger")
    def test_when_logging_disabled_then_does_not_log(
        self, mock_logger: MagicMock, mock_should_log: MagicMock
    ) -> None:
        mock_should_log.return_value = False

        log_api_request("GET", "https://example.com/by-route/1")

        mock_logger.info.assert_not_called()

    @patch("now_departing.adapters.api_request_logger.should_log_requests")
    @patch("now_departing.adapters.api_request_logger.logger")
    def test_when_logging_enabled_with_params_then_logs_full_url(
        self, mock_logger: MagicMock, mock_should_log: MagicMock
    ) -> None:
        """Given logging enabled with params, when calling, then logs URL with params."""
        mock_should_log.return_value = True

        log_api_request("GET", "https://example.com/by-location", params={"lat": 1, "lon": 2})

        mock_logger.info.assert_called_once()
        message = mock_logger.info.call_args[0][0]
        assert "GET https://example.com/by-location?lat=1&lon=2" in message


class TestLogApiResponse:
    """Tests for log_api_response function."""

    @patch("now_departing.adapters.api_request_logger.should_log_requests")
    @patch("now_departing.adapters.api_request_logger.logger")
    def test_logs_status_elapsed_and_size(
        self, mock_logger: MagicMock, mock_should_log: MagicMock
    ) -> None:
        mock_should_log.return_value = True

        log_api_response("https://example.com/by-route/1", 200, 0.1234, size=4)

        message = mock_logger.info.call_args[0][0]
        assert message == (
            "API Response: 200 from https://example.com/by-route/1 in 123ms, 4 bytes"
        )

    @patch("now_departing.adapters.api_request_logger.should_log_requests")
    @patch("now_departing.adapters.api_request_logger.logger")
    def test_when_logging_disabled_then_does_not_log(
        self, mock_logger: MagicMock, mock_should_log: MagicMock
    ) -> None:
        mock_should_log.return_value = False

        log_api_response("https://example.com/by-route/1", 503, 1.0)

        mock_logger.info.assert_not_called()
