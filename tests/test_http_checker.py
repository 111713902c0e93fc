"""
Tests for HTTP checker module.

Tests HTTPS-then-HTTP fallback, latency capture, and status derivation.
"""

from dataclasses import replace
from unittest.mock import patch

import aiohttp
import pytest

from domain_health.checkers.http import HTTPChecker
from domain_health.config import ProbeSettings
from domain_health.errors import FetchTimeoutError
from domain_health.models import HealthStatus, ReachabilityResult

from factories import make_response


@pytest.fixture
def http_checker():
    """Create an HTTPChecker instance for testing."""
    return HTTPChecker()


def connection_error(message="Cannot connect to host example.com:443"):
    return aiohttp.ClientConnectionError(message)


class TestHTTPChecker:
    """Tests for HTTPChecker class."""

    @pytest.mark.asyncio
    async def test_check_success_https(self, http_checker):
        """HTTPS answering 200 is healthy and records latency."""
        response = make_response(200, url="https://example.com")

        with patch.object(http_checker, '_fetch', return_value=response) as mock_fetch:
            result = await http_checker.check("example.com")

        assert isinstance(result, ReachabilityResult)
        assert result.status == HealthStatus.HEALTHY
        assert result.reachable is True
        assert result.status_code == 200
        assert result.url_tried == "https://example.com"
        assert result.latency_ms is not None and result.latency_ms >= 0
        assert result.error is None
        mock_fetch.assert_called_once_with("https://example.com", 7.0, method="HEAD")

    @pytest.mark.asyncio
    async def test_falls_back_to_http_on_connection_error(self, http_checker):
        """HTTPS connection error followed by HTTP 200 is reachable and healthy."""
        calls = []

        async def mock_fetch(url, timeout, method="GET", headers=None):
            calls.append(url)
            if url.startswith("https://"):
                raise connection_error()
            return make_response(200, url=url)

        with patch.object(http_checker, '_fetch', side_effect=mock_fetch):
            result = await http_checker.check("example.com")

        assert calls == ["https://example.com", "http://example.com"]
        assert result.reachable is True
        assert result.status == HealthStatus.HEALTHY
        assert result.url_tried == "http://example.com"
        assert result.error is None

    @pytest.mark.asyncio
    async def test_falls_back_to_http_on_timeout(self, http_checker):
        async def mock_fetch(url, timeout, method="GET", headers=None):
            if url.startswith("https://"):
                raise FetchTimeoutError(url, timeout)
            return make_response(301, url=url)

        with patch.object(http_checker, '_fetch', side_effect=mock_fetch):
            result = await http_checker.check("example.com")

        assert result.reachable is True
        assert result.status_code == 301
        assert result.status == HealthStatus.HEALTHY
        assert result.url_tried == "http://example.com"

    @pytest.mark.asyncio
    async def test_both_attempts_fail(self, http_checker):
        """Neither protocol answering is unreachable and an error."""
        with patch.object(
            http_checker,
            '_fetch',
            side_effect=[connection_error(), FetchTimeoutError("http://example.com", 7.0)],
        ):
            result = await http_checker.check("example.com")

        assert result.reachable is False
        assert result.status == HealthStatus.ERROR
        assert result.status_code is None
        assert result.latency_ms is None
        assert result.error == "Request timed out"

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_captured(self, http_checker):
        with patch.object(http_checker, '_fetch', side_effect=RuntimeError("boom")):
            result = await http_checker.check("example.com")

        assert result.reachable is False
        assert result.status == HealthStatus.ERROR
        assert result.error == "boom"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [400, 404, 500, 503, 599])
    async def test_error_status_codes_are_reachable_warnings(self, http_checker, status_code):
        """A 4xx/5xx answer means reachable but erroring."""
        with patch.object(http_checker, '_fetch', return_value=make_response(status_code, url="https://example.com")):
            result = await http_checker.check("example.com")

        assert result.reachable is True
        assert result.status == HealthStatus.WARNING
        assert result.status_code == status_code

    @pytest.mark.asyncio
    async def test_error_status_does_not_trigger_http_fallback(self, http_checker):
        with patch.object(http_checker, '_fetch', return_value=make_response(503, url="https://example.com")) as mock_fetch:
            result = await http_checker.check("example.com")

        assert mock_fetch.call_count == 1
        assert result.url_tried == "https://example.com"

    @pytest.mark.asyncio
    async def test_records_final_url_after_redirects(self, http_checker):
        response = replace(make_response(200, url="https://example.com"), final_url="https://www.example.com/")

        with patch.object(http_checker, '_fetch', return_value=response):
            result = await http_checker.check("example.com")

        assert result.final_url == "https://www.example.com/"

    @pytest.mark.asyncio
    async def test_uses_configured_timeout(self):
        checker = HTTPChecker(ProbeSettings(http_timeout=2.5))
        with patch.object(checker, '_fetch', return_value=make_response(200)) as mock_fetch:
            await checker.check("example.com")

        assert mock_fetch.call_args[0][1] == 2.5


class TestStatusDetermination:
    """Tests for HTTP status code evaluation."""

    def test_success_and_redirects_are_healthy(self, http_checker):
        for code in (100, 200, 204, 301, 302, 308):
            assert http_checker._determine_status(code) == HealthStatus.HEALTHY

    def test_client_and_server_errors_are_warnings(self, http_checker):
        for code in (400, 401, 403, 404, 429, 500, 502, 503, 504):
            assert http_checker._determine_status(code) == HealthStatus.WARNING
