"""
HTTP/HTTPS reachability checker.

Probes a domain's web endpoint with header-only requests, trying HTTPS
first and falling back to plain HTTP.
"""

import logging
import time
from typing import Optional

from ..models import HealthStatus, ReachabilityResult
from ..transport import FetchResponse
from .base_checker import BaseChecker

logger = logging.getLogger(__name__)


class HTTPChecker(BaseChecker):
    """
    Checker for HTTP/HTTPS reachability.

    Any received status code counts as reachable, so "reachable but
    erroring" is distinguished from "unreachable".
    """

    async def check(self, domain: str) -> ReachabilityResult:
        """
        Probe the domain over HTTPS, falling back to HTTP.

        Args:
            domain: The domain name to check

        Returns:
            ReachabilityResult; never raises
        """
        logger.debug(f"Starting HTTP check for domain: {domain}")

        https_url = f"https://{domain}"
        used_url = https_url
        response: Optional[FetchResponse] = None
        latency_ms: Optional[int] = None
        error: Optional[str] = None

        for url in (https_url, f"http://{domain}"):
            try:
                start = time.monotonic()
                response = await self._fetch(url, self.settings.http_timeout, method="HEAD")
                latency_ms = int(round((time.monotonic() - start) * 1000))
                used_url = url
                error = None
                break
            except Exception as e:
                error = str(e) or f"{type(e).__name__} occurred"
                logger.debug(f"HEAD {url} failed for {domain}: {error}")

        if response is None:
            logger.warning(f"Failed to connect to {domain} via both HTTPS and HTTP: {error}")
            return ReachabilityResult(
                status=HealthStatus.ERROR,
                reachable=False,
                url_tried=used_url,
                error=error,
            )

        status = self._determine_status(response.status)
        logger.debug(f"HTTP check for {domain}: {used_url} -> {response.status} in {latency_ms}ms")

        return ReachabilityResult(
            status=status,
            reachable=True,
            url_tried=used_url,
            status_code=response.status,
            latency_ms=latency_ms,
            final_url=response.final_url,
        )

    def _determine_status(self, status_code: int) -> HealthStatus:
        """
        Determine health based on HTTP status code.

        4xx and 5xx mean the site answers but is erroring (WARNING);
        everything else is HEALTHY.
        """
        if 400 <= status_code < 600:
            return HealthStatus.WARNING
        return HealthStatus.HEALTHY
