"""
Base checker infrastructure for domain health checks.

Provides the abstract base class shared by the reachability and
registration checkers.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..config import ProbeSettings
from ..transport import FetchResponse, fetch


class BaseChecker(ABC):
    """
    Abstract base class for all domain checkers.

    All checker implementations must inherit from this class and implement
    the check() method. Checkers never raise: every failure is captured
    into the returned result object.
    """

    def __init__(self, settings: Optional[ProbeSettings] = None):
        """
        Initialize the checker.

        Args:
            settings: Probe settings (timeouts, retry policy, URLs)
        """
        self.settings = settings or ProbeSettings()

    @abstractmethod
    async def check(self, domain: str) -> Any:
        """
        Execute the check for the specified domain.

        Args:
            domain: The domain name to check

        Returns:
            Checker-specific result object
        """
        pass

    async def _fetch(
        self,
        url: str,
        timeout: float,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
    ) -> FetchResponse:
        """
        Send a request through the shared transport.

        Single seam for network I/O so tests can patch it.

        Raises:
            FetchTimeoutError: If the timeout fires
            aiohttp.ClientError: On transport failures
        """
        request_headers = {"User-Agent": self.settings.user_agent}
        if headers:
            request_headers.update(headers)
        return await fetch(url, timeout, method=method, headers=request_headers)
