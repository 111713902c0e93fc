"""
RDAP bootstrap registry cache.

Fetches the IANA RDAP bootstrap document, which maps TLDs to their
authoritative RDAP servers, and caches it in memory with a TTL.

Bootstrap format:
{
    "services": [
        [["com", "net"], ["https://rdap.verisign.com/com/v1/"]],
        [["org"], ["https://rdap.publicinterestregistry.org/rdap/"]],
        ...
    ]
}
"""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config import ProbeSettings
from ..transport import TRANSPORT_ERRORS, FetchResponse, fetch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BootstrapSnapshot:
    """
    Immutable TLD to server mapping.

    Attributes:
        services_by_tld: Lowercase TLD to ordered RDAP base URLs
        fetched_at: Clock reading when the snapshot was fetched
    """
    services_by_tld: Dict[str, Tuple[str, ...]] = field(default_factory=dict)
    fetched_at: Optional[float] = None

    def servers_for(self, tld: str) -> List[str]:
        return list(self.services_by_tld.get(tld.lower(), ()))


def parse_bootstrap_services(data: Any) -> Dict[str, Tuple[str, ...]]:
    """
    Flatten the bootstrap "services" array into a TLD mapping.

    Malformed entries are skipped. Keys are lowercased.

    Raises:
        ValueError: If the document is not an object with a services list
    """
    if not isinstance(data, dict) or not isinstance(data.get("services"), list):
        raise ValueError("Bootstrap document has no 'services' list")

    services: Dict[str, Tuple[str, ...]] = {}
    for entry in data["services"]:
        if not isinstance(entry, list) or len(entry) < 2:
            continue
        tlds, urls = entry[0], entry[1]
        if not isinstance(tlds, list) or not isinstance(urls, list):
            continue
        servers = tuple(url for url in urls if isinstance(url, str) and url)
        for tld in tlds:
            if isinstance(tld, str) and tld:
                services[tld.lower()] = servers
    return services


class BootstrapRegistry:
    """
    Process-wide cache of the RDAP bootstrap registry.

    The snapshot is replaced wholesale on each successful refresh. A failed
    refresh keeps the previous snapshot, and the next lookup tries again.
    Concurrent refreshes are not coordinated; the last writer wins.
    """

    def __init__(
        self,
        settings: Optional[ProbeSettings] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            settings: Probe settings providing the URL, TTL and timeout
            clock: Monotonic clock, injectable for tests
        """
        self.settings = settings or ProbeSettings()
        self._clock = clock
        self._snapshot = BootstrapSnapshot()

    @property
    def snapshot(self) -> BootstrapSnapshot:
        return self._snapshot

    def is_stale(self) -> bool:
        """True if never fetched or older than the TTL."""
        fetched_at = self._snapshot.fetched_at
        if fetched_at is None:
            return True
        return self._clock() - fetched_at > self.settings.bootstrap_ttl

    async def servers_for(self, tld: str) -> List[str]:
        """
        Return the RDAP base URLs serving a TLD.

        Refreshes the cache first if it is stale. Never raises.

        Args:
            tld: Top-level domain, any case

        Returns:
            Ordered list of base URLs, possibly empty
        """
        if self.is_stale():
            await self.refresh()
        return self._snapshot.servers_for(tld)

    async def refresh(self, force: bool = False) -> bool:
        """
        Fetch the bootstrap document and replace the snapshot.

        Args:
            force: Refresh even if the snapshot is still fresh

        Returns:
            True if the snapshot was replaced
        """
        if not force and not self.is_stale():
            return False

        url = self.settings.bootstrap_url
        logger.info(f"Refreshing RDAP bootstrap registry from {url}")

        try:
            response = await self._fetch(url)
            if not response.ok:
                raise ValueError(f"HTTP {response.status} {response.reason}".strip())
            services = parse_bootstrap_services(json.loads(response.body))
        except TRANSPORT_ERRORS as e:
            # json.JSONDecodeError is a ValueError
            logger.warning(f"Failed to fetch RDAP bootstrap data: {str(e) or type(e).__name__}")
            return False

        fetched_at = self._clock()
        previous = self._snapshot.fetched_at
        if previous is not None and fetched_at <= previous:
            fetched_at = previous + 1e-6

        self._snapshot = BootstrapSnapshot(services_by_tld=services, fetched_at=fetched_at)
        logger.debug(f"RDAP bootstrap registry loaded with {len(services)} TLD(s)")
        return True

    async def _fetch(self, url: str) -> FetchResponse:
        return await fetch(
            url,
            self.settings.bootstrap_timeout,
            headers={"Accept": "application/json", "User-Agent": self.settings.user_agent},
        )
