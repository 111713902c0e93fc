"""
RDAP resolver.

Looks up domain registration data through a public RDAP aggregator,
retrying on rate limits and timeouts, then falls back to the TLD's
authoritative servers listed in the bootstrap registry.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional
from urllib.parse import quote

from ..config import ProbeSettings
from ..transport import RDAP_ACCEPT, TRANSPORT_ERRORS, FetchOutcome, FetchResponse, OutcomeKind
from .base_checker import BaseChecker
from .bootstrap import BootstrapRegistry

logger = logging.getLogger(__name__)


def retry_delay(
    outcome: FetchOutcome,
    attempt: int,
    max_retries: int,
    base_delay: float,
) -> Optional[float]:
    """
    Decide whether an attempt should be retried, and after how long.

    Only rate limits and timeouts are retried. The delay grows
    exponentially with the attempt index; for rate limits the server's
    Retry-After is added on top.

    Args:
        outcome: Classified result of the attempt
        attempt: Zero-based index of the attempt that just finished
        max_retries: Number of retries allowed after the first attempt
        base_delay: Backoff base in seconds

    Returns:
        Delay in seconds before the next attempt, or None to stop
    """
    if attempt >= max_retries:
        return None

    backoff = base_delay * (2 ** attempt)
    if outcome.kind is OutcomeKind.RATE_LIMITED:
        return backoff + (outcome.retry_after or 0.0)
    if outcome.kind is OutcomeKind.TIMEOUT:
        return backoff
    return None


def domain_path(domain: str) -> str:
    return f"domain/{quote(domain, safe='')}"


class RDAPResolver(BaseChecker):
    """
    Resolver for raw RDAP domain responses.

    Escalation order is part of the contract: aggregator with retries,
    then each bootstrap server once, strictly sequentially.
    """

    def __init__(
        self,
        settings: Optional[ProbeSettings] = None,
        bootstrap: Optional[BootstrapRegistry] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Args:
            settings: Probe settings
            bootstrap: Shared bootstrap registry; a private one is created if omitted
            sleep: Coroutine used for backoff delays
        """
        super().__init__(settings)
        self.bootstrap = bootstrap or BootstrapRegistry(self.settings)
        self._sleep = sleep

    async def check(self, domain: str) -> FetchResponse:
        return await self.resolve(domain)

    async def resolve(self, domain: str) -> FetchResponse:
        """
        Fetch RDAP data for a domain.

        Args:
            domain: The domain name to resolve

        Returns:
            The first successful response, otherwise the last non-success
            response received

        Raises:
            FetchTimeoutError, aiohttp.ClientError: Only from the final
                unguarded aggregator attempt, when no response was ever
                received
        """
        primary_url = f"{self.settings.rdap_aggregator_url.rstrip('/')}/{domain_path(domain)}"
        last_response: Optional[FetchResponse] = None

        outcome = await self._fetch_with_retries(primary_url)
        if outcome.kind is OutcomeKind.SUCCESS:
            return outcome.response
        if outcome.response is not None:
            last_response = outcome.response

        logger.info(
            f"RDAP aggregator lookup failed for {domain} ({outcome.kind.value}"
            f"{': ' + outcome.error if outcome.error else ''}), trying bootstrap servers"
        )

        tld = domain.rsplit('.', 1)[-1]
        servers = await self.bootstrap.servers_for(tld)
        if not servers:
            logger.debug(f"No bootstrap RDAP servers known for .{tld}")

        for server in servers:
            server_url = f"{server.rstrip('/')}/{domain_path(domain)}"
            outcome = await self._attempt(server_url)
            if outcome.kind is OutcomeKind.SUCCESS:
                logger.debug(f"Bootstrap RDAP lookup succeeded for {domain} via {server_url}")
                return outcome.response
            if outcome.response is not None:
                last_response = outcome.response
            logger.warning(
                f"Bootstrap RDAP lookup failed ({server_url}): "
                f"{outcome.error or outcome.response.status}"
            )

        if last_response is not None:
            return last_response

        logger.info(f"No RDAP response obtained for {domain}, making final aggregator attempt")
        return await self._fetch(primary_url, self.settings.rdap_timeout, headers={"Accept": RDAP_ACCEPT})

    async def _fetch_with_retries(self, url: str) -> FetchOutcome:
        """
        Attempt a URL, retrying according to retry_delay().

        Returns:
            The outcome of the last attempt made
        """
        max_retries = self.settings.rdap_max_retries
        attempt = 0

        while True:
            outcome = await self._attempt(url)
            if outcome.kind is OutcomeKind.SUCCESS:
                return outcome

            delay = retry_delay(outcome, attempt, max_retries, self.settings.retry_base_delay)
            if delay is None:
                return outcome

            logger.info(
                f"RDAP request to {url} {outcome.kind.value} "
                f"(attempt {attempt + 1}/{max_retries + 1}), retrying in {delay:.1f}s"
            )
            await self._sleep(delay)
            attempt += 1

    async def _attempt(self, url: str) -> FetchOutcome:
        """Make a single request and classify it."""
        try:
            response = await self._fetch(url, self.settings.rdap_timeout, headers={"Accept": RDAP_ACCEPT})
        except TRANSPORT_ERRORS as e:
            logger.debug(f"RDAP request to {url} failed: {str(e) or type(e).__name__}")
            return FetchOutcome.from_exception(e)

        logger.debug(f"RDAP request to {url} returned {response.status}")
        return FetchOutcome.from_response(response)
