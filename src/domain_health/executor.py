"""
Executor layer for domain health checks.

Runs the reachability and registration checks for a domain concurrently,
merges them into one DomainHealthResult, and fans out over batches of
domains with a concurrency limit.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from .checkers.bootstrap import BootstrapRegistry
from .checkers.http import HTTPChecker
from .checkers.rdap import RDAPResolver
from .checkers.whois import WhoisChecker
from .config import ProbeSettings
from .models import DomainHealthResult, combine_status
from .normalizer import isoformat_utc

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    """
    Results of checking several domains.

    Attributes:
        results: Health results in input order, for domains that completed
        errors: Domain name to error message, for domains whose check raised
        execution_time: Wall-clock seconds for the whole batch
    """
    results: List[DomainHealthResult] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)
    execution_time: float = 0.0


class DomainHealthExecutor:
    """
    Aggregator for domain health checks.

    One bootstrap registry is shared by every check run through the same
    executor.
    """

    def __init__(
        self,
        settings: Optional[ProbeSettings] = None,
        http_checker: Optional[HTTPChecker] = None,
        whois_checker: Optional[WhoisChecker] = None,
        bootstrap: Optional[BootstrapRegistry] = None,
    ):
        """
        Args:
            settings: Probe settings
            http_checker: Reachability checker; created if omitted
            whois_checker: Registration checker; created if omitted
            bootstrap: Shared bootstrap registry; created if omitted
        """
        self.settings = settings or ProbeSettings()
        self.bootstrap = bootstrap or BootstrapRegistry(self.settings)
        self.http_checker = http_checker or HTTPChecker(self.settings)
        self.whois_checker = whois_checker or WhoisChecker(
            self.settings,
            resolver=RDAPResolver(self.settings, bootstrap=self.bootstrap),
        )

    async def check(self, domain: str) -> DomainHealthResult:
        """
        Check one domain's reachability and registration concurrently.

        Both checks always run to completion. Exceptions here indicate a
        bug and propagate to the caller.

        Args:
            domain: Normalized domain name

        Returns:
            DomainHealthResult stamped at completion time
        """
        logger.debug(f"Starting health check for domain: {domain}")
        start_time = time.time()

        http_result, whois_result = await asyncio.gather(
            self.http_checker.check(domain),
            self.whois_checker.check(domain),
        )

        status = combine_status([http_result.status, whois_result.status])
        checked_at = isoformat_utc(datetime.now(timezone.utc))

        logger.debug(f"Completed health check for {domain} in {time.time() - start_time:.2f}s: {status.value}")

        return DomainHealthResult(
            domain=domain,
            status=status,
            checked_at=checked_at,
            http=http_result,
            whois=whois_result,
        )

    async def check_many(self, domains: Iterable[str]) -> BatchResult:
        """
        Check several domains concurrently, bounded by max_concurrent_domains.

        A domain whose check raises is recorded in BatchResult.errors and
        does not affect the others.

        Args:
            domains: Normalized domain names

        Returns:
            BatchResult with results in input order
        """
        domains = list(domains)
        logger.info(f"Starting health checks for {len(domains)} domain(s)")
        start_time = time.time()

        semaphore = asyncio.Semaphore(self.settings.max_concurrent_domains)

        async def bounded_check(domain: str) -> DomainHealthResult:
            async with semaphore:
                return await self.check(domain)

        outcomes = await asyncio.gather(
            *(bounded_check(domain) for domain in domains),
            return_exceptions=True,
        )

        batch = BatchResult()
        for domain, outcome in zip(domains, outcomes):
            if isinstance(outcome, Exception):
                error_msg = str(outcome) or f"{type(outcome).__name__} occurred"
                logger.error(f"Health check failed for {domain}: {error_msg}", exc_info=outcome)
                batch.errors[domain] = error_msg
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                batch.results.append(outcome)

        batch.execution_time = time.time() - start_time
        logger.info(f"Completed health checks in {batch.execution_time:.2f}s")
        return batch


# Registries shared by check_domain_health(), one per bootstrap source
_shared_bootstraps: Dict[Tuple[str, float, float, str], BootstrapRegistry] = {}


def shared_bootstrap(settings: Optional[ProbeSettings] = None) -> BootstrapRegistry:
    """
    Return the process-wide bootstrap registry for these settings.

    Registries are created lazily and reused by every caller whose
    bootstrap URL, TTL, timeout and user agent match.
    """
    settings = settings or ProbeSettings()
    key = (settings.bootstrap_url, settings.bootstrap_ttl, settings.bootstrap_timeout, settings.user_agent)
    registry = _shared_bootstraps.get(key)
    if registry is None:
        registry = _shared_bootstraps[key] = BootstrapRegistry(settings)
    return registry


async def check_domain_health(
    domain: str,
    settings: Optional[ProbeSettings] = None,
    bootstrap: Optional[BootstrapRegistry] = None,
) -> DomainHealthResult:
    """
    Convenience entry point: check a single domain.

    Args:
        domain: Normalized domain name
        settings: Optional probe settings
        bootstrap: Registry to use; defaults to the shared one for these settings

    Returns:
        DomainHealthResult
    """
    executor = DomainHealthExecutor(settings, bootstrap=bootstrap or shared_bootstrap(settings))
    return await executor.check(domain)

