"""
WHOIS checker for domain registration information.

Resolves RDAP data for a domain and normalizes it into registrar,
registration dates and an expiration-based status.
"""

import logging
import time
from typing import Optional

from ..config import ProbeSettings
from ..models import HealthStatus, RegistrationResult
from ..normalizer import normalize
from .base_checker import BaseChecker
from .rdap import RDAPResolver

logger = logging.getLogger(__name__)


class WhoisChecker(BaseChecker):
    """
    Checker for domain registration data.

    Status is derived from days until expiration:
    - ERROR: already expired
    - WARNING: expires within expiry_warning_days, or expiration unknown
    - HEALTHY: otherwise
    """

    def __init__(self, settings: Optional[ProbeSettings] = None, resolver: Optional[RDAPResolver] = None):
        """
        Args:
            settings: Probe settings
            resolver: RDAP resolver to use; one is created if omitted
        """
        super().__init__(settings)
        self.resolver = resolver or RDAPResolver(self.settings)

    async def check(self, domain: str) -> RegistrationResult:
        """
        Execute the registration check for the specified domain.

        Args:
            domain: The domain name to check

        Returns:
            RegistrationResult; never raises
        """
        check_start_time = time.time()
        logger.debug(f"Starting WHOIS check for domain: {domain}")

        try:
            response = await self.resolver.resolve(domain)
        except Exception as e:
            message = str(e) or "WHOIS lookup failed"
            logger.warning(f"WHOIS lookup failed for {domain}: {message}")
            return RegistrationResult(
                status=HealthStatus.WARNING,
                message=message,
                error=message,
            )

        result = normalize(response, expiry_warning_days=self.settings.expiry_warning_days)

        logger.debug(f"WHOIS data for {domain}:")
        logger.debug(f"  Registrar: {result.registrar}")
        logger.debug(f"  Expiration Date: {result.expiration_date}")
        logger.debug(f"  Days To Expire: {result.days_to_expire}")
        logger.debug(f"WHOIS check completed for {domain} in {time.time() - check_start_time:.3f}s")

        return result
