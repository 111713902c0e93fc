"""
Domain Health Probe Engine

Determines whether a domain's web endpoint is reachable and whether its
RDAP registration data indicates impending expiration, tolerating slow,
rate-limited and inconsistently formatted upstream services.
"""

__version__ = "0.1.0"

from .checkers import BootstrapRegistry, HTTPChecker, RDAPResolver, WhoisChecker
from .config import ProbeSettings, DomainConfig, ManifestConfig, load_manifest, validate_domain
from .errors import DomainHealthError, FetchTimeoutError, InvalidDomainError
from .executor import BatchResult, DomainHealthExecutor, check_domain_health
from .models import (
    DomainHealthResult,
    HealthStatus,
    ReachabilityResult,
    RegistrationResult,
    combine_status,
)
from .normalizer import normalize

__all__ = [
    'BatchResult',
    'BootstrapRegistry',
    'DomainConfig',
    'DomainHealthError',
    'DomainHealthExecutor',
    'DomainHealthResult',
    'FetchTimeoutError',
    'HTTPChecker',
    'HealthStatus',
    'InvalidDomainError',
    'ManifestConfig',
    'ProbeSettings',
    'RDAPResolver',
    'ReachabilityResult',
    'RegistrationResult',
    'WhoisChecker',
    'check_domain_health',
    'combine_status',
    'load_manifest',
    'normalize',
    'validate_domain',
]
