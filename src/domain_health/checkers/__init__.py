"""
Checker modules for domain health probing.

Each checker module implements one concern of the health check.
"""

from .base_checker import BaseChecker
from .bootstrap import BootstrapRegistry, BootstrapSnapshot
from .http import HTTPChecker
from .rdap import RDAPResolver, retry_delay
from .whois import WhoisChecker

__all__ = ['BaseChecker', 'BootstrapRegistry', 'BootstrapSnapshot', 'HTTPChecker', 'RDAPResolver', 'WhoisChecker', 'retry_delay']
