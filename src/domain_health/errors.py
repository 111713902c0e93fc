"""Exception types raised by the domain health engine."""

from typing import Optional


class DomainHealthError(Exception):
    """Base class for all domain health errors."""


class FetchTimeoutError(DomainHealthError):
    """
    Raised when a request's timeout fires before a response arrives.
    
    Kept distinct from connection and protocol failures so the RDAP
    retry policy can treat it as transient.
    
    Attributes:
        url: The URL that was being requested
        timeout: The timeout in seconds that elapsed
    """
    
    def __init__(self, url: str, timeout: Optional[float] = None):
        super().__init__("Request timed out")
        self.url = url
        self.timeout = timeout


class InvalidDomainError(DomainHealthError, ValueError):
    """Raised when a domain name fails validation."""
    
    def __init__(self, domain: str):
        super().__init__(f"Please provide a valid domain (got '{domain}')")
        self.domain = domain
