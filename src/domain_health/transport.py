"""
HTTP transport shared by the checkers.

Wraps aiohttp requests with a per-request timeout, snapshots responses into
immutable FetchResponse objects, and classifies attempts into tagged
FetchOutcome values consumed by the RDAP retry policy.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import timezone
from email.utils import parsedate_to_datetime
from enum import Enum
from typing import Dict, Mapping, Optional

import aiohttp

from .errors import FetchTimeoutError

logger = logging.getLogger(__name__)

RDAP_ACCEPT = "application/rdap+json, application/json"

# Used when a 429 carries no usable Retry-After header
DEFAULT_RETRY_AFTER = 1.0


@dataclass(frozen=True)
class FetchResponse:
    """
    Snapshot of an HTTP response.

    Attributes:
        url: The URL that was requested
        status: HTTP status code
        reason: HTTP reason phrase
        headers: Response headers with lowercased names
        body: Decoded response body (empty for HEAD requests)
        final_url: URL after following redirects
    """
    url: str
    status: int
    reason: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str = ""
    final_url: Optional[str] = None

    @property
    def ok(self) -> bool:
        """True for 2xx responses."""
        return 200 <= self.status < 300

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower())

    def retry_after(self, default: float = DEFAULT_RETRY_AFTER) -> float:
        """Seconds requested by the Retry-After header, or default."""
        parsed = parse_retry_after(self.header('retry-after'))
        return default if parsed is None else parsed


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """
    Parse a Retry-After header value.

    Supports delta-seconds ("120") and HTTP-dates
    ("Wed, 21 Oct 2015 07:28:00 GMT").

    Args:
        value: Raw header value

    Returns:
        Delay in seconds, or None if absent, unparsable or non-positive
    """
    if not value:
        return None

    value = value.strip()

    try:
        seconds = int(value)
        return float(seconds) if seconds > 0 else None
    except ValueError:
        pass

    try:
        retry_at = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None

    # "-0000" zones parse as naive but are still GMT
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)

    delay = retry_at.timestamp() - time.time()
    return delay if delay > 0 else None


class OutcomeKind(str, Enum):
    """Classification of a single request attempt."""
    SUCCESS = "success"            # 2xx response
    HTTP_ERROR = "http_error"      # any other response except 429
    RATE_LIMITED = "rate_limited"  # 429 response
    TIMEOUT = "timeout"            # timeout fired before a response
    FAILURE = "failure"            # connection, DNS, TLS or protocol failure


@dataclass(frozen=True)
class FetchOutcome:
    """
    Tagged result of a request attempt.

    Attributes:
        kind: Outcome classification
        response: The response, for SUCCESS, HTTP_ERROR and RATE_LIMITED
        retry_after: Server-requested delay in seconds, for RATE_LIMITED
        error: Failure description, for TIMEOUT and FAILURE
    """
    kind: OutcomeKind
    response: Optional[FetchResponse] = None
    retry_after: Optional[float] = None
    error: Optional[str] = None

    @classmethod
    def from_response(cls, response: FetchResponse) -> 'FetchOutcome':
        """Classify a received response."""
        if response.ok:
            return cls(OutcomeKind.SUCCESS, response=response)
        if response.status == 429:
            return cls(OutcomeKind.RATE_LIMITED, response=response, retry_after=response.retry_after())
        return cls(OutcomeKind.HTTP_ERROR, response=response)

    @classmethod
    def from_exception(cls, exc: BaseException) -> 'FetchOutcome':
        """Classify a request failure."""
        if isinstance(exc, FetchTimeoutError):
            return cls(OutcomeKind.TIMEOUT, error=str(exc))
        return cls(OutcomeKind.FAILURE, error=str(exc) or type(exc).__name__)


# Errors that mean "this attempt failed" rather than "the code is broken"
TRANSPORT_ERRORS = (FetchTimeoutError, aiohttp.ClientError, OSError, ValueError)


async def fetch(
    url: str,
    timeout: float,
    method: str = "GET",
    headers: Optional[Dict[str, str]] = None,
    session: Optional[aiohttp.ClientSession] = None,
) -> FetchResponse:
    """
    Send a single request with a hard timeout.

    The timeout covers the whole request including reading the body.
    Redirects are followed.

    Args:
        url: The URL to request
        timeout: Maximum time in seconds
        method: HTTP method (HEAD requests skip the body)
        headers: Extra request headers
        session: Optional session to reuse; a new one is created otherwise

    Returns:
        FetchResponse snapshot of the final response

    Raises:
        FetchTimeoutError: If the timeout fires before completion
        aiohttp.ClientError: If the request fails at the transport level
    """
    client_timeout = aiohttp.ClientTimeout(total=timeout)

    try:
        if session is not None:
            return await _send(session, url, method, headers, client_timeout)

        async with aiohttp.ClientSession(timeout=client_timeout) as own_session:
            return await _send(own_session, url, method, headers, client_timeout)

    except asyncio.TimeoutError as e:
        logger.debug(f"{method} {url} timed out after {timeout}s")
        raise FetchTimeoutError(url, timeout) from e


async def _send(
    session: aiohttp.ClientSession,
    url: str,
    method: str,
    headers: Optional[Dict[str, str]],
    client_timeout: aiohttp.ClientTimeout,
) -> FetchResponse:
    async with session.request(
        method,
        url,
        headers=headers,
        allow_redirects=True,
        timeout=client_timeout,
    ) as response:
        body = "" if method == "HEAD" else await response.text(errors="replace")
        return FetchResponse(
            url=url,
            status=response.status,
            reason=response.reason or "",
            headers={key.lower(): value for key, value in response.headers.items()},
            body=body,
            final_url=str(response.url),
        )
