"""Data models for domain health results."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Optional


class HealthStatus(str, Enum):
    """
    Health classification shared by every result type.

    Severity ordering used for combination: error > warning > healthy.
    """
    HEALTHY = "healthy"
    WARNING = "warning"
    ERROR = "error"

    @property
    def severity(self) -> int:
        """Numeric severity, higher is worse."""
        return _SEVERITY[self]


_SEVERITY = {
    HealthStatus.HEALTHY: 0,
    HealthStatus.WARNING: 1,
    HealthStatus.ERROR: 2,
}


def combine_status(statuses: Iterable[HealthStatus]) -> HealthStatus:
    """
    Combine several statuses into the most severe one.

    Args:
        statuses: Statuses to combine (may be empty)

    Returns:
        ERROR if any status is ERROR, else WARNING if any is WARNING,
        else HEALTHY (including for empty input)
    """
    return max(statuses, key=lambda status: status.severity, default=HealthStatus.HEALTHY)


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    """Drop unset optional fields so they are absent from the JSON object."""
    return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class ReachabilityResult:
    """Outcome of probing a domain's web endpoint."""
    status: HealthStatus
    reachable: bool
    url_tried: str
    status_code: Optional[int] = None
    latency_ms: Optional[int] = None
    error: Optional[str] = None
    final_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase JSON shape."""
        return _compact({
            "status": self.status.value,
            "reachable": self.reachable,
            "statusCode": self.status_code,
            "urlTried": self.url_tried,
            "finalUrl": self.final_url,
            "latencyMs": self.latency_ms,
            "error": self.error,
        })


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of resolving and normalizing a domain's registration data."""
    status: HealthStatus
    registrar: Optional[str] = None
    expiration_date: Optional[str] = None  # ISO-8601, UTC
    created_date: Optional[str] = None
    updated_date: Optional[str] = None
    days_to_expire: Optional[int] = None
    message: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the camelCase JSON shape."""
        return _compact({
            "status": self.status.value,
            "registrar": self.registrar,
            "expirationDate": self.expiration_date,
            "createdDate": self.created_date,
            "updatedDate": self.updated_date,
            "daysToExpire": self.days_to_expire,
            "message": self.message,
            "error": self.error,
        })


@dataclass(frozen=True)
class DomainHealthResult:
    """
    Aggregated health snapshot for a single domain.

    Attributes:
        domain: The domain name that was checked
        status: Most severe of the HTTP and WHOIS statuses
        checked_at: ISO-8601 timestamp stamped when both checks completed
        http: Reachability probe result
        whois: Registration data result
    """
    domain: str
    status: HealthStatus
    checked_at: str
    http: ReachabilityResult
    whois: RegistrationResult

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON object handed to callers."""
        return {
            "domain": self.domain,
            "status": self.status.value,
            "checkedAt": self.checked_at,
            "http": self.http.to_dict(),
            "whois": self.whois.to_dict(),
        }
