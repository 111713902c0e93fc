"""
WHOIS data normalizer.

Decodes RDAP domain responses through a tolerant partial schema and turns
them into RegistrationResult objects: expiration, registration and update
dates, registrar name, days to expiration and a health status.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Sequence, Tuple

from .models import HealthStatus, RegistrationResult
from .transport import FetchResponse

logger = logging.getLogger(__name__)

EXPIRATION_ALIASES = ("expiration", "expiry")
REGISTRATION_ALIASES = ("registration", "registered")
UPDATE_ALIASES = ("last changed", "last update", "last updated", "updated")

DEFAULT_EXPIRY_WARNING_DAYS = 30

# Non-ISO formats seen from real RDAP servers
_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d",
    "%d-%b-%Y",
    "%Y.%m.%d",
    "%Y/%m/%d",
)


# ============================================================================
# Partial schema
# ============================================================================

def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


@dataclass(frozen=True)
class RdapEvent:
    action: str
    date: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> Optional['RdapEvent']:
        if not isinstance(data, dict):
            return None
        action = _as_str(data.get("eventAction"))
        if action is None:
            return None
        return cls(action=action, date=_as_str(data.get("eventDate")))


@dataclass(frozen=True)
class RdapEntity:
    roles: Tuple[str, ...] = ()
    vcard: Tuple[Any, ...] = ()

    @classmethod
    def from_json(cls, data: Any) -> Optional['RdapEntity']:
        if not isinstance(data, dict):
            return None
        roles = tuple(role for role in _as_list(data.get("roles")) if isinstance(role, str))
        vcard_array = _as_list(data.get("vcardArray"))
        properties = _as_list(vcard_array[1]) if len(vcard_array) > 1 else []
        return cls(roles=roles, vcard=tuple(properties))

    def has_role(self, role: str) -> bool:
        return any(r.lower() == role for r in self.roles)

    @property
    def formatted_name(self) -> Optional[str]:
        """Value of the vCard "fn" property, if it is a string."""
        for entry in self.vcard:
            if isinstance(entry, list) and len(entry) >= 4 and entry[0] == "fn":
                if isinstance(entry[3], str):
                    return entry[3]
        return None


@dataclass(frozen=True)
class RdapDomain:
    """
    The subset of an RDAP domain object the normalizer relies on.

    Missing or mistyped fields decode to empty values; unknown fields
    are ignored.
    """
    events: Tuple[RdapEvent, ...] = ()
    entities: Tuple[RdapEntity, ...] = ()
    registrar: Optional[str] = None
    registrar_name: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> 'RdapDomain':
        if not isinstance(data, dict):
            return cls()
        events = (RdapEvent.from_json(item) for item in _as_list(data.get("events")))
        entities = (RdapEntity.from_json(item) for item in _as_list(data.get("entities")))
        return cls(
            events=tuple(e for e in events if e is not None),
            entities=tuple(e for e in entities if e is not None),
            registrar=_as_str(data.get("registrar")),
            registrar_name=_as_str(data.get("registrarName")),
        )

    def event_date(self, aliases: Sequence[str]) -> Optional[str]:
        """Date of the first event whose action contains any alias."""
        lowered = [alias.lower() for alias in aliases]
        for event in self.events:
            action = event.action.lower()
            if any(alias in action for alias in lowered):
                return event.date
        return None

    def registrar_display_name(self) -> Optional[str]:
        """
        Registrar name from the registrar entity's vCard, falling back
        to top-level registrar fields.
        """
        entity = next((e for e in self.entities if e.has_role("registrar")), None)
        if entity is not None and entity.formatted_name:
            return entity.formatted_name
        return self.registrar or self.registrar_name


# ============================================================================
# Dates
# ============================================================================

def parse_whois_date(raw: Optional[str]) -> Optional[datetime]:
    """
    Parse an RDAP event date tolerantly.

    Accepts ISO-8601 with or without "Z", offsets and fractional seconds,
    plus a handful of non-ISO layouts. Naive values are taken as UTC.

    Args:
        raw: Date string as emitted by the server

    Returns:
        Timezone-aware UTC datetime, or None if unparsable
    """
    if not raw or not isinstance(raw, str):
        return None

    value = raw.strip()
    if not value:
        return None

    if value.upper().endswith(" UTC"):
        value = value[:-4].strip() + "Z"
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"

    parsed = _parse_iso(value)
    if parsed is None:
        for fmt in _DATE_FORMATS:
            try:
                parsed = datetime.strptime(value, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)

    # Offsets on placeholder dates like 0001-01-01 can push UTC out of range
    try:
        return parsed.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        return None


def _parse_iso(value: str) -> Optional[datetime]:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass

    # Older interpreters reject fractional seconds that are not 3 or 6 digits
    head, sep, tail = value.partition(".")
    if not sep:
        return None
    digits = ""
    while tail and tail[0].isdigit():
        digits, tail = digits + tail[0], tail[1:]
    if not digits:
        return None
    try:
        return datetime.fromisoformat(f"{head}.{digits[:6].ljust(6, '0')}{tail}")
    except ValueError:
        return None


def isoformat_utc(value: datetime) -> str:
    """Format as ISO-8601 UTC with milliseconds, e.g. 2025-01-01T00:00:00.000Z."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def days_to_expiration(expiration: Optional[datetime], now: Optional[datetime] = None) -> Optional[int]:
    """
    Calendar days (UTC) from now until expiration, negative if past.

    Args:
        expiration: Expiration datetime, or None
        now: Reference time, defaults to the current time

    Returns:
        Signed number of days, or None if there is no expiration
    """
    if expiration is None:
        return None
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return (expiration.astimezone(timezone.utc).date() - now.astimezone(timezone.utc).date()).days


# ============================================================================
# Normalization
# ============================================================================

def normalize(
    response: FetchResponse,
    now: Optional[datetime] = None,
    expiry_warning_days: int = DEFAULT_EXPIRY_WARNING_DAYS,
) -> RegistrationResult:
    """
    Turn an RDAP response into a RegistrationResult.

    Never raises: unavailable or malformed upstream data degrades to a
    WARNING result.

    Args:
        response: Response returned by the RDAP resolver
        now: Reference time for days-to-expiration
        expiry_warning_days: Expirations this close or closer are WARNING

    Returns:
        RegistrationResult with dates, registrar and derived status
    """
    if not response.ok:
        reason = response.reason or "Unknown error"
        return RegistrationResult(
            status=HealthStatus.WARNING,
            message=f"WHOIS service unavailable ({response.status} {reason})",
            error=reason,
        )

    try:
        data = json.loads(response.body) if response.body.strip() else None
    except ValueError:
        data = None

    if not isinstance(data, dict):
        logger.warning(f"RDAP response from {response.url} was not a JSON object")
        return RegistrationResult(
            status=HealthStatus.WARNING,
            message="WHOIS data could not be parsed",
            error="WHOIS response was not JSON",
        )

    record = RdapDomain.from_json(data)

    expiration = _event_datetime(record, EXPIRATION_ALIASES, "expiration", response.url)
    created = _event_datetime(record, REGISTRATION_ALIASES, "registration", response.url)
    updated = _event_datetime(record, UPDATE_ALIASES, "last update", response.url)

    days = days_to_expiration(expiration, now)
    status, message = _derive_status(days, expiry_warning_days)

    return RegistrationResult(
        status=status,
        registrar=record.registrar_display_name(),
        expiration_date=isoformat_utc(expiration) if expiration else None,
        created_date=isoformat_utc(created) if created else None,
        updated_date=isoformat_utc(updated) if updated else None,
        days_to_expire=days,
        message=message,
    )


def _event_datetime(record: RdapDomain, aliases: Sequence[str], label: str, source: str) -> Optional[datetime]:
    raw = record.event_date(aliases)
    parsed = parse_whois_date(raw)
    if raw and parsed is None:
        logger.warning(f"Discarding unparsable {label} date {raw!r} from {source}")
    return parsed


def _derive_status(days: Optional[int], warning_days: int) -> Tuple[HealthStatus, Optional[str]]:
    if days is None:
        return HealthStatus.WARNING, "Expiration date unavailable"
    if days < 0:
        return HealthStatus.ERROR, "Domain appears expired"
    if days <= warning_days:
        return HealthStatus.WARNING, f"Expires in {days} day{'' if days == 1 else 's'}"
    return HealthStatus.HEALTHY, None
