"""Configuration management for domain health checks."""

import json
import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import yaml

from domain_health.errors import InvalidDomainError


DEFAULT_USER_AGENT = "domain-health/0.1 (+https://github.com/domain-health)"

# Hostname shape accepted by the outer surfaces
DOMAIN_PATTERN = re.compile(r'^[a-zA-Z0-9][a-zA-Z0-9-]{0,61}[a-zA-Z0-9]?(\.[a-zA-Z]{2,})+$')


@dataclass
class ProbeSettings:
    """Tunable parameters for the probe engine."""

    http_timeout: float = 7.0
    rdap_timeout: float = 7.0
    bootstrap_timeout: float = 5.0
    rdap_max_retries: int = 2
    retry_base_delay: float = 1.0
    rdap_aggregator_url: str = "https://rdap.org"
    bootstrap_url: str = "https://data.iana.org/rdap/dns.json"
    bootstrap_ttl: float = 12 * 60 * 60
    expiry_warning_days: int = 30
    max_concurrent_domains: int = 10
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self):
        """Validate settings after initialization."""
        for name in ('http_timeout', 'rdap_timeout', 'bootstrap_timeout', 'bootstrap_ttl'):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or value <= 0:
                raise ValueError(f"'{name}' must be a positive number, got {value!r}")

        if not isinstance(self.rdap_max_retries, int) or self.rdap_max_retries < 0:
            raise ValueError(f"'rdap_max_retries' must be a non-negative integer, got {self.rdap_max_retries!r}")

        if not isinstance(self.retry_base_delay, (int, float)) or self.retry_base_delay < 0:
            raise ValueError(f"'retry_base_delay' must be a non-negative number, got {self.retry_base_delay!r}")

        if not isinstance(self.expiry_warning_days, int) or self.expiry_warning_days < 0:
            raise ValueError(f"'expiry_warning_days' must be a non-negative integer, got {self.expiry_warning_days!r}")

        if not isinstance(self.max_concurrent_domains, int) or self.max_concurrent_domains < 1:
            raise ValueError(f"'max_concurrent_domains' must be a positive integer, got {self.max_concurrent_domains!r}")

        for name in ('rdap_aggregator_url', 'bootstrap_url'):
            _validate_url(name, getattr(self, name))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProbeSettings':
        """
        Build settings from a mapping, rejecting unknown keys.

        Args:
            data: Mapping of setting names to values

        Returns:
            ProbeSettings with defaults for missing keys

        Raises:
            ValueError: If a key is unknown or a value is invalid
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(
                f"Unknown setting(s): {', '.join(unknown)}. "
                f"Valid settings are: {', '.join(sorted(known))}"
            )
        return cls(**data)


def _validate_url(name: str, url: str) -> None:
    if not isinstance(url, str) or not url:
        raise ValueError(f"'{name}' cannot be empty")

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise ValueError(f"'{name}' scheme must be http or https, got: {parsed.scheme or 'none'}")
    if not parsed.netloc:
        raise ValueError(f"'{name}' must include a host: {url}")


@dataclass
class DomainConfig:
    """Configuration for a single domain to check."""

    name: str
    tags: List[str] = field(default_factory=list)


@dataclass
class ManifestConfig:
    """Complete manifest configuration."""

    domains: List[DomainConfig]
    settings: ProbeSettings = field(default_factory=ProbeSettings)


def normalize_domain(domain: str) -> str:
    """Trim whitespace and lowercase a domain name."""
    return domain.strip().lower()


def is_valid_domain(domain: str) -> bool:
    """Check whether a string looks like a plausible hostname."""
    return bool(DOMAIN_PATTERN.match(domain.strip()))


def validate_domain(domain: Optional[str]) -> str:
    """
    Normalize and validate a domain name.

    Args:
        domain: Raw domain name from user input

    Returns:
        The normalized domain name

    Raises:
        InvalidDomainError: If the domain is empty or malformed
    """
    normalized = normalize_domain(domain or "")
    if not normalized or not is_valid_domain(normalized):
        raise InvalidDomainError(domain or "")
    return normalized


def get_default_manifest_path() -> Optional[str]:
    """
    Find default manifest file in current directory.

    Looks for domains.yaml first, then domains.json.

    Returns:
        Path to manifest file if found, None otherwise.
    """
    yaml_path = Path('domains.yaml')
    if yaml_path.exists():
        return str(yaml_path)

    json_path = Path('domains.json')
    if json_path.exists():
        return str(json_path)

    return None


def load_manifest(file_path: str) -> ManifestConfig:
    """
    Load and parse manifest file (YAML or JSON).

    Expected YAML format:
        settings:            # Optional, see ProbeSettings
          http_timeout: 7
          rdap_max_retries: 2
        domains:
          - example.com
          - name: example.org
            tags: [prod]

    Args:
        file_path: Path to manifest file

    Returns:
        Parsed ManifestConfig object

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If file format is invalid or parsing fails
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"Manifest file not found: {file_path}")

    try:
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()

        if path.suffix in ['.yaml', '.yml']:
            data = yaml.safe_load(content)
        elif path.suffix == '.json':
            data = json.loads(content)
        else:
            raise ValueError(f"Unsupported file format: {path.suffix}. Use .yaml, .yml, or .json")

        if data is None:
            raise ValueError("Manifest file is empty")

        if not isinstance(data, dict):
            raise ValueError("Manifest must be an object/dictionary")

        settings_data = data.get('settings', {}) or {}
        if not isinstance(settings_data, dict):
            raise ValueError("'settings' must be an object/dictionary")
        settings = ProbeSettings.from_dict(settings_data)

        domains_data = data.get('domains', [])
        if not isinstance(domains_data, list):
            raise ValueError("'domains' must be a list")

        domains = [_parse_domain(entry, idx) for idx, entry in enumerate(domains_data)]

        return ManifestConfig(domains=domains, settings=settings)

    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax: {str(e)}")
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON syntax at line {e.lineno}, column {e.colno}: {e.msg}")
    except TypeError as e:
        raise ValueError(f"Invalid setting value: {str(e)}")


def _parse_domain(entry: Any, index: int) -> DomainConfig:
    """
    Parse a single domain entry, either a bare string or an object.

    Raises:
        ValueError: If the entry is malformed or the name is invalid
    """
    if isinstance(entry, str):
        name, tags = entry, []
    elif isinstance(entry, dict):
        name = entry.get('name')
        if not name or not isinstance(name, str):
            raise ValueError(f"Domain at index {index} is missing required 'name' field")
        tags = entry.get('tags', [])
        if not isinstance(tags, list):
            raise ValueError(f"Domain '{name}': 'tags' must be a list")
    else:
        raise ValueError(f"Domain at index {index} must be a string or an object/dictionary")

    try:
        normalized = validate_domain(name)
    except InvalidDomainError:
        raise ValueError(f"Domain at index {index} is not a valid domain name: '{name}'")

    return DomainConfig(name=normalized, tags=[str(tag) for tag in tags])
