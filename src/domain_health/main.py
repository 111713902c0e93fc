"""
CLI entry point for the domain health probe engine.

Provides command-line interface for checking domain reachability and
registration health, with manifest files, JSON/CSV export and logging
configuration.
"""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import click

from . import __version__
from .checkers.bootstrap import BootstrapRegistry
from .config import (
    DomainConfig,
    ManifestConfig,
    ProbeSettings,
    get_default_manifest_path,
    load_manifest,
    validate_domain,
)
from .console.output import ConsoleManager
from .errors import InvalidDomainError
from .executor import DomainHealthExecutor
from .reporter import Reporter


logger = logging.getLogger(__name__)

LOG_FILE = 'domain-health.log'


def setup_logging(log_level: str, debug_mode: bool = False, log_file: Optional[str] = LOG_FILE) -> None:
    """
    Configure logging with specified level and debug mode.

    The file handler always logs at the requested level. The console
    handler is silent unless debug mode is on.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        debug_mode: If True, also log to the console
        log_file: Path of the log file, or None to skip file logging
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler()
    if debug_mode:
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
    else:
        console_handler.setLevel(logging.CRITICAL + 1)
    root_logger.addHandler(console_handler)

    logger.info(f"Logging initialized at {log_level} level (debug_mode={debug_mode})")


def _validate_domains(ctx: click.Context, param: click.Parameter, value: Tuple[str, ...]) -> List[str]:
    """Click callback normalizing and validating -d/--domain values."""
    domains = []
    for raw in value:
        try:
            domains.append(validate_domain(raw))
        except InvalidDomainError as e:
            raise click.BadParameter(str(e), ctx=ctx, param=param)
    return domains


def resolve_manifest(file_path: Optional[str], domains: List[str]) -> Tuple[ManifestConfig, str]:
    """
    Build the manifest to run from -d/--domain values or a manifest file.

    Explicit domains take precedence over the manifest's domain list but
    keep its settings when a file is also given.

    Returns:
        Tuple of (manifest, description of its source)

    Raises:
        click.ClickException: If there is nothing to check
    """
    if file_path is None and not domains:
        file_path = get_default_manifest_path()
        if file_path is None:
            raise click.ClickException(
                "No domains to check. Please either:\n"
                "  1. Pass one or more domains with -d/--domain, or\n"
                "  2. Create a 'domains.yaml' or 'domains.json' file in the current directory, or\n"
                "  3. Specify a manifest file using the -f/--file option\n\n"
                "Example: domain-health check -d example.com"
            )

    if file_path is not None:
        manifest = load_manifest(file_path)
        if domains:
            manifest.domains = [DomainConfig(name=domain) for domain in domains]
        return manifest, file_path

    return ManifestConfig(domains=[DomainConfig(name=domain) for domain in domains]), "command line"


@click.group()
def cli() -> None:
    """
    Domain health probe engine.

    Checks whether domains answer over HTTPS/HTTP and whether their
    RDAP registration data shows impending expiration.
    """
    pass


@cli.command(name='check')
@click.option(
    '-d', '--domain', 'domains',
    multiple=True,
    callback=_validate_domains,
    help='Domain to check (repeatable)'
)
@click.option(
    '-f', '--file',
    type=click.Path(exists=True),
    help='Path to manifest file (YAML/JSON)'
)
@click.option(
    '-o', '--output',
    type=click.Path(),
    help='Output file path (.json or .csv)'
)
@click.option(
    '--json', 'as_json',
    is_flag=True,
    default=False,
    help='Print results as JSON instead of a table'
)
@click.option(
    '--view',
    type=click.Choice(['table', 'detailed'], case_sensitive=False),
    default='table',
    help='Display view mode (default: table)'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='INFO',
    help='Logging level (default: INFO)'
)
@click.option(
    '--debug',
    is_flag=True,
    default=False,
    help='Enable debug mode with verbose console output'
)
def check_command(
    domains: List[str],
    file: Optional[str],
    output: Optional[str],
    as_json: bool,
    view: str,
    log_level: str,
    debug: bool
) -> None:
    """
    Check domain health and display results.

    Examples:

        # Check a single domain
        domain-health check -d example.com

        # Check several domains and print JSON
        domain-health check -d example.com -d example.org --json

        # Use a manifest file and export a report
        domain-health check -f domains.yaml -o report.json
    """
    setup_logging(log_level, debug_mode=debug)
    console_manager = ConsoleManager(debug_mode=debug)

    try:
        manifest, source = resolve_manifest(file, domains)
        if not manifest.domains:
            raise click.ClickException(f"No domains defined in {source}")

        logger.info(f"Checking {len(manifest.domains)} domain(s) from {source}")
        if not as_json:
            console_manager.print_banner(__version__, source, len(manifest.domains), manifest.settings)

        executor = DomainHealthExecutor(manifest.settings)
        batch = asyncio.run(executor.check_many(d.name for d in manifest.domains))

        reporter = Reporter(
            batch,
            console_manager=console_manager,
            tags={d.name: d.tags for d in manifest.domains},
        )

        if as_json:
            click.echo(reporter.to_json())
        else:
            if view == 'detailed':
                reporter.display_detailed()
            else:
                reporter.display_table()
            console_manager.print_info(
                f"Checked {len(batch.results) + len(batch.errors)} domain(s) in {batch.execution_time:.2f}s"
            )

        if output:
            suffix = Path(output).suffix.lower()
            if suffix == '.json':
                reporter.export_json(output)
            elif suffix == '.csv':
                reporter.export_csv(output)
            else:
                raise click.ClickException(
                    f"Unsupported output format: {suffix}. "
                    "Please use .json or .csv extension."
                )

        if batch.errors:
            sys.exit(1)

        logger.info("Health check completed successfully")

    except click.ClickException:
        raise

    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {str(e)}", exc_info=True)
        raise click.ClickException(str(e))

    except Exception as e:
        error_msg = str(e) if str(e) else f"{type(e).__name__} occurred"
        logger.error(f"Unexpected error: {error_msg}", exc_info=True)
        console_manager.print_error(
            error_msg,
            details={'error_type': type(e).__name__, 'log_file': LOG_FILE},
            exception=e
        )
        sys.exit(1)


@cli.command(name='bootstrap')
@click.argument('tlds', nargs=-1, required=True)
@click.option(
    '--url',
    type=str,
    default=None,
    help='Bootstrap document URL (default: IANA)'
)
def bootstrap_command(tlds: Tuple[str, ...], url: Optional[str]) -> None:
    """
    Show the authoritative RDAP servers for one or more TLDs.

    Example:

        domain-health bootstrap com org dev
    """
    settings = ProbeSettings(bootstrap_url=url) if url else ProbeSettings()
    registry = BootstrapRegistry(settings)

    async def lookup() -> dict:
        if not await registry.refresh():
            raise click.ClickException(f"Failed to fetch RDAP bootstrap data from {settings.bootstrap_url}")
        return {tld.lower().lstrip('.'): await registry.servers_for(tld.lstrip('.')) for tld in tlds}

    click.echo(json.dumps(asyncio.run(lookup()), indent=2))


def main() -> None:
    """Entry point for CLI."""
    cli()


if __name__ == '__main__':
    main()
