"""Central console output manager for Rich-formatted output.

Coordinates all Rich console output for the CLI so errors, notices and
debug information share one look.
"""

import traceback
from typing import Any, Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.text import Text

from ..config import ProbeSettings
from .themes import ICONS, get_theme


class ConsoleManager:
    """Central console output manager.

    Attributes:
        console: Rich Console instance
        debug_mode: Whether debug mode is enabled
    """

    def __init__(self, debug_mode: bool = False, console: Optional[Console] = None):
        """Initialize the ConsoleManager.

        Args:
            debug_mode: If True, display info messages and tracebacks
            console: Optional Console to write to (defaults to stdout)
        """
        self.debug_mode = debug_mode
        self.console = console or Console(theme=get_theme())

    def print_banner(self, version: str, source: str, domain_count: int, settings: ProbeSettings) -> None:
        """Display the run header: where domains came from and key probe settings."""
        banner_text = Text()
        banner_text.append("Domain Health Probe\n", style="bold cyan")
        banner_text.append(f"Version: {version}\n\n", style="dim")

        banner_text.append(f"{ICONS['domain']} Source: ", style="info")
        banner_text.append(f"{source}\n", style="white")

        banner_text.append(f"{ICONS['healthy']} Domains: ", style="info")
        banner_text.append(f"{domain_count}\n", style="white")

        banner_text.append(f"{ICONS['info']} RDAP: ", style="info")
        banner_text.append(f"{settings.rdap_aggregator_url} (retries: {settings.rdap_max_retries})\n", style="white")

        banner_text.append(f"{ICONS['time']} Expiry warning: ", style="info")
        banner_text.append(f"{settings.expiry_warning_days} days", style="white")

        if self.debug_mode:
            banner_text.append("\n\n", style="white")
            banner_text.append(f"{ICONS['warning']} Debug Mode: ", style="warning")
            banner_text.append("ENABLED", style="bold yellow")

        self.console.print(Panel(banner_text, border_style="cyan", padding=(1, 2)))

    def print_error(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None,
    ) -> None:
        """Display error message in a Rich Panel.

        In debug mode the exception's stack trace is shown as well.

        Args:
            message: Error message to display
            details: Optional dictionary with additional context
            exception: Optional exception for the traceback
        """
        error_text = Text()
        error_text.append(f"{ICONS['error']} ", style="error")
        error_text.append(message, style="error")

        if details:
            error_text.append("\n\n", style="white")
            error_text.append("Context:\n", style="bold dim")
            for key, value in details.items():
                error_text.append(f"  {key.replace('_', ' ').title()}: ", style="dim")
                error_text.append(f"{value}\n", style="white")

        suggestion = self._get_error_suggestion(message)
        if suggestion:
            error_text.append("\n", style="white")
            error_text.append(f"{ICONS['info']} Suggestion: ", style="info")
            error_text.append(suggestion, style="cyan")

        self.console.print(Panel(
            error_text,
            title="[bold red]Error[/bold red]",
            border_style="red",
            padding=(1, 2)
        ))

        if self.debug_mode and exception is not None:
            self._print_traceback(exception)

    def _get_error_suggestion(self, message: str) -> Optional[str]:
        """Get an actionable suggestion for common errors."""
        message_lower = message.lower()

        if 'file not found' in message_lower or 'no such file' in message_lower:
            return "Check that the file path is correct and the file exists."

        if 'timeout' in message_lower or 'timed out' in message_lower:
            return "Check your network connection and firewall settings."

        if 'valid domain' in message_lower:
            return "Use a bare domain name such as example.com, without http:// or a path."

        if 'rate limit' in message_lower or 'too many requests' in message_lower:
            return "The RDAP service is rate limiting requests. Wait a few minutes before trying again."

        return None

    def _print_traceback(self, exception: BaseException) -> None:
        """Print exception traceback with syntax highlighting."""
        tb_text = ''.join(traceback.format_exception(
            type(exception),
            exception,
            exception.__traceback__
        ))

        self.console.print()
        self.console.print(Panel(
            Syntax(tb_text, "python", theme="monokai", line_numbers=True, word_wrap=True),
            title="[bold red]Stack Trace[/bold red]",
            border_style="red",
            padding=(1, 2)
        ))

    def print_success(self, message: str) -> None:
        """Display success message."""
        self.console.print(f"{ICONS['healthy']} {message}", style="success")

    def print_warning(self, message: str) -> None:
        """Display warning message."""
        self.console.print(f"{ICONS['warning']} {message}", style="warning")

    def print_info(self, message: str) -> None:
        """Display info message (only in debug mode)."""
        if self.debug_mode:
            self.console.print(f"{ICONS['info']} {message}", style="info")
