"""
Reporter layer for domain health results.

Formats health results as Rich tables and trees, and exports them to
JSON and CSV.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from .console.output import ConsoleManager
from .console.themes import ICONS, STATUS_COLORS, STATUS_LABELS
from .executor import BatchResult
from .models import DomainHealthResult, HealthStatus


logger = logging.getLogger(__name__)


class Reporter:
    """
    Reporter for formatting and outputting domain health results.
    """

    def __init__(
        self,
        batch: BatchResult,
        console_manager: Optional[ConsoleManager] = None,
        tags: Optional[Dict[str, List[str]]] = None,
    ):
        """
        Args:
            batch: Results produced by DomainHealthExecutor.check_many()
            console_manager: ConsoleManager for Rich output
            tags: Manifest tags by domain name
        """
        self.batch = batch
        self.tags = tags or {}
        self.console_manager = console_manager or ConsoleManager()
        self.console = self.console_manager.console

    @property
    def results(self) -> List[DomainHealthResult]:
        return self.batch.results

    def display_table(self) -> None:
        """Display one row per domain, most severe first."""
        table = Table(
            title="[bold magenta]Domain Health[/bold magenta]",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("Domain", style="domain", no_wrap=True)
        table.add_column("Overall")
        table.add_column("HTTP")
        table.add_column("WHOIS")
        table.add_column("Registrar", style="dim")
        table.add_column("Expires")
        table.add_column("Latency", justify="right", style="metric")

        for result in self._sorted_results():
            table.add_row(
                result.domain,
                self._status_text(result.status),
                self._http_cell(result),
                self._status_text(result.whois.status, result.whois.message),
                result.whois.registrar or "Unavailable",
                self._expiry_label(result),
                f"{result.http.latency_ms} ms" if result.http.latency_ms is not None else "-",
            )

        self.console.print()
        self.console.print(table)
        self._display_errors()

    def display_detailed(self) -> None:
        """Display a tree of HTTP and WHOIS details per domain."""
        self.console.print()
        for result in self._sorted_results():
            tree = Tree(self._status_text(result.status, result.domain))
            tree.add(Text.assemble("checked at ", (result.checked_at, "timestamp")))
            if self.tags.get(result.domain):
                tree.add(f"Tags: {', '.join(self.tags[result.domain])}")

            http = tree.add(Text.assemble("HTTP: ", self._http_cell(result)))
            http.add(f"URL tried: {result.http.url_tried}")
            if result.http.final_url and result.http.final_url.rstrip('/') != result.http.url_tried:
                http.add(f"Redirected to: {result.http.final_url}")
            if result.http.latency_ms is not None:
                http.add(f"{ICONS['time']} {result.http.latency_ms} ms")
            if result.http.error:
                http.add(Text(result.http.error, style="error"))

            whois = tree.add(Text.assemble("WHOIS: ", self._status_text(result.whois.status, result.whois.message)))
            whois.add(f"Registrar: {result.whois.registrar or 'Unavailable'}")
            whois.add(f"Expiration date: {self._expiry_label(result)}")
            if result.whois.created_date:
                whois.add(f"Registered: {result.whois.created_date}")
            if result.whois.updated_date:
                whois.add(f"Updated: {result.whois.updated_date}")
            if result.whois.error and result.whois.error != result.whois.message:
                whois.add(Text(result.whois.error, style="error"))

            self.console.print(tree)
            self.console.print()

        self._display_errors()

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable form of the whole batch."""
        data: Dict[str, Any] = {"results": [result.to_dict() for result in self.results]}
        if self.batch.errors:
            data["errors"] = [{"domain": domain, "error": message} for domain, message in self.batch.errors.items()]
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def export_json(self, file_path: str) -> None:
        """
        Export results to a JSON file.

        Args:
            file_path: Path where JSON file should be created

        Raises:
            OSError: If the file cannot be written
        """
        try:
            output_path = Path(file_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(self.to_json())
        except OSError as e:
            error_msg = f"Failed to export JSON: {str(e)}"
            logger.error(error_msg, exc_info=True)
            self.console_manager.print_error(error_msg, details={'file_path': file_path})
            raise

        logger.info(f"Results exported to JSON: {file_path}")
        self.console_manager.print_success(f"Results exported to: {file_path}")

    def export_csv(self, file_path: str) -> None:
        """
        Export results to a CSV file, one row per domain.

        Raises:
            OSError: If the file cannot be written
        """
        rows = self._results_to_csv_rows()
        if not rows:
            logger.warning("No results to export")
            self.console_manager.print_warning("No results to export")
            return

        try:
            output_path = Path(file_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, 'w', newline='', encoding='utf-8') as f:
                writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
                writer.writeheader()
                writer.writerows(rows)
        except OSError as e:
            error_msg = f"Failed to export CSV: {str(e)}"
            logger.error(error_msg, exc_info=True)
            self.console_manager.print_error(error_msg, details={'file_path': file_path})
            raise

        logger.info(f"Results exported to CSV: {file_path}")
        self.console_manager.print_success(f"Results exported to: {file_path}")

    def _results_to_csv_rows(self) -> List[Dict[str, Any]]:
        rows = []
        for result in self.results:
            rows.append({
                "domain": result.domain,
                "status": result.status.value,
                "checked_at": result.checked_at,
                "tags": ";".join(self.tags.get(result.domain, [])),
                "http_status": result.http.status.value,
                "http_reachable": result.http.reachable,
                "http_status_code": result.http.status_code if result.http.status_code is not None else "",
                "http_url": result.http.url_tried,
                "http_latency_ms": result.http.latency_ms if result.http.latency_ms is not None else "",
                "whois_status": result.whois.status.value,
                "registrar": result.whois.registrar or "",
                "expiration_date": result.whois.expiration_date or "",
                "days_to_expire": result.whois.days_to_expire if result.whois.days_to_expire is not None else "",
                "whois_message": result.whois.message or "",
            })
        return rows

    def _sorted_results(self) -> List[DomainHealthResult]:
        return sorted(self.results, key=lambda r: -r.status.severity)

    def _display_errors(self) -> None:
        for domain, message in self.batch.errors.items():
            self.console_manager.print_error(
                f"Health check failed for {domain}: {message}",
                details={'domain': domain},
            )

    @staticmethod
    def _status_text(status: HealthStatus, label: Optional[str] = None) -> Text:
        color = STATUS_COLORS[status.value]
        return Text(f"{ICONS[status.value]} {label or STATUS_LABELS[status.value]}", style=color)

    def _http_cell(self, result: DomainHealthResult) -> Text:
        http = result.http
        if not http.reachable:
            return self._status_text(http.status, "Unreachable")
        return self._status_text(http.status, f"HTTP {http.status_code}")

    @staticmethod
    def _expiry_label(result: DomainHealthResult) -> str:
        whois = result.whois
        if not whois.expiration_date:
            return "Expiry unknown"
        date_text = whois.expiration_date[:10]
        if whois.days_to_expire is None:
            return date_text
        if whois.days_to_expire < 0:
            return f"{date_text} (expired)"
        return f"{date_text} ({whois.days_to_expire} days)"
