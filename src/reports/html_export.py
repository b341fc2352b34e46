"""
HTML export of decoded entries.

Renders ``templates/otp_report.html`` with Jinja2: one block per entry with
its fields and a QR code of the otpauth URI, embedded as a data URI so the
document is self-contained.

Usage:
    from reports.html_export import ReportBuilder

    html = ReportBuilder().render_html(entries)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from jinja2 import Environment, FileSystemLoader, TemplateError

from core.logging import get_logger
from core.timestamps import format_display, utc_now
from extractors.exceptions import ReportError
from extractors.lockdown import Entry

from .paths import get_templates_dir
from .qr import qr_data_uri

LOGGER = get_logger("reports.html")

DEFAULT_TEMPLATE = "otp_report.html"


@dataclass
class ReportData:
    """Complete data for report generation."""

    title: str = "Lockdown TOTP secrets export"
    generation_date: str = ""
    entries: List[Dict[str, Any]] = field(default_factory=list)

    def __post_init__(self):
        if not self.generation_date:
            self.generation_date = format_display(utc_now())


def entry_context(entry: Entry) -> Dict[str, Any]:
    """Template variables for a single entry."""
    return {
        "service": entry.service,
        "login": entry.login,
        "created": format_display(entry.created),
        "modified": format_display(entry.modified),
        "url": entry.url,
        "favorite": entry.favorite,
        "archived": entry.archived,
        "qr": qr_data_uri(entry.url),
    }


class ReportBuilder:
    """Renders entries to a standalone HTML document."""

    def __init__(self, template_name: str = DEFAULT_TEMPLATE):
        self._template_name = template_name
        self._env = Environment(
            loader=FileSystemLoader(get_templates_dir()),
            autoescape=True,
        )

    def build_data(
        self,
        entries: Iterable[Entry],
        generated_at: Optional[datetime] = None,
    ) -> ReportData:
        data = ReportData(entries=[entry_context(entry) for entry in entries])
        if generated_at is not None:
            data.generation_date = format_display(generated_at)
        return data

    def render_html(
        self,
        entries: Iterable[Entry],
        generated_at: Optional[datetime] = None,
    ) -> str:
        """
        Render the report.

        Args:
            entries: Decoded entries, in output order
            generated_at: Timestamp shown in the header (default: now)

        Returns:
            The HTML document

        Raises:
            ReportError: If the template fails or a QR code cannot be built
        """
        data = self.build_data(entries, generated_at)
        try:
            template = self._env.get_template(self._template_name)
            html = template.render(
                title=data.title,
                generation_date=data.generation_date,
                entries=data.entries,
            )
        except TemplateError as exc:
            raise ReportError(f"Error rendering HTML: {exc}") from exc

        LOGGER.debug("Rendered HTML report with %d entries", len(data.entries))
        return html
