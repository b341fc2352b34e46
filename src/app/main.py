from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from core.app_version import get_app_version
from core.config import OUTPUT_FORMATS, AppConfig, load_app_config
from core.logging import configure_logging, get_logger
from extractors.exceptions import ConfigurationError, ExportError
from extractors.lockdown import Entry, extract_entries
from reports.html_export import ReportBuilder
from reports.json_export import entries_to_json

LOGGER = get_logger("app")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lockdown-export",
        description="Export TOTP secrets from the Lockdown app as JSON or HTML.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        type=Path,
        help="Lockdown group preferences plist (default: the app's container path)",
    )
    parser.add_argument(
        "-a", "--include-archived",
        action="store_true",
        default=None,
        help="Also include archived secrets",
    )
    format_group = parser.add_mutually_exclusive_group()
    format_group.add_argument(
        "--html",
        dest="output_format",
        action="store_const",
        const="html",
        help="Export in HTML format",
    )
    format_group.add_argument(
        "--format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        help="Export format (default: json)",
    )
    parser.add_argument(
        "-o", "--output",
        type=Path,
        help="Write the export to this file instead of stdout",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML configuration file (default: config/config.yml)",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    parser.add_argument(
        "-V", "--version",
        action="version",
        version=f"lockdown-export {get_app_version()}",
    )
    return parser


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Command-line flags win over the config file."""
    if args.path is not None:
        config.container_path = args.path
    if args.include_archived is not None:
        config.include_archived = args.include_archived
    if args.output_format is not None:
        config.output_format = args.output_format
    if args.log_level:
        config.logging.level = args.log_level
    return config


def setup_logging(config: AppConfig) -> None:
    try:
        configure_logging(
            config.logging.level_value,
            log_dir=config.logging.log_dir,
            max_bytes=config.logging.max_mb * 1024 * 1024,
            backup_count=config.logging.backup_count,
        )
    except OSError as exc:
        raise ConfigurationError(f"Could not set up log file in {config.logging.log_dir}: {exc}") from exc


def render(entries: List[Entry], output_format: str) -> str:
    if output_format == "html":
        return ReportBuilder().render_html(entries)
    return entries_to_json(entries) + "\n"


def write_output(text: str, output: Optional[Path]) -> None:
    if output is None:
        sys.stdout.write(text)
        sys.stdout.flush()
        return
    output.write_text(text, encoding="utf-8")
    LOGGER.info("Wrote %s", output)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(logging.WARNING)

    try:
        config = apply_overrides(load_app_config(args.config), args)
        setup_logging(config)
        entries = extract_entries(
            config.resolved_container_path(),
            include_archived=config.include_archived,
        )
        text = render(entries, config.output_format)
    except ExportError as exc:
        LOGGER.error("%s", exc)
        return 1

    try:
        write_output(text, args.output)
    except OSError as exc:
        LOGGER.error("Error writing %s: %s", config.output_format.upper(), exc)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
