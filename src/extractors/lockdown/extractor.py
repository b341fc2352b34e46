"""
Lockdown export pipeline.

Two decode stages, kept separate so each can be driven on its own:

1. ``read_container`` turns the preferences file into the nested archive blob
2. ``decode_archive_blob`` turns that blob into ``Entry`` records

All records are decoded before anything is returned, so a failure on any
item leaves the caller with no output at all.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Union

from core.logging import get_logger

from ._nska import load_archive
from ._parsers import Entry, decode_entries
from .container import read_container

LOGGER = get_logger("extractors.lockdown")


def decode_archive_blob(blob: bytes, include_archived: bool = False) -> List[Entry]:
    """Decode nested keyed-archive bytes into entries."""
    archive = load_archive(blob)
    return decode_entries(archive, include_archived=include_archived)


def extract_entries(path: Union[str, Path], include_archived: bool = False) -> List[Entry]:
    """
    Read a Lockdown container file and decode its items.

    Args:
        path: Path to the group preferences plist
        include_archived: Also return archived items

    Returns:
        Entries in archive order

    Raises:
        ExportError: On any read, format or graph problem
    """
    LOGGER.info("Reading Lockdown container %s", path)
    blob = read_container(path)
    entries = decode_archive_blob(blob, include_archived=include_archived)
    LOGGER.info("Extracted %d entries", len(entries))
    return entries
