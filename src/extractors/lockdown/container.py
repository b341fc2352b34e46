"""
Lockdown preferences container reader.

The app keeps its items in a group preferences plist. The items themselves are
not plain plist values: the ``kLDExtensionItemsKey`` entry holds a data blob
that is a second, NSKeyedArchiver-encoded plist. This module only handles the
outer file and hands back that blob.
"""

from __future__ import annotations

import plistlib
from pathlib import Path
from typing import Any, Dict, Union

from core.logging import get_logger
from extractors.exceptions import (
    ContainerReadError,
    FieldTypeError,
    MissingFieldError,
    PlistFormatError,
)

from ._nska import PLIST_DECODE_ERRORS

LOGGER = get_logger("extractors.lockdown.container")

ITEMS_KEY = "kLDExtensionItemsKey"

DEFAULT_CONTAINER_PATH = Path(
    "~/Library/Containers/com.corybohon.Lockdown-Mac/Data/Library/Preferences/"
    "group.corybohon.Lockdown.plist"
)


def default_container_path() -> Path:
    """Return the container path in the current user's home directory."""
    return DEFAULT_CONTAINER_PATH.expanduser()


def parse_container(data: bytes) -> Dict[str, Any]:
    """
    Decode the outer container plist.

    Raises:
        PlistFormatError: If ``data`` is not a plist dictionary
    """
    try:
        container = plistlib.loads(data)
    except PLIST_DECODE_ERRORS as exc:
        raise PlistFormatError(f"Could not decode plist: {exc}") from exc

    if not isinstance(container, dict):
        raise PlistFormatError(
            f"Container plist must be a dictionary, got {type(container).__name__}"
        )
    return container


def extract_items_blob(container: Dict[str, Any]) -> bytes:
    """
    Return the nested archive bytes stored under ``kLDExtensionItemsKey``.

    Raises:
        MissingFieldError: If the key is absent
        FieldTypeError: If the value is not data
    """
    if ITEMS_KEY not in container:
        raise MissingFieldError(ITEMS_KEY)
    blob = container[ITEMS_KEY]
    if not isinstance(blob, (bytes, bytearray)):
        raise FieldTypeError(ITEMS_KEY, "data", blob)
    return bytes(blob)


def read_container(path: Union[str, Path]) -> bytes:
    """
    Read the container at ``path`` and return the nested archive blob.

    Raises:
        ContainerReadError: If the file cannot be read
        PlistFormatError: If the file is not a plist dictionary
        GraphError: If the items key is missing or not data
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ContainerReadError(f"Could not read plist {path}: {exc}") from exc

    LOGGER.debug("Read %d bytes from %s", len(data), path)
    blob = extract_items_blob(parse_container(data))
    LOGGER.debug("Nested archive is %d bytes", len(blob))
    return blob
