"""
JSON export of decoded entries.

The document is a list of objects whose keys follow the record fields:
``Service, Login, Created, Modified, URL, Favorite, Archived``. Timestamps are
RFC 3339 UTC strings.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List

from core.timestamps import format_rfc3339, parse_rfc3339
from extractors.exceptions import FieldTypeError, MissingFieldError
from extractors.lockdown import Entry

JSON_INDENT = 4

FIELD_NAMES = ("Service", "Login", "Created", "Modified", "URL", "Favorite", "Archived")


def entry_to_dict(entry: Entry) -> Dict[str, Any]:
    return {
        "Service": entry.service,
        "Login": entry.login,
        "Created": format_rfc3339(entry.created),
        "Modified": format_rfc3339(entry.modified),
        "URL": entry.url,
        "Favorite": entry.favorite,
        "Archived": entry.archived,
    }


def entry_from_dict(data: Dict[str, Any]) -> Entry:
    """Inverse of :func:`entry_to_dict`."""
    for name in FIELD_NAMES:
        if name not in data:
            raise MissingFieldError(name, data)
    for name in ("Service", "Login", "URL", "Created", "Modified"):
        if not isinstance(data[name], str):
            raise FieldTypeError(name, "a string", data[name], data)
    for name in ("Favorite", "Archived"):
        if not isinstance(data[name], bool):
            raise FieldTypeError(name, "a boolean", data[name], data)

    return Entry(
        service=data["Service"],
        login=data["Login"],
        created=parse_rfc3339(data["Created"]),
        modified=parse_rfc3339(data["Modified"]),
        url=data["URL"],
        favorite=data["Favorite"],
        archived=data["Archived"],
    )


def entries_to_json(entries: Iterable[Entry]) -> str:
    """Serialize entries as a pretty-printed JSON array."""
    return json.dumps(
        [entry_to_dict(entry) for entry in entries],
        indent=JSON_INDENT,
        ensure_ascii=False,
    )


def entries_from_json(text: str) -> List[Entry]:
    """Parse a document written by :func:`entries_to_json`."""
    data = json.loads(text)
    if not isinstance(data, list):
        raise FieldTypeError("entries", "an array", data)
    result: List[Entry] = []
    for item in data:
        if not isinstance(item, dict):
            raise FieldTypeError("entry", "an object", item)
        result.append(entry_from_dict(item))
    return result
