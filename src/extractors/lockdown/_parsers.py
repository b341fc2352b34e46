"""
Lockdown item parsers.

Each member of the archive root's ``NS.objects`` list is a dictionary
describing one one-time-password item. Field values are either stored inline
or as a UID pointing into ``$objects``:

- itemIsArchivedKey / itemFavoriteKey: booleans
- serviceNameKey / accountNameKey: strings
- dateCreatedKey / dateModifiedKey: NSDate dictionaries with ``NS.time``
  (Cocoa seconds); the modified date may be ``$null``
- itemURLString: UID of an ``otpauth://`` URI, or of a placeholder when the
  URI has to be rebuilt from the raw secret in itemKeyKey

Every unexpected shape raises; records are never partially decoded.
"""

from __future__ import annotations

import plistlib
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.logging import get_logger
from core.timestamps import cocoa_to_datetime
from extractors.exceptions import (
    FieldTypeError,
    FieldValueError,
    MissingFieldError,
)

from ._nska import MEMBERS_KEY, KeyedArchive, deref, is_null, resolve_uid, root_members

LOGGER = get_logger("extractors.lockdown.parsers")

ARCHIVED_KEY = "itemIsArchivedKey"
FAVORITE_KEY = "itemFavoriteKey"
SERVICE_KEY = "serviceNameKey"
ACCOUNT_KEY = "accountNameKey"
CREATED_KEY = "dateCreatedKey"
MODIFIED_KEY = "dateModifiedKey"
URL_KEY = "itemURLString"
SECRET_KEY = "itemKeyKey"
TIME_KEY = "NS.time"

OTPAUTH_PREFIX = "otpauth://"


@dataclass(frozen=True)
class Entry:
    """One decoded one-time-password item."""
    service: str
    login: str
    created: datetime
    modified: datetime
    url: str
    favorite: bool
    archived: bool


# =============================================================================
# Field readers
# =============================================================================

def _require(record: Dict[str, Any], key: str) -> Any:
    if key not in record:
        raise MissingFieldError(key, record)
    return record[key]


def _read_bool(record: Dict[str, Any], key: str, objects: List[Any]) -> bool:
    value = deref(_require(record, key), objects, field=key, context=record)
    if not isinstance(value, bool):
        raise FieldTypeError(key, "a boolean", value, record)
    return value


def _read_string(record: Dict[str, Any], key: str, objects: List[Any]) -> str:
    value = deref(_require(record, key), objects, field=key, context=record)
    if not isinstance(value, str):
        raise FieldTypeError(key, "a string", value, record)
    return value


def _read_date(
    record: Dict[str, Any],
    key: str,
    objects: List[Any],
    allow_null: bool = False,
) -> Optional[datetime]:
    """Read an NSDate field; returns None for ``$null`` when ``allow_null``."""
    value = deref(_require(record, key), objects, field=key, context=record)
    if allow_null and is_null(value):
        return None
    if not isinstance(value, dict):
        raise FieldTypeError(key, "a date dictionary", value, record)
    if TIME_KEY not in value:
        raise MissingFieldError(f"{key}.{TIME_KEY}", record)

    raw = value[TIME_KEY]
    try:
        return cocoa_to_datetime(raw)
    except TypeError:
        raise FieldTypeError(f"{key}.{TIME_KEY}", "a number", raw, record) from None
    except ValueError as exc:
        raise FieldValueError(f"{key}.{TIME_KEY}", str(exc), record) from exc


def _read_url(record: Dict[str, Any], objects: List[Any]) -> str:
    """The URL must be stored as a reference to a string, never inline."""
    ref = _require(record, URL_KEY)
    if not isinstance(ref, plistlib.UID):
        raise FieldTypeError(URL_KEY, "a reference", ref, record)
    value = resolve_uid(ref, objects, field=URL_KEY, context=record)
    if not isinstance(value, str):
        raise FieldTypeError(URL_KEY, "a string", value, record)
    return value


# =============================================================================
# Secret / URI reconciliation
# =============================================================================

def build_otpauth_uri(service: str, login: str, secret: str) -> str:
    """
    Format a TOTP URI from its parts.

    No percent-encoding is applied; the parts are used as stored.

    Example:
        >>> build_otpauth_uri("Example", "alice", "JBSWY3DPEHPK3PXP")
        'otpauth://totp/Example:alice?secret=JBSWY3DPEHPK3PXP&issuer=Example'
    """
    return f"otpauth://totp/{service}:{login}?secret={secret}&issuer={service}"


def synthesize_uri(
    service: str,
    login: str,
    objects: List[Any],
    item_key_ref: Any,
    context: Any = None,
) -> str:
    """
    Rebuild an ``otpauth://`` URI from the raw secret stored in itemKeyKey.

    Args:
        service: Service name (used as label prefix and issuer)
        login: Account name, may be empty
        objects: The archive ``$objects`` array
        item_key_ref: Value of itemKeyKey, None when the key is absent
        context: Record used in error messages

    Raises:
        MissingFieldError: If the secret key is absent
        FieldTypeError: If it is not a reference to a string
        FieldValueError: If the secret is empty or ``$null``
    """
    if item_key_ref is None:
        raise MissingFieldError(SECRET_KEY, context)
    if not isinstance(item_key_ref, plistlib.UID):
        raise FieldTypeError(SECRET_KEY, "a reference", item_key_ref, context)

    secret = resolve_uid(item_key_ref, objects, field=SECRET_KEY, context=context)
    if not isinstance(secret, str):
        raise FieldTypeError(SECRET_KEY, "a string", secret, context)
    if not secret or is_null(secret):
        raise FieldValueError(SECRET_KEY, f"has no usable secret for service '{service}'", context)

    LOGGER.debug("Rebuilt otpauth URI for %s", service)
    return build_otpauth_uri(service, login, secret)


# =============================================================================
# Entry decoding
# =============================================================================

def decode_entry(objects: List[Any], ref: Any, include_archived: bool) -> Optional[Entry]:
    """
    Decode the item referenced by ``ref``.

    The archived flag is read first. Archived items are skipped (None) when
    ``include_archived`` is False, without validating their other fields.

    Raises:
        GraphError: On any missing field or unexpected value shape
    """
    record = resolve_uid(ref, objects, field=MEMBERS_KEY)
    if not isinstance(record, dict):
        raise FieldTypeError(MEMBERS_KEY, "a dictionary", record)

    archived = _read_bool(record, ARCHIVED_KEY, objects)
    if archived and not include_archived:
        LOGGER.debug("Skipping archived item %d", int(ref.data))
        return None

    favorite = _read_bool(record, FAVORITE_KEY, objects)

    service = _read_string(record, SERVICE_KEY, objects)
    if not service or is_null(service):
        raise FieldValueError(SERVICE_KEY, "is empty", record)

    login = _read_string(record, ACCOUNT_KEY, objects)
    if is_null(login):
        login = ""

    created = _read_date(record, CREATED_KEY, objects)
    modified = _read_date(record, MODIFIED_KEY, objects, allow_null=True)
    if modified is None:
        modified = created

    url = _read_url(record, objects)
    if not url.startswith(OTPAUTH_PREFIX):
        url = synthesize_uri(service, login, objects, record.get(SECRET_KEY), context=record)

    if not url or is_null(url):
        raise FieldValueError(URL_KEY, "is missing", record)

    return Entry(
        service=service,
        login=login,
        created=created,
        modified=modified,
        url=url,
        favorite=favorite,
        archived=archived,
    )


def decode_entries(archive: KeyedArchive, include_archived: bool = False) -> List[Entry]:
    """
    Decode every item listed by the archive root, in archive order.

    Raises:
        GraphError: On the first item that cannot be decoded
    """
    members = root_members(archive)
    entries: List[Entry] = []
    for ref in members:
        entry = decode_entry(archive.objects, ref, include_archived)
        if entry is not None:
            entries.append(entry)

    LOGGER.debug("Decoded %d of %d items", len(entries), len(members))
    return entries
