"""
NSKeyedArchiver object-graph helpers.

A keyed archive is a plist dictionary with a flat ``$objects`` array and a
``$top`` mapping naming the root object. Objects refer to each other only by
``plistlib.UID`` indices into ``$objects``. Index 0 conventionally holds the
``$null`` sentinel string.

References are resolved on demand against the array and never cached. Any
reference or shape that does not match what the exporter expects raises a
:class:`~extractors.exceptions.GraphError` subclass.
"""

from __future__ import annotations

import plistlib
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from xml.parsers.expat import ExpatError

from core.logging import get_logger
from extractors.exceptions import (
    FieldTypeError,
    MissingFieldError,
    PlistFormatError,
    ReferenceOutOfBoundsError,
)

LOGGER = get_logger("extractors.lockdown.nska")

NULL_SENTINEL = "$null"
TOP_KEY = "$top"
OBJECTS_KEY = "$objects"
ROOT_KEY = "root"
MEMBERS_KEY = "NS.objects"

# What plistlib.loads raises for bytes that are not a property list
PLIST_DECODE_ERRORS = (plistlib.InvalidFileException, ExpatError, ValueError, TypeError, OverflowError)


@dataclass(frozen=True)
class KeyedArchive:
    """Decoded keyed archive: the flat object array plus the ``$top`` mapping."""

    objects: List[Any]
    top: Dict[str, Any]

    def resolve(self, ref: Any, field: Optional[str] = None, context: Any = None) -> Any:
        return resolve_uid(ref, self.objects, field=field, context=context)


def is_null(value: Any) -> bool:
    """True when ``value`` is the archive's ``$null`` sentinel."""
    return isinstance(value, str) and value == NULL_SENTINEL


def resolve_uid(
    ref: Any,
    objects: List[Any],
    field: Optional[str] = None,
    context: Any = None,
) -> Any:
    """
    Resolve a ``plistlib.UID`` against the ``$objects`` list.

    The variant of the returned value is not checked; that is up to the caller.

    Raises:
        FieldTypeError: If ``ref`` is not a UID
        ReferenceOutOfBoundsError: If the index is outside ``objects``
    """
    if not isinstance(ref, plistlib.UID):
        raise FieldTypeError(field or "reference", "a reference", ref, context)
    index = int(ref.data)
    if not 0 <= index < len(objects):
        raise ReferenceOutOfBoundsError(index, len(objects), field, context)
    return objects[index]


def deref(
    value: Any,
    objects: List[Any],
    field: Optional[str] = None,
    context: Any = None,
) -> Any:
    """Follow one layer of UID indirection; non-UID values are returned as is."""
    if isinstance(value, plistlib.UID):
        return resolve_uid(value, objects, field=field, context=context)
    return value


def load_archive(blob: bytes) -> KeyedArchive:
    """
    Decode keyed-archive plist bytes (binary or XML).

    Raises:
        PlistFormatError: If the bytes are not a property list
        FieldTypeError: If the decoded plist is not a dictionary, or ``$objects``
            / ``$top`` have the wrong type
        MissingFieldError: If ``$objects`` or ``$top`` are absent
    """
    if not isinstance(blob, (bytes, bytearray)):
        raise FieldTypeError("archive", "data", blob)

    try:
        archive = plistlib.loads(bytes(blob))
    except PLIST_DECODE_ERRORS as exc:
        raise PlistFormatError(f"Could not decode nested plist: {exc}") from exc

    if not isinstance(archive, dict):
        raise FieldTypeError("archive", "a dictionary", archive)

    if OBJECTS_KEY not in archive:
        raise MissingFieldError(OBJECTS_KEY)
    objects = archive[OBJECTS_KEY]
    if not isinstance(objects, list):
        raise FieldTypeError(OBJECTS_KEY, "an array", objects)

    if TOP_KEY not in archive:
        raise MissingFieldError(TOP_KEY)
    top = archive[TOP_KEY]
    if not isinstance(top, dict):
        raise FieldTypeError(TOP_KEY, "a dictionary", top)

    LOGGER.debug("Loaded keyed archive with %d objects", len(objects))
    return KeyedArchive(objects=objects, top=top)


def root_descriptor(archive: KeyedArchive) -> Dict[str, Any]:
    """Resolve ``$top.root`` and check that it is a dictionary."""
    if ROOT_KEY not in archive.top:
        raise MissingFieldError(f"{TOP_KEY}.{ROOT_KEY}", archive.top)

    root = archive.resolve(archive.top[ROOT_KEY], field=f"{TOP_KEY}.{ROOT_KEY}", context=archive.top)
    if not isinstance(root, dict):
        raise FieldTypeError(f"{TOP_KEY}.{ROOT_KEY}", "a dictionary", root)
    return root


def root_members(archive: KeyedArchive) -> List[plistlib.UID]:
    """
    Return the member-list references of the root descriptor.

    Every element of ``NS.objects`` must be a UID. Whether each one resolves
    to a dictionary is checked when the record is decoded.
    """
    root = root_descriptor(archive)

    if MEMBERS_KEY not in root:
        raise MissingFieldError(MEMBERS_KEY, root)
    members = root[MEMBERS_KEY]
    if not isinstance(members, list):
        raise FieldTypeError(MEMBERS_KEY, "an array", members, root)

    for position, member in enumerate(members):
        if not isinstance(member, plistlib.UID):
            raise FieldTypeError(f"{MEMBERS_KEY}[{position}]", "a reference", member, root)

    return list(members)
