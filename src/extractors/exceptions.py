"""
Exceptions for the export pipeline.

Every failure while reading the container or walking the archive graph is
fatal. Nothing in the pipeline catches these to keep going; the CLI reports
the first one and exits.
"""

from __future__ import annotations

from typing import Any, Optional


class ExportError(Exception):
    """Base exception for export errors."""
    pass


class ContainerReadError(ExportError):
    """Raised when the container file cannot be read."""
    pass


class PlistFormatError(ExportError):
    """Raised when outer or nested property-list bytes fail to decode."""
    pass


class ConfigurationError(ExportError, ValueError):
    """Raised when configuration is invalid."""
    pass


class ReportError(ExportError):
    """Raised when a report cannot be rendered."""
    pass


class GraphError(ExportError):
    """
    Raised when the archive graph does not have the expected shape.

    ``context`` holds the partially decoded record (or the raw dictionary)
    the problem was found in, when there is one.
    """

    def __init__(self, message: str, context: Any = None):
        self.context = context
        if context is not None:
            message = f"{message} (in {context!r})"
        super().__init__(message)


class ReferenceOutOfBoundsError(GraphError):
    """Raised when a UID points outside the $objects array."""

    def __init__(self, index: int, size: int, field: Optional[str] = None, context: Any = None):
        self.index = index
        self.size = size
        self.field = field
        where = f" for '{field}'" if field else ""
        super().__init__(
            f"Reference {index}{where} out of bounds for {size} archived objects",
            context,
        )


class MissingFieldError(GraphError):
    """Raised when a required key is absent."""

    def __init__(self, field: str, context: Any = None):
        self.field = field
        super().__init__(f"Missing required field '{field}'", context)


class FieldTypeError(GraphError):
    """Raised when a field holds a value of the wrong variant."""

    def __init__(self, field: str, expected: str, value: Any, context: Any = None):
        self.field = field
        self.expected = expected
        self.actual = type(value).__name__
        super().__init__(
            f"Field '{field}' must be {expected}, got {self.actual} {value!r}",
            context,
        )


class FieldValueError(GraphError):
    """Raised when a field has the right variant but an unusable value."""

    def __init__(self, field: str, reason: str, context: Any = None):
        self.field = field
        self.reason = reason
        super().__init__(f"Field '{field}' {reason}", context)
