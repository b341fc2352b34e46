"""
Extractors for application data stores.

Folder Structure:
- lockdown/        Lockdown one-time-password items (NSKeyedArchiver plist)
"""

from .exceptions import (
    ConfigurationError,
    ContainerReadError,
    ExportError,
    FieldTypeError,
    FieldValueError,
    GraphError,
    MissingFieldError,
    PlistFormatError,
    ReferenceOutOfBoundsError,
    ReportError,
)
