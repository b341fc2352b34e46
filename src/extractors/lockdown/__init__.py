"""
Lockdown (macOS) one-time-password item extraction.

Structure:
- container.py: Outer preferences plist, returns the nested archive blob
- _nska.py: NSKeyedArchiver graph resolution
- _parsers.py: Entry record, item decoding, otpauth URI reconstruction
- extractor.py: Pipeline tying the stages together
"""

from ._parsers import Entry, build_otpauth_uri, decode_entries, decode_entry, synthesize_uri
from .container import default_container_path, read_container
from .extractor import decode_archive_blob, extract_entries

__all__ = [
    "Entry",
    "build_otpauth_uri",
    "decode_entries",
    "decode_entry",
    "synthesize_uri",
    "default_container_path",
    "read_container",
    "decode_archive_blob",
    "extract_entries",
]
