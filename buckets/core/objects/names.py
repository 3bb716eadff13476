"""
Validation of caller-supplied bucket names, object ids and mime types.

This is the only defense against path traversal, so every store entry
point that takes a bucket or id from a caller runs it through here
before building a path. Nothing in this module touches the filesystem.
"""

import os
from typing import Optional

from .errors import InvalidName

PARENT_DIRECTORY = ".."

# Characters the host platform refuses in a single directory entry name
if os.name == "nt":
    INVALID_NAME_CHARS = frozenset('<>:"/\\|?*') | frozenset(chr(c) for c in range(32))
else:
    INVALID_NAME_CHARS = frozenset("/\0")


def _validate_entry_name(value: Optional[str], field: str, label: str) -> str:
    if value is None or not value.strip():
        raise InvalidName(field, f"The {label} may not be empty or whitespace")

    if PARENT_DIRECTORY in value or value == ".":
        raise InvalidName(field, f"The {label} contains invalid characters")

    if any(char in INVALID_NAME_CHARS for char in value):
        raise InvalidName(field, f"The {label} contains invalid characters")

    return value


def validate_bucket_name(bucket: Optional[str]) -> str:
    """Return the bucket name unchanged, or raise InvalidName."""
    return _validate_entry_name(bucket, "bucket", "bucket name")


def validate_object_id(object_id: Optional[str]) -> str:
    """Return the object id unchanged, or raise InvalidName."""
    return _validate_entry_name(object_id, "id", "object id")


def validate_mime_type(mime_type: Optional[str]) -> str:
    """Mime types are stored, never used in a path, so only emptiness matters."""
    if mime_type is None or not mime_type.strip():
        raise InvalidName("mime_type", "The mime type may not be empty or whitespace")
    return mime_type
