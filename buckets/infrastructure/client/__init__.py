"""
HTTP client for a remote Buckets server.
"""

from ...core.objects.errors import InvalidName
from .client import BucketsClient, NotAuthorizedError, UploadMode

__all__ = ["BucketsClient", "InvalidName", "NotAuthorizedError", "UploadMode"]
