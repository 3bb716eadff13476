"""
Local filesystem storage for bucket objects.
"""

from .filesystem import FilesystemObjectStore

__all__ = ["FilesystemObjectStore"]
