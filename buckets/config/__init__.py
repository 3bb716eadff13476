"""
Server configuration, read from environment variables and .env.
"""

from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
