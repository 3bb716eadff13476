"""
Buckets - a minimal single-node object storage service.

This package contains the complete application:
- core: Framework-agnostic object model, name validation and access gate
- infrastructure: Filesystem object store and the HTTP client
- api: FastAPI routes and dependencies
- config: Application configuration
"""

__version__ = "0.1.0"
