"""
Infrastructure layer - concrete backends and remote access.

- storage: Filesystem-backed object store
- client: HTTP client for a remote Buckets server

These translate between external formats and our domain models.
"""
