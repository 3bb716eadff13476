"""
The object store interface.

The HTTP layer depends on this protocol, not on a concrete backend, so
routes can be tested against any implementation.
"""

from typing import Optional, Protocol

from .models import BucketObject, ObjectMetadata


class ObjectStore(Protocol):
    """
    Protocol for whole-object storage grouped into buckets.

    Every method that takes a bucket or object id validates it first and
    raises InvalidName without touching storage when it is unacceptable.
    """

    def list_buckets(self) -> list[str]:
        """Names of all buckets that currently hold objects."""
        ...

    def list_objects(self, bucket: str) -> list[str]:
        """Ids in a bucket. Raises BucketNotFound if the bucket is absent."""
        ...

    def get_metadata(
        self,
        bucket: str,
        object_id: str,
    ) -> Optional[tuple[ObjectMetadata, int]]:
        """Metadata and payload size, or None if the object is absent."""
        ...

    def get_object(
        self,
        bucket: str,
        object_id: str,
    ) -> Optional[BucketObject]:
        """Metadata and payload, or None if the object is absent."""
        ...

    def create_object(
        self,
        bucket: str,
        name: str,
        mime_type: str,
        data: bytes,
    ) -> str:
        """Store a new object and return its generated id."""
        ...

    def delete_object(self, bucket: str, object_id: str) -> bool:
        """Remove an object. Raises ObjectNotFound if it is absent."""
        ...
