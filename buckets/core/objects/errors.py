"""
Error taxonomy for the object store.

Each exception maps to exactly one outcome at the HTTP boundary:
- InvalidName: caller sent a malformed bucket, id or mime type (400)
- NotFoundError: the bucket or object does not exist (404)
- IntegrityError: the on-disk state is corrupt (500, never repaired)
- StorageIoError: the filesystem refused an operation (500, never retried)
"""


class BucketsError(Exception):
    """Base class for all object store errors."""
    pass


class InvalidName(BucketsError):
    """
    Raised when a bucket name, object id or mime type is not acceptable.

    Always raised before any filesystem access.
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class NotFoundError(BucketsError):
    """Raised when a bucket or object is absent. An expected outcome."""
    pass


class BucketNotFound(NotFoundError):
    """The bucket directory does not exist."""

    def __init__(self, bucket: str) -> None:
        super().__init__(f"The bucket '{bucket}' does not exist")
        self.bucket = bucket


class ObjectNotFound(NotFoundError):
    """No metadata record exists for the object."""

    def __init__(self, bucket: str, object_id: str) -> None:
        super().__init__(f"The object '{object_id}' does not exist in bucket '{bucket}'")
        self.bucket = bucket
        self.object_id = object_id


class IntegrityError(BucketsError):
    """
    Raised when exactly one of an object's two artifacts exists,
    or when a metadata record cannot be parsed.
    """

    def __init__(self, bucket: str, object_id: str, message: str) -> None:
        super().__init__(message)
        self.bucket = bucket
        self.object_id = object_id


class StorageIoError(BucketsError):
    """Raised when a filesystem call fails for a reason other than absence."""
    pass
