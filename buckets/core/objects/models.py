"""
Domain models for stored objects.

These models have no dependencies on FastAPI, httpx or the filesystem.
The metadata record is what gets persisted next to each payload; the
object is metadata plus bytes, as handed back to readers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from .errors import InvalidName, NotFoundError

T = TypeVar("T")

DEFAULT_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class ObjectMetadata:
    """
    The small structured record stored alongside a payload.

    Objects are immutable once created. The payload size is not stored;
    it comes from the payload file.
    """
    id: str
    bucket: str
    name: str
    mime_type: str

    def to_record(self) -> dict[str, str]:
        """Serializable form, keyed the way it is stored on disk."""
        return {
            "id": self.id,
            "bucket": self.bucket,
            "name": self.name,
            "mime_type": self.mime_type,
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "ObjectMetadata":
        """
        Build metadata from a stored record.

        Raises KeyError if a field is missing and TypeError if the record
        is not a mapping; the store turns both into an IntegrityError.
        """
        return cls(
            id=str(record["id"]),
            bucket=str(record["bucket"]),
            name=str(record["name"]),
            mime_type=str(record["mime_type"]),
        )


@dataclass(frozen=True)
class BucketObject:
    """A stored object: its metadata record plus the full payload."""
    metadata: ObjectMetadata
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class LookupStatus(Enum):
    """The three outcomes a caller of the store has to tell apart."""
    FOUND = "found"
    NOT_FOUND = "not_found"
    INVALID = "invalid"


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """
    Outcome of a store call with absence and bad input made explicit.

    Integrity and I/O failures are never represented here; they
    propagate as exceptions.
    """
    status: LookupStatus
    value: Optional[T] = None
    message: str = ""

    @classmethod
    def found(cls, value: T) -> "StoreResult[T]":
        return cls(status=LookupStatus.FOUND, value=value)

    @classmethod
    def not_found(cls, message: str = "") -> "StoreResult[T]":
        return cls(status=LookupStatus.NOT_FOUND, message=message)

    @classmethod
    def invalid(cls, message: str) -> "StoreResult[T]":
        return cls(status=LookupStatus.INVALID, message=message)

    @property
    def ok(self) -> bool:
        return self.status is LookupStatus.FOUND


def capture(operation: Callable[..., Optional[T]], *args: Any) -> StoreResult[T]:
    """
    Run a store operation and classify its outcome.

    A None return and NotFoundError both count as NOT_FOUND; InvalidName
    becomes INVALID with the validation message.
    """
    try:
        value = operation(*args)
    except InvalidName as e:
        return StoreResult.invalid(e.message)
    except NotFoundError as e:
        return StoreResult.not_found(str(e))

    if value is None:
        return StoreResult.not_found()
    return StoreResult.found(value)
