"""
Object store domain: models, identifiers, name validation and errors.
"""

from .errors import (
    BucketNotFound,
    BucketsError,
    IntegrityError,
    InvalidName,
    NotFoundError,
    ObjectNotFound,
    StorageIoError,
)
from .headers import (
    BUCKET_NAME_HEADER,
    IDENTIFICATION_HEADERS,
    OBJECT_ID_HEADER,
    OBJECT_NAME_HEADER,
    decode_name,
    encode_name,
)
from .identifiers import IdentifierGenerator, IdGenerator
from .models import (
    DEFAULT_MIME_TYPE,
    BucketObject,
    LookupStatus,
    ObjectMetadata,
    StoreResult,
    capture,
)
from .names import validate_bucket_name, validate_mime_type, validate_object_id
from .store import ObjectStore

__all__ = [
    "BucketNotFound",
    "BucketsError",
    "IntegrityError",
    "InvalidName",
    "NotFoundError",
    "ObjectNotFound",
    "StorageIoError",
    "BUCKET_NAME_HEADER",
    "IDENTIFICATION_HEADERS",
    "OBJECT_ID_HEADER",
    "OBJECT_NAME_HEADER",
    "decode_name",
    "encode_name",
    "IdentifierGenerator",
    "IdGenerator",
    "DEFAULT_MIME_TYPE",
    "BucketObject",
    "LookupStatus",
    "ObjectMetadata",
    "StoreResult",
    "capture",
    "validate_bucket_name",
    "validate_mime_type",
    "validate_object_id",
    "ObjectStore",
]
