"""
HTTP client for a Buckets server.

Turns the REST surface into typed results:
- invalid bucket names or object ids raise InvalidName before any request
- 404 becomes None (or False for deletes), never an exception
- 403 becomes NotAuthorizedError
- anything else unexpected raises httpx.HTTPStatusError

Uploads can be sent as a multipart form or as a single raw body. Both
shapes reach the same server endpoint; the choice only matters for
proxies or servers that handle one better than the other.
"""

import logging
from enum import Enum
from typing import BinaryIO, Optional, Union
from urllib.parse import quote

import httpx

from ...core.access.gate import AuthenticationRequirements, OperationKind
from ...core.objects.headers import (
    BUCKET_NAME_HEADER,
    OBJECT_ID_HEADER,
    OBJECT_NAME_HEADER,
    decode_name,
)
from ...core.objects.models import DEFAULT_MIME_TYPE, BucketObject, ObjectMetadata
from ...core.objects.names import validate_bucket_name, validate_object_id

logger = logging.getLogger(__name__)


class NotAuthorizedError(Exception):
    """Raised when the server requires a token we don't have, or rejects ours."""

    def __init__(self, kind: OperationKind, message: str = "") -> None:
        super().__init__(message or f"Not authorized for {kind.value}")
        self.kind = kind


class UploadMode(Enum):
    """How create_object shapes the request body."""
    MULTIPART = "multipart"  # form with a single "file" part
    RAW = "raw"              # payload is the body, mime type is Content-Type


class BucketsClient:
    """
    Typed wrapper around the Buckets HTTP API.

    The server's authentication requirements are fetched once on
    construction so calls that would certainly be refused fail locally.

    Pass http_client to reuse an existing httpx.Client (for example a
    FastAPI TestClient); its base URL is used and it is not closed by
    this wrapper.
    """

    def __init__(
        self,
        base_url: str = "",
        token: Optional[str] = None,
        *,
        upload_mode: UploadMode = UploadMode.MULTIPART,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 30.0,
    ) -> None:
        if http_client is None and not base_url:
            raise ValueError("base_url is required when no http_client is given")

        self._token = token
        self._upload_mode = upload_mode
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            base_url=base_url.rstrip("/") + "/",
            timeout=timeout,
        )

        response = self._request("GET", "System/AuthenticationRequirements")
        response.raise_for_status()
        self._requirements = AuthenticationRequirements({
            kind: bool(response.json().get(kind.value, False))
            for kind in OperationKind
        })

        logger.info(
            "Connected to Buckets server",
            extra={
                "base_url": str(self._client.base_url),
                "upload_mode": upload_mode.value,
                "authentication_requirements": self._requirements.as_dict(),
            }
        )

    @property
    def authentication_requirements(self) -> AuthenticationRequirements:
        return self._requirements

    # -----------------------------------------------------------------------
    # Listing
    # -----------------------------------------------------------------------

    def list_buckets(self) -> list[str]:
        """Names of all buckets on the server."""
        response = self._call(OperationKind.BUCKET_LIST, "GET", "Bucket/List")
        response.raise_for_status()
        return list(response.json())

    def list_objects(self, bucket: str) -> Optional[list[str]]:
        """Object ids in a bucket, or None if the bucket does not exist."""
        response = self._call(
            OperationKind.OBJECT_LIST, "GET", f"{_bucket_path(bucket)}/List"
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        response.raise_for_status()
        return list(response.json())

    # -----------------------------------------------------------------------
    # Reads
    # -----------------------------------------------------------------------

    def get_object_metadata(
        self,
        bucket: str,
        object_id: str,
    ) -> Optional[tuple[ObjectMetadata, int]]:
        """Metadata and payload size via HEAD, or None if the object is absent."""
        response = self._call(
            OperationKind.OBJECT_READ, "HEAD", _object_path(bucket, object_id)
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        response.raise_for_status()

        size = int(response.headers.get("content-length", "0") or 0)
        return _metadata_from_headers(response, bucket, object_id), size

    def get_object(self, bucket: str, object_id: str) -> Optional[BucketObject]:
        """Metadata and payload, or None if the object is absent."""
        response = self._call(
            OperationKind.OBJECT_READ, "GET", _object_path(bucket, object_id)
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        response.raise_for_status()

        return BucketObject(
            metadata=_metadata_from_headers(response, bucket, object_id),
            data=response.content,
        )

    # -----------------------------------------------------------------------
    # Writes
    # -----------------------------------------------------------------------

    def create_object(
        self,
        bucket: str,
        data: Union[bytes, BinaryIO],
        name: str,
        mime_type: str = DEFAULT_MIME_TYPE,
    ) -> ObjectMetadata:
        """
        Upload a new object and return its metadata, including the new id.

        data may be bytes or a binary file object; a file object is read
        to the end.
        """
        payload = data if isinstance(data, bytes) else data.read()
        params = {"nameOverride": name, "mimeOverride": mime_type}
        path = _bucket_path(bucket)

        if self._upload_mode is UploadMode.MULTIPART:
            response = self._call(
                OperationKind.OBJECT_CREATE,
                "PUT",
                path,
                params=params,
                files={"file": (name, payload, mime_type)},
            )
        else:
            response = self._call(
                OperationKind.OBJECT_CREATE,
                "PUT",
                path,
                params=params,
                content=payload,
                headers={"Content-Type": mime_type},
            )

        response.raise_for_status()

        return ObjectMetadata(
            id=response.json(),
            bucket=bucket,
            name=name,
            mime_type=mime_type,
        )

    def delete_object(self, bucket: str, object_id: str) -> bool:
        """Remove an object. Returns False if it did not exist."""
        response = self._call(
            OperationKind.OBJECT_DELETE, "DELETE", _object_path(bucket, object_id)
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            return False
        response.raise_for_status()
        return True

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "BucketsClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def _call(self, kind: OperationKind, method: str, path: str, **kwargs) -> httpx.Response:
        """Send a request for an operation kind, translating 403."""
        if self._token is None and self._requirements.is_required(kind):
            raise NotAuthorizedError(kind, f"A token is required for {kind.value}")

        response = self._request(method, path, **kwargs)

        if response.status_code == httpx.codes.FORBIDDEN:
            message = ""
            if response.headers.get("content-type", "").startswith("application/json"):
                message = response.json().get("message", "")
            logger.warning(
                "Request refused by server",
                extra={"operation": kind.value, "message": message}
            )
            raise NotAuthorizedError(kind, message)

        return response

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = dict(kwargs.pop("headers", None) or {})
        if self._token is not None:
            headers["Authorization"] = f"Bearer {self._token}"
        return self._client.request(method, path, headers=headers, **kwargs)


def _segment(value: str) -> str:
    """URL-encode one path segment, slashes included."""
    return quote(value, safe="")


def _bucket_path(bucket: str) -> str:
    """
    Path for a bucket, checked locally first.

    "." and ".." would be collapsed by URL normalization and reach a
    different route, so bad names never leave the client.
    """
    return f"Bucket/{_segment(validate_bucket_name(bucket))}"


def _object_path(bucket: str, object_id: str) -> str:
    return f"{_bucket_path(bucket)}/{_segment(validate_object_id(object_id))}"


def _metadata_from_headers(
    response: httpx.Response,
    bucket: str,
    object_id: str,
) -> ObjectMetadata:
    """Rebuild metadata from read headers, falling back to what we asked for."""
    headers = response.headers
    return ObjectMetadata(
        id=headers.get(OBJECT_ID_HEADER, object_id),
        bucket=decode_name(headers.get(BUCKET_NAME_HEADER, _segment(bucket))),
        name=decode_name(headers.get(OBJECT_NAME_HEADER, _segment(object_id))),
        mime_type=headers.get("content-type", DEFAULT_MIME_TYPE),
    )
