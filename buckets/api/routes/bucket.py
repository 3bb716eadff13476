"""
Bucket and object API endpoints.

Every endpoint follows the same order:
1. FastAPI parses the path (request shape)
2. The access gate dependency checks the token for the operation kind
3. The object store performs the filesystem operation
4. The outcome is rendered as status, headers and body

Store calls are synchronous. Handlers that do nothing else are plain
functions, which FastAPI runs in its threadpool; the upload handler
awaits the body first and then hands the store call to the threadpool.
"""

import logging
from dataclasses import dataclass
from typing import Annotated, Optional
from uuid import uuid4

from fastapi import APIRouter, Depends, Query, Request, Response, status
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from ...core.access.gate import OperationKind
from ...core.objects.models import DEFAULT_MIME_TYPE, LookupStatus, capture
from ..dependencies import ObjectStoreDep, SettingsDep, require_access
from ..responses import (
    BUCKET_NOT_FOUND,
    BasicResponse,
    ProblemDetails,
    bad_request,
    error_response,
    not_found,
    object_headers,
)

logger = logging.getLogger(__name__)

router = APIRouter()

MULTIPART_FORM = "multipart/form-data"
UPLOAD_FIELD = "file"

ERROR_RESPONSES = {
    400: {"description": "Invalid bucket name or object id", "model": BasicResponse},
    403: {"description": "Bearer token required", "model": BasicResponse},
}
NOT_FOUND_RESPONSES = {
    **ERROR_RESPONSES,
    404: {"description": "Not found", "model": ProblemDetails},
}


@dataclass
class Upload:
    """The payload of a PUT, whichever request shape carried it."""
    data: bytes
    filename: Optional[str]
    content_type: Optional[str]


class UploadRejected(Exception):
    """The PUT body cannot be accepted; carries the response to send."""

    def __init__(self, response: Response) -> None:
        super().__init__(response.status_code)
        self.response = response


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

@router.get(
    "/List",
    response_model=list[str],
    summary="List buckets",
    dependencies=[Depends(require_access(OperationKind.BUCKET_LIST))],
    responses={403: ERROR_RESPONSES[403]},
)
def list_buckets(store: ObjectStoreDep) -> list[str]:
    """Names of all buckets that currently hold objects."""
    return store.list_buckets()


@router.get(
    "/{bucket}/List",
    response_model=list[str],
    summary="List objects in a bucket",
    dependencies=[Depends(require_access(OperationKind.OBJECT_LIST))],
    responses=NOT_FOUND_RESPONSES,
)
def list_objects(bucket: str, request: Request, store: ObjectStoreDep):
    """Ids of the objects in a bucket. 404 if the bucket does not exist."""
    result = capture(store.list_objects, bucket)

    if result.status is LookupStatus.INVALID:
        return bad_request(result.message)
    if result.status is LookupStatus.NOT_FOUND:
        return not_found(request, BUCKET_NOT_FOUND)

    return result.value


# ---------------------------------------------------------------------------
# Object reads
# ---------------------------------------------------------------------------

@router.head(
    "/{bucket}/{object_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Get object metadata",
    description="Check an object exists and return its metadata as headers.",
    dependencies=[Depends(require_access(OperationKind.OBJECT_READ))],
    responses=NOT_FOUND_RESPONSES,
)
def head_object(bucket: str, object_id: str, request: Request, store: ObjectStoreDep):
    result = capture(store.get_metadata, bucket, object_id)

    if result.status is LookupStatus.INVALID:
        return bad_request(result.message)
    if result.status is LookupStatus.NOT_FOUND:
        return not_found(request)

    metadata, size = result.value
    headers = object_headers(metadata)
    headers["Content-Type"] = metadata.mime_type
    headers["Content-Length"] = str(size)

    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=headers)


@router.get(
    "/{bucket}/{object_id}",
    summary="Get object",
    description="Return the object's payload with its metadata as headers.",
    dependencies=[Depends(require_access(OperationKind.OBJECT_READ))],
    responses={
        **NOT_FOUND_RESPONSES,
        200: {"description": "Object payload", "content": {"application/octet-stream": {}}},
    },
)
def get_object(bucket: str, object_id: str, request: Request, store: ObjectStoreDep):
    result = capture(store.get_object, bucket, object_id)

    if result.status is LookupStatus.INVALID:
        return bad_request(result.message)
    if result.status is LookupStatus.NOT_FOUND:
        return not_found(request)

    stored = result.value
    headers = object_headers(stored.metadata)
    # Stored type verbatim; media_type would append a charset to text types
    headers["Content-Type"] = stored.metadata.mime_type

    return Response(content=stored.data, headers=headers)


# ---------------------------------------------------------------------------
# Object writes
# ---------------------------------------------------------------------------

@router.put(
    "/{bucket}",
    response_model=str,
    summary="Create object",
    description=(
        "Store a new object. Send either a multipart form with a 'file' part "
        "or the raw payload as the request body. Returns the new object id."
    ),
    dependencies=[Depends(require_access(OperationKind.OBJECT_CREATE))],
    responses={
        **ERROR_RESPONSES,
        413: {"description": "Payload too large", "model": BasicResponse},
    },
)
async def put_object(
    bucket: str,
    request: Request,
    store: ObjectStoreDep,
    settings: SettingsDep,
    name_override: Annotated[Optional[str], Query(alias="nameOverride")] = None,
    mime_override: Annotated[Optional[str], Query(alias="mimeOverride")] = None,
):
    """
    Create an object from the request body.

    Name and mime type resolve in order: query override, then what the
    upload declared, then a default (fresh UUID name, octet-stream type).
    """
    max_bytes = settings.max_upload_size_mb * 1024 * 1024

    try:
        upload = await _read_upload(request, max_bytes)
    except UploadRejected as e:
        return e.response

    mime_type = _first_present(mime_override, upload.content_type) or DEFAULT_MIME_TYPE
    name = _first_present(name_override, upload.filename) or str(uuid4())

    result = await run_in_threadpool(
        capture, store.create_object, bucket, name, mime_type, upload.data
    )

    if result.status is LookupStatus.INVALID:
        return bad_request(result.message)

    return result.value


@router.delete(
    "/{bucket}/{object_id}",
    summary="Delete object",
    dependencies=[Depends(require_access(OperationKind.OBJECT_DELETE))],
    responses=NOT_FOUND_RESPONSES,
)
def delete_object(bucket: str, object_id: str, request: Request, store: ObjectStoreDep):
    """Remove an object; its bucket disappears with its last object."""
    result = capture(store.delete_object, bucket, object_id)

    if result.status is LookupStatus.INVALID:
        return bad_request(result.message)
    if result.status is LookupStatus.NOT_FOUND:
        return not_found(request)

    return Response(status_code=status.HTTP_200_OK)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def _read_upload(request: Request, max_bytes: int) -> Upload:
    """Pull the payload out of a multipart form or a raw body."""
    declared_length = request.headers.get("content-length")
    if declared_length and declared_length.isdigit() and int(declared_length) > max_bytes:
        raise UploadRejected(_too_large(max_bytes))

    content_type = request.headers.get("content-type", "")

    if content_type.startswith(MULTIPART_FORM):
        try:
            form = await request.form()
        except HTTPException as e:
            raise UploadRejected(bad_request(f"Malformed multipart body: {e.detail}")) from e
        except MultiPartException as e:
            raise UploadRejected(bad_request(f"Malformed multipart body: {e.message}")) from e
        part = form.get(UPLOAD_FIELD)
        if not isinstance(part, UploadFile):
            await form.close()
            raise UploadRejected(
                bad_request(f"A file part named '{UPLOAD_FIELD}' is required")
            )
        upload = Upload(
            data=await part.read(),
            filename=part.filename,
            content_type=part.content_type,
        )
        await form.close()
    else:
        upload = Upload(
            data=await request.body(),
            filename=None,
            content_type=content_type,
        )

    if len(upload.data) > max_bytes:
        raise UploadRejected(_too_large(max_bytes))

    return upload


def _too_large(max_bytes: int) -> Response:
    return error_response(
        status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        f"Object exceeds the maximum size of {max_bytes // (1024 * 1024)}MB",
    )


def _first_present(*values: Optional[str]) -> Optional[str]:
    """First value that is not None, empty or whitespace."""
    for value in values:
        if value and value.strip():
            return value
    return None
