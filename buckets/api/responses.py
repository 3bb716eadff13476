"""
Shared response bodies.

Validation and authorization failures use a flat {message, error} body.
Absence uses a problem-details style body so clients can tell the two
apart without parsing messages.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..core.objects.headers import (
    BUCKET_NAME_HEADER,
    OBJECT_ID_HEADER,
    OBJECT_NAME_HEADER,
    encode_name,
)
from ..core.objects.models import ObjectMetadata

OBJECT_NOT_FOUND = "The specified object could not be found"
BUCKET_NOT_FOUND = "The specified bucket could not be found"


class BasicResponse(BaseModel):
    """Body for 400, 403 and 500 responses."""
    message: str
    error: bool = True


class ProblemDetails(BaseModel):
    """Body for 404 responses."""
    status: int
    title: str
    instance: str


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=BasicResponse(message=message).model_dump(),
    )


def bad_request(message: str) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, message)


def not_found(request: Request, title: str = OBJECT_NOT_FOUND) -> JSONResponse:
    body = ProblemDetails(
        status=status.HTTP_404_NOT_FOUND,
        title=title,
        instance=request.url.path,
    )
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=body.model_dump())


def object_headers(metadata: ObjectMetadata) -> dict[str, str]:
    """
    Identification headers for object reads.

    Names are always percent-encoded; see core.objects.headers.
    """
    return {
        BUCKET_NAME_HEADER: encode_name(metadata.bucket),
        OBJECT_NAME_HEADER: encode_name(metadata.name),
        OBJECT_ID_HEADER: metadata.id,
    }
