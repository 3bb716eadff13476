"""
Health check endpoints.

/health answers as long as the process is up. /health/ready also
requires a usable configuration and a writable storage root.
"""

import logging
import os
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from ... import __version__
from ..dependencies import SettingsDep

logger = logging.getLogger(__name__)

router = APIRouter()


class HealthResponse(BaseModel):
    """Liveness response."""
    status: str
    version: str
    details: dict[str, Any] = {}


class ReadinessCheck(BaseModel):
    """Individual readiness check result."""
    name: str
    status: str  # "ok" or "error"
    error: str | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response with details."""
    status: str  # "ready" or "not_ready"
    version: str
    checks: list[ReadinessCheck]


@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check",
    description="Returns 200 if the service is running. Does not check storage.",
)
async def health_check(settings: SettingsDep) -> HealthResponse:
    """Liveness check. Fast, and never touches the filesystem."""
    return HealthResponse(
        status="ok",
        version=__version__,
        details={"api_version": settings.api_version},
    )


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    status_code=status.HTTP_200_OK,
    summary="Readiness check",
    description="Returns 200 if the service can handle traffic, 503 otherwise.",
    responses={
        503: {
            "description": "Service not ready",
            "model": ReadinessResponse,
        }
    },
)
def readiness_check(settings: SettingsDep, response: Response) -> ReadinessResponse:
    """
    Readiness: usable configuration and a writable storage root.

    The storage root may not exist yet (it is created with the first
    object), in which case its nearest existing parent must be writable.
    """
    checks: list[ReadinessCheck] = []

    problems = settings.validate_required_fields()
    if problems:
        checks.append(ReadinessCheck(
            name="configuration",
            status="error",
            error="; ".join(problems),
        ))
    else:
        checks.append(ReadinessCheck(name="configuration", status="ok"))

    storage_error = _storage_root_error(Path(settings.bucket_path))
    if storage_error:
        checks.append(ReadinessCheck(name="storage", status="error", error=storage_error))
    else:
        checks.append(ReadinessCheck(name="storage", status="ok"))

    all_ok = all(check.status == "ok" for check in checks)
    if not all_ok:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        logger.warning(
            "Readiness check failed",
            extra={
                "checks": [
                    {"name": c.name, "status": c.status, "error": c.error}
                    for c in checks
                ]
            }
        )

    return ReadinessResponse(
        status="ready" if all_ok else "not_ready",
        version=__version__,
        checks=checks,
    )


def _storage_root_error(root: Path) -> str | None:
    """Describe why the storage root is unusable, or None if it is fine."""
    candidate = root.absolute()
    while not candidate.exists():
        if candidate.parent == candidate:
            return f"No existing parent for {root}"
        candidate = candidate.parent

    if not candidate.is_dir():
        return f"{candidate} is not a directory"
    if not os.access(candidate, os.W_OK | os.X_OK):
        return f"{candidate} is not writable"
    return None
