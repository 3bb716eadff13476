"""
FastAPI dependency injection.

Dependencies provide the object store, the access gate and configuration
to route handlers. Routes never build their own collaborators, which
keeps them easy to test: override get_settings and everything
downstream follows.
"""

import logging
from typing import Annotated, Callable, Optional

from fastapi import Depends, Security
from fastapi.security import APIKeyHeader

from ..config.settings import Settings, get_settings
from ..core.access.gate import AccessGate, NotAuthorized, OperationKind
from ..core.objects.store import ObjectStore
from ..infrastructure.storage.filesystem import FilesystemObjectStore

logger = logging.getLogger(__name__)

# Raw Authorization header; the gate parses the bearer scheme itself so
# it can tell a missing header from a malformed one.
authorization_header = APIKeyHeader(name="Authorization", auto_error=False)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------

def get_access_gate(
    settings: Annotated[Settings, Depends(get_settings)],
) -> AccessGate:
    """Provide a gate over a fresh snapshot of the requirement flags."""
    return AccessGate(
        requirements=settings.authentication_requirements(),
        keys=settings.authentication_keys_list,
    )


AccessGateDep = Annotated[AccessGate, Depends(get_access_gate)]


def require_access(kind: OperationKind) -> Callable[..., None]:
    """
    Build a dependency that enforces the token requirement for one kind.

    Attach it to a route with dependencies=[Depends(require_access(...))].
    It runs before the handler body, so a denied request never reaches
    the object store. Raises NotAuthorized, rendered as 403 by the
    application's exception handler.
    """

    def check_access(
        gate: AccessGateDep,
        authorization: Optional[str] = Security(authorization_header),
    ) -> None:
        try:
            gate.authorize(kind, authorization)
        except NotAuthorized as e:
            logger.warning(
                "Request denied",
                extra={"operation": kind.value, "reason": e.message}
            )
            raise

    check_access.__name__ = f"require_{kind.name.lower()}"
    return check_access


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_object_store(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ObjectStore:
    """
    Provide the object store for the configured root.

    The store keeps no state beyond its root path, so a new instance per
    request is as good as a shared one.
    """
    return FilesystemObjectStore(settings.bucket_path)


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# Route signature aliases
ObjectStoreDep = Annotated[ObjectStore, Depends(get_object_store)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
