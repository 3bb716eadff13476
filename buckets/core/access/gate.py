"""
Per-operation bearer-token gate.

Which operations need a token is configuration, read fresh for each
request and handed to the gate as a frozen snapshot. The gate knows
nothing about the object store; the HTTP layer consults it before any
store call is made.
"""

import hmac
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

BEARER_PREFIX = "Bearer "


class OperationKind(Enum):
    """The unit of authorization granularity. Values are the wire names."""
    BUCKET_LIST = "BucketList"
    OBJECT_LIST = "ObjectList"
    OBJECT_READ = "ObjectRead"
    OBJECT_CREATE = "ObjectCreate"
    OBJECT_DELETE = "ObjectDelete"


class NotAuthorized(Exception):
    """Raised when a required credential is missing, malformed or unknown."""

    def __init__(self, kind: OperationKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass(frozen=True)
class AuthenticationRequirements:
    """
    Read-only snapshot of which operation kinds require a token.

    Kinds that are not listed do not require one.
    """
    required: Mapping[OperationKind, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Copy so later changes to the caller's dict can't leak in
        object.__setattr__(self, "required", MappingProxyType(dict(self.required)))

    def is_required(self, kind: OperationKind) -> bool:
        return bool(self.required.get(kind, False))

    def as_dict(self) -> dict[str, bool]:
        """Wire form: every kind, keyed by its name."""
        return {kind.value: self.is_required(kind) for kind in OperationKind}


class AccessGate:
    """Decides whether a request may perform an operation kind."""

    def __init__(
        self,
        requirements: AuthenticationRequirements,
        keys: Iterable[str],
    ) -> None:
        self._requirements = requirements
        self._keys = tuple(key for key in keys if key)

    def is_required(self, kind: OperationKind) -> bool:
        return self._requirements.is_required(kind)

    def is_valid(self, credential: Optional[str]) -> bool:
        """True if the credential matches a configured key."""
        if not credential:
            return False
        candidate = credential.encode("utf-8")
        return any(
            hmac.compare_digest(candidate, key.encode("utf-8"))
            for key in self._keys
        )

    def authorize(self, kind: OperationKind, authorization: Optional[str]) -> None:
        """
        Check an Authorization header value for an operation kind.

        Returns quietly when the kind needs no token. Otherwise raises
        NotAuthorized unless the header is "Bearer <known token>".
        """
        if not self.is_required(kind):
            return

        if not authorization:
            raise NotAuthorized(kind, "No Authorization header provided")

        if not authorization.startswith(BEARER_PREFIX):
            raise NotAuthorized(kind, "Authorization header is not a bearer token")

        token = authorization[len(BEARER_PREFIX):]
        if not self.is_valid(token):
            raise NotAuthorized(kind, "Authorization header token is invalid")
