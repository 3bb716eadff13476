"""
Bearer-token access control per operation kind.
"""

from .gate import (
    AccessGate,
    AuthenticationRequirements,
    NotAuthorized,
    OperationKind,
)

__all__ = [
    "AccessGate",
    "AuthenticationRequirements",
    "NotAuthorized",
    "OperationKind",
]
