"""
Object identifier generation.

Ids are random 128-bit values rendered as canonical UUID strings. They
are unique with overwhelming probability, and the store still checks
the bucket for an existing object before using one.
"""

from typing import Protocol
from uuid import uuid4


class IdGenerator(Protocol):
    """Anything that can propose a fresh id for a bucket."""

    def generate(self, bucket: str) -> str:
        ...


class IdentifierGenerator:
    """Default generator backed by uuid4."""

    def generate(self, bucket: str) -> str:
        # The bucket plays no part in a random id; it is accepted so
        # bucket-scoped generators can share the interface.
        return str(uuid4())
