"""Capability protocols consumed by the directory services.

Secret hashing and the wall clock are injected so the services stay
deterministic under test.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

Clock = Callable[[], datetime]
"""Callable returning the current time as an aware UTC datetime."""


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(UTC)


@runtime_checkable
class SecretHasher(Protocol):
    """One-way hashing of user secrets."""

    def hash(self, secret: str) -> str:
        """Hash a plaintext secret.

        Args:
            secret: The plaintext secret

        Returns:
            An opaque digest suitable for storage
        """
        ...

    def verify(self, secret: str, digest: str) -> bool:
        """Check a plaintext secret against a stored digest."""
        ...
