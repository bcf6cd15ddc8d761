"""Value objects for the directory domain.

Value objects are immutable descriptors that provide type safety and
domain semantics for identifiers and domain concepts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Generic, TypeVar

from ulid import ULID


@dataclass(frozen=True)
class UserId:
    """Identifier for a User aggregate.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> UserId:
        """Generate a new UserId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> UserId:
        """Create UserId from string value.

        Args:
            value: ULID string

        Returns:
            UserId instance

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            ULID.from_str(value)
        except ValueError as e:
            raise ValueError(f"Invalid UserId: {value}") from e

        return cls(value=value)


@dataclass(frozen=True)
class GroupId:
    """Identifier for a Group aggregate.

    Uses ULID for sortability and distribution-friendly generation.
    """

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> GroupId:
        """Generate a new GroupId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> GroupId:
        """Create GroupId from string value.

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            ULID.from_str(value)
        except ValueError as e:
            raise ValueError(f"Invalid GroupId: {value}") from e

        return cls(value=value)


@dataclass(frozen=True)
class JobId:
    """Identifier for a ProvisioningJob aggregate."""

    value: str

    def __str__(self) -> str:
        """Return string representation."""
        return self.value

    @classmethod
    def generate(cls) -> JobId:
        """Generate a new JobId using ULID."""
        return cls(value=str(ULID()))

    @classmethod
    def from_string(cls, value: str) -> JobId:
        """Create JobId from string value.

        Raises:
            ValueError: If value is not a valid ULID
        """
        try:
            ULID.from_str(value)
        except ValueError as e:
            raise ValueError(f"Invalid JobId: {value}") from e

        return cls(value=value)


class LockoutState(StrEnum):
    """Account lockout state derived at evaluation time."""

    UNLOCKED = "unlocked"
    LOCKED = "locked"


class JobStatus(StrEnum):
    """Lifecycle states of a provisioning job.

    Transitions are monotonic: pending -> running -> completed | failed,
    plus pending -> failed when a job is abandoned before it starts.
    """

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Completed and failed jobs never change again."""
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class ProvisioningAction(StrEnum):
    """Classification of a single reconciled record."""

    CREATED = "created"
    UPDATED = "updated"
    FAILED = "failed"


@dataclass(frozen=True)
class UserProfile:
    """Mutable profile fields of a user, as supplied by a caller.

    Used both to create a user and as the full-replacement patch for
    updates. The secret is deliberately absent: it only changes through
    a dedicated password operation.
    """

    login_name: str
    email: str
    first_name: str = ""
    last_name: str = ""
    phone: str | None = None
    department: str | None = None
    title: str | None = None
    active: bool = True
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GroupRef:
    """Read-only reference from a user to one of its groups."""

    group_id: GroupId
    name: str


@dataclass(frozen=True)
class GroupMember:
    """Read-only reference from a group to one of its member users."""

    user_id: UserId
    login_name: str


class SortOrder(StrEnum):
    """Ordering applied to search results."""

    NEWEST_FIRST = "newest_first"
    ALPHABETICAL = "alphabetical"


@dataclass(frozen=True)
class PageRequest:
    """Zero-based page window for search operations.

    ALPHABETICAL sorts users by login name and groups by name, ascending.
    """

    page: int = 0
    size: int = 20
    sort: SortOrder = SortOrder.NEWEST_FIRST

    def __post_init__(self) -> None:
        if self.page < 0:
            raise ValueError("page cannot be negative")
        if self.size < 1:
            raise ValueError("size must be at least 1")

    @property
    def offset(self) -> int:
        return self.page * self.size


T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of search results plus the total match count."""

    items: list[T]
    total: int
    page: int
    size: int
