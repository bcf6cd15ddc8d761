"""Group aggregate for the directory context."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from directory.domain.value_objects import GroupId, GroupMember, UserId
from directory.ports.exceptions import FieldValidationError


@dataclass(eq=False)
class Group:
    """Group aggregate representing a named collection of users.

    Membership is not owned by the group. It lives in independent
    association records managed through the membership repository; the
    members tuple is a read-only snapshot hydrated on load.

    Business rules:
    - name is non-blank (uniqueness is enforced by the service)
    """

    id: GroupId
    name: str
    description: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None
    members: tuple[GroupMember, ...] = ()

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise FieldValidationError("displayName", "Group name is required")

    @classmethod
    def create(cls, name: str, description: str = "") -> Group:
        """Factory method for a new group with a generated ID.

        Raises:
            FieldValidationError: If the name is blank
        """
        return cls(id=GroupId.generate(), name=name, description=description or "")

    def __str__(self) -> str:
        """Return string representation."""
        return f"Group({self.name})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Group):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def update(self, name: str, description: str | None) -> None:
        """Replace name and description.

        Raises:
            FieldValidationError: If the new name is blank
        """
        if not name or not name.strip():
            raise FieldValidationError("displayName", "Group name is required")
        self.name = name
        self.description = description or ""

    def stamp_created(self, now: datetime) -> None:
        """Pre-save hook for a brand new record."""
        self.created_at = now
        self.updated_at = now

    def touch(self, now: datetime) -> None:
        """Pre-save hook for a modified record."""
        self.updated_at = now

    def has_member(self, user_id: UserId) -> bool:
        """Check membership against the hydrated snapshot."""
        return any(m.user_id == user_id for m in self.members)

    @property
    def member_ids(self) -> frozenset[UserId]:
        """IDs of the users in the hydrated snapshot."""
        return frozenset(m.user_id for m in self.members)
