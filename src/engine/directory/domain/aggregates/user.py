"""User aggregate for the directory context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from directory.domain.value_objects import (
    GroupRef,
    LockoutState,
    UserId,
    UserProfile,
)
from directory.ports.exceptions import FieldValidationError


def _require(field_name: str, value: str | None) -> str:
    if value is None or not value.strip():
        raise FieldValidationError(field_name)
    return value


@dataclass(eq=False)
class User:
    """User aggregate: the authoritative record of a person.

    Business rules:
    - login_name and email are non-blank (uniqueness is enforced by the
      service against the store, not by the aggregate)
    - failed_login_attempts is never negative
    - a locked_until in the past means the account is not locked

    Timestamps are assigned explicitly through stamp_created() and touch();
    the directory services call them with their injected clock before every
    save.

    Group references are a read-only snapshot hydrated by the repository
    from the membership records; changing them here has no effect.
    """

    id: UserId
    login_name: str
    email: str
    secret_digest: str
    first_name: str = ""
    last_name: str = ""
    phone: str | None = None
    department: str | None = None
    title: str | None = None
    active: bool = True
    failed_login_attempts: int = 0
    locked_until: datetime | None = None
    last_login_at: datetime | None = None
    attributes: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    groups: tuple[GroupRef, ...] = ()

    def __post_init__(self) -> None:
        _require("loginName", self.login_name)
        _require("email", self.email)
        if self.failed_login_attempts < 0:
            raise ValueError("failed_login_attempts cannot be negative")

    @classmethod
    def create(cls, profile: UserProfile, secret_digest: str) -> User:
        """Factory method for a new user with a generated ID.

        Args:
            profile: Login name, email and the remaining profile fields
            secret_digest: Already-hashed secret

        Returns:
            A new, unsaved User aggregate

        Raises:
            FieldValidationError: If login name or email is blank
        """
        user = cls(
            id=UserId.generate(),
            login_name=profile.login_name,
            email=profile.email,
            secret_digest=secret_digest,
        )
        user.apply_profile(profile)
        return user

    def __str__(self) -> str:
        """Return string representation."""
        return f"User({self.login_name})"

    def __eq__(self, other: object) -> bool:
        """Users are equal if they have the same ID (identity-based equality)."""
        if not isinstance(other, User):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        """Hash based on ID for use in sets and dicts."""
        return hash(self.id)

    @property
    def display_name(self) -> str:
        """Full name, falling back to the login name."""
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.login_name

    def apply_profile(self, profile: UserProfile) -> None:
        """Replace all mutable profile fields.

        Raises:
            FieldValidationError: If login name or email is blank
        """
        self.login_name = _require("loginName", profile.login_name)
        self.email = _require("email", profile.email)
        self.first_name = profile.first_name
        self.last_name = profile.last_name
        self.phone = profile.phone
        self.department = profile.department
        self.title = profile.title
        self.active = profile.active
        self.attributes = dict(profile.attributes)

    def change_secret(self, secret_digest: str) -> None:
        """Replace the stored secret digest."""
        self.secret_digest = secret_digest

    def stamp_created(self, now: datetime) -> None:
        """Pre-save hook for a brand new record."""
        self.created_at = now
        self.updated_at = now

    def touch(self, now: datetime) -> None:
        """Pre-save hook for a modified record."""
        self.updated_at = now

    def is_locked(self, now: datetime) -> bool:
        """Check whether the account is inside its lockout window.

        Args:
            now: Evaluation time

        Returns:
            True iff locked_until is set and strictly after now
        """
        return self.locked_until is not None and now < self.locked_until

    def lockout_state(self, now: datetime) -> LockoutState:
        """Lockout state as observed at the given time."""
        return LockoutState.LOCKED if self.is_locked(now) else LockoutState.UNLOCKED

    def record_failed_login(
        self, max_attempts: int, lockout_duration: timedelta, now: datetime
    ) -> bool:
        """Count a failed login and lock the account at the threshold.

        This is the only transition into the locked state.

        Args:
            max_attempts: Failed attempts that trigger the lockout
            lockout_duration: Length of the lockout window
            now: Time of the attempt

        Returns:
            True if this attempt started (or restarted) a lockout window
        """
        self.failed_login_attempts += 1
        if self.failed_login_attempts >= max_attempts:
            self.locked_until = now + lockout_duration
            return True
        return False

    def record_successful_login(self, now: datetime) -> None:
        """Reset the failure counter and clear any lockout.

        This is the only stored transition out of the locked state.
        """
        self.failed_login_attempts = 0
        self.locked_until = None
        self.last_login_at = now
