"""Repository protocols (ports) for the directory bounded context.

Repository protocols define the interface for persisting and retrieving
aggregates. The directory services depend only on these protocols; the
SQLAlchemy implementations live in directory.infrastructure.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from directory.domain.aggregates import Group, ProvisioningJob, User
from directory.domain.value_objects import GroupId, JobId, Page, PageRequest, UserId


@runtime_checkable
class IUserRepository(Protocol):
    """Repository for User aggregate persistence.

    Loaded users carry a snapshot of their group references.
    """

    async def save(self, user: User) -> None:
        """Persist a user aggregate (insert or update).

        Args:
            user: The User aggregate to persist

        Raises:
            DuplicateKeyError: If the store rejects a duplicate login name or email
        """
        ...

    async def get_by_id(self, user_id: UserId) -> User | None:
        """Retrieve a user by its ID, or None if not found."""
        ...

    async def get_by_login_name(self, login_name: str) -> User | None:
        """Retrieve a user by login name (exact match), or None if not found."""
        ...

    async def get_by_email(self, email: str) -> User | None:
        """Retrieve a user by email (exact match), or None if not found."""
        ...

    async def search(self, query: str | None, page: PageRequest) -> Page[User]:
        """Search users by case-insensitive substring of login name or email.

        Args:
            query: Substring to match; None or blank matches every user
            page: Page window and sort order

        Returns:
            One page of users plus the total match count
        """
        ...

    async def delete(self, user: User) -> bool:
        """Delete a user.

        Returns:
            True if deleted, False if not found
        """
        ...


@runtime_checkable
class IGroupRepository(Protocol):
    """Repository for Group aggregate persistence.

    Loaded groups carry a snapshot of their members.
    """

    async def save(self, group: Group) -> None:
        """Persist a group aggregate (insert or update).

        Raises:
            DuplicateKeyError: If the store rejects a duplicate name
        """
        ...

    async def get_by_id(self, group_id: GroupId) -> Group | None:
        """Retrieve a group by its ID, or None if not found."""
        ...

    async def get_by_name(self, name: str) -> Group | None:
        """Retrieve a group by name (exact match), or None if not found."""
        ...

    async def search(self, query: str | None, page: PageRequest) -> Page[Group]:
        """Search groups by case-insensitive substring of the name."""
        ...

    async def delete(self, group: Group) -> bool:
        """Delete a group.

        Returns:
            True if deleted, False if not found
        """
        ...


@runtime_checkable
class IMembershipRepository(Protocol):
    """Association records between users and groups.

    Neither aggregate owns membership. Each record is an independent
    (user, group) pair; both sides read it through this index.
    """

    async def add(self, group_id: GroupId, user_id: UserId) -> bool:
        """Add a membership record.

        Returns:
            True if added, False if it already existed
        """
        ...

    async def remove(self, group_id: GroupId, user_id: UserId) -> bool:
        """Remove a membership record.

        Returns:
            True if removed, False if it did not exist
        """
        ...

    async def list_member_ids(self, group_id: GroupId) -> list[UserId]:
        """List the IDs of the users in a group."""
        ...

    async def list_group_ids(self, user_id: UserId) -> list[GroupId]:
        """List the IDs of the groups a user belongs to."""
        ...

    async def remove_all_for_user(self, user_id: UserId) -> int:
        """Remove every membership of a user. Returns the number removed."""
        ...

    async def remove_all_for_group(self, group_id: GroupId) -> int:
        """Remove every membership of a group. Returns the number removed."""
        ...


@runtime_checkable
class IProvisioningJobRepository(Protocol):
    """Repository for ProvisioningJob aggregate persistence."""

    async def save(self, job: ProvisioningJob) -> None:
        """Persist a job (insert or update)."""
        ...

    async def get_by_id(self, job_id: JobId) -> ProvisioningJob | None:
        """Retrieve a job by its ID, or None if not found."""
        ...

    async def list_all(self) -> list[ProvisioningJob]:
        """List every job, newest first."""
        ...
