"""Group application service for the directory bounded context.

Handles group lifecycle and membership. Membership lives in independent
association records, so every change here is visible from both the
group's and the user's side.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from directory.application.observability import (
    DefaultGroupServiceProbe,
    GroupServiceProbe,
)
from directory.domain.aggregates import Group
from directory.domain.value_objects import GroupId, Page, PageRequest, UserId
from directory.ports.capabilities import Clock, utc_now
from directory.ports.exceptions import DuplicateKeyError, NotFoundError
from directory.ports.repositories import (
    IGroupRepository,
    IMembershipRepository,
    IUserRepository,
)


class GroupService:
    """Application service for group management.

    Membership edits apply atomically per call: either every change of a
    set/add/remove call is stored or none is.
    """

    def __init__(
        self,
        session: AsyncSession,
        group_repository: IGroupRepository,
        user_repository: IUserRepository,
        membership_repository: IMembershipRepository,
        clock: Clock = utc_now,
        probe: GroupServiceProbe | None = None,
    ):
        """Initialize GroupService with dependencies.

        Args:
            session: Database session for transaction management
            group_repository: Repository for group persistence
            user_repository: Used to skip unknown users in membership edits
            membership_repository: Association records between users and groups
            clock: Source of the current time
            probe: Optional domain probe for observability
        """
        self._session = session
        self._group_repository = group_repository
        self._user_repository = user_repository
        self._membership_repository = membership_repository
        self._clock = clock
        self._probe = probe or DefaultGroupServiceProbe()

    async def _load(self, group_id: GroupId) -> Group:
        group = await self._group_repository.get_by_id(group_id)
        if group is None:
            raise NotFoundError("Group", group_id.value)
        return group

    async def _ensure_unique(self, name: str, exclude: GroupId | None = None) -> None:
        existing = await self._group_repository.get_by_name(name)
        if existing is not None and existing.id != exclude:
            raise DuplicateKeyError("Group", "name", name)

    async def _existing_users(
        self, group_id: GroupId, user_ids: Iterable[UserId]
    ) -> list[UserId]:
        known: list[UserId] = []
        unknown: list[str] = []
        for user_id in dict.fromkeys(user_ids):
            if await self._user_repository.get_by_id(user_id) is None:
                unknown.append(user_id.value)
            else:
                known.append(user_id)
        if unknown:
            self._probe.unknown_members_skipped(
                group_id=group_id.value, user_ids=unknown
            )
        return known

    async def create_group(self, name: str, description: str = "") -> Group:
        """Create a new group.

        Raises:
            FieldValidationError: If the name is blank
            DuplicateKeyError: If the name is already taken
        """
        try:
            async with self._session.begin():
                group = Group.create(name=name, description=description)
                await self._ensure_unique(name)
                group.stamp_created(self._clock())
                await self._group_repository.save(group)
        except Exception as e:
            self._probe.group_creation_failed(name=name, error=str(e))
            raise

        self._probe.group_created(group_id=group.id.value, name=group.name)
        return group

    async def update_group(
        self, group_id: GroupId, name: str, description: str | None = None
    ) -> Group:
        """Rename and redescribe a group.

        Raises:
            NotFoundError: If the group does not exist
            FieldValidationError: If the name is blank
            DuplicateKeyError: If the name belongs to another group
        """
        try:
            async with self._session.begin():
                group = await self._load(group_id)
                group.update(name, description)
                await self._ensure_unique(name, exclude=group.id)
                group.touch(self._clock())
                await self._group_repository.save(group)
        except Exception as e:
            self._probe.group_update_failed(group_id=group_id.value, error=str(e))
            raise

        self._probe.group_updated(group_id=group.id.value, name=group.name)
        return group

    async def delete_group(self, group_id: GroupId) -> None:
        """Delete a group and its membership records.

        Raises:
            NotFoundError: If the group does not exist
        """
        try:
            async with self._session.begin():
                group = await self._load(group_id)
                await self._membership_repository.remove_all_for_group(group.id)
                await self._group_repository.delete(group)
        except Exception as e:
            self._probe.group_deletion_failed(group_id=group_id.value, error=str(e))
            raise

        self._probe.group_deleted(group_id=group.id.value, name=group.name)

    async def get_group(self, group_id: GroupId) -> Group:
        """Get a group by ID with its members.

        Raises:
            NotFoundError: If the group does not exist
        """
        async with self._session.begin():
            return await self._load(group_id)

    async def find_by_name(self, name: str) -> Group | None:
        """Get a group by name, or None if absent."""
        async with self._session.begin():
            return await self._group_repository.get_by_name(name)

    async def search_groups(
        self, query: str | None, page: PageRequest | None = None
    ) -> Page[Group]:
        """Search groups by case-insensitive substring of the name."""
        async with self._session.begin():
            return await self._group_repository.search(query, page or PageRequest())

    async def set_members(self, group_id: GroupId, user_ids: Iterable[UserId]) -> Group:
        """Replace the members of a group.

        Afterwards the members are exactly the existing users among user_ids.

        Raises:
            NotFoundError: If the group does not exist
        """
        try:
            async with self._session.begin():
                group = await self._load(group_id)
                wanted = await self._existing_users(group.id, user_ids)
                current = await self._membership_repository.list_member_ids(group.id)
                to_add = [u for u in wanted if u not in current]
                to_remove = [u for u in current if u not in wanted]
                group = await self._apply(group, to_add, to_remove)
        except Exception as e:
            self._probe.membership_change_failed(group_id=group_id.value, error=str(e))
            raise

        self._probe.members_changed(
            group_id=group.id.value, added=len(to_add), removed=len(to_remove)
        )
        return group

    async def add_members(self, group_id: GroupId, user_ids: Iterable[UserId]) -> Group:
        """Add existing users to a group. Unknown users are skipped.

        Raises:
            NotFoundError: If the group does not exist
        """
        try:
            async with self._session.begin():
                group = await self._load(group_id)
                wanted = await self._existing_users(group.id, user_ids)
                current = await self._membership_repository.list_member_ids(group.id)
                to_add = [u for u in wanted if u not in current]
                group = await self._apply(group, to_add, [])
        except Exception as e:
            self._probe.membership_change_failed(group_id=group_id.value, error=str(e))
            raise

        self._probe.members_changed(
            group_id=group.id.value, added=len(to_add), removed=0
        )
        return group

    async def remove_members(
        self, group_id: GroupId, user_ids: Iterable[UserId]
    ) -> Group:
        """Remove users from a group. Users that are not members are ignored.

        Raises:
            NotFoundError: If the group does not exist
        """
        try:
            async with self._session.begin():
                group = await self._load(group_id)
                current = await self._membership_repository.list_member_ids(group.id)
                to_remove = [u for u in dict.fromkeys(user_ids) if u in current]
                group = await self._apply(group, [], to_remove)
        except Exception as e:
            self._probe.membership_change_failed(group_id=group_id.value, error=str(e))
            raise

        self._probe.members_changed(
            group_id=group.id.value, added=0, removed=len(to_remove)
        )
        return group

    async def _apply(
        self, group: Group, to_add: list[UserId], to_remove: list[UserId]
    ) -> Group:
        for user_id in to_add:
            await self._membership_repository.add(group.id, user_id)
        for user_id in to_remove:
            await self._membership_repository.remove(group.id, user_id)
        if to_add or to_remove:
            group.touch(self._clock())
            await self._group_repository.save(group)
        # Reload so the member snapshot reflects the association records
        return await self._load(group.id)
