"""PostgreSQL implementation of IGroupRepository.

Loaded groups carry their members, read from the user_groups
association table in the same session.
"""

from __future__ import annotations

from collections import defaultdict

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from directory.domain.aggregates import Group
from directory.domain.value_objects import (
    GroupId,
    GroupMember,
    Page,
    PageRequest,
    SortOrder,
    UserId,
)
from directory.infrastructure.models import GroupModel, UserGroupModel, UserModel
from directory.infrastructure.observability import (
    DefaultGroupRepositoryProbe,
    GroupRepositoryProbe,
)
from directory.infrastructure.search import LIKE_ESCAPE, contains_pattern
from directory.ports.exceptions import DuplicateKeyError
from directory.ports.repositories import IGroupRepository


class GroupRepository(IGroupRepository):
    """PostgreSQL-backed repository for Group aggregates."""

    def __init__(
        self, session: AsyncSession, probe: GroupRepositoryProbe | None = None
    ) -> None:
        """Initialize repository with database session and probe.

        Args:
            session: AsyncSession owned by the calling service
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultGroupRepositoryProbe()

    async def save(self, group: Group) -> None:
        """Persist group metadata. Members are written by the membership repository.

        Raises:
            DuplicateKeyError: If the group name is taken
        """
        model = await self._session.get(GroupModel, group.id.value)
        if model is None:
            model = GroupModel(id=group.id.value)
            self._session.add(model)

        model.name = group.name
        model.description = group.description
        if group.created_at is not None:
            model.created_at = group.created_at
        if group.updated_at is not None:
            model.updated_at = group.updated_at

        try:
            await self._session.flush()
        except IntegrityError as e:
            if "uq_groups_name" in str(e) or "groups.name" in str(e):
                self._probe.duplicate_group_name(group.name)
                raise DuplicateKeyError("Group", "name", group.name) from e
            raise

        self._probe.group_saved(group.id.value, group.name)

    async def get_by_id(self, group_id: GroupId) -> Group | None:
        """Fetch a group with its members hydrated, or None if not found."""
        return await self._get_one(
            "id", GroupModel.id == group_id.value, group_id.value
        )

    async def get_by_name(self, name: str) -> Group | None:
        """Fetch a group by exact name, or None if not found."""
        return await self._get_one("name", GroupModel.name == name, name)

    async def search(self, query: str | None, page: PageRequest) -> Page[Group]:
        """Search groups by case-insensitive substring of the name."""
        stmt = select(GroupModel)
        if query and query.strip():
            stmt = stmt.where(
                GroupModel.name.ilike(
                    contains_pattern(query.strip()), escape=LIKE_ESCAPE
                )
            )

        total = await self._session.scalar(
            select(func.count()).select_from(stmt.subquery())
        )

        if page.sort == SortOrder.ALPHABETICAL:
            stmt = stmt.order_by(GroupModel.name.asc())
        else:
            stmt = stmt.order_by(GroupModel.created_at.desc(), GroupModel.id.desc())

        result = await self._session.execute(
            stmt.offset(page.offset).limit(page.size)
        )
        models = list(result.scalars().all())
        members = await self._members([m.id for m in models])

        return Page(
            items=[self._to_domain(m, members.get(m.id, ())) for m in models],
            total=total or 0,
            page=page.page,
            size=page.size,
        )

    async def delete(self, group: Group) -> bool:
        """Delete a group. Membership records go with it (CASCADE)."""
        model = await self._session.get(GroupModel, group.id.value)
        if model is None:
            return False

        await self._session.delete(model)
        await self._session.flush()
        self._probe.group_deleted(group.id.value)
        return True

    async def _get_one(self, key: str, criterion, value: str) -> Group | None:
        result = await self._session.execute(select(GroupModel).where(criterion))
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.group_not_found(key, value)
            return None

        members = await self._members([model.id])
        group_members = members.get(model.id, ())
        self._probe.group_retrieved(model.id, len(group_members))
        return self._to_domain(model, group_members)

    async def _members(
        self, group_ids: list[str]
    ) -> dict[str, tuple[GroupMember, ...]]:
        if not group_ids:
            return {}
        stmt = (
            select(UserGroupModel.group_id, UserModel.id, UserModel.login_name)
            .join(UserModel, UserModel.id == UserGroupModel.user_id)
            .where(UserGroupModel.group_id.in_(group_ids))
            .order_by(UserModel.login_name)
        )
        result = await self._session.execute(stmt)

        members: dict[str, list[GroupMember]] = defaultdict(list)
        for group_id, user_id, login_name in result.all():
            members[group_id].append(
                GroupMember(user_id=UserId(value=user_id), login_name=login_name)
            )
        return {group_id: tuple(items) for group_id, items in members.items()}

    @staticmethod
    def _to_domain(model: GroupModel, members: tuple[GroupMember, ...]) -> Group:
        return Group(
            id=GroupId(value=model.id),
            name=model.name,
            description=model.description or "",
            created_at=model.created_at,
            updated_at=model.updated_at,
            members=members,
        )
