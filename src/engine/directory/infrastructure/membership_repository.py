"""PostgreSQL implementation of IMembershipRepository."""

from __future__ import annotations

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from directory.domain.value_objects import GroupId, UserId
from directory.infrastructure.models import UserGroupModel
from directory.infrastructure.observability import (
    DefaultMembershipRepositoryProbe,
    MembershipRepositoryProbe,
)
from directory.ports.repositories import IMembershipRepository


class MembershipRepository(IMembershipRepository):
    """Rows of the user_groups association table."""

    def __init__(
        self, session: AsyncSession, probe: MembershipRepositoryProbe | None = None
    ) -> None:
        self._session = session
        self._probe = probe or DefaultMembershipRepositoryProbe()

    async def _get(self, group_id: GroupId, user_id: UserId) -> UserGroupModel | None:
        return await self._session.get(
            UserGroupModel, {"user_id": user_id.value, "group_id": group_id.value}
        )

    async def add(self, group_id: GroupId, user_id: UserId) -> bool:
        """Add a membership record. Returns False if it already existed."""
        if await self._get(group_id, user_id) is not None:
            return False
        self._session.add(
            UserGroupModel(user_id=user_id.value, group_id=group_id.value)
        )
        await self._session.flush()
        self._probe.membership_added(group_id.value, user_id.value)
        return True

    async def remove(self, group_id: GroupId, user_id: UserId) -> bool:
        """Remove a membership record. Returns False if it did not exist."""
        model = await self._get(group_id, user_id)
        if model is None:
            return False
        await self._session.delete(model)
        await self._session.flush()
        self._probe.membership_removed(group_id.value, user_id.value)
        return True

    async def list_member_ids(self, group_id: GroupId) -> list[UserId]:
        result = await self._session.execute(
            select(UserGroupModel.user_id)
            .where(UserGroupModel.group_id == group_id.value)
            .order_by(UserGroupModel.user_id)
        )
        return [UserId(value=user_id) for user_id in result.scalars().all()]

    async def list_group_ids(self, user_id: UserId) -> list[GroupId]:
        result = await self._session.execute(
            select(UserGroupModel.group_id)
            .where(UserGroupModel.user_id == user_id.value)
            .order_by(UserGroupModel.group_id)
        )
        return [GroupId(value=group_id) for group_id in result.scalars().all()]

    async def remove_all_for_user(self, user_id: UserId) -> int:
        result = await self._session.execute(
            delete(UserGroupModel).where(UserGroupModel.user_id == user_id.value)
        )
        self._probe.memberships_cleared("user", user_id.value, result.rowcount)
        return result.rowcount

    async def remove_all_for_group(self, group_id: GroupId) -> int:
        result = await self._session.execute(
            delete(UserGroupModel).where(UserGroupModel.group_id == group_id.value)
        )
        self._probe.memberships_cleared("group", group_id.value, result.rowcount)
        return result.rowcount
