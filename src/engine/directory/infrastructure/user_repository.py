"""PostgreSQL implementation of IUserRepository.

Loaded users carry their group references, read from the user_groups
association table in the same session.
"""

from __future__ import annotations

from collections import defaultdict

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from directory.domain.aggregates import User
from directory.domain.value_objects import (
    GroupId,
    GroupRef,
    Page,
    PageRequest,
    SortOrder,
    UserId,
)
from directory.infrastructure.models import GroupModel, UserGroupModel, UserModel
from directory.infrastructure.observability import (
    DefaultUserRepositoryProbe,
    UserRepositoryProbe,
)
from directory.infrastructure.search import LIKE_ESCAPE, contains_pattern
from directory.ports.exceptions import DuplicateKeyError
from directory.ports.repositories import IUserRepository

# Natural key -> markers of its unique violation (constraint name, column)
_UNIQUE_KEYS = {
    "loginName": ("uq_users_login_name", "users.login_name"),
    "email": ("uq_users_email", "users.email"),
}


class UserRepository(IUserRepository):
    """PostgreSQL-backed repository for User aggregates.

    The repository never opens transactions; callers wrap it in
    `async with session.begin()`.
    """

    def __init__(
        self, session: AsyncSession, probe: UserRepositoryProbe | None = None
    ) -> None:
        """Initialize repository with database session and probe.

        Args:
            session: AsyncSession owned by the calling service
            probe: Optional domain probe for observability
        """
        self._session = session
        self._probe = probe or DefaultUserRepositoryProbe()

    async def save(self, user: User) -> None:
        """Persist a user aggregate.

        Creates a new user or updates an existing one. Group references on
        the aggregate are ignored; membership is written through the
        membership repository.

        Raises:
            DuplicateKeyError: If the login name or email is taken
        """
        model = await self._session.get(UserModel, user.id.value)
        if model is None:
            model = UserModel(id=user.id.value)
            self._session.add(model)

        model.login_name = user.login_name
        model.email = user.email
        model.secret_digest = user.secret_digest
        model.first_name = user.first_name
        model.last_name = user.last_name
        model.phone = user.phone
        model.department = user.department
        model.title = user.title
        model.active = user.active
        model.failed_login_attempts = user.failed_login_attempts
        model.locked_until = user.locked_until
        model.last_login_at = user.last_login_at
        model.attributes = dict(user.attributes)
        if user.created_at is not None:
            model.created_at = user.created_at
        if user.updated_at is not None:
            model.updated_at = user.updated_at

        try:
            # Flush to surface unique violations here rather than at commit
            await self._session.flush()
        except IntegrityError as e:
            for key, markers in _UNIQUE_KEYS.items():
                if any(marker in str(e) for marker in markers):
                    value = user.login_name if key == "loginName" else user.email
                    self._probe.duplicate_user_key(key, value)
                    raise DuplicateKeyError("User", key, value) from e
            raise

        self._probe.user_saved(user.id.value, user.login_name)

    async def get_by_id(self, user_id: UserId) -> User | None:
        """Retrieve a user by its ID, or None if not found."""
        return await self._get_one("id", UserModel.id == user_id.value, user_id.value)

    async def get_by_login_name(self, login_name: str) -> User | None:
        """Retrieve a user by login name (exact match), or None if not found."""
        return await self._get_one(
            "loginName", UserModel.login_name == login_name, login_name
        )

    async def get_by_email(self, email: str) -> User | None:
        """Retrieve a user by email (exact match), or None if not found."""
        return await self._get_one("email", UserModel.email == email, email)

    async def search(self, query: str | None, page: PageRequest) -> Page[User]:
        """Search users by case-insensitive substring of login name or email."""
        stmt = select(UserModel)
        if query and query.strip():
            pattern = contains_pattern(query.strip())
            stmt = stmt.where(
                or_(
                    UserModel.login_name.ilike(pattern, escape=LIKE_ESCAPE),
                    UserModel.email.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )

        total = await self._session.scalar(
            select(func.count()).select_from(stmt.subquery())
        )

        if page.sort == SortOrder.ALPHABETICAL:
            stmt = stmt.order_by(UserModel.login_name.asc())
        else:
            stmt = stmt.order_by(UserModel.created_at.desc(), UserModel.id.desc())

        result = await self._session.execute(
            stmt.offset(page.offset).limit(page.size)
        )
        models = list(result.scalars().all())
        refs = await self._group_refs([m.id for m in models])

        return Page(
            items=[self._to_domain(m, refs.get(m.id, ())) for m in models],
            total=total or 0,
            page=page.page,
            size=page.size,
        )

    async def delete(self, user: User) -> bool:
        """Delete a user. Membership records go with it (CASCADE)."""
        model = await self._session.get(UserModel, user.id.value)
        if model is None:
            return False

        await self._session.delete(model)
        await self._session.flush()
        self._probe.user_deleted(user.id.value)
        return True

    async def _get_one(self, key: str, criterion, value: str) -> User | None:
        result = await self._session.execute(select(UserModel).where(criterion))
        model = result.scalar_one_or_none()

        if model is None:
            self._probe.user_not_found(key, value)
            return None

        refs = await self._group_refs([model.id])
        groups = refs.get(model.id, ())
        self._probe.user_retrieved(model.id, len(groups))
        return self._to_domain(model, groups)

    async def _group_refs(self, user_ids: list[str]) -> dict[str, tuple[GroupRef, ...]]:
        if not user_ids:
            return {}
        stmt = (
            select(UserGroupModel.user_id, GroupModel.id, GroupModel.name)
            .join(GroupModel, GroupModel.id == UserGroupModel.group_id)
            .where(UserGroupModel.user_id.in_(user_ids))
            .order_by(GroupModel.name)
        )
        result = await self._session.execute(stmt)

        refs: dict[str, list[GroupRef]] = defaultdict(list)
        for user_id, group_id, name in result.all():
            refs[user_id].append(GroupRef(group_id=GroupId(value=group_id), name=name))
        return {user_id: tuple(items) for user_id, items in refs.items()}

    @staticmethod
    def _to_domain(model: UserModel, groups: tuple[GroupRef, ...]) -> User:
        return User(
            id=UserId(value=model.id),
            login_name=model.login_name,
            email=model.email,
            secret_digest=model.secret_digest,
            first_name=model.first_name or "",
            last_name=model.last_name or "",
            phone=model.phone,
            department=model.department,
            title=model.title,
            active=model.active,
            failed_login_attempts=model.failed_login_attempts,
            locked_until=model.locked_until,
            last_login_at=model.last_login_at,
            attributes=dict(model.attributes or {}),
            created_at=model.created_at,
            updated_at=model.updated_at,
            groups=groups,
        )
