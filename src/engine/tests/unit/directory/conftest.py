"""Shared fixtures for directory unit tests.

Provides an in-memory stand-in for the store so the services can be
exercised end to end without a database.
"""

from __future__ import annotations

import copy
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from directory.domain.aggregates import Group, ProvisioningJob, User
from directory.domain.value_objects import (
    GroupId,
    GroupMember,
    GroupRef,
    JobId,
    Page,
    PageRequest,
    SortOrder,
    UserId,
)
from directory.ports.repositories import (
    IGroupRepository,
    IMembershipRepository,
    IProvisioningJobRepository,
    IUserRepository,
)

EPOCH = datetime(2024, 1, 15, 9, 30, tzinfo=UTC)


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = EPOCH):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class PlainHasher:
    """Reversible SecretHasher, good enough for tests."""

    def hash(self, secret: str) -> str:
        return f"plain:{secret}"

    def verify(self, secret: str, digest: str) -> bool:
        return digest == f"plain:{secret}"


class InMemoryStore:
    """Records shared by the in-memory repositories."""

    def __init__(self) -> None:
        self.users: dict[UserId, User] = {}
        self.groups: dict[GroupId, Group] = {}
        self.memberships: set[tuple[GroupId, UserId]] = set()
        self.jobs: dict[JobId, ProvisioningJob] = {}


def _paginate(items: list, page: PageRequest) -> Page:
    return Page(
        items=items[page.offset : page.offset + page.size],
        total=len(items),
        page=page.page,
        size=page.size,
    )


class InMemoryUserRepository(IUserRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    def _hydrate(self, user: User) -> User:
        loaded = copy.deepcopy(user)
        refs = [
            GroupRef(group_id=g, name=self._store.groups[g].name)
            for g, u in self._store.memberships
            if u == user.id and g in self._store.groups
        ]
        loaded.groups = tuple(sorted(refs, key=lambda r: r.name))
        return loaded

    async def save(self, user: User) -> None:
        self._store.users[user.id] = copy.deepcopy(user)

    async def get_by_id(self, user_id: UserId) -> User | None:
        user = self._store.users.get(user_id)
        return self._hydrate(user) if user else None

    async def get_by_login_name(self, login_name: str) -> User | None:
        for user in self._store.users.values():
            if user.login_name == login_name:
                return self._hydrate(user)
        return None

    async def get_by_email(self, email: str) -> User | None:
        for user in self._store.users.values():
            if user.email == email:
                return self._hydrate(user)
        return None

    async def search(self, query: str | None, page: PageRequest) -> Page[User]:
        needle = (query or "").strip().lower()
        matches = [
            self._hydrate(u)
            for u in self._store.users.values()
            if needle in u.login_name.lower() or needle in u.email.lower()
        ]
        if page.sort == SortOrder.ALPHABETICAL:
            matches.sort(key=lambda u: u.login_name)
        else:
            matches.sort(key=lambda u: (u.created_at, u.id.value), reverse=True)
        return _paginate(matches, page)

    async def delete(self, user: User) -> bool:
        return self._store.users.pop(user.id, None) is not None


class InMemoryGroupRepository(IGroupRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    def _hydrate(self, group: Group) -> Group:
        loaded = copy.deepcopy(group)
        members = [
            GroupMember(user_id=u, login_name=self._store.users[u].login_name)
            for g, u in self._store.memberships
            if g == group.id and u in self._store.users
        ]
        loaded.members = tuple(sorted(members, key=lambda m: m.login_name))
        return loaded

    async def save(self, group: Group) -> None:
        self._store.groups[group.id] = copy.deepcopy(group)

    async def get_by_id(self, group_id: GroupId) -> Group | None:
        group = self._store.groups.get(group_id)
        return self._hydrate(group) if group else None

    async def get_by_name(self, name: str) -> Group | None:
        for group in self._store.groups.values():
            if group.name == name:
                return self._hydrate(group)
        return None

    async def search(self, query: str | None, page: PageRequest) -> Page[Group]:
        needle = (query or "").strip().lower()
        matches = [
            self._hydrate(g)
            for g in self._store.groups.values()
            if needle in g.name.lower()
        ]
        if page.sort == SortOrder.ALPHABETICAL:
            matches.sort(key=lambda g: g.name)
        else:
            matches.sort(key=lambda g: (g.created_at, g.id.value), reverse=True)
        return _paginate(matches, page)

    async def delete(self, group: Group) -> bool:
        return self._store.groups.pop(group.id, None) is not None


class InMemoryMembershipRepository(IMembershipRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store

    async def add(self, group_id: GroupId, user_id: UserId) -> bool:
        if (group_id, user_id) in self._store.memberships:
            return False
        self._store.memberships.add((group_id, user_id))
        return True

    async def remove(self, group_id: GroupId, user_id: UserId) -> bool:
        if (group_id, user_id) not in self._store.memberships:
            return False
        self._store.memberships.discard((group_id, user_id))
        return True

    async def list_member_ids(self, group_id: GroupId) -> list[UserId]:
        return sorted(
            (u for g, u in self._store.memberships if g == group_id),
            key=lambda u: u.value,
        )

    async def list_group_ids(self, user_id: UserId) -> list[GroupId]:
        return sorted(
            (g for g, u in self._store.memberships if u == user_id),
            key=lambda g: g.value,
        )

    async def remove_all_for_user(self, user_id: UserId) -> int:
        doomed = {m for m in self._store.memberships if m[1] == user_id}
        self._store.memberships -= doomed
        return len(doomed)

    async def remove_all_for_group(self, group_id: GroupId) -> int:
        doomed = {m for m in self._store.memberships if m[0] == group_id}
        self._store.memberships -= doomed
        return len(doomed)


class InMemoryJobRepository(IProvisioningJobRepository):
    def __init__(self, store: InMemoryStore):
        self._store = store
        self.saves: list[ProvisioningJob] = []

    async def save(self, job: ProvisioningJob) -> None:
        snapshot = copy.deepcopy(job)
        self.saves.append(snapshot)
        self._store.jobs[job.id] = snapshot

    async def get_by_id(self, job_id: JobId) -> ProvisioningJob | None:
        job = self._store.jobs.get(job_id)
        return copy.deepcopy(job) if job else None

    async def list_all(self) -> list[ProvisioningJob]:
        return sorted(
            (copy.deepcopy(j) for j in self._store.jobs.values()),
            key=lambda j: (j.created_at, j.id.value),
            reverse=True,
        )


@pytest.fixture
def mock_session():
    """Create mock async session with transaction support."""
    session = AsyncMock()
    mock_transaction = MagicMock()
    mock_transaction.__aenter__ = AsyncMock(return_value=None)
    mock_transaction.__aexit__ = AsyncMock(return_value=None)
    session.begin = MagicMock(return_value=mock_transaction)
    return session


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def hasher() -> PlainHasher:
    return PlainHasher()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def user_repository(store) -> InMemoryUserRepository:
    return InMemoryUserRepository(store)


@pytest.fixture
def group_repository(store) -> InMemoryGroupRepository:
    return InMemoryGroupRepository(store)


@pytest.fixture
def membership_repository(store) -> InMemoryMembershipRepository:
    return InMemoryMembershipRepository(store)


@pytest.fixture
def job_repository(store) -> InMemoryJobRepository:
    return InMemoryJobRepository(store)


@pytest.fixture
def user_service(mock_session, user_repository, membership_repository, hasher, clock):
    """UserService over the in-memory store."""
    from directory.application.services import UserService

    return UserService(
        session=mock_session,
        user_repository=user_repository,
        membership_repository=membership_repository,
        hasher=hasher,
        temporary_secret="ChangeMe123!",
        clock=clock,
    )


@pytest.fixture
def group_service(
    mock_session, group_repository, user_repository, membership_repository, clock
):
    """GroupService over the in-memory store."""
    from directory.application.services import GroupService

    return GroupService(
        session=mock_session,
        group_repository=group_repository,
        user_repository=user_repository,
        membership_repository=membership_repository,
        clock=clock,
    )


@pytest.fixture
def job_ledger(mock_session, job_repository, clock):
    """JobLedger over the in-memory store."""
    from directory.application.services import JobLedger

    return JobLedger(session=mock_session, job_repository=job_repository, clock=clock)
