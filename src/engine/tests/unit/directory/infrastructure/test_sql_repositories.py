"""Unit tests for the SQLAlchemy repositories.

Runs the real repositories against an in-memory SQLite database through
aiosqlite. Every test wraps repository calls in session.begin(), as the
services do.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import create_autospec

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from directory.domain.aggregates import Group, ProvisioningJob, User
from directory.domain.value_objects import (
    JobStatus,
    PageRequest,
    ProvisioningAction,
    SortOrder,
    UserId,
    UserProfile,
)
from directory.infrastructure import (
    GroupRepository,
    MembershipRepository,
    ProvisioningJobRepository,
    UserRepository,
)
from directory.infrastructure.models import UserModel
from directory.infrastructure.observability import UserRepositoryProbe
from directory.ports.exceptions import DuplicateKeyError
from infrastructure.database.models import Base

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def session():
    """Session on a fresh in-memory database."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    sessionmaker = async_sessionmaker(engine, expire_on_commit=False)
    async with sessionmaker() as session:
        yield session

    await engine.dispose()


def new_user(login_name: str, email: str | None = None, at: datetime = NOW) -> User:
    user = User.create(
        UserProfile(
            login_name=login_name,
            email=email or f"{login_name}@example.com",
            first_name=login_name.title(),
            attributes={"manager": "bob"},
        ),
        "digest",
    )
    user.stamp_created(at)
    return user


def new_group(name: str, at: datetime = NOW) -> Group:
    group = Group.create(name=name, description=f"{name} team")
    group.stamp_created(at)
    return group


class TestUserRepository:
    """Tests for UserRepository."""

    @pytest.mark.asyncio
    async def test_save_and_load(self, session):
        repository = UserRepository(session)
        user = new_user("alice")

        async with session.begin():
            await repository.save(user)
        async with session.begin():
            loaded = await repository.get_by_id(user.id)

        assert loaded == user
        assert loaded.login_name == "alice"
        assert loaded.first_name == "Alice"
        assert loaded.attributes == {"manager": "bob"}
        assert loaded.groups == ()

    @pytest.mark.asyncio
    async def test_lookup_by_natural_keys(self, session):
        repository = UserRepository(session)
        user = new_user("alice")
        async with session.begin():
            await repository.save(user)

        async with session.begin():
            assert await repository.get_by_login_name("alice") == user
            assert await repository.get_by_email("alice@example.com") == user
            assert await repository.get_by_login_name("ALICE") is None
            assert await repository.get_by_id(UserId.generate()) is None

    @pytest.mark.asyncio
    async def test_save_updates_existing_row(self, session):
        repository = UserRepository(session)
        user = new_user("alice")
        async with session.begin():
            await repository.save(user)

        user.email = "alice@new.example.com"
        user.failed_login_attempts = 2
        async with session.begin():
            await repository.save(user)
        async with session.begin():
            loaded = await repository.get_by_login_name("alice")

        assert loaded.email == "alice@new.example.com"
        assert loaded.failed_login_attempts == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "login_name,email,key",
        [
            ("alice", "other@example.com", "loginName"),
            ("alice2", "alice@example.com", "email"),
        ],
    )
    async def test_unique_violation_becomes_duplicate_key(
        self, session, login_name, email, key
    ):
        repository = UserRepository(session)
        async with session.begin():
            await repository.save(new_user("alice"))

        with pytest.raises(DuplicateKeyError) as exc_info:
            async with session.begin():
                await repository.save(new_user(login_name, email))

        assert exc_info.value.key == key

    @pytest.mark.asyncio
    async def test_probe_records_saves_and_duplicates(self, session):
        probe = create_autospec(UserRepositoryProbe, instance=True)
        repository = UserRepository(session, probe=probe)
        user = new_user("alice")
        async with session.begin():
            await repository.save(user)

        with pytest.raises(DuplicateKeyError):
            async with session.begin():
                await repository.save(new_user("alice", "other@example.com"))

        probe.user_saved.assert_called_once_with(user.id.value, "alice")
        probe.duplicate_user_key.assert_called_once_with("loginName", "alice")

    @pytest.mark.asyncio
    async def test_search_by_substring(self, session):
        repository = UserRepository(session)
        async with session.begin():
            await repository.save(new_user("alice", "alice@corp.example"))
            await repository.save(new_user("bob", "bob@home.example"))
            await repository.save(new_user("carol", "carol@corp.example"))

        async with session.begin():
            page = await repository.search(
                "CORP", PageRequest(sort=SortOrder.ALPHABETICAL)
            )

        assert [u.login_name for u in page.items] == ["alice", "carol"]
        assert page.total == 2

    @pytest.mark.asyncio
    async def test_search_treats_wildcards_literally(self, session):
        repository = UserRepository(session)
        async with session.begin():
            await repository.save(new_user("a_b"))
            await repository.save(new_user("axb"))

        async with session.begin():
            page = await repository.search("a_b", PageRequest())

        assert [u.login_name for u in page.items] == ["a_b"]

    @pytest.mark.asyncio
    async def test_search_newest_first_and_paged(self, session):
        repository = UserRepository(session)
        async with session.begin():
            for i, name in enumerate(["u1", "u2", "u3"]):
                await repository.save(new_user(name, at=NOW + timedelta(minutes=i)))

        async with session.begin():
            first = await repository.search(None, PageRequest(page=0, size=2))
            second = await repository.search(None, PageRequest(page=1, size=2))

        assert [u.login_name for u in first.items] == ["u3", "u2"]
        assert [u.login_name for u in second.items] == ["u1"]
        assert first.total == second.total == 3

    @pytest.mark.asyncio
    async def test_delete(self, session):
        repository = UserRepository(session)
        user = new_user("alice")
        async with session.begin():
            await repository.save(user)

        async with session.begin():
            assert await repository.delete(user) is True
        async with session.begin():
            assert await repository.get_by_id(user.id) is None
            assert await repository.delete(user) is False


class TestGroupRepository:
    """Tests for GroupRepository."""

    @pytest.mark.asyncio
    async def test_save_and_load_by_name(self, session):
        repository = GroupRepository(session)
        group = new_group("Engineering")

        async with session.begin():
            await repository.save(group)
        async with session.begin():
            loaded = await repository.get_by_name("Engineering")

        assert loaded == group
        assert loaded.description == "Engineering team"
        assert loaded.members == ()

    @pytest.mark.asyncio
    async def test_duplicate_name(self, session):
        repository = GroupRepository(session)
        async with session.begin():
            await repository.save(new_group("Engineering"))

        with pytest.raises(DuplicateKeyError):
            async with session.begin():
                await repository.save(new_group("Engineering"))

    @pytest.mark.asyncio
    async def test_search(self, session):
        repository = GroupRepository(session)
        async with session.begin():
            for name in ["Sales", "Engineering", "Site Reliability Engineering"]:
                await repository.save(new_group(name))

        async with session.begin():
            page = await repository.search(
                "engineering", PageRequest(sort=SortOrder.ALPHABETICAL)
            )

        assert [g.name for g in page.items] == [
            "Engineering",
            "Site Reliability Engineering",
        ]


class TestMembershipRepository:
    """Membership records are visible from both sides."""

    @pytest.mark.asyncio
    async def test_membership_hydrates_both_aggregates(self, session):
        users = UserRepository(session)
        groups = GroupRepository(session)
        memberships = MembershipRepository(session)
        alice, bob = new_user("alice"), new_user("bob")
        engineering, sales = new_group("Engineering"), new_group("Sales")

        async with session.begin():
            for user in (alice, bob):
                await users.save(user)
            for group in (engineering, sales):
                await groups.save(group)
            assert await memberships.add(engineering.id, bob.id) is True
            assert await memberships.add(engineering.id, alice.id) is True
            assert await memberships.add(sales.id, alice.id) is True
            assert await memberships.add(sales.id, alice.id) is False

        async with session.begin():
            loaded_group = await groups.get_by_id(engineering.id)
            loaded_user = await users.get_by_id(alice.id)

        assert [m.login_name for m in loaded_group.members] == ["alice", "bob"]
        assert [g.name for g in loaded_user.groups] == ["Engineering", "Sales"]

    @pytest.mark.asyncio
    async def test_remove_and_clear(self, session):
        users = UserRepository(session)
        groups = GroupRepository(session)
        memberships = MembershipRepository(session)
        alice = new_user("alice")
        engineering, sales = new_group("Engineering"), new_group("Sales")
        async with session.begin():
            await users.save(alice)
            await groups.save(engineering)
            await groups.save(sales)
            await memberships.add(engineering.id, alice.id)
            await memberships.add(sales.id, alice.id)

        async with session.begin():
            assert await memberships.remove(engineering.id, alice.id) is True
            assert await memberships.remove(engineering.id, alice.id) is False
            assert await memberships.list_group_ids(alice.id) == [sales.id]
            assert await memberships.remove_all_for_user(alice.id) == 1
            assert await memberships.list_member_ids(sales.id) == []


class TestProvisioningJobRepository:
    """Tests for ProvisioningJobRepository."""

    @pytest.mark.asyncio
    async def test_round_trips_tally_and_status(self, session):
        repository = ProvisioningJobRepository(session)
        job = ProvisioningJob.create(
            job_name="hr-sync",
            source_location="/feeds/hr.csv",
            triggered_by="ops",
            now=NOW,
            dry_run=True,
        )
        job.start(NOW)
        job.record(ProvisioningAction.UPDATED, deactivated=True)
        job.record(ProvisioningAction.FAILED)

        async with session.begin():
            await repository.save(job)
        async with session.begin():
            loaded = await repository.get_by_id(job.id)

        assert loaded.status == JobStatus.RUNNING
        assert loaded.dry_run is True
        assert loaded.source_location == "/feeds/hr.csv"
        assert (loaded.total_processed, loaded.updated_count) == (2, 1)
        assert (loaded.deactivated_count, loaded.failed_count) == (1, 1)

    @pytest.mark.asyncio
    async def test_list_all_newest_first(self, session):
        repository = ProvisioningJobRepository(session)
        older = ProvisioningJob.create("a", None, None, NOW)
        newer = ProvisioningJob.create("b", None, None, NOW + timedelta(hours=1))

        async with session.begin():
            await repository.save(older)
            await repository.save(newer)
        async with session.begin():
            jobs = await repository.list_all()

        assert [j.id for j in jobs] == [newer.id, older.id]


class TestModels:
    def test_user_table_has_named_unique_constraints(self):
        names = {c.name for c in UserModel.__table__.constraints}
        assert {"uq_users_login_name", "uq_users_email"} <= names
