"""Unit tests for AuthenticationService."""

from datetime import timedelta
from unittest.mock import create_autospec

import pytest
import pytest_asyncio

from directory.application.observability import AuthenticationProbe
from directory.application.services import AuthenticationService
from directory.domain.value_objects import UserProfile
from directory.ports.exceptions import (
    AuthenticationError,
    InactiveAccountError,
    LockedAccountError,
)


@pytest.fixture
def mock_probe():
    """Create mock authentication probe."""
    return create_autospec(AuthenticationProbe, instance=True)


@pytest.fixture
def service(user_service, hasher, mock_probe):
    return AuthenticationService(
        user_service=user_service,
        hasher=hasher,
        max_attempts=3,
        lockout_duration=timedelta(minutes=15),
        probe=mock_probe,
    )


@pytest_asyncio.fixture
async def alice(user_service):
    return await user_service.create_user(
        UserProfile(login_name="alice", email="alice@example.com"), "correct horse"
    )


class TestAuthenticate:
    """Tests for authenticate."""

    @pytest.mark.asyncio
    async def test_correct_secret_returns_user(self, service, alice, clock, mock_probe):
        user = await service.authenticate("alice", "correct horse")

        assert user.id == alice.id
        assert user.last_login_at == clock.now
        mock_probe.user_authenticated.assert_called_once_with(
            user_id=alice.id.value, login_name="alice"
        )

    @pytest.mark.asyncio
    async def test_unknown_user_is_rejected(self, service, mock_probe):
        with pytest.raises(AuthenticationError) as exc_info:
            await service.authenticate("ghost", "whatever")

        assert exc_info.value.reason == "unknown_user"
        mock_probe.authentication_failed.assert_called_once_with(
            login_name="ghost", reason="unknown_user"
        )

    @pytest.mark.asyncio
    async def test_wrong_secret_counts_a_failure(self, service, alice, user_repository):
        with pytest.raises(AuthenticationError) as exc_info:
            await service.authenticate("alice", "wrong")

        assert exc_info.value.reason == "bad_secret"
        stored = await user_repository.get_by_login_name("alice")
        assert stored.failed_login_attempts == 1

    @pytest.mark.asyncio
    async def test_messages_do_not_reveal_the_reason(self, service, alice):
        with pytest.raises(AuthenticationError) as unknown:
            await service.authenticate("ghost", "x")
        with pytest.raises(AuthenticationError) as wrong:
            await service.authenticate("alice", "x")

        assert str(unknown.value) == str(wrong.value) == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_threshold_locks_even_correct_secret(self, service, alice):
        for _ in range(3):
            with pytest.raises(AuthenticationError):
                await service.authenticate("alice", "wrong")

        with pytest.raises(LockedAccountError):
            await service.authenticate("alice", "correct horse")

    @pytest.mark.asyncio
    async def test_lock_expires(self, service, alice, clock, user_repository):
        for _ in range(3):
            with pytest.raises(AuthenticationError):
                await service.authenticate("alice", "wrong")
        clock.advance(timedelta(minutes=16))

        user = await service.authenticate("alice", "correct horse")

        assert user.failed_login_attempts == 0
        assert (await user_repository.get_by_login_name("alice")).locked_until is None

    @pytest.mark.asyncio
    async def test_success_resets_counter(self, service, alice):
        with pytest.raises(AuthenticationError):
            await service.authenticate("alice", "wrong")

        user = await service.authenticate("alice", "correct horse")

        assert user.failed_login_attempts == 0

    @pytest.mark.asyncio
    async def test_inactive_account_is_rejected(self, service, alice, user_service):
        await user_service.update_user(
            alice.id,
            UserProfile(login_name="alice", email="alice@example.com", active=False),
        )

        with pytest.raises(InactiveAccountError):
            await service.authenticate("alice", "correct horse")
