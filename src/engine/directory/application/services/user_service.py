"""User application service for the directory bounded context.

Owns the user uniqueness invariants and the account lockout state machine.
Every public operation runs in its own transaction.
"""

from __future__ import annotations

from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from directory.application.observability import (
    DefaultUserServiceProbe,
    UserServiceProbe,
)
from directory.application.value_objects import DryRunOverlay, UpsertResult
from directory.domain.aggregates import User
from directory.domain.value_objects import (
    Page,
    PageRequest,
    ProvisioningAction,
    UserId,
    UserProfile,
)
from directory.ports.capabilities import Clock, SecretHasher, utc_now
from directory.ports.exceptions import (
    DuplicateKeyError,
    FieldValidationError,
    NotFoundError,
)
from directory.ports.repositories import IMembershipRepository, IUserRepository


def _require_keys(login_name: str | None, email: str | None) -> tuple[str, str]:
    if login_name is None or not login_name.strip():
        raise FieldValidationError("loginName")
    if email is None or not email.strip():
        raise FieldValidationError("email")
    return login_name, email


class UserService:
    """Application service for user management.

    Uniqueness of login name and email is checked against the store before
    every write; the store's unique constraints catch whatever slips past
    a concurrent writer and surface as the same DuplicateKeyError.
    """

    def __init__(
        self,
        session: AsyncSession,
        user_repository: IUserRepository,
        membership_repository: IMembershipRepository,
        hasher: SecretHasher,
        temporary_secret: str,
        clock: Clock = utc_now,
        probe: UserServiceProbe | None = None,
    ):
        """Initialize UserService with dependencies.

        Args:
            session: Database session for transaction management
            user_repository: Repository for user persistence
            membership_repository: Association records, cleared on delete
            hasher: Secret hashing capability
            temporary_secret: Secret given to users created by upsert
            clock: Source of the current time
            probe: Optional domain probe for observability
        """
        self._session = session
        self._user_repository = user_repository
        self._membership_repository = membership_repository
        self._hasher = hasher
        self._temporary_secret = temporary_secret
        self._clock = clock
        self._probe = probe or DefaultUserServiceProbe()

    async def _ensure_unique(
        self, login_name: str, email: str, exclude: UserId | None = None
    ) -> None:
        by_login = await self._user_repository.get_by_login_name(login_name)
        if by_login is not None and by_login.id != exclude:
            raise DuplicateKeyError("User", "loginName", login_name)
        by_email = await self._user_repository.get_by_email(email)
        if by_email is not None and by_email.id != exclude:
            raise DuplicateKeyError("User", "email", email)

    async def _load(self, user_id: UserId) -> User:
        user = await self._user_repository.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id.value)
        return user

    async def create_user(self, profile: UserProfile, secret: str) -> User:
        """Create a new user.

        Args:
            profile: Login name, email and the remaining profile fields
            secret: Plaintext secret, hashed before storage

        Returns:
            The stored User aggregate

        Raises:
            FieldValidationError: If login name or email is blank
            DuplicateKeyError: If login name or email is already taken
        """
        try:
            _require_keys(profile.login_name, profile.email)
            async with self._session.begin():
                await self._ensure_unique(profile.login_name, profile.email)
                user = User.create(profile, self._hasher.hash(secret))
                user.stamp_created(self._clock())
                await self._user_repository.save(user)
        except Exception as e:
            self._probe.user_creation_failed(
                login_name=profile.login_name, error=str(e)
            )
            raise

        self._probe.user_created(user_id=user.id.value, login_name=user.login_name)
        return user

    async def update_user(self, user_id: UserId, profile: UserProfile) -> User:
        """Replace the profile of an existing user. The secret is unchanged.

        Raises:
            NotFoundError: If the user does not exist
            FieldValidationError: If login name or email is blank
            DuplicateKeyError: If login name or email belongs to another user
        """
        try:
            _require_keys(profile.login_name, profile.email)
            async with self._session.begin():
                user = await self._load(user_id)
                await self._ensure_unique(
                    profile.login_name, profile.email, exclude=user.id
                )
                user.apply_profile(profile)
                user.touch(self._clock())
                await self._user_repository.save(user)
        except Exception as e:
            self._probe.user_update_failed(user_id=user_id.value, error=str(e))
            raise

        self._probe.user_updated(user_id=user.id.value, login_name=user.login_name)
        return user

    async def change_password(self, user_id: UserId, new_secret: str) -> User:
        """Re-hash and store a new secret.

        Raises:
            NotFoundError: If the user does not exist
        """
        try:
            async with self._session.begin():
                user = await self._load(user_id)
                user.change_secret(self._hasher.hash(new_secret))
                user.touch(self._clock())
                await self._user_repository.save(user)
        except Exception as e:
            self._probe.user_update_failed(user_id=user_id.value, error=str(e))
            raise

        self._probe.password_changed(user_id=user.id.value)
        return user

    async def record_failed_login(
        self, login_name: str, max_attempts: int, lockout_duration: timedelta
    ) -> User | None:
        """Count a failed login, locking the account at max_attempts.

        Args:
            login_name: Login name that failed to authenticate
            max_attempts: Failed attempts that trigger the lockout
            lockout_duration: Length of the lockout window

        Returns:
            The updated user, or None if the login name is unknown
        """
        now = self._clock()
        async with self._session.begin():
            user = await self._user_repository.get_by_login_name(login_name)
            if user is None:
                return None
            locked = user.record_failed_login(max_attempts, lockout_duration, now)
            user.touch(now)
            await self._user_repository.save(user)

        self._probe.login_failure_recorded(
            user_id=user.id.value,
            login_name=user.login_name,
            failed_attempts=user.failed_login_attempts,
        )
        if locked and user.locked_until is not None:
            self._probe.account_locked(
                user_id=user.id.value,
                login_name=user.login_name,
                locked_until=user.locked_until,
            )
        return user

    async def record_successful_login(self, login_name: str) -> User | None:
        """Reset the failure counter, clear any lockout and stamp the login.

        Returns:
            The updated user, or None if the login name is unknown
        """
        now = self._clock()
        async with self._session.begin():
            user = await self._user_repository.get_by_login_name(login_name)
            if user is None:
                return None
            user.record_successful_login(now)
            user.touch(now)
            await self._user_repository.save(user)

        self._probe.login_recorded(user_id=user.id.value, login_name=user.login_name)
        return user

    def is_locked(self, user: User) -> bool:
        """Check whether the user is inside its lockout window right now."""
        return user.is_locked(self._clock())

    async def upsert_by_login_name(
        self,
        login_name: str | None,
        email: str | None,
        first_name: str | None,
        last_name: str | None,
        active: bool,
    ) -> UpsertResult:
        """Create or update a user keyed by login name.

        An existing user gets its email, names and active flag replaced;
        otherwise a user is created with the temporary secret. Calling this
        twice with the same arguments leaves the store as after one call.

        Raises:
            FieldValidationError: If login name or email is blank
            DuplicateKeyError: If the email belongs to a different user
        """
        login_name, email = _require_keys(login_name, email)
        now = self._clock()
        async with self._session.begin():
            existing = await self._user_repository.get_by_login_name(login_name)
            await self._ensure_unique(
                login_name, email, exclude=existing.id if existing else None
            )
            if existing is not None:
                deactivated = existing.active and not active
                existing.email = email
                existing.first_name = first_name or ""
                existing.last_name = last_name or ""
                existing.active = active
                existing.touch(now)
                await self._user_repository.save(existing)
                user = existing
                result = UpsertResult(
                    user=user,
                    action=ProvisioningAction.UPDATED,
                    deactivated=deactivated,
                )
            else:
                profile = UserProfile(
                    login_name=login_name,
                    email=email,
                    first_name=first_name or "",
                    last_name=last_name or "",
                    active=active,
                )
                user = User.create(profile, self._hasher.hash(self._temporary_secret))
                user.stamp_created(now)
                await self._user_repository.save(user)
                result = UpsertResult(user=user, action=ProvisioningAction.CREATED)

        self._probe.user_upserted(
            user_id=user.id.value,
            login_name=login_name,
            action=result.action.value,
        )
        return result

    async def plan_upsert(
        self,
        login_name: str | None,
        email: str | None,
        active: bool,
        overlay: DryRunOverlay | None = None,
    ) -> UpsertResult:
        """Report what upsert_by_login_name would do, without writing.

        When an overlay is given, keys planned earlier in the same dry run
        count as if they had been written, and this plan is added to it.

        Returns:
            The would-be action; user is the stored user for an update of a
            stored record, None otherwise

        Raises:
            FieldValidationError: If login name or email is blank
            DuplicateKeyError: If the email would collide with a different user
        """
        login_name, email = _require_keys(login_name, email)
        overlay = overlay if overlay is not None else DryRunOverlay()
        async with self._session.begin():
            existing = await self._user_repository.get_by_login_name(login_name)
            owner = overlay.email_owner(email)
            if owner is None:
                by_email = await self._user_repository.get_by_email(email)
                # A stored owner whose email was re-planned has released it
                if (
                    by_email is not None
                    and by_email.login_name != login_name
                    and not overlay.is_planned(by_email.login_name)
                ):
                    owner = by_email.login_name
            if owner is not None and owner != login_name:
                raise DuplicateKeyError("User", "email", email)

        planned = overlay.planned(login_name)
        if planned is not None:
            was_active = planned[1]
        elif existing is not None:
            was_active = existing.active
        else:
            was_active = None
        overlay.remember(login_name, email, active)

        if was_active is None:
            return UpsertResult(user=None, action=ProvisioningAction.CREATED)
        return UpsertResult(
            user=existing,
            action=ProvisioningAction.UPDATED,
            deactivated=was_active and not active,
        )

    async def delete_user(self, user_id: UserId) -> None:
        """Delete a user and its membership records.

        Raises:
            NotFoundError: If the user does not exist
        """
        try:
            async with self._session.begin():
                user = await self._load(user_id)
                await self._membership_repository.remove_all_for_user(user.id)
                await self._user_repository.delete(user)
        except Exception as e:
            self._probe.user_deletion_failed(user_id=user_id.value, error=str(e))
            raise

        self._probe.user_deleted(user_id=user.id.value, login_name=user.login_name)

    async def get_user(self, user_id: UserId) -> User:
        """Get a user by ID.

        Raises:
            NotFoundError: If the user does not exist
        """
        async with self._session.begin():
            return await self._load(user_id)

    async def find_by_login_name(self, login_name: str) -> User | None:
        """Get a user by login name, or None if absent."""
        async with self._session.begin():
            return await self._user_repository.get_by_login_name(login_name)

    async def search_users(
        self, query: str | None, page: PageRequest | None = None
    ) -> Page[User]:
        """Search users by case-insensitive substring of login name or email.

        A blank query matches every user. Results are newest first unless
        the page request asks for alphabetical order.
        """
        page = page or PageRequest()
        async with self._session.begin():
            result = await self._user_repository.search(query, page)

        self._probe.users_searched(
            query=query, count=len(result.items), total=result.total
        )
        return result
