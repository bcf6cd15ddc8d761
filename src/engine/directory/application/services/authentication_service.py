"""Credential checks against the directory.

Verifies a login name and secret, drives the lockout state machine and
rejects locked or inactive accounts. Issues no tokens.
"""

from __future__ import annotations

from datetime import timedelta

from directory.application.observability import (
    AuthenticationProbe,
    DefaultAuthenticationProbe,
)
from directory.application.services.user_service import UserService
from directory.domain.aggregates import User
from directory.ports.capabilities import SecretHasher
from directory.ports.exceptions import (
    AuthenticationError,
    InactiveAccountError,
    LockedAccountError,
)


class AuthenticationService:
    """Application service for login attempts.

    Every rejection raises an AuthenticationError with the same message, so
    callers cannot tell an unknown account from a wrong secret.
    """

    def __init__(
        self,
        user_service: UserService,
        hasher: SecretHasher,
        max_attempts: int,
        lockout_duration: timedelta,
        probe: AuthenticationProbe | None = None,
    ):
        """Initialize AuthenticationService with dependencies.

        Args:
            user_service: Directory core that owns the lockout state
            hasher: Secret verification capability
            max_attempts: Failed attempts that lock the account
            lockout_duration: Length of the lockout window
            probe: Optional domain probe for observability
        """
        self._user_service = user_service
        self._hasher = hasher
        self._max_attempts = max_attempts
        self._lockout_duration = lockout_duration
        self._probe = probe or DefaultAuthenticationProbe()

    async def authenticate(self, login_name: str, secret: str) -> User:
        """Check a login name and secret.

        Returns:
            The authenticated user, with its failure counter reset

        Raises:
            LockedAccountError: If the account is inside its lockout window
            InactiveAccountError: If the account is deactivated
            AuthenticationError: If the account is unknown or the secret is wrong
        """
        user = await self._user_service.find_by_login_name(login_name)
        if user is None:
            self._reject(login_name, "unknown_user")
            raise AuthenticationError("unknown_user")

        if self._user_service.is_locked(user):
            self._reject(login_name, "locked")
            raise LockedAccountError("locked")

        if not user.active:
            self._reject(login_name, "inactive")
            raise InactiveAccountError("inactive")

        if not self._hasher.verify(secret, user.secret_digest):
            await self._user_service.record_failed_login(
                login_name, self._max_attempts, self._lockout_duration
            )
            self._reject(login_name, "bad_secret")
            raise AuthenticationError("bad_secret")

        authenticated = await self._user_service.record_successful_login(login_name)
        result = authenticated or user
        self._probe.user_authenticated(
            user_id=result.id.value, login_name=result.login_name
        )
        return result

    def _reject(self, login_name: str, reason: str) -> None:
        self._probe.authentication_failed(login_name=login_name, reason=reason)
