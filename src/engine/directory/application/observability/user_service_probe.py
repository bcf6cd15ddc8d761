"""Protocol for user service observability.

Defines the interface for domain probes that capture application-level
domain events for user management and the lockout state machine.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class UserServiceProbe(Protocol):
    """Domain probe for user service operations."""

    def user_created(self, user_id: str, login_name: str) -> None:
        """Record that a user was created."""
        ...

    def user_creation_failed(self, login_name: str, error: str) -> None:
        """Record that user creation failed."""
        ...

    def user_updated(self, user_id: str, login_name: str) -> None:
        """Record that a user profile was replaced."""
        ...

    def user_update_failed(self, user_id: str, error: str) -> None:
        """Record that a user update failed."""
        ...

    def password_changed(self, user_id: str) -> None:
        """Record that a user's secret was replaced."""
        ...

    def user_deleted(self, user_id: str, login_name: str) -> None:
        """Record that a user was deleted."""
        ...

    def user_deletion_failed(self, user_id: str, error: str) -> None:
        """Record that a user deletion failed."""
        ...

    def user_upserted(self, user_id: str, login_name: str, action: str) -> None:
        """Record that a user was created or updated by login name."""
        ...

    def login_failure_recorded(
        self, user_id: str, login_name: str, failed_attempts: int
    ) -> None:
        """Record that a failed login attempt was counted."""
        ...

    def account_locked(
        self, user_id: str, login_name: str, locked_until: datetime
    ) -> None:
        """Record that an account entered its lockout window."""
        ...

    def login_recorded(self, user_id: str, login_name: str) -> None:
        """Record that a successful login reset the lockout state."""
        ...

    def users_searched(self, query: str | None, count: int, total: int) -> None:
        """Record that users were searched."""
        ...

    def with_context(self, context: ObservationContext) -> UserServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultUserServiceProbe:
    """Default implementation of UserServiceProbe using structlog."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger | None = None,
        context: ObservationContext | None = None,
    ):
        self._logger = logger or structlog.get_logger()
        self._context = context

    def _get_context_kwargs(self) -> dict[str, Any]:
        """Get context metadata as kwargs for logging."""
        if self._context is None:
            return {}
        return self._context.as_dict()

    def with_context(self, context: ObservationContext) -> DefaultUserServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultUserServiceProbe(logger=self._logger, context=context)

    def user_created(self, user_id: str, login_name: str) -> None:
        self._logger.info(
            "user_created",
            user_id=user_id,
            login_name=login_name,
            **self._get_context_kwargs(),
        )

    def user_creation_failed(self, login_name: str, error: str) -> None:
        self._logger.error(
            "user_creation_failed",
            login_name=login_name,
            error=error,
            **self._get_context_kwargs(),
        )

    def user_updated(self, user_id: str, login_name: str) -> None:
        self._logger.info(
            "user_updated",
            user_id=user_id,
            login_name=login_name,
            **self._get_context_kwargs(),
        )

    def user_update_failed(self, user_id: str, error: str) -> None:
        self._logger.error(
            "user_update_failed",
            user_id=user_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def password_changed(self, user_id: str) -> None:
        self._logger.info(
            "password_changed",
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def user_deleted(self, user_id: str, login_name: str) -> None:
        self._logger.info(
            "user_deleted",
            user_id=user_id,
            login_name=login_name,
            **self._get_context_kwargs(),
        )

    def user_deletion_failed(self, user_id: str, error: str) -> None:
        self._logger.error(
            "user_deletion_failed",
            user_id=user_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def user_upserted(self, user_id: str, login_name: str, action: str) -> None:
        self._logger.info(
            "user_upserted",
            user_id=user_id,
            login_name=login_name,
            action=action,
            **self._get_context_kwargs(),
        )

    def login_failure_recorded(
        self, user_id: str, login_name: str, failed_attempts: int
    ) -> None:
        self._logger.info(
            "login_failure_recorded",
            user_id=user_id,
            login_name=login_name,
            failed_attempts=failed_attempts,
            **self._get_context_kwargs(),
        )

    def account_locked(
        self, user_id: str, login_name: str, locked_until: datetime
    ) -> None:
        self._logger.warning(
            "account_locked",
            user_id=user_id,
            login_name=login_name,
            locked_until=locked_until.isoformat(),
            **self._get_context_kwargs(),
        )

    def login_recorded(self, user_id: str, login_name: str) -> None:
        self._logger.info(
            "login_recorded",
            user_id=user_id,
            login_name=login_name,
            **self._get_context_kwargs(),
        )

    def users_searched(self, query: str | None, count: int, total: int) -> None:
        self._logger.debug(
            "users_searched",
            query=query,
            count=count,
            total=total,
            **self._get_context_kwargs(),
        )
