"""Protocol for authentication observability.

Defines the interface for domain probes that capture credential checks
against the directory.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class AuthenticationProbe(Protocol):
    """Domain probe for authentication operations."""

    def user_authenticated(self, user_id: str, login_name: str) -> None:
        """Record successful authentication."""
        ...

    def authentication_failed(self, login_name: str, reason: str) -> None:
        """Record authentication failure.

        Args:
            login_name: The login name that was presented
            reason: Failure reason (unknown_user, locked, inactive, bad_secret)
        """
        ...

    def with_context(self, context: ObservationContext) -> AuthenticationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultAuthenticationProbe:
    """Default implementation of AuthenticationProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultAuthenticationProbe:
        """Create a new probe with observation context bound."""
        return DefaultAuthenticationProbe(logger=self._logger, context=context)

    def user_authenticated(self, user_id: str, login_name: str) -> None:
        """Record successful authentication."""
        self._logger.info(
            "user_authenticated",
            user_id=user_id,
            login_name=login_name,
            **self._get_context_kwargs(),
        )

    def authentication_failed(self, login_name: str, reason: str) -> None:
        """Record authentication failure."""
        self._logger.warning(
            "authentication_failed",
            login_name=login_name,
            reason=reason,
            **self._get_context_kwargs(),
        )
