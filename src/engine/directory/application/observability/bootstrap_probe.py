"""Protocol for directory bootstrap observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class DirectoryBootstrapProbe(Protocol):
    """Domain probe for seeding the directory defaults."""

    def default_group_created(self, group_id: str, name: str) -> None:
        """Record that a missing default group was created."""
        ...

    def admin_user_created(self, user_id: str, login_name: str) -> None:
        """Record that the initial administrator was created."""
        ...

    def defaults_ensured(self, groups_created: int, admin_created: bool) -> None:
        """Record that the bootstrap finished."""
        ...

    def bootstrap_failed(self, error: str) -> None:
        """Record that the bootstrap failed."""
        ...

    def with_context(self, context: ObservationContext) -> DirectoryBootstrapProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultDirectoryBootstrapProbe:
    """Default implementation of DirectoryBootstrapProbe using structlog."""

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

    def with_context(
        self, context: ObservationContext
    ) -> DefaultDirectoryBootstrapProbe:
        """Create a new probe with observation context bound."""
        return DefaultDirectoryBootstrapProbe(logger=self._logger, context=context)

    def default_group_created(self, group_id: str, name: str) -> None:
        self._logger.info(
            "default_group_created",
            group_id=group_id,
            name=name,
            **self._get_context_kwargs(),
        )

    def admin_user_created(self, user_id: str, login_name: str) -> None:
        self._logger.info(
            "admin_user_created",
            user_id=user_id,
            login_name=login_name,
            **self._get_context_kwargs(),
        )

    def defaults_ensured(self, groups_created: int, admin_created: bool) -> None:
        self._logger.info(
            "defaults_ensured",
            groups_created=groups_created,
            admin_created=admin_created,
            **self._get_context_kwargs(),
        )

    def bootstrap_failed(self, error: str) -> None:
        self._logger.error(
            "bootstrap_failed",
            error=error,
            **self._get_context_kwargs(),
        )
