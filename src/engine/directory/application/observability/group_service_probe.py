"""Protocol for group service observability.

Defines the interface for domain probes that capture application-level
domain events for group and membership management.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class GroupServiceProbe(Protocol):
    """Domain probe for group service operations."""

    def group_created(self, group_id: str, name: str) -> None:
        """Record that a group was created."""
        ...

    def group_creation_failed(self, name: str, error: str) -> None:
        """Record that group creation failed."""
        ...

    def group_updated(self, group_id: str, name: str) -> None:
        """Record that a group was renamed or redescribed."""
        ...

    def group_update_failed(self, group_id: str, error: str) -> None:
        """Record that a group update failed."""
        ...

    def group_deleted(self, group_id: str, name: str) -> None:
        """Record that a group was deleted."""
        ...

    def group_deletion_failed(self, group_id: str, error: str) -> None:
        """Record that a group deletion failed."""
        ...

    def members_changed(self, group_id: str, added: int, removed: int) -> None:
        """Record that the membership of a group changed."""
        ...

    def unknown_members_skipped(self, group_id: str, user_ids: list[str]) -> None:
        """Record that a bulk membership edit named users that do not exist."""
        ...

    def membership_change_failed(self, group_id: str, error: str) -> None:
        """Record that a membership change failed."""
        ...

    def with_context(self, context: ObservationContext) -> GroupServiceProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultGroupServiceProbe:
    """Default implementation of GroupServiceProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultGroupServiceProbe:
        """Create a new probe with observation context bound."""
        return DefaultGroupServiceProbe(logger=self._logger, context=context)

    def group_created(self, group_id: str, name: str) -> None:
        self._logger.info(
            "group_created",
            group_id=group_id,
            name=name,
            **self._get_context_kwargs(),
        )

    def group_creation_failed(self, name: str, error: str) -> None:
        self._logger.error(
            "group_creation_failed",
            name=name,
            error=error,
            **self._get_context_kwargs(),
        )

    def group_updated(self, group_id: str, name: str) -> None:
        self._logger.info(
            "group_updated",
            group_id=group_id,
            name=name,
            **self._get_context_kwargs(),
        )

    def group_update_failed(self, group_id: str, error: str) -> None:
        self._logger.error(
            "group_update_failed",
            group_id=group_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def group_deleted(self, group_id: str, name: str) -> None:
        self._logger.info(
            "group_deleted",
            group_id=group_id,
            name=name,
            **self._get_context_kwargs(),
        )

    def group_deletion_failed(self, group_id: str, error: str) -> None:
        self._logger.error(
            "group_deletion_failed",
            group_id=group_id,
            error=error,
            **self._get_context_kwargs(),
        )

    def members_changed(self, group_id: str, added: int, removed: int) -> None:
        self._logger.info(
            "members_changed",
            group_id=group_id,
            added=added,
            removed=removed,
            **self._get_context_kwargs(),
        )

    def unknown_members_skipped(self, group_id: str, user_ids: list[str]) -> None:
        self._logger.warning(
            "unknown_members_skipped",
            group_id=group_id,
            user_ids=user_ids,
            **self._get_context_kwargs(),
        )

    def membership_change_failed(self, group_id: str, error: str) -> None:
        self._logger.error(
            "membership_change_failed",
            group_id=group_id,
            error=error,
            **self._get_context_kwargs(),
        )
