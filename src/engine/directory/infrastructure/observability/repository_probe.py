"""Domain probes for directory repository operations.

Following Domain-Oriented Observability patterns, these probes capture
domain-significant events related to user, group, membership and job
persistence.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class UserRepositoryProbe(Protocol):
    """Domain probe for user repository operations."""

    def user_saved(self, user_id: str, login_name: str) -> None:
        """Record that a user was successfully saved."""
        ...

    def user_retrieved(self, user_id: str, group_count: int) -> None:
        """Record that a user was retrieved with its groups hydrated."""
        ...

    def user_not_found(self, key: str, value: str) -> None:
        """Record that a lookup by id, login name or email found nothing."""
        ...

    def duplicate_user_key(self, key: str, value: str) -> None:
        """Record that the store rejected a duplicate natural key."""
        ...

    def user_deleted(self, user_id: str) -> None:
        """Record that a user was deleted."""
        ...

    def with_context(self, context: ObservationContext) -> UserRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class GroupRepositoryProbe(Protocol):
    """Domain probe for group repository operations."""

    def group_saved(self, group_id: str, name: str) -> None:
        """Record that a group was successfully saved."""
        ...

    def group_retrieved(self, group_id: str, member_count: int) -> None:
        """Record that a group was retrieved with members hydrated."""
        ...

    def group_not_found(self, key: str, value: str) -> None:
        """Record that a group was not found."""
        ...

    def duplicate_group_name(self, name: str) -> None:
        """Record that the store rejected a duplicate group name."""
        ...

    def group_deleted(self, group_id: str) -> None:
        """Record that a group was deleted."""
        ...

    def with_context(self, context: ObservationContext) -> GroupRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class MembershipRepositoryProbe(Protocol):
    """Domain probe for membership record operations."""

    def membership_added(self, group_id: str, user_id: str) -> None:
        """Record that a membership record was written."""
        ...

    def membership_removed(self, group_id: str, user_id: str) -> None:
        """Record that a membership record was removed."""
        ...

    def memberships_cleared(self, owner: str, owner_id: str, count: int) -> None:
        """Record that every membership of a user or group was removed."""
        ...

    def with_context(self, context: ObservationContext) -> MembershipRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class ProvisioningJobRepositoryProbe(Protocol):
    """Domain probe for provisioning job repository operations."""

    def job_saved(self, job_id: str, status: str) -> None:
        """Record that a job was successfully saved."""
        ...

    def job_not_found(self, job_id: str) -> None:
        """Record that a job was not found."""
        ...

    def with_context(
        self, context: ObservationContext
    ) -> ProvisioningJobRepositoryProbe:
        """Create a new probe with observation context bound."""
        ...


class _StructlogProbe:
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


class DefaultUserRepositoryProbe(_StructlogProbe):
    """Default implementation of UserRepositoryProbe using structlog."""

    def with_context(self, context: ObservationContext) -> DefaultUserRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultUserRepositoryProbe(logger=self._logger, context=context)

    def user_saved(self, user_id: str, login_name: str) -> None:
        """Record that a user was successfully saved."""
        self._logger.info(
            "user_saved",
            user_id=user_id,
            login_name=login_name,
            **self._get_context_kwargs(),
        )

    def user_retrieved(self, user_id: str, group_count: int) -> None:
        """Record that a user was retrieved with its groups hydrated."""
        self._logger.debug(
            "user_retrieved",
            user_id=user_id,
            group_count=group_count,
            **self._get_context_kwargs(),
        )

    def user_not_found(self, key: str, value: str) -> None:
        """Record that a user was not found."""
        self._logger.debug(
            "user_not_found",
            key=key,
            value=value,
            **self._get_context_kwargs(),
        )

    def duplicate_user_key(self, key: str, value: str) -> None:
        """Record that the store rejected a duplicate natural key."""
        self._logger.warning(
            "duplicate_user_key",
            key=key,
            value=value,
            **self._get_context_kwargs(),
        )

    def user_deleted(self, user_id: str) -> None:
        """Record that a user was deleted."""
        self._logger.info(
            "user_deleted",
            user_id=user_id,
            **self._get_context_kwargs(),
        )


class DefaultGroupRepositoryProbe(_StructlogProbe):
    """Default implementation of GroupRepositoryProbe using structlog."""

    def with_context(self, context: ObservationContext) -> DefaultGroupRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultGroupRepositoryProbe(logger=self._logger, context=context)

    def group_saved(self, group_id: str, name: str) -> None:
        """Record that a group was successfully saved."""
        self._logger.info(
            "group_saved",
            group_id=group_id,
            name=name,
            **self._get_context_kwargs(),
        )

    def group_retrieved(self, group_id: str, member_count: int) -> None:
        """Record that a group was retrieved with members hydrated."""
        self._logger.debug(
            "group_retrieved",
            group_id=group_id,
            member_count=member_count,
            **self._get_context_kwargs(),
        )

    def group_not_found(self, key: str, value: str) -> None:
        """Record that a group was not found."""
        self._logger.debug(
            "group_not_found",
            key=key,
            value=value,
            **self._get_context_kwargs(),
        )

    def duplicate_group_name(self, name: str) -> None:
        """Record that the store rejected a duplicate group name."""
        self._logger.warning(
            "duplicate_group_name",
            name=name,
            **self._get_context_kwargs(),
        )

    def group_deleted(self, group_id: str) -> None:
        """Record that a group was deleted."""
        self._logger.info(
            "group_deleted",
            group_id=group_id,
            **self._get_context_kwargs(),
        )


class DefaultMembershipRepositoryProbe(_StructlogProbe):
    """Default implementation of MembershipRepositoryProbe using structlog."""

    def with_context(
        self, context: ObservationContext
    ) -> DefaultMembershipRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultMembershipRepositoryProbe(logger=self._logger, context=context)

    def membership_added(self, group_id: str, user_id: str) -> None:
        self._logger.debug(
            "membership_added",
            group_id=group_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def membership_removed(self, group_id: str, user_id: str) -> None:
        self._logger.debug(
            "membership_removed",
            group_id=group_id,
            user_id=user_id,
            **self._get_context_kwargs(),
        )

    def memberships_cleared(self, owner: str, owner_id: str, count: int) -> None:
        self._logger.debug(
            "memberships_cleared",
            owner=owner,
            owner_id=owner_id,
            count=count,
            **self._get_context_kwargs(),
        )


class DefaultProvisioningJobRepositoryProbe(_StructlogProbe):
    """Default implementation of ProvisioningJobRepositoryProbe using structlog."""

    def with_context(
        self, context: ObservationContext
    ) -> DefaultProvisioningJobRepositoryProbe:
        """Create a new probe with observation context bound."""
        return DefaultProvisioningJobRepositoryProbe(
            logger=self._logger, context=context
        )

    def job_saved(self, job_id: str, status: str) -> None:
        self._logger.debug(
            "job_saved",
            job_id=job_id,
            status=status,
            **self._get_context_kwargs(),
        )

    def job_not_found(self, job_id: str) -> None:
        self._logger.debug(
            "job_not_found",
            job_id=job_id,
            **self._get_context_kwargs(),
        )
