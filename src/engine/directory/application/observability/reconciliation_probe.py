"""Protocol for reconciliation observability.

Captures per-record failures and the overall run outcome of a
provisioning feed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from shared_kernel.observability_context import ObservationContext


class ReconciliationProbe(Protocol):
    """Domain probe for reconciliation runs."""

    def reconciliation_started(self, job_id: str, dry_run: bool) -> None:
        """Record that a feed started being reconciled."""
        ...

    def record_failed(
        self, job_id: str, row_number: int, login_name: str | None, error: str
    ) -> None:
        """Record that one feed record could not be reconciled."""
        ...

    def reconciliation_aborted(self, job_id: str, row_number: int, error: str) -> None:
        """Record that the run stopped because the feed or store failed."""
        ...

    def reconciliation_finished(self, job_id: str, status: str, processed: int) -> None:
        """Record that a run reached a terminal job status."""
        ...

    def with_context(self, context: ObservationContext) -> ReconciliationProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultReconciliationProbe:
    """Default implementation of ReconciliationProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultReconciliationProbe:
        """Create a new probe with observation context bound."""
        return DefaultReconciliationProbe(logger=self._logger, context=context)

    def reconciliation_started(self, job_id: str, dry_run: bool) -> None:
        self._logger.info(
            "reconciliation_started",
            job_id=job_id,
            dry_run=dry_run,
            **self._get_context_kwargs(),
        )

    def record_failed(
        self, job_id: str, row_number: int, login_name: str | None, error: str
    ) -> None:
        self._logger.warning(
            "record_failed",
            job_id=job_id,
            row_number=row_number,
            login_name=login_name,
            error=error,
            **self._get_context_kwargs(),
        )

    def reconciliation_aborted(self, job_id: str, row_number: int, error: str) -> None:
        self._logger.error(
            "reconciliation_aborted",
            job_id=job_id,
            row_number=row_number,
            error=error,
            **self._get_context_kwargs(),
        )

    def reconciliation_finished(self, job_id: str, status: str, processed: int) -> None:
        self._logger.info(
            "reconciliation_finished",
            job_id=job_id,
            status=status,
            processed=processed,
            **self._get_context_kwargs(),
        )
