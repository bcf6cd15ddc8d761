"""Protocol for job ledger observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

import structlog

if TYPE_CHECKING:
    from directory.domain.aggregates import ProvisioningJob
    from shared_kernel.observability_context import ObservationContext


def _tally(job: ProvisioningJob) -> dict[str, int]:
    return {
        "total_processed": job.total_processed,
        "created_count": job.created_count,
        "updated_count": job.updated_count,
        "deactivated_count": job.deactivated_count,
        "failed_count": job.failed_count,
    }


class JobLedgerProbe(Protocol):
    """Domain probe for provisioning job lifecycle events."""

    def job_created(self, job: ProvisioningJob) -> None:
        """Record that a pending job was created."""
        ...

    def job_started(self, job: ProvisioningJob) -> None:
        """Record that a job moved to running."""
        ...

    def job_checkpointed(self, job: ProvisioningJob) -> None:
        """Record that a running job's tally was persisted."""
        ...

    def job_completed(self, job: ProvisioningJob) -> None:
        """Record that a job completed."""
        ...

    def job_failed(self, job: ProvisioningJob) -> None:
        """Record that a job failed."""
        ...

    def with_context(self, context: ObservationContext) -> JobLedgerProbe:
        """Create a new probe with observation context bound."""
        ...


class DefaultJobLedgerProbe:
    """Default implementation of JobLedgerProbe using structlog."""

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

    def with_context(self, context: ObservationContext) -> DefaultJobLedgerProbe:
        """Create a new probe with observation context bound."""
        return DefaultJobLedgerProbe(logger=self._logger, context=context)

    def job_created(self, job: ProvisioningJob) -> None:
        self._logger.info(
            "job_created",
            job_id=job.id.value,
            job_name=job.job_name,
            source_location=job.source_location,
            triggered_by=job.triggered_by,
            dry_run=job.dry_run,
            **self._get_context_kwargs(),
        )

    def job_started(self, job: ProvisioningJob) -> None:
        self._logger.info(
            "job_started",
            job_id=job.id.value,
            dry_run=job.dry_run,
            **self._get_context_kwargs(),
        )

    def job_checkpointed(self, job: ProvisioningJob) -> None:
        self._logger.debug(
            "job_checkpointed",
            job_id=job.id.value,
            **_tally(job),
            **self._get_context_kwargs(),
        )

    def job_completed(self, job: ProvisioningJob) -> None:
        self._logger.info(
            "job_completed",
            job_id=job.id.value,
            dry_run=job.dry_run,
            **_tally(job),
            **self._get_context_kwargs(),
        )

    def job_failed(self, job: ProvisioningJob) -> None:
        self._logger.error(
            "job_failed",
            job_id=job.id.value,
            error=job.error_message,
            **_tally(job),
            **self._get_context_kwargs(),
        )
