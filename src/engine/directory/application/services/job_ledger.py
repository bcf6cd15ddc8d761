"""Job ledger for the directory bounded context.

The ledger is the only writer of ProvisioningJob records. Lifecycle
transitions are persisted immediately; per-record tallies are kept in
memory and persisted on checkpoint() and on the terminal transition.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from directory.application.observability import DefaultJobLedgerProbe, JobLedgerProbe
from directory.application.value_objects import RecordOutcome
from directory.domain.aggregates import ProvisioningJob
from directory.domain.value_objects import JobId
from directory.ports.capabilities import Clock, utc_now
from directory.ports.exceptions import NotFoundError
from directory.ports.repositories import IProvisioningJobRepository


class JobLedger:
    """Application service for provisioning job lifecycle and tally."""

    def __init__(
        self,
        session: AsyncSession,
        job_repository: IProvisioningJobRepository,
        clock: Clock = utc_now,
        probe: JobLedgerProbe | None = None,
    ):
        """Initialize JobLedger with dependencies.

        Args:
            session: Database session for transaction management
            job_repository: Repository for job persistence
            clock: Source of the current time
            probe: Optional domain probe for observability
        """
        self._session = session
        self._job_repository = job_repository
        self._clock = clock
        self._probe = probe or DefaultJobLedgerProbe()

    async def _save(self, job: ProvisioningJob) -> None:
        async with self._session.begin():
            await self._job_repository.save(job)

    async def create_job(
        self,
        job_name: str,
        source_location: str | None = None,
        triggered_by: str | None = None,
        dry_run: bool = False,
    ) -> ProvisioningJob:
        """Create and persist a pending job."""
        job = ProvisioningJob.create(
            job_name=job_name,
            source_location=source_location,
            triggered_by=triggered_by,
            now=self._clock(),
            dry_run=dry_run,
        )
        await self._save(job)
        self._probe.job_created(job)
        return job

    async def start(self, job: ProvisioningJob, dry_run: bool | None = None) -> None:
        """Move a pending job to running, optionally choosing its mode first.

        Raises:
            InvalidJobTransitionError: If the job is not pending
        """
        if dry_run is not None:
            job.set_dry_run(dry_run)
        job.start(self._clock())
        await self._save(job)
        self._probe.job_started(job)

    def record(self, job: ProvisioningJob, outcome: RecordOutcome) -> None:
        """Tally one processed record on a running job (in memory).

        Raises:
            InvalidJobTransitionError: If the job is not running
        """
        job.record(outcome.action, deactivated=outcome.deactivated)

    async def checkpoint(self, job: ProvisioningJob) -> None:
        """Persist the current tally of a running job."""
        await self._save(job)
        self._probe.job_checkpointed(job)

    async def complete(self, job: ProvisioningJob) -> None:
        """Move a running job to completed and persist its final tally.

        Raises:
            InvalidJobTransitionError: If the job is not running
        """
        job.complete(self._clock())
        await self._save(job)
        self._probe.job_completed(job)

    async def fail(self, job: ProvisioningJob, message: str) -> None:
        """Move a pending or running job to failed, keeping its tally.

        Raises:
            InvalidJobTransitionError: If the job is already terminal
        """
        job.fail(message, self._clock())
        await self._save(job)
        self._probe.job_failed(job)

    async def get_by_id(self, job_id: JobId) -> ProvisioningJob:
        """Get a job by ID.

        Raises:
            NotFoundError: If the job does not exist
        """
        async with self._session.begin():
            job = await self._job_repository.get_by_id(job_id)
        if job is None:
            raise NotFoundError("ProvisioningJob", job_id.value)
        return job

    async def history(self) -> list[ProvisioningJob]:
        """List every job, newest first."""
        async with self._session.begin():
            return await self._job_repository.list_all()
