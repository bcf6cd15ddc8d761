"""Reconciliation of external provisioning feeds against the directory.

Records are pulled one at a time and classified as created, updated or
failed. In commit mode each record is upserted through the UserService;
in dry run nothing is written and the classification comes from
UserService.plan_upsert.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from directory.application.column_mapping import ColumnMapping, MappedRecord
from directory.application.observability import (
    DefaultReconciliationProbe,
    ReconciliationProbe,
)
from directory.application.services.job_ledger import JobLedger
from directory.application.services.user_service import UserService
from directory.application.value_objects import (
    DryRunOverlay,
    ReconciliationResult,
    RecordOutcome,
    UpsertResult,
)
from directory.domain.aggregates import ProvisioningJob
from directory.domain.value_objects import JobId, ProvisioningAction
from directory.ports.exceptions import (
    DirectoryError,
    FieldValidationError,
    SourceReadError,
)

Feed = Iterable[Mapping[str | None, str | None]]


def _require_fields(record: MappedRecord) -> None:
    """Every feed record must carry a non-blank login name, email and names."""
    for field, value in (
        ("loginName", record.login_name),
        ("email", record.email),
        ("firstName", record.first_name),
        ("lastName", record.last_name),
    ):
        if not value:
            raise FieldValidationError(field)


class ReconciliationService:
    """Drives a feed through the directory and keeps the tally on a job.

    A directory error on one record fails that record only. An error
    reading the feed, or any other error (the store going away), fails the
    whole job; counts tallied up to that point are kept.
    """

    def __init__(
        self,
        user_service: UserService,
        job_ledger: JobLedger,
        checkpoint_interval: int = 100,
        max_rows: int | None = 5000,
        probe: ReconciliationProbe | None = None,
    ):
        """Initialize ReconciliationService with dependencies.

        Args:
            user_service: Directory core used for lookups and upserts
            job_ledger: Owner of the job lifecycle and tally
            checkpoint_interval: Persist the running tally every N records
            max_rows: Largest accepted feed; None disables the limit
            probe: Optional domain probe for observability
        """
        if checkpoint_interval < 1:
            raise ValueError("checkpoint_interval must be at least 1")
        self._user_service = user_service
        self._job_ledger = job_ledger
        self._checkpoint_interval = checkpoint_interval
        self._max_rows = max_rows
        self._probe = probe or DefaultReconciliationProbe()

    async def run(
        self,
        job_name: str,
        feed: Feed,
        source_location: str | None = None,
        triggered_by: str | None = None,
        dry_run: bool = False,
        mapping: ColumnMapping | None = None,
    ) -> ReconciliationResult:
        """Create a job for the feed and execute it."""
        job = await self._job_ledger.create_job(
            job_name=job_name,
            source_location=source_location,
            triggered_by=triggered_by,
            dry_run=dry_run,
        )
        return await self._execute(job, feed, None, mapping or ColumnMapping.DEFAULT)

    async def execute_job(
        self,
        job_id: JobId,
        feed: Feed,
        dry_run: bool | None = None,
        mapping: ColumnMapping | None = None,
    ) -> ReconciliationResult:
        """Execute a pending job against a feed.

        Args:
            job_id: The pending job to run
            feed: Ordered rows of string-keyed values
            dry_run: Overrides the job's mode when given
            mapping: Column mapping; the default mapping when omitted

        Returns:
            The job in its terminal state plus the per-record outcomes

        Raises:
            NotFoundError: If the job does not exist
            InvalidJobTransitionError: If the job is not pending
        """
        job = await self._job_ledger.get_by_id(job_id)
        return await self._execute(job, feed, dry_run, mapping or ColumnMapping.DEFAULT)

    async def _execute(
        self,
        job: ProvisioningJob,
        feed: Feed,
        dry_run: bool | None,
        mapping: ColumnMapping,
    ) -> ReconciliationResult:
        await self._job_ledger.start(job, dry_run=dry_run)
        self._probe.reconciliation_started(job_id=job.id.value, dry_run=job.dry_run)

        outcomes: list[RecordOutcome] = []
        overlay = DryRunOverlay()
        row_number = 0
        try:
            for row in feed:
                row_number += 1
                if self._max_rows is not None and row_number > self._max_rows:
                    raise SourceReadError(
                        f"Feed exceeds the maximum of {self._max_rows} rows"
                    )
                outcome = await self._reconcile(job, row_number, row, mapping, overlay)
                outcomes.append(outcome)
                self._job_ledger.record(job, outcome)
                if row_number % self._checkpoint_interval == 0:
                    await self._job_ledger.checkpoint(job)
        except Exception as e:
            self._probe.reconciliation_aborted(
                job_id=job.id.value, row_number=row_number, error=str(e)
            )
            await self._job_ledger.fail(job, str(e))
        else:
            await self._job_ledger.complete(job)

        self._probe.reconciliation_finished(
            job_id=job.id.value, status=job.status.value, processed=job.total_processed
        )
        return ReconciliationResult(job=job, outcomes=outcomes)

    async def _reconcile(
        self,
        job: ProvisioningJob,
        row_number: int,
        row: Mapping[str | None, str | None],
        mapping: ColumnMapping,
        overlay: DryRunOverlay,
    ) -> RecordOutcome:
        record = mapping.extract(row)
        try:
            _require_fields(record)
            result: UpsertResult
            if job.dry_run:
                result = await self._user_service.plan_upsert(
                    record.login_name, record.email, record.active, overlay=overlay
                )
            else:
                result = await self._user_service.upsert_by_login_name(
                    record.login_name,
                    record.email,
                    record.first_name,
                    record.last_name,
                    record.active,
                )
        except SourceReadError:
            raise
        except DirectoryError as e:
            self._probe.record_failed(
                job_id=job.id.value,
                row_number=row_number,
                login_name=record.login_name,
                error=str(e),
            )
            return RecordOutcome(
                row_number=row_number,
                login_name=record.login_name,
                action=ProvisioningAction.FAILED,
                error=str(e),
            )

        return RecordOutcome(
            row_number=row_number,
            login_name=record.login_name,
            action=result.action,
            deactivated=result.deactivated,
        )
