"""ProvisioningJob aggregate for the directory context."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from directory.domain.value_objects import JobId, JobStatus, ProvisioningAction
from directory.ports.exceptions import InvalidJobTransitionError


@dataclass(eq=False)
class ProvisioningJob:
    """Tracks one execution of a provisioning feed and its tally.

    Business rules:
    - status only moves forward: pending -> running -> completed | failed,
      or pending -> failed
    - a terminal job is immutable
    - counts are non-negative and created + updated + failed <= total
    - deactivated_count overlaps updated_count; it counts updates that
      turned an active user inactive
    """

    id: JobId
    job_name: str
    source_location: str | None
    dry_run: bool
    status: JobStatus
    created_at: datetime
    triggered_by: str | None = None
    total_processed: int = 0
    created_count: int = 0
    updated_count: int = 0
    deactivated_count: int = 0
    failed_count: int = 0
    error_message: str | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @classmethod
    def create(
        cls,
        job_name: str,
        source_location: str | None,
        triggered_by: str | None,
        now: datetime,
        dry_run: bool = False,
    ) -> ProvisioningJob:
        """Factory method for a new pending job.

        Args:
            job_name: Human readable job name
            source_location: Where the feed comes from (file path, URL)
            triggered_by: Operator or system that requested the job
            now: Creation time
            dry_run: Whether the job only simulates its changes

        Returns:
            A new ProvisioningJob in pending state
        """
        return cls(
            id=JobId.generate(),
            job_name=job_name,
            source_location=source_location,
            dry_run=dry_run,
            status=JobStatus.PENDING,
            created_at=now,
            triggered_by=triggered_by,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ProvisioningJob):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def set_dry_run(self, dry_run: bool) -> None:
        """Choose the execution mode before the job starts.

        Raises:
            InvalidJobTransitionError: If the job is no longer pending
        """
        if self.status != JobStatus.PENDING:
            raise InvalidJobTransitionError(
                f"Cannot change mode of job {self.id.value} in status {self.status}"
            )
        self.dry_run = dry_run

    def start(self, now: datetime) -> None:
        """Move from pending to running.

        Raises:
            InvalidJobTransitionError: If the job is not pending
        """
        if self.status != JobStatus.PENDING:
            raise InvalidJobTransitionError(
                f"Cannot start job {self.id.value} in status {self.status}"
            )
        self.status = JobStatus.RUNNING
        self.started_at = now

    def complete(self, now: datetime) -> None:
        """Move from running to completed.

        Raises:
            InvalidJobTransitionError: If the job is not running
        """
        if self.status != JobStatus.RUNNING:
            raise InvalidJobTransitionError(
                f"Cannot complete job {self.id.value} in status {self.status}"
            )
        self.status = JobStatus.COMPLETED
        self.completed_at = now

    def fail(self, message: str, now: datetime) -> None:
        """Move from pending or running to failed, keeping the tally.

        Raises:
            InvalidJobTransitionError: If the job is already terminal
        """
        if self.is_terminal:
            raise InvalidJobTransitionError(
                f"Cannot fail job {self.id.value} in status {self.status}"
            )
        self.status = JobStatus.FAILED
        self.error_message = message
        self.completed_at = now

    def record(self, action: ProvisioningAction, deactivated: bool = False) -> None:
        """Tally one processed record.

        Raises:
            InvalidJobTransitionError: If the job is not running
        """
        if self.status != JobStatus.RUNNING:
            raise InvalidJobTransitionError(
                f"Cannot record results on job {self.id.value} in status {self.status}"
            )
        self.total_processed += 1
        if action == ProvisioningAction.CREATED:
            self.created_count += 1
        elif action == ProvisioningAction.UPDATED:
            self.updated_count += 1
            if deactivated:
                self.deactivated_count += 1
        else:
            self.failed_count += 1
