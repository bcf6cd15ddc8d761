"""PostgreSQL implementation of IProvisioningJobRepository."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from directory.domain.aggregates import ProvisioningJob
from directory.domain.value_objects import JobId, JobStatus
from directory.infrastructure.models import ProvisioningJobModel
from directory.infrastructure.observability import (
    DefaultProvisioningJobRepositoryProbe,
    ProvisioningJobRepositoryProbe,
)
from directory.ports.repositories import IProvisioningJobRepository

_COLUMNS = (
    "job_name",
    "source_location",
    "dry_run",
    "triggered_by",
    "total_processed",
    "created_count",
    "updated_count",
    "deactivated_count",
    "failed_count",
    "error_message",
    "created_at",
    "started_at",
    "completed_at",
)


class ProvisioningJobRepository(IProvisioningJobRepository):
    """PostgreSQL-backed repository for ProvisioningJob aggregates."""

    def __init__(
        self,
        session: AsyncSession,
        probe: ProvisioningJobRepositoryProbe | None = None,
    ) -> None:
        self._session = session
        self._probe = probe or DefaultProvisioningJobRepositoryProbe()

    async def save(self, job: ProvisioningJob) -> None:
        """Persist a job (insert or update)."""
        model = await self._session.get(ProvisioningJobModel, job.id.value)
        if model is None:
            model = ProvisioningJobModel(id=job.id.value)
            self._session.add(model)

        for column in _COLUMNS:
            setattr(model, column, getattr(job, column))
        model.status = job.status.value

        await self._session.flush()
        self._probe.job_saved(job.id.value, job.status.value)

    async def get_by_id(self, job_id: JobId) -> ProvisioningJob | None:
        model = await self._session.get(ProvisioningJobModel, job_id.value)
        if model is None:
            self._probe.job_not_found(job_id.value)
            return None
        return self._to_domain(model)

    async def list_all(self) -> list[ProvisioningJob]:
        """List every job, newest first."""
        result = await self._session.execute(
            select(ProvisioningJobModel).order_by(
                ProvisioningJobModel.created_at.desc(),
                ProvisioningJobModel.id.desc(),
            )
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    @staticmethod
    def _to_domain(model: ProvisioningJobModel) -> ProvisioningJob:
        return ProvisioningJob(
            id=JobId(value=model.id),
            status=JobStatus(model.status),
            **{column: getattr(model, column) for column in _COLUMNS},
        )
