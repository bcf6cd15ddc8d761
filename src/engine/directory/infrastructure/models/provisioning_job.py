"""SQLAlchemy ORM model for the provisioning_jobs table."""

from datetime import datetime

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from infrastructure.database.models import Base, UTCDateTime


class ProvisioningJobModel(Base):
    """ORM model for provisioning_jobs table."""

    __tablename__ = "provisioning_jobs"

    id: Mapped[str] = mapped_column(String(26), primary_key=True)
    job_name: Mapped[str] = mapped_column(String(255), nullable=False)
    source_location: Mapped[str | None] = mapped_column(Text, nullable=True)
    dry_run: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    triggered_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    total_processed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    deactivated_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime, nullable=False, index=True
    )
    started_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)

    def __repr__(self) -> str:
        """Return string representation."""
        return f"<ProvisioningJobModel(id={self.id}, status={self.status})>"
