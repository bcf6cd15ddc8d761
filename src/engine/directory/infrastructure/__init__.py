"""Infrastructure adapters for the directory bounded context."""

from directory.infrastructure.csv_feed import CsvFeed
from directory.infrastructure.group_repository import GroupRepository
from directory.infrastructure.membership_repository import MembershipRepository
from directory.infrastructure.provisioning_job_repository import (
    ProvisioningJobRepository,
)
from directory.infrastructure.user_repository import UserRepository

__all__ = [
    "CsvFeed",
    "GroupRepository",
    "MembershipRepository",
    "ProvisioningJobRepository",
    "UserRepository",
]
