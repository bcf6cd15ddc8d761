"""Domain aggregates for the directory context.

Aggregates are the core business objects containing state and business logic.
They enforce invariants and business rules without depending on infrastructure.
"""

from directory.domain.aggregates.group import Group
from directory.domain.aggregates.provisioning_job import ProvisioningJob
from directory.domain.aggregates.user import User

__all__ = [
    "Group",
    "ProvisioningJob",
    "User",
]
