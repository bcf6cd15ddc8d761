"""Domain-Oriented Observability for directory infrastructure."""

from directory.infrastructure.observability.repository_probe import (
    DefaultGroupRepositoryProbe,
    DefaultMembershipRepositoryProbe,
    DefaultProvisioningJobRepositoryProbe,
    DefaultUserRepositoryProbe,
    GroupRepositoryProbe,
    MembershipRepositoryProbe,
    ProvisioningJobRepositoryProbe,
    UserRepositoryProbe,
)

__all__ = [
    "DefaultGroupRepositoryProbe",
    "DefaultMembershipRepositoryProbe",
    "DefaultProvisioningJobRepositoryProbe",
    "DefaultUserRepositoryProbe",
    "GroupRepositoryProbe",
    "MembershipRepositoryProbe",
    "ProvisioningJobRepositoryProbe",
    "UserRepositoryProbe",
]
