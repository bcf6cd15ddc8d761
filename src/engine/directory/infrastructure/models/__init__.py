"""SQLAlchemy ORM models for the directory bounded context.

These models map to database tables and are used by repository implementations.
"""

from directory.infrastructure.models.group import GroupModel
from directory.infrastructure.models.membership import UserGroupModel
from directory.infrastructure.models.provisioning_job import ProvisioningJobModel
from directory.infrastructure.models.user import UserModel

__all__ = [
    "GroupModel",
    "ProvisioningJobModel",
    "UserGroupModel",
    "UserModel",
]
