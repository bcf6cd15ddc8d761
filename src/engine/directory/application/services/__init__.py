"""Application services for the directory bounded context."""

from directory.application.services.authentication_service import (
    AuthenticationService,
)
from directory.application.services.bootstrap_service import (
    DirectoryBootstrapService,
)
from directory.application.services.group_service import GroupService
from directory.application.services.job_ledger import JobLedger
from directory.application.services.reconciliation_service import (
    ReconciliationService,
)
from directory.application.services.user_service import UserService

__all__ = [
    "AuthenticationService",
    "DirectoryBootstrapService",
    "GroupService",
    "JobLedger",
    "ReconciliationService",
    "UserService",
]
