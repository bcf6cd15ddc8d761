"""Domain-Oriented Observability for the directory application layer.

Probes for application service operations following Domain-Oriented
Observability patterns.
"""

from directory.application.observability.authentication_probe import (
    AuthenticationProbe,
    DefaultAuthenticationProbe,
)
from directory.application.observability.bootstrap_probe import (
    DefaultDirectoryBootstrapProbe,
    DirectoryBootstrapProbe,
)
from directory.application.observability.group_service_probe import (
    DefaultGroupServiceProbe,
    GroupServiceProbe,
)
from directory.application.observability.job_ledger_probe import (
    DefaultJobLedgerProbe,
    JobLedgerProbe,
)
from directory.application.observability.reconciliation_probe import (
    DefaultReconciliationProbe,
    ReconciliationProbe,
)
from directory.application.observability.user_service_probe import (
    DefaultUserServiceProbe,
    UserServiceProbe,
)

__all__ = [
    "AuthenticationProbe",
    "DefaultAuthenticationProbe",
    "DirectoryBootstrapProbe",
    "DefaultDirectoryBootstrapProbe",
    "GroupServiceProbe",
    "DefaultGroupServiceProbe",
    "JobLedgerProbe",
    "DefaultJobLedgerProbe",
    "ReconciliationProbe",
    "DefaultReconciliationProbe",
    "UserServiceProbe",
    "DefaultUserServiceProbe",
]
