"""Wiring of the directory services.

Builds every service of the directory around one AsyncSession. The
caller owns the session (see infrastructure.database.dependencies.
session_scope); each service operation opens its own transaction on it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from directory.application.observability import (
    DefaultAuthenticationProbe,
    DefaultDirectoryBootstrapProbe,
    DefaultGroupServiceProbe,
    DefaultJobLedgerProbe,
    DefaultReconciliationProbe,
    DefaultUserServiceProbe,
)
from directory.application.security import BcryptSecretHasher
from directory.application.services import (
    AuthenticationService,
    DirectoryBootstrapService,
    GroupService,
    JobLedger,
    ReconciliationService,
    UserService,
)
from directory.infrastructure import (
    GroupRepository,
    MembershipRepository,
    ProvisioningJobRepository,
    UserRepository,
)
from directory.ports.capabilities import Clock, SecretHasher, utc_now
from directory.presentation.scim import ScimProvider
from infrastructure.settings import DirectorySettings, get_directory_settings
from shared_kernel.observability_context import ObservationContext

P = TypeVar("P")


@dataclass(frozen=True)
class DirectoryServices:
    """The directory's services, sharing one session."""

    users: UserService
    groups: GroupService
    jobs: JobLedger
    reconciliation: ReconciliationService
    authentication: AuthenticationService
    bootstrap: DirectoryBootstrapService
    scim: ScimProvider


def _bind(probe: P, context: ObservationContext | None) -> P:
    return probe.with_context(context) if context is not None else probe


def build_directory_services(
    session: AsyncSession,
    settings: DirectorySettings | None = None,
    hasher: SecretHasher | None = None,
    clock: Clock = utc_now,
    context: ObservationContext | None = None,
) -> DirectoryServices:
    """Build the directory services for one session.

    Args:
        session: Session shared by every repository
        settings: Directory settings; the cached environment settings if omitted
        hasher: Secret hasher; bcrypt if omitted
        clock: Source of the current time
        context: Optional observation context bound to every service probe

    Returns:
        The wired services
    """
    settings = settings or get_directory_settings()
    hasher = hasher or BcryptSecretHasher()
    temporary_secret = settings.temporary_secret.get_secret_value()

    user_repository = UserRepository(session)
    group_repository = GroupRepository(session)
    membership_repository = MembershipRepository(session)
    job_repository = ProvisioningJobRepository(session)

    users = UserService(
        session=session,
        user_repository=user_repository,
        membership_repository=membership_repository,
        hasher=hasher,
        temporary_secret=temporary_secret,
        clock=clock,
        probe=_bind(DefaultUserServiceProbe(), context),
    )
    groups = GroupService(
        session=session,
        group_repository=group_repository,
        user_repository=user_repository,
        membership_repository=membership_repository,
        clock=clock,
        probe=_bind(DefaultGroupServiceProbe(), context),
    )
    jobs = JobLedger(
        session=session,
        job_repository=job_repository,
        clock=clock,
        probe=_bind(DefaultJobLedgerProbe(), context),
    )

    admin_secret = settings.bootstrap_admin_secret
    return DirectoryServices(
        users=users,
        groups=groups,
        jobs=jobs,
        reconciliation=ReconciliationService(
            user_service=users,
            job_ledger=jobs,
            checkpoint_interval=settings.provisioning_checkpoint_interval,
            max_rows=settings.provisioning_max_rows,
            probe=_bind(DefaultReconciliationProbe(), context),
        ),
        authentication=AuthenticationService(
            user_service=users,
            hasher=hasher,
            max_attempts=settings.lockout_max_attempts,
            lockout_duration=settings.lockout_duration,
            probe=_bind(DefaultAuthenticationProbe(), context),
        ),
        bootstrap=DirectoryBootstrapService(
            user_service=users,
            group_service=groups,
            admin_login_name=settings.bootstrap_admin_login,
            admin_email=settings.bootstrap_admin_email,
            admin_secret=admin_secret.get_secret_value() if admin_secret else None,
            probe=_bind(DefaultDirectoryBootstrapProbe(), context),
        ),
        scim=ScimProvider(
            user_service=users,
            group_service=groups,
            base_location=settings.scim_base_location,
            temporary_secret=temporary_secret,
            default_page_size=settings.scim_page_size,
        ),
    )
