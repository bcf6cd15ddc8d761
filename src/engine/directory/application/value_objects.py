"""Application-layer value objects for the directory bounded context.

Read-only result objects returned by the directory and reconciliation
services.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from directory.domain.aggregates import ProvisioningJob, User
from directory.domain.value_objects import ProvisioningAction


@dataclass(frozen=True)
class UpsertResult:
    """Outcome of an upsert by login name.

    For a planned (dry run) upsert of a new login name, user is None.
    """

    user: User | None
    action: ProvisioningAction
    deactivated: bool = False


@dataclass(frozen=True)
class RecordOutcome:
    """Classification of one feed record.

    row_number is 1-based and counts data rows only (the header is row 0).
    """

    row_number: int
    login_name: str | None
    action: ProvisioningAction
    deactivated: bool = False
    error: str | None = None


@dataclass(frozen=True)
class ReconciliationResult:
    """Final job state plus the per-record outcomes of one reconciliation run."""

    job: ProvisioningJob
    outcomes: list[RecordOutcome] = field(default_factory=list)

    @property
    def failures(self) -> list[RecordOutcome]:
        return [o for o in self.outcomes if o.action == ProvisioningAction.FAILED]


@dataclass
class DryRunOverlay:
    """Keys planned earlier in the same dry run.

    Lets a dry run classify a record the way commit mode would after the
    previous records had been written: a repeated login name is an update,
    and an email claimed by an earlier record belongs to that record.
    """

    _planned: dict[str, tuple[str, bool]] = field(default_factory=dict)
    _claims: dict[str, str] = field(default_factory=dict)

    def planned(self, login_name: str) -> tuple[str, bool] | None:
        """Planned (email, active) for a login name, or None if not planned."""
        return self._planned.get(login_name)

    def email_owner(self, email: str) -> str | None:
        """Login name that claimed the email in this run, if any."""
        return self._claims.get(email)

    def is_planned(self, login_name: str) -> bool:
        return login_name in self._planned

    def remember(self, login_name: str, email: str, active: bool) -> None:
        """Record the outcome of a planned upsert."""
        previous = self._planned.get(login_name)
        if previous is not None and previous[0] != email:
            self._claims.pop(previous[0], None)
        self._planned[login_name] = (email, active)
        self._claims[email] = login_name
