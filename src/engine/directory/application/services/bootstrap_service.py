"""Directory bootstrap service.

Seeds the default groups and the initial administrator at startup. Safe
to run on every start and from several instances at once.
"""

from __future__ import annotations

from collections.abc import Mapping

from directory.application.observability import (
    DefaultDirectoryBootstrapProbe,
    DirectoryBootstrapProbe,
)
from directory.application.services.group_service import GroupService
from directory.application.services.user_service import UserService
from directory.domain.aggregates import Group, User
from directory.domain.value_objects import UserProfile
from directory.ports.exceptions import DuplicateKeyError

ADMIN_GROUP = "Administrators"
DEFAULT_GROUPS: Mapping[str, str] = {
    ADMIN_GROUP: "System administrators",
    "Users": "Default user group",
}


class DirectoryBootstrapService:
    """Creates whatever default records are missing."""

    def __init__(
        self,
        user_service: UserService,
        group_service: GroupService,
        admin_login_name: str | None = None,
        admin_email: str | None = None,
        admin_secret: str | None = None,
        groups: Mapping[str, str] = DEFAULT_GROUPS,
        probe: DirectoryBootstrapProbe | None = None,
    ):
        """Initialize DirectoryBootstrapService with dependencies.

        Args:
            user_service: Directory core for users
            group_service: Directory core for groups
            admin_login_name: Initial administrator; None skips the admin
            admin_email: Email of the initial administrator
            admin_secret: Secret of the initial administrator
            groups: Default group names mapped to their descriptions
            probe: Optional domain probe for observability
        """
        self._user_service = user_service
        self._group_service = group_service
        self._admin_login_name = admin_login_name
        self._admin_email = admin_email
        self._admin_secret = admin_secret
        self._groups = groups
        self._probe = probe or DefaultDirectoryBootstrapProbe()

    async def ensure_defaults(self) -> None:
        """Create missing default groups and the initial administrator."""
        try:
            groups_created = 0
            for name, description in self._groups.items():
                if await self._ensure_group(name, description):
                    groups_created += 1

            admin_created = False
            if self._admin_login_name and self._admin_email and self._admin_secret:
                admin, admin_created = await self._ensure_admin(
                    self._admin_login_name, self._admin_email, self._admin_secret
                )
                admin_group = await self._group_service.find_by_name(ADMIN_GROUP)
                if admin_group is not None and not admin_group.has_member(admin.id):
                    await self._group_service.add_members(admin_group.id, [admin.id])
        except Exception as e:
            self._probe.bootstrap_failed(error=str(e))
            raise

        self._probe.defaults_ensured(
            groups_created=groups_created, admin_created=admin_created
        )

    async def _ensure_group(self, name: str, description: str) -> Group | None:
        if await self._group_service.find_by_name(name) is not None:
            return None
        try:
            group = await self._group_service.create_group(name, description)
        except DuplicateKeyError:
            # Another instance created it concurrently
            return None
        self._probe.default_group_created(group_id=group.id.value, name=group.name)
        return group

    async def _ensure_admin(
        self, login_name: str, email: str, secret: str
    ) -> tuple[User, bool]:
        existing = await self._user_service.find_by_login_name(login_name)
        if existing is not None:
            return existing, False
        profile = UserProfile(
            login_name=login_name,
            email=email,
            first_name="System",
            last_name="Administrator",
        )
        try:
            admin = await self._user_service.create_user(profile, secret)
        except DuplicateKeyError:
            concurrent = await self._user_service.find_by_login_name(login_name)
            if concurrent is None:
                raise
            return concurrent, False
        self._probe.admin_user_created(
            user_id=admin.id.value, login_name=admin.login_name
        )
        return admin, True
