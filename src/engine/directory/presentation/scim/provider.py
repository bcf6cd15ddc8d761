"""SCIM resource provider.

Serves SCIM documents by calling the directory services. HTTP routing
and request marshaling belong to the caller; this facade takes and
returns pydantic documents and raises directory errors, which
to_scim_error() turns into SCIM error documents.
"""

from __future__ import annotations

from directory.application.services import GroupService, UserService
from directory.domain.value_objects import GroupId, UserId
from directory.ports.exceptions import (
    AuthenticationError,
    DirectoryError,
    DuplicateKeyError,
    FieldValidationError,
    NotFoundError,
)
from directory.presentation.scim.mapper import (
    DEFAULT_PAGE_SIZE,
    ResourceType,
    from_external_group,
    from_external_user,
    pagination_window,
    parse_filter,
    to_external_group,
    to_external_user,
)
from directory.presentation.scim.models import (
    ScimErrorResponse,
    ScimGroup,
    ScimListResponse,
    ScimUser,
)


def _user_id(raw: str) -> UserId:
    try:
        return UserId.from_string(raw)
    except ValueError as e:
        raise NotFoundError("User", raw) from e


def _group_id(raw: str) -> GroupId:
    try:
        return GroupId.from_string(raw)
    except ValueError as e:
        raise NotFoundError("Group", raw) from e


def to_scim_error(error: Exception) -> ScimErrorResponse:
    """Map an exception to a SCIM error document.

    DuplicateKeyError is 409 uniqueness, NotFoundError 404 and
    FieldValidationError 400 invalidValue. Errors outside the directory
    taxonomy are 500 without detail.
    """
    if isinstance(error, DuplicateKeyError):
        return ScimErrorResponse(
            status="409", scim_type="uniqueness", detail=str(error)
        )
    if isinstance(error, NotFoundError):
        return ScimErrorResponse(status="404", detail=str(error))
    if isinstance(error, FieldValidationError):
        return ScimErrorResponse(
            status="400", scim_type="invalidValue", detail=str(error)
        )
    if isinstance(error, AuthenticationError):
        return ScimErrorResponse(status="401", detail=str(error))
    if isinstance(error, DirectoryError):
        return ScimErrorResponse(
            status="400", scim_type="invalidSyntax", detail=str(error)
        )
    return ScimErrorResponse(status="500", detail="Internal server error")


class ScimProvider:
    """SCIM Users and Groups endpoints, minus the HTTP layer.

    Listings are sorted by userName / displayName. Users created through
    SCIM get the configured temporary secret.
    """

    def __init__(
        self,
        user_service: UserService,
        group_service: GroupService,
        base_location: str,
        temporary_secret: str,
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self._user_service = user_service
        self._group_service = group_service
        self._base_location = base_location
        self._temporary_secret = temporary_secret
        self._default_page_size = default_page_size

    async def list_users(
        self,
        filter: str | None = None,
        start_index: int | None = None,
        count: int | None = None,
    ) -> ScimListResponse:
        page = pagination_window(start_index, count, self._default_page_size)
        result = await self._user_service.search_users(
            parse_filter(filter, ResourceType.USER), page
        )
        return ScimListResponse(
            total_results=result.total,
            start_index=page.offset + 1,
            items_per_page=len(result.items),
            resources=[to_external_user(u, self._base_location) for u in result.items],
        )

    async def get_user(self, user_id: str) -> ScimUser:
        user = await self._user_service.get_user(_user_id(user_id))
        return to_external_user(user, self._base_location)

    async def create_user(self, resource: ScimUser) -> ScimUser:
        user = await self._user_service.create_user(
            from_external_user(resource), self._temporary_secret
        )
        return to_external_user(user, self._base_location)

    async def replace_user(self, user_id: str, resource: ScimUser) -> ScimUser:
        """Full replacement of the user's profile (SCIM PUT)."""
        user = await self._user_service.update_user(
            _user_id(user_id), from_external_user(resource)
        )
        return to_external_user(user, self._base_location)

    async def delete_user(self, user_id: str) -> None:
        await self._user_service.delete_user(_user_id(user_id))

    async def list_groups(
        self,
        filter: str | None = None,
        start_index: int | None = None,
        count: int | None = None,
    ) -> ScimListResponse:
        page = pagination_window(start_index, count, self._default_page_size)
        result = await self._group_service.search_groups(
            parse_filter(filter, ResourceType.GROUP), page
        )
        return ScimListResponse(
            total_results=result.total,
            start_index=page.offset + 1,
            items_per_page=len(result.items),
            resources=[to_external_group(g, self._base_location) for g in result.items],
        )

    async def get_group(self, group_id: str) -> ScimGroup:
        group = await self._group_service.get_group(_group_id(group_id))
        return to_external_group(group, self._base_location)

    async def create_group(self, resource: ScimGroup) -> ScimGroup:
        draft = from_external_group(resource)
        group = await self._group_service.create_group(draft.display_name)
        if draft.member_ids:
            group = await self._group_service.set_members(group.id, draft.member_ids)
        return to_external_group(group, self._base_location)

    async def replace_group(self, group_id: str, resource: ScimGroup) -> ScimGroup:
        """Full replacement of the group's name and members (SCIM PUT)."""
        draft = from_external_group(resource)
        group = await self._group_service.get_group(_group_id(group_id))
        await self._group_service.update_group(
            group.id, draft.display_name, group.description
        )
        group = await self._group_service.set_members(group.id, draft.member_ids)
        return to_external_group(group, self._base_location)

    async def delete_group(self, group_id: str) -> None:
        await self._group_service.delete_group(_group_id(group_id))
