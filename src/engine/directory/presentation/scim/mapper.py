"""Pure mapping between directory aggregates and SCIM resource documents.

Nothing here touches the store or mutates its inputs.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from directory.domain.aggregates import Group, User
from directory.domain.value_objects import PageRequest, SortOrder, UserId, UserProfile
from directory.presentation.scim.models import (
    ENTERPRISE_USER_SCHEMA,
    USER_SCHEMA,
    ScimEmail,
    ScimEnterpriseExtension,
    ScimGroup,
    ScimGroupRef,
    ScimMember,
    ScimMeta,
    ScimName,
    ScimPhoneNumber,
    ScimUser,
)

DEFAULT_PAGE_SIZE = 100

_FILTER = re.compile(
    r"""^\s*(?P<attribute>[A-Za-z.]+)\s+eq\s+
        (?:"(?P<double>[^"]*)"|'(?P<single>[^']*)'|(?P<bare>\S+))\s*$""",
    re.IGNORECASE | re.VERBOSE,
)


class ResourceType(StrEnum):
    USER = "User"
    GROUP = "Group"


# Filterable attributes per resource type, lower-cased
_FILTERABLE = {
    ResourceType.USER: frozenset({"username", "emails.value"}),
    ResourceType.GROUP: frozenset({"displayname"}),
}


@dataclass(frozen=True)
class GroupDraft:
    """Group fields carried by a SCIM Group document."""

    display_name: str
    member_ids: list[UserId]


def user_location(base_location: str, user_id: str) -> str:
    return f"{base_location.rstrip('/')}/Users/{user_id}"


def group_location(base_location: str, group_id: str) -> str:
    return f"{base_location.rstrip('/')}/Groups/{group_id}"


def to_external_user(user: User, base_location: str) -> ScimUser:
    """Map a user to its SCIM resource document."""
    enterprise = None
    manager = user.attributes.get("manager")
    if user.department or user.title or manager:
        enterprise = ScimEnterpriseExtension(
            department=user.department,
            title=user.title,
            manager=manager,
        )

    return ScimUser(
        schemas=[USER_SCHEMA, ENTERPRISE_USER_SCHEMA] if enterprise else [USER_SCHEMA],
        id=user.id.value,
        user_name=user.login_name,
        name=ScimName(given_name=user.first_name, family_name=user.last_name),
        display_name=user.display_name,
        emails=[ScimEmail(value=user.email, type="work", primary=True)],
        phone_numbers=(
            [ScimPhoneNumber(value=user.phone, type="work")] if user.phone else []
        ),
        active=user.active,
        groups=[
            ScimGroupRef(
                value=ref.group_id.value,
                display=ref.name,
                ref=group_location(base_location, ref.group_id.value),
            )
            for ref in user.groups
        ],
        enterprise=enterprise,
        meta=ScimMeta(
            resource_type=ResourceType.USER.value,
            created=user.created_at,
            last_modified=user.updated_at,
            location=user_location(base_location, user.id.value),
        ),
    )


def to_external_group(group: Group, base_location: str) -> ScimGroup:
    """Map a group to its SCIM resource document."""
    return ScimGroup(
        id=group.id.value,
        display_name=group.name,
        members=[
            ScimMember(
                value=member.user_id.value,
                display=member.login_name,
                ref=user_location(base_location, member.user_id.value),
                type="User",
            )
            for member in group.members
        ],
        meta=ScimMeta(
            resource_type=ResourceType.GROUP.value,
            created=group.created_at,
            last_modified=group.updated_at,
            location=group_location(base_location, group.id.value),
        ),
    )


def from_external_user(resource: ScimUser) -> UserProfile:
    """Map a SCIM User document to the profile it describes.

    The primary email wins, then the first one. Absent optional fields map
    to empty values and an absent active flag means active. Blank keys are
    left for the directory to reject.
    """
    email = next((e.value for e in resource.emails if e.primary), None)
    if email is None and resource.emails:
        email = resource.emails[0].value

    enterprise = resource.enterprise or ScimEnterpriseExtension()
    attributes = {"manager": enterprise.manager} if enterprise.manager else {}

    return UserProfile(
        login_name=resource.user_name or "",
        email=email or "",
        first_name=(resource.name.given_name if resource.name else None) or "",
        last_name=(resource.name.family_name if resource.name else None) or "",
        phone=resource.phone_numbers[0].value if resource.phone_numbers else None,
        department=enterprise.department,
        title=enterprise.title,
        active=True if resource.active is None else resource.active,
        attributes=attributes,
    )


def from_external_group(resource: ScimGroup) -> GroupDraft:
    """Map a SCIM Group document to a display name and member ids.

    Member values that are not valid identifiers cannot name an existing
    user and are dropped.
    """
    member_ids: list[UserId] = []
    for member in resource.members:
        try:
            member_ids.append(UserId.from_string(member.value))
        except ValueError:
            continue
    return GroupDraft(display_name=resource.display_name or "", member_ids=member_ids)


def parse_filter(expression: str | None, resource_type: ResourceType) -> str | None:
    """Extract the search value from a simple equality filter.

    Users accept ``userName eq "..."`` and ``emails.value eq "..."``;
    groups accept ``displayName eq "..."``. Attribute names are
    case-insensitive and the value may be double-quoted, single-quoted or
    bare. Anything else means no filter.
    """
    if not expression:
        return None
    match = _FILTER.match(expression)
    if match is None:
        return None
    if match.group("attribute").lower() not in _FILTERABLE[resource_type]:
        return None
    value = next(
        (v for v in match.group("double", "single", "bare") if v is not None), ""
    )
    return value or None


def pagination_window(
    start_index: int | None, count: int | None, default_count: int = DEFAULT_PAGE_SIZE
) -> PageRequest:
    """Translate SCIM 1-based paging into a zero-based page request.

    A missing or non-positive count means default_count; a missing or
    non-positive start_index means 1. The page is the one containing
    start_index, so a start_index inside a page is rounded down to the
    start of that page.
    """
    size = count if count is not None and count > 0 else default_count
    start = start_index if start_index is not None and start_index > 0 else 1
    return PageRequest(page=(start - 1) // size, size=size, sort=SortOrder.ALPHABETICAL)
