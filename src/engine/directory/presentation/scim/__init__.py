"""SCIM protocol adapter for the directory."""

from directory.presentation.scim.mapper import (
    GroupDraft,
    ResourceType,
    from_external_group,
    from_external_user,
    pagination_window,
    parse_filter,
    to_external_group,
    to_external_user,
)
from directory.presentation.scim.provider import ScimProvider, to_scim_error

__all__ = [
    "GroupDraft",
    "ResourceType",
    "ScimProvider",
    "from_external_group",
    "from_external_user",
    "pagination_window",
    "parse_filter",
    "to_external_group",
    "to_external_user",
    "to_scim_error",
]
