"""Pydantic models for SCIM resource documents.

Field names follow Python conventions; the SCIM attribute names are the
aliases. Serialize with ``model_dump(by_alias=True, exclude_none=True)``.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

USER_SCHEMA = "urn:ietf:params:scim:schemas:core:2.0:User"
GROUP_SCHEMA = "urn:ietf:params:scim:schemas:core:2.0:Group"
ENTERPRISE_USER_SCHEMA = "urn:ietf:params:scim:schemas:extension:enterprise:2.0:User"
LIST_RESPONSE_SCHEMA = "urn:ietf:params:scim:api:messages:2.0:ListResponse"
ERROR_SCHEMA = "urn:ietf:params:scim:api:messages:2.0:Error"


class ScimModel(BaseModel):
    """Base for SCIM documents: accepts both SCIM and Python field names."""

    model_config = ConfigDict(populate_by_name=True)


class ScimName(ScimModel):
    given_name: str | None = Field(default=None, alias="givenName")
    family_name: str | None = Field(default=None, alias="familyName")


class ScimEmail(ScimModel):
    value: str
    type: str | None = "work"
    primary: bool | None = None


class ScimPhoneNumber(ScimModel):
    value: str
    type: str | None = "work"


class ScimGroupRef(ScimModel):
    """A group the user belongs to, as listed on the user resource."""

    value: str
    display: str | None = None
    ref: str | None = Field(default=None, alias="$ref")
    type: str | None = "direct"


class ScimMember(ScimModel):
    """A member of a group, as listed on the group resource."""

    value: str
    display: str | None = None
    ref: str | None = Field(default=None, alias="$ref")
    type: str | None = "User"


class ScimEnterpriseExtension(ScimModel):
    department: str | None = None
    title: str | None = None
    manager: str | None = None


class ScimMeta(ScimModel):
    resource_type: str = Field(alias="resourceType")
    created: datetime | None = None
    last_modified: datetime | None = Field(default=None, alias="lastModified")
    location: str | None = None


class ScimUser(ScimModel):
    """SCIM User resource."""

    schemas: list[str] = Field(
        default_factory=lambda: [USER_SCHEMA, ENTERPRISE_USER_SCHEMA]
    )
    id: str | None = None
    user_name: str | None = Field(default=None, alias="userName")
    name: ScimName | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    emails: list[ScimEmail] = Field(default_factory=list)
    phone_numbers: list[ScimPhoneNumber] = Field(
        default_factory=list, alias="phoneNumbers"
    )
    active: bool | None = None
    groups: list[ScimGroupRef] = Field(default_factory=list)
    enterprise: ScimEnterpriseExtension | None = Field(
        default=None, alias=ENTERPRISE_USER_SCHEMA
    )
    meta: ScimMeta | None = None


class ScimGroup(ScimModel):
    """SCIM Group resource."""

    schemas: list[str] = Field(default_factory=lambda: [GROUP_SCHEMA])
    id: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    members: list[ScimMember] = Field(default_factory=list)
    meta: ScimMeta | None = None


class ScimListResponse(ScimModel):
    """SCIM ListResponse envelope."""

    schemas: list[str] = Field(default_factory=lambda: [LIST_RESPONSE_SCHEMA])
    total_results: int = Field(alias="totalResults")
    start_index: int = Field(alias="startIndex")
    items_per_page: int = Field(alias="itemsPerPage")
    resources: list[ScimUser] | list[ScimGroup] = Field(
        default_factory=list, alias="Resources"
    )


class ScimErrorResponse(ScimModel):
    """SCIM error document. status is a string, as SCIM requires."""

    schemas: list[str] = Field(default_factory=lambda: [ERROR_SCHEMA])
    status: str
    scim_type: str | None = Field(default=None, alias="scimType")
    detail: str | None = None
