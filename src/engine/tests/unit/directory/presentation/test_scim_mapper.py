"""Unit tests for SCIM resource mapping."""

from datetime import UTC, datetime

import pytest

from directory.domain.aggregates import Group, User
from directory.domain.value_objects import (
    GroupId,
    GroupMember,
    GroupRef,
    SortOrder,
    UserId,
    UserProfile,
)
from directory.presentation.scim import (
    ResourceType,
    from_external_group,
    from_external_user,
    pagination_window,
    parse_filter,
    to_external_group,
    to_external_user,
)
from directory.presentation.scim.models import (
    ENTERPRISE_USER_SCHEMA,
    USER_SCHEMA,
    ScimEmail,
    ScimGroup,
    ScimMember,
    ScimUser,
)

BASE = "https://idp.example.com/scim/v2"
NOW = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def user() -> User:
    user = User.create(
        UserProfile(
            login_name="john.doe",
            email="john@example.com",
            first_name="John",
            last_name="Doe",
            phone="555-0100",
            department="Engineering",
            title="Engineer",
            attributes={"manager": "jane"},
        ),
        "digest",
    )
    user.stamp_created(NOW)
    user.groups = (GroupRef(group_id=GroupId.generate(), name="Engineering"),)
    return user


class TestToExternalUser:
    def test_core_attributes(self, user):
        resource = to_external_user(user, BASE)

        assert resource.id == user.id.value
        assert resource.user_name == "john.doe"
        assert resource.name.given_name == "John"
        assert resource.display_name == "John Doe"
        assert resource.emails == [
            ScimEmail(value="john@example.com", type="work", primary=True)
        ]
        assert resource.phone_numbers[0].value == "555-0100"
        assert resource.active is True
        assert resource.meta.location == f"{BASE}/Users/{user.id.value}"
        assert resource.meta.created == NOW

    def test_groups_link_to_group_resources(self, user):
        resource = to_external_user(user, BASE)

        ref = user.groups[0]
        assert resource.groups[0].value == ref.group_id.value
        assert resource.groups[0].display == "Engineering"
        assert resource.groups[0].ref == f"{BASE}/Groups/{ref.group_id.value}"

    def test_enterprise_extension(self, user):
        resource = to_external_user(user, BASE)

        assert resource.schemas == [USER_SCHEMA, ENTERPRISE_USER_SCHEMA]
        assert resource.enterprise.department == "Engineering"
        assert resource.enterprise.manager == "jane"

    def test_no_extension_without_enterprise_data(self):
        plain = User.create(UserProfile(login_name="a", email="a@x"), "d")

        resource = to_external_user(plain, BASE)

        assert resource.schemas == [USER_SCHEMA]
        assert resource.enterprise is None
        assert resource.phone_numbers == []

    def test_serializes_with_scim_names(self, user):
        document = to_external_user(user, BASE).model_dump(
            by_alias=True, exclude_none=True
        )

        assert document["userName"] == "john.doe"
        assert document["name"]["familyName"] == "Doe"
        assert document[ENTERPRISE_USER_SCHEMA]["title"] == "Engineer"
        assert "$ref" in document["groups"][0]
        assert document["meta"]["resourceType"] == "User"


class TestFromExternalUser:
    def test_round_trip_preserves_profile(self, user):
        profile = from_external_user(to_external_user(user, BASE))

        assert profile.login_name == user.login_name
        assert profile.email == user.email
        assert profile.first_name == user.first_name
        assert profile.last_name == user.last_name
        assert profile.phone == user.phone
        assert profile.department == user.department
        assert profile.title == user.title
        assert profile.active == user.active
        assert profile.attributes == {"manager": "jane"}

    def test_parses_scim_document(self):
        resource = ScimUser.model_validate(
            {
                "schemas": [USER_SCHEMA],
                "userName": "alice",
                "name": {"givenName": "Alice"},
                "emails": [
                    {"value": "home@example.com", "type": "home"},
                    {"value": "work@example.com", "type": "work", "primary": True},
                ],
                "active": False,
            }
        )

        profile = from_external_user(resource)

        assert profile.login_name == "alice"
        assert profile.email == "work@example.com"
        assert profile.first_name == "Alice"
        assert profile.last_name == ""
        assert profile.active is False

    def test_first_email_without_primary(self):
        resource = ScimUser(
            user_name="alice",
            emails=[ScimEmail(value="a@x"), ScimEmail(value="b@x")],
        )
        assert from_external_user(resource).email == "a@x"

    def test_defaults_for_absent_fields(self):
        profile = from_external_user(ScimUser())

        assert profile.login_name == ""
        assert profile.email == ""
        assert profile.active is True
        assert profile.attributes == {}


class TestGroups:
    def test_to_external_group(self):
        alice = UserId.generate()
        group = Group.create(name="Engineering")
        group.stamp_created(NOW)
        group.members = (GroupMember(user_id=alice, login_name="alice"),)

        resource = to_external_group(group, BASE)

        assert resource.display_name == "Engineering"
        assert resource.members[0].value == alice.value
        assert resource.members[0].display == "alice"
        assert resource.members[0].ref == f"{BASE}/Users/{alice.value}"
        assert resource.meta.resource_type == "Group"

    def test_from_external_group_drops_invalid_ids(self):
        alice = UserId.generate()
        resource = ScimGroup(
            display_name="Engineering",
            members=[ScimMember(value=alice.value), ScimMember(value="nope")],
        )

        draft = from_external_group(resource)

        assert draft.display_name == "Engineering"
        assert draft.member_ids == [alice]


class TestParseFilter:
    @pytest.mark.parametrize(
        "expression,expected",
        [
            ('userName eq "john.doe"', "john.doe"),
            ("username EQ 'john.doe'", "john.doe"),
            ("userName eq john.doe", "john.doe"),
            ('emails.value eq "john@example.com"', "john@example.com"),
            ('userName eq ""', None),
            ('userName co "john"', None),
            ('displayName eq "Engineering"', None),
            ("", None),
            (None, None),
        ],
    )
    def test_user_filters(self, expression, expected):
        assert parse_filter(expression, ResourceType.USER) == expected

    def test_group_filter(self):
        assert parse_filter('displayName eq "Eng"', ResourceType.GROUP) == "Eng"
        assert parse_filter('userName eq "Eng"', ResourceType.GROUP) is None


class TestPaginationWindow:
    @pytest.mark.parametrize(
        "start_index,count,page,size",
        [
            (None, None, 0, 100),
            (1, 10, 0, 10),
            (11, 10, 1, 10),
            (15, 10, 1, 10),
            (0, 0, 0, 100),
            (-5, 25, 0, 25),
        ],
    )
    def test_window(self, start_index, count, page, size):
        window = pagination_window(start_index, count)

        assert (window.page, window.size) == (page, size)
        assert window.sort == SortOrder.ALPHABETICAL

    def test_custom_default(self):
        assert pagination_window(None, None, default_count=50).size == 50
