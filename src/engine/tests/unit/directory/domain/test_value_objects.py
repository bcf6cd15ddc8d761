"""Unit tests for directory value objects."""

import pytest

from directory.domain.aggregates import Group
from directory.domain.value_objects import (
    GroupId,
    GroupMember,
    JobId,
    JobStatus,
    PageRequest,
    SortOrder,
    UserId,
)
from directory.ports.exceptions import FieldValidationError


class TestIdentifiers:
    @pytest.mark.parametrize("id_type", [UserId, GroupId, JobId])
    def test_generated_ids_round_trip_through_strings(self, id_type):
        generated = id_type.generate()
        assert id_type.from_string(str(generated)) == generated

    @pytest.mark.parametrize("id_type", [UserId, GroupId, JobId])
    def test_invalid_ids_are_rejected(self, id_type):
        with pytest.raises(ValueError):
            id_type.from_string("not-a-ulid")

    def test_generated_ids_are_unique(self):
        assert UserId.generate() != UserId.generate()


class TestJobStatus:
    @pytest.mark.parametrize(
        "status,terminal",
        [
            (JobStatus.PENDING, False),
            (JobStatus.RUNNING, False),
            (JobStatus.COMPLETED, True),
            (JobStatus.FAILED, True),
        ],
    )
    def test_is_terminal(self, status, terminal):
        assert status.is_terminal is terminal


class TestPageRequest:
    def test_defaults(self):
        page = PageRequest()
        assert (page.page, page.size, page.sort) == (0, 20, SortOrder.NEWEST_FIRST)
        assert page.offset == 0

    def test_offset(self):
        assert PageRequest(page=3, size=25).offset == 75

    def test_rejects_negative_page(self):
        with pytest.raises(ValueError):
            PageRequest(page=-1)

    def test_rejects_empty_size(self):
        with pytest.raises(ValueError):
            PageRequest(size=0)


class TestGroupAggregate:
    def test_blank_name_is_rejected(self):
        with pytest.raises(FieldValidationError):
            Group.create(name="  ")

    def test_update_rejects_blank_name(self):
        group = Group.create(name="Engineering")
        with pytest.raises(FieldValidationError):
            group.update("", "whatever")
        assert group.name == "Engineering"

    def test_update_normalizes_missing_description(self):
        group = Group.create(name="Engineering", description="Builders")
        group.update("Platform", None)
        assert group.name == "Platform"
        assert group.description == ""

    def test_membership_snapshot(self):
        alice = UserId.generate()
        group = Group.create(name="Engineering")
        group.members = (GroupMember(user_id=alice, login_name="alice"),)

        assert group.has_member(alice)
        assert not group.has_member(UserId.generate())
        assert group.member_ids == frozenset({alice})
