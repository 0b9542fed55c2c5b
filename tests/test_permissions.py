from __future__ import annotations

import pytest

from pmotrack.models import Action, Role
from pmotrack.permissions import UserProfile, can, filter_records_by_permission, is_page_admin, parse_role


@pytest.mark.parametrize(
    "role, allowed",
    [
        (Role.ADMIN, {"view", "create", "edit", "delete", "approve"}),
        (Role.STAFF, {"view", "create", "edit", "approve"}),
        (Role.DIRECTOR, {"view", "approve"}),
        (Role.CLIENT, {"view"}),
    ],
)
def test_capability_table(role, allowed):
    for action in Action:
        assert can(role, action) is (action.value in allowed), (role, action)


def test_can_accepts_strings_and_denies_unknown():
    assert can("admin", "delete") is True
    assert can("Staff", "DELETE") is False
    assert can("guest", "view") is False
    assert can(None, "view") is False
    assert can(Role.ADMIN, "publish") is False


def test_parse_role_by_name_or_value():
    assert parse_role("DIRECTOR") is Role.DIRECTOR
    assert parse_role(" client ") is Role.CLIENT
    assert parse_role("") is None


def test_superadmin_and_wildcard_administer_any_page():
    assert is_page_admin(UserProfile("root", Role.CLIENT, is_superadmin=True), "gad-budget-and-plans")
    assert is_page_admin(UserProfile("ana", Role.CLIENT, frozenset({"*"})), "major-repairs")


def test_explicit_page_grant_requires_admin_role():
    staff = UserProfile("ben", Role.STAFF, frozenset({"major-repairs"}))
    client = UserProfile("cy", Role.CLIENT, frozenset({"major-repairs"}))
    assert is_page_admin(staff, "major-repairs") is True
    assert is_page_admin(staff, "minor-repairs") is False
    assert is_page_admin(client, "major-repairs") is False
    assert is_page_admin(None, "major-repairs") is False


def test_profile_from_dict():
    profile = UserProfile.from_dict({"name": "dee", "role": "Director", "allowedPages": ["research-program"]})
    assert profile.role is Role.DIRECTOR
    assert profile.allowed_pages == frozenset({"research-program"})
    assert UserProfile.from_dict({"name": "x", "role": "nobody"}).role is Role.CLIENT


RECORDS = [
    {"id": 1, "recordStatus": "Published", "submittedBy": "ben"},
    {"id": 2, "recordStatus": "Draft", "submittedBy": "ben"},
    {"id": 3, "status": "Draft", "assessor": "cy"},
    {"id": 4, "status": "Published", "assessor": "cy"},
]


def _ids(records):
    return [r["id"] for r in records]


def test_anonymous_sees_published_only():
    assert _ids(filter_records_by_permission(RECORDS, None, page_admin=False)) == [1, 4]


def test_page_admin_sees_everything():
    profile = UserProfile("ana", Role.ADMIN)
    assert _ids(filter_records_by_permission(RECORDS, profile, page_admin=True)) == [1, 2, 3, 4]


def test_owner_sees_own_drafts():
    assert _ids(filter_records_by_permission(RECORDS, UserProfile("ben", Role.STAFF), False)) == [1, 2, 4]
    assert _ids(filter_records_by_permission(RECORDS, UserProfile("cy", Role.CLIENT), False)) == [1, 3, 4]
