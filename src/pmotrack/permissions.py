"""Role-based capability checks and record visibility rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Union

from .models import Action, Role

_CAPABILITIES: Dict[Action, FrozenSet[Role]] = {
    Action.VIEW: frozenset(Role),
    Action.CREATE: frozenset({Role.ADMIN, Role.STAFF}),
    Action.EDIT: frozenset({Role.ADMIN, Role.STAFF}),
    Action.DELETE: frozenset({Role.ADMIN}),
    Action.APPROVE: frozenset({Role.ADMIN, Role.STAFF, Role.DIRECTOR}),
}

# Roles that may administer a page they have been granted explicitly
PAGE_ADMIN_ROLES: FrozenSet[Role] = _CAPABILITIES[Action.APPROVE]

WILDCARD_PAGE = "*"
PUBLISHED = "Published"
DRAFT = "Draft"


def parse_role(value: Union[Role, str, None]) -> Optional[Role]:
    if isinstance(value, Role):
        return value
    if not value:
        return None
    text = str(value).strip().lower()
    for role in Role:
        if role.value.lower() == text or role.name.lower() == text:
            return role
    return None


def parse_action(value: Union[Action, str, None]) -> Optional[Action]:
    if isinstance(value, Action):
        return value
    if not value:
        return None
    try:
        return Action(str(value).strip().lower())
    except ValueError:
        return None


def can(role: Union[Role, str, None], action: Union[Action, str]) -> bool:
    """Return whether ``role`` may perform ``action``; unknown values are denied."""

    parsed_role = parse_role(role)
    parsed_action = parse_action(action)
    if parsed_role is None or parsed_action is None:
        return False
    return parsed_role in _CAPABILITIES[parsed_action]


@dataclass(frozen=True)
class UserProfile:
    name: str
    role: Role
    allowed_pages: FrozenSet[str] = field(default_factory=frozenset)
    is_superadmin: bool = False

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "UserProfile":
        role = parse_role(raw.get("role")) or Role.CLIENT
        return cls(
            name=str(raw.get("name", "")),
            role=role,
            allowed_pages=frozenset(raw.get("allowedPages") or raw.get("allowed_pages") or ()),
            is_superadmin=bool(raw.get("is_superadmin", False)),
        )


def is_page_admin(profile: Optional[UserProfile], page: str) -> bool:
    """
    Decide whether ``profile`` may approve and publish records on ``page``.

    Superadmins and holders of the ``"*"`` page grant administer every page.
    An explicit page grant only counts for Admin, Staff and Director roles.
    """

    if profile is None:
        return False
    if profile.is_superadmin or WILDCARD_PAGE in profile.allowed_pages:
        return True
    if page in profile.allowed_pages:
        return profile.role in PAGE_ADMIN_ROLES
    return False


def _record_status(record: Mapping[str, Any]) -> Optional[str]:
    return record.get("recordStatus") or record.get("status")


def _record_owner(record: Mapping[str, Any]) -> Optional[str]:
    return record.get("submittedBy") or record.get("assessor")


def filter_records_by_permission(
    records: Iterable[Mapping[str, Any]],
    profile: Optional[UserProfile],
    page_admin: bool,
) -> List[Mapping[str, Any]]:
    """
    Apply draft/published visibility to assessment records.

    - anonymous visitors see published records
    - page admins see everything
    - other signed-in users see published records and their own drafts
    """

    items = list(records)
    if profile is None:
        return [r for r in items if _record_status(r) == PUBLISHED]
    if page_admin:
        return items
    return [
        r
        for r in items
        if _record_status(r) == PUBLISHED
        or (_record_status(r) == DRAFT and _record_owner(r) == profile.name)
    ]


__all__ = [
    "PAGE_ADMIN_ROLES",
    "UserProfile",
    "can",
    "filter_records_by_permission",
    "is_page_admin",
    "parse_role",
]
