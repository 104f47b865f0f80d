"""
Role-Based Access Control – deriving a CapabilitySet from the current Actor.
"""

from dataclasses import fields, replace
from functools import lru_cache
from typing import Iterable, Optional

from portal_access.config import ROLE_DISPLAY_NAMES
from portal_access.models import Actor, Assignment, CapabilitySet, Role

# Every boolean capability flag, in declaration order.
CAPABILITY_FLAGS = tuple(f.name for f in fields(CapabilitySet) if f.type in (bool, "bool"))

# ── Role → granted flags ─────────────────────────────────────────────
_VIEW_ALL = {
    "can_view_all_clients",
    "can_view_all_bookings",
    "can_view_all_service_points",
    "can_view_all_operators",
    "can_view_all_reviews",
}
_CREATE = {"can_create_service_point", "can_create_operator"}

ROLE_GRANTS = {
    Role.ADMIN: frozenset(CAPABILITY_FLAGS),
    Role.MANAGER: frozenset(
        _VIEW_ALL | _CREATE | {"can_manage_partners", "can_manage_operators", "can_view_audit_logs"}
    ),
    Role.PARTNER: frozenset(_CREATE | {"can_manage_operators", "can_view_own_service_points"}),
    Role.OPERATOR: frozenset({"can_view_own_service_points"}),
    Role.CLIENT: frozenset(),
}

if set(ROLE_GRANTS) != set(Role):
    raise RuntimeError(f"ROLE_GRANTS does not cover roles: {set(Role) - set(ROLE_GRANTS)}")

ANONYMOUS = CapabilitySet()


def resolve(actor: Optional[Actor]) -> CapabilitySet:
    """Derive the CapabilitySet for *actor*.

    Unauthenticated actors and unknown roles get the no-access set. Equal
    actors resolve to the very same CapabilitySet object.
    """
    if actor is None:
        return ANONYMOUS
    if not isinstance(actor.role, str):
        actor = replace(actor, role="" if actor.role is None else str(actor.role))
    if not isinstance(actor.service_point_ids, tuple):
        actor = replace(actor, service_point_ids=tuple(actor.service_point_ids or ()))
    return _resolve(actor)


@lru_cache(maxsize=256)
def _resolve(actor: Actor) -> CapabilitySet:
    role = Role.parse(actor.role)
    if role is None:
        return ANONYMOUS

    granted = ROLE_GRANTS[role]
    flags = {name: name in granted for name in CAPABILITY_FLAGS}

    return CapabilitySet(
        role=role,
        partner_id=actor.partner_id if role is Role.PARTNER else None,
        operator_id=actor.operator_id if role is Role.OPERATOR else None,
        client_id=actor.client_id if role is Role.CLIENT else None,
        assigned_service_point_ids=(
            tuple(dict.fromkeys(actor.service_point_ids)) if role is Role.OPERATOR else None
        ),
        **flags,
    )


def with_assignments(actor: Actor, assignments: Iterable[Assignment]) -> Actor:
    """Return *actor* carrying the service point ids of its active assignments."""
    ids = tuple(a.service_point_id for a in assignments if a.is_active)
    return replace(actor, service_point_ids=ids)


def has_permission(capabilities: CapabilitySet, flag: str) -> bool:
    """Value of the named capability flag; unknown names are False."""
    if flag not in CAPABILITY_FLAGS:
        return False
    return bool(getattr(capabilities, flag))


def role_display_name(role) -> str:
    parsed = Role.parse(role)
    if parsed is None:
        return "User"
    return ROLE_DISPLAY_NAMES.get(parsed.value, "User")
