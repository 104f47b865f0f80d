"""
Resource-level access decisions and UI guards built on a CapabilitySet.

Every function here is total: a missing or malformed id means ownership
cannot be proven, and the answer is False.
"""

from typing import Callable, Iterable, Optional

from portal_access.models import CapabilitySet, ResourceKind, Role
from portal_access.permissions import has_permission

_CLIENT_OWNED = {ResourceKind.BOOKING, ResourceKind.REVIEW}
_POINT_SCOPED = {ResourceKind.BOOKING, ResourceKind.REVIEW}


def _as_id(value) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def is_partner_owned(partner_id, owner_partner_id) -> bool:
    """True iff the resource's owning partner is *partner_id*."""
    mine = _as_id(partner_id)
    owner = _as_id(owner_partner_id)
    return mine is not None and owner is not None and mine == owner


def can_access(
    capabilities: CapabilitySet,
    resource_type,
    resource_owner_id=None,
    resource_id=None,
    service_point_id=None,
) -> bool:
    """Decide whether the actor behind *capabilities* may access a resource.

    resource_owner_id is the owning partner id for partners and the authoring
    client id for clients. For operators, service points are checked by
    resource_id; bookings and reviews by the caller-resolved service_point_id.
    """
    if capabilities.has_full_access:
        return True

    kind = ResourceKind.parse(resource_type)
    if kind is None:
        return False

    if capabilities.is_partner:
        return is_partner_owned(capabilities.partner_id, resource_owner_id)

    if capabilities.is_operator:
        assigned = capabilities.assigned_service_point_ids or ()
        if kind is ResourceKind.SERVICE_POINT:
            point = _as_id(resource_id if resource_id is not None else service_point_id)
        elif kind in _POINT_SCOPED:
            point = _as_id(service_point_id)
        else:
            return False
        return point is not None and point in assigned

    if capabilities.is_client:
        if kind not in _CLIENT_OWNED:
            return False
        owner = _as_id(resource_owner_id)
        return owner is not None and owner == capabilities.client_id

    return False


def can_manage_service_point(capabilities: CapabilitySet, owner_partner_id) -> bool:
    """Edit/delete rights on a service point; operators may only view theirs."""
    if capabilities.has_full_access:
        return True
    if capabilities.is_partner:
        return is_partner_owned(capabilities.partner_id, owner_partner_id)
    return False


def passes_guard(
    capabilities: CapabilitySet,
    allowed_roles: Optional[Iterable] = None,
    required_permissions: Optional[Iterable[str]] = None,
    check: Optional[Callable[[CapabilitySet], bool]] = None,
) -> bool:
    """Role / permission / custom-predicate gate for a piece of UI."""
    if allowed_roles:
        roles = {Role.parse(r) for r in allowed_roles} - {None}
        if capabilities.role not in roles:
            return False

    if required_permissions:
        if not all(has_permission(capabilities, p) for p in required_permissions):
            return False

    if check is not None and not check(capabilities):
        return False

    return True
