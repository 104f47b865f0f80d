"""
Unit tests for resource access decisions and UI guards.
"""

import pytest

from portal_access.access import can_access, can_manage_service_point, is_partner_owned, passes_guard
from portal_access.models import Actor, ResourceKind
from portal_access.permissions import resolve


def caps_for(role, **ids):
    return resolve(Actor(id=1, role=role, **ids))


# ── Tests: admin / manager ───────────────────────────────────────────

@pytest.mark.parametrize("role", ["admin", "manager"])
@pytest.mark.parametrize("kind", list(ResourceKind))
def test_full_access_roles_see_everything(role, kind):
    assert can_access(caps_for(role), kind) is True


# ── Tests: partner ───────────────────────────────────────────────────

@pytest.mark.parametrize("partner_id", [5, 6])
def test_partner_service_point_ownership(partner_id):
    caps = caps_for("partner", partner_id=partner_id)
    assert can_access(caps, ResourceKind.SERVICE_POINT, resource_owner_id=5) is (partner_id == 5)


def test_partner_without_owner_id_is_denied():
    caps = caps_for("partner", partner_id=5)
    assert can_access(caps, "operator") is False


def test_partner_without_own_id_is_denied():
    caps = caps_for("partner")
    assert can_access(caps, "service_point", resource_owner_id=5) is False


# ── Tests: operator ──────────────────────────────────────────────────

def test_operator_service_point_membership():
    caps = caps_for("operator", operator_id=4, service_point_ids=(7, 9))
    assert can_access(caps, "service_point", resource_id=7) is True
    assert can_access(caps, "service_point", resource_id=8) is False
    assert can_access(caps, "service_point") is False


def test_operator_booking_needs_resolved_point():
    caps = caps_for("operator", operator_id=4, service_point_ids=(7,))
    assert can_access(caps, "booking", resource_id=500, service_point_id=7) is True
    assert can_access(caps, "review", resource_id=500, service_point_id=8) is False
    assert can_access(caps, "booking", resource_id=500) is False


def test_operator_without_assignments_sees_nothing():
    caps = caps_for("operator", operator_id=4)
    assert can_access(caps, "service_point", resource_id=7) is False


def test_operator_cannot_access_operators_or_clients():
    caps = caps_for("operator", operator_id=4, service_point_ids=(7,))
    assert can_access(caps, "operator", resource_id=4, service_point_id=7) is False
    assert can_access(caps, "client", resource_id=1, service_point_id=7) is False


# ── Tests: client / anonymous ────────────────────────────────────────

def test_client_owns_own_bookings_and_reviews():
    caps = caps_for("client", client_id=11)
    assert can_access(caps, "booking", resource_owner_id=11) is True
    assert can_access(caps, "review", resource_owner_id=11) is True
    assert can_access(caps, "booking", resource_owner_id=12) is False
    assert can_access(caps, "service_point", resource_owner_id=11) is False


def test_anonymous_is_denied():
    assert can_access(resolve(None), "service_point", resource_owner_id=1, resource_id=1) is False


@pytest.mark.parametrize("owner", ["abc", object(), True, None])
def test_malformed_ids_are_denied_without_raising(owner):
    caps = caps_for("partner", partner_id=1)
    assert can_access(caps, "service_point", resource_owner_id=owner) is False


def test_unknown_resource_kind_is_denied():
    assert can_access(caps_for("partner", partner_id=1), "invoice", resource_owner_id=1) is False


# ── Tests: helpers ───────────────────────────────────────────────────

def test_is_partner_owned():
    assert is_partner_owned(5, 5) is True
    assert is_partner_owned(5, "5") is True
    assert is_partner_owned(5, 6) is False
    assert is_partner_owned(None, None) is False


def test_can_manage_service_point():
    assert can_manage_service_point(caps_for("manager"), 3) is True
    assert can_manage_service_point(caps_for("partner", partner_id=3), 3) is True
    assert can_manage_service_point(caps_for("partner", partner_id=3), 4) is False
    operator = caps_for("operator", operator_id=4, service_point_ids=(3,))
    assert can_manage_service_point(operator, 3) is False


def test_passes_guard_by_role_and_permission():
    partner = caps_for("partner", partner_id=3)
    assert passes_guard(partner) is True
    assert passes_guard(partner, allowed_roles=["admin", "partner"]) is True
    assert passes_guard(partner, allowed_roles=["admin"]) is False
    assert passes_guard(partner, required_permissions=["can_manage_operators"]) is True
    assert passes_guard(partner, required_permissions=["can_manage_users"]) is False
    assert passes_guard(partner, check=lambda c: c.partner_id == 3) is True
    assert passes_guard(partner, check=lambda c: c.partner_id == 4) is False


def test_passes_guard_anonymous_with_roles():
    assert passes_guard(resolve(None), allowed_roles=["client"]) is False
    assert passes_guard(resolve(None), allowed_roles=["ghost"]) is False
