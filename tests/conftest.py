"""
Shared fakes for the test-suite.
"""

import pytest

from portal_access.models import Assignment, BulkFailure, BulkResult, BulkSummary, Operator, ServicePoint
from portal_access.storage import MemoryStore


class FakeTransport:
    """In-memory stand-in for AssignmentTransport that records every call."""

    base_url = "http://backend.test/api/v1"

    def __init__(self):
        self.operators = {}
        self.points = {}
        self.assignments = {}
        self.calls = []
        self.server_rejects = {}   # service_point_id -> error text
        self.server_ignores = set()
        self._next_id = 100

    # ── Seeding ──────────────────────────────────────────────────────

    def add_operator(self, operator_id, partner_id, access_level=1):
        self.operators[operator_id] = Operator(
            id=operator_id, partner_id=partner_id, user_id=operator_id + 1000,
            access_level=access_level,
        )

    def add_point(self, point_id, partner_id, name=None):
        self.points[point_id] = ServicePoint(
            id=point_id, partner_id=partner_id, name=name or f"Point {point_id}",
        )

    def add_assignment(self, operator_id, point_id, is_active=True):
        self._next_id += 1
        a = Assignment(
            id=self._next_id, operator_id=operator_id, service_point_id=point_id,
            is_active=is_active, service_point_name=self.points[point_id].name,
        )
        self.assignments[a.id] = a
        return a

    # ── Transport API ────────────────────────────────────────────────

    def get_operator(self, operator_id):
        self.calls.append(("get_operator", operator_id))
        return self.operators[operator_id]

    def get_service_point(self, service_point_id):
        self.calls.append(("get_service_point", service_point_id))
        return self.points.get(service_point_id)

    def list_partner_service_points(self, partner_id):
        self.calls.append(("list_partner_service_points", partner_id))
        return [p for p in self.points.values() if p.partner_id == partner_id]

    def list_assignments(self, operator_id, active=None):
        self.calls.append(("list_assignments", operator_id, active))
        rows = [a for a in self.assignments.values() if a.operator_id == operator_id]
        if active is not None:
            rows = [a for a in rows if a.is_active == active]
        return rows

    def get_assignment(self, assignment_id):
        self.calls.append(("get_assignment", assignment_id))
        return self.assignments[assignment_id]

    def create_assignment(self, operator_id, service_point_id):
        self.calls.append(("create_assignment", operator_id, service_point_id))
        return self.add_assignment(operator_id, service_point_id)

    def bulk_assign(self, operator_id, service_point_ids):
        self.calls.append(("bulk_assign", operator_id, list(service_point_ids)))
        succeeded, failed = [], []
        for sp_id in service_point_ids:
            if sp_id in self.server_ignores:
                continue
            if sp_id in self.server_rejects:
                failed.append(BulkFailure(sp_id, "", self.server_rejects[sp_id]))
                continue
            succeeded.append(self.add_assignment(operator_id, sp_id))
        return BulkResult(
            succeeded=succeeded,
            failed=failed,
            summary=BulkSummary(len(service_point_ids), len(succeeded), len(failed)),
        )

    def update_assignment(self, assignment_id, is_active):
        self.calls.append(("update_assignment", assignment_id, is_active))
        self.assignments[assignment_id].is_active = is_active
        return self.assignments[assignment_id]

    def delete_assignment(self, assignment_id):
        self.calls.append(("delete_assignment", assignment_id))
        del self.assignments[assignment_id]

    def called(self, name):
        return [c for c in self.calls if c[0] == name]


@pytest.fixture
def transport():
    """Partner 5 owns points 1-3, partner 6 owns point 9; operator 4 works for partner 5."""
    t = FakeTransport()
    t.add_operator(4, partner_id=5)
    t.add_operator(8, partner_id=6)
    for point_id in (1, 2, 3):
        t.add_point(point_id, partner_id=5)
    t.add_point(9, partner_id=6, name="Other Partner Point")
    return t


@pytest.fixture
def store():
    return MemoryStore()
