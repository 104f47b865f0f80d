"""
Unit tests for the HTTP transport, using a fake requests session.
"""

import json

import pytest
import requests

from portal_access.transport import AssignmentTransport


# ── Helpers / Fakes ──────────────────────────────────────────────────

class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload
        self.content = json.dumps(payload).encode() if payload is not None else b""

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []
        self.headers = {}

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        return self.responses.pop(0)


ROW = {
    "id": 31,
    "operator_id": 4,
    "service_point_id": 7,
    "service_point_name": "Center",
    "partner_id": 5,
    "is_active": True,
    "assigned_at": "2024-03-01T10:00:00Z",
    "created_at": "2024-03-01T10:00:00Z",
    "updated_at": "2024-03-02T10:00:00.000+02:00",
}


def make(*responses, token=None):
    session = FakeSession(responses)
    return AssignmentTransport("http://backend/api/v1/", token=token, timeout=3, session=session), session


# ── Tests ────────────────────────────────────────────────────────────

def test_list_assignments_builds_url_and_params():
    t, s = make(FakeResponse(payload={"data": [ROW], "meta": {"total": 1}}))
    rows = t.list_assignments(4, active=True)

    method, url, kwargs = s.requests[0]
    assert method == "GET"
    assert url == "http://backend/api/v1/operators/4/service_points"
    assert kwargs["params"] == {"active": "true"}
    assert kwargs["timeout"] == 3
    assert rows[0].service_point_name == "Center"
    assert rows[0].assigned_at.year == 2024


def test_list_assignments_without_filter_sends_no_params():
    t, s = make(FakeResponse(payload={"data": []}))
    assert t.list_assignments(4) == []
    assert s.requests[0][2]["params"] is None


def test_token_sets_bearer_header():
    t, s = make(token="abc")
    assert s.headers["Authorization"] == "Bearer abc"


def test_create_and_update_bodies():
    t, s = make(
        FakeResponse(201, {"data": ROW, "message": "ok"}),
        FakeResponse(200, {"data": dict(ROW, is_active=False)}),
    )
    assert t.create_assignment(4, 7).id == 31
    assert t.update_assignment(31, False).is_active is False

    assert s.requests[0][2]["json"] == {"service_point_id": 7}
    assert s.requests[1][0] == "PATCH"
    assert s.requests[1][1].endswith("/operator_service_points/31")
    assert s.requests[1][2]["json"] == {"is_active": False}


def test_bulk_assign_parses_three_part_report():
    t, s = make(FakeResponse(200, {
        "data": [ROW],
        "errors": [{"service_point_id": 9, "service_point_name": "Far", "error": "taken"}],
        "meta": {"total_requested": 2, "successful": 1, "failed": 1},
        "message": "done",
    }))
    result = t.bulk_assign(4, [7, 9])

    assert s.requests[0][1].endswith("/operators/4/service_points/bulk_assign")
    assert s.requests[0][2]["json"] == {"service_point_ids": [7, 9]}
    assert result.summary.total_requested == 2
    assert result.failed[0].service_point_name == "Far"
    assert result.failed[0].error == "taken"


def test_delete_with_empty_body():
    t, s = make(FakeResponse(204))
    assert t.delete_assignment(31) is None
    assert s.requests[0][0] == "DELETE"


def test_http_errors_are_raised_unmodified():
    t, _ = make(FakeResponse(500, {"error": "boom"}))
    with pytest.raises(requests.HTTPError) as e:
        t.list_assignments(4)
    assert e.value.response.status_code == 500


def test_missing_service_point_is_none():
    t, _ = make(FakeResponse(404, {"error": "not found"}))
    assert t.get_service_point(77) is None


def test_service_point_other_errors_raise():
    t, _ = make(FakeResponse(503))
    with pytest.raises(requests.HTTPError):
        t.get_service_point(77)


def test_operator_and_partner_points():
    t, _ = make(
        FakeResponse(payload={"id": 4, "partner_id": 5, "user": {"id": 40}, "access_level": 3}),
        FakeResponse(payload={"data": [{"id": 7, "partner_id": 5, "name": "Center"}]}),
    )
    op = t.get_operator(4)
    assert (op.partner_id, op.user_id, op.access_level) == (5, 40, 3)
    points = t.list_partner_service_points(5)
    assert [p.id for p in points] == [7]


def test_operator_access_level_out_of_range():
    t, _ = make(FakeResponse(payload={"id": 4, "partner_id": 5, "user_id": 40, "access_level": 9}))
    with pytest.raises(ValueError, match="access_level"):
        t.get_operator(4)


def test_assignment_detail_uses_nested_info():
    detail = {
        "id": 31, "operator_id": 4, "service_point_id": 7, "is_active": True,
        "service_point_info": {"id": 7, "name": "Nested"},
        "partner_info": {"id": 5, "name": "P"},
    }
    t, _ = make(FakeResponse(payload={"data": detail}))
    a = t.get_assignment(31)
    assert a.service_point_name == "Nested"
    assert a.partner_id == 5
