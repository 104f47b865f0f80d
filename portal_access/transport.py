"""
HTTP client for the booking backend's operator assignment endpoints.

Failures are raised as ``requests`` exceptions and never retried here.
"""

from typing import Any, Dict, List, Optional

import requests

from portal_access.config import PORTAL_API_URL, REQUEST_TIMEOUT_SECONDS
from portal_access.models import (
    Assignment,
    BulkFailure,
    BulkResult,
    BulkSummary,
    Operator,
    ServicePoint,
)


def _unwrap(payload):
    """Strip the {"data": ...} envelope used by most backend responses."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


class AssignmentTransport:
    """Thin wrapper over a requests.Session bound to the backend base URL."""

    def __init__(
        self,
        base_url: str = PORTAL_API_URL,
        token: Optional[str] = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _request(self, method: str, path: str, **kwargs) -> Any:
        response = self.session.request(
            method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs
        )
        response.raise_for_status()
        if not response.content:
            return None
        return response.json()

    # ── Lookups used for validation ──────────────────────────────────

    def get_operator(self, operator_id: int) -> Operator:
        return Operator.from_dict(_unwrap(self._request("GET", f"/operators/{operator_id}")))

    def get_service_point(self, service_point_id: int) -> Optional[ServicePoint]:
        """Fetch one service point; None when the backend answers 404."""
        try:
            payload = self._request("GET", f"/service_points/{service_point_id}")
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                return None
            raise
        return ServicePoint.from_dict(_unwrap(payload))

    def list_partner_service_points(self, partner_id: int) -> List[ServicePoint]:
        rows = _unwrap(self._request("GET", f"/partners/{partner_id}/service_points")) or []
        return [ServicePoint.from_dict(r) for r in rows]

    # ── Assignments ──────────────────────────────────────────────────

    def list_assignments(self, operator_id: int, active: Optional[bool] = None) -> List[Assignment]:
        params = {"active": str(active).lower()} if active is not None else None
        rows = _unwrap(
            self._request("GET", f"/operators/{operator_id}/service_points", params=params)
        ) or []
        return [Assignment.from_dict(r) for r in rows]

    def get_assignment(self, assignment_id: int) -> Assignment:
        return Assignment.from_dict(
            _unwrap(self._request("GET", f"/operator_service_points/{assignment_id}"))
        )

    def create_assignment(self, operator_id: int, service_point_id: int) -> Assignment:
        payload = self._request(
            "POST",
            f"/operators/{operator_id}/service_points",
            json={"service_point_id": service_point_id},
        )
        return Assignment.from_dict(_unwrap(payload))

    def bulk_assign(self, operator_id: int, service_point_ids: List[int]) -> BulkResult:
        payload: Dict[str, Any] = self._request(
            "POST",
            f"/operators/{operator_id}/service_points/bulk_assign",
            json={"service_point_ids": list(service_point_ids)},
        ) or {}

        succeeded = [Assignment.from_dict(r) for r in payload.get("data") or []]
        failed = [
            BulkFailure(
                service_point_id=int(e["service_point_id"]),
                service_point_name=str(e.get("service_point_name") or ""),
                error=str(e.get("error") or "Rejected by server"),
            )
            for e in payload.get("errors") or []
        ]
        meta = payload.get("meta") or {}
        summary = BulkSummary(
            total_requested=int(meta.get("total_requested", len(service_point_ids))),
            successful=int(meta.get("successful", len(succeeded))),
            failed=int(meta.get("failed", len(failed))),
        )
        return BulkResult(succeeded=succeeded, failed=failed, summary=summary)

    def update_assignment(self, assignment_id: int, is_active: bool) -> Assignment:
        payload = self._request(
            "PATCH",
            f"/operator_service_points/{assignment_id}",
            json={"is_active": bool(is_active)},
        )
        return Assignment.from_dict(_unwrap(payload))

    def delete_assignment(self, assignment_id: int) -> None:
        self._request("DELETE", f"/operator_service_points/{assignment_id}")
