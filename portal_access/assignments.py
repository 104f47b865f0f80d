"""
Operator ↔ service point assignment lifecycle: assign, bulk assign, toggle,
revoke and list.

Domain rejections raise ValidationError / Conflict for single operations and
are collected per item for bulk operations. Transport errors pass through.
"""

import sys
from typing import Dict, Iterable, List, Optional

import requests

from portal_access.access import is_partner_owned
from portal_access.config import ASSIGNMENT_HARD_DELETE
from portal_access.errors import AssignmentError, Conflict, ValidationError
from portal_access.models import (
    Assignment,
    BulkFailure,
    BulkResult,
    BulkSummary,
    Operator,
    ServicePoint,
)


def check_ownership(operator: Operator, point: Optional[ServicePoint], service_point_id: int):
    """Raise ValidationError unless *point* exists and belongs to the operator's partner."""
    if point is None:
        raise ValidationError(f"Service point {service_point_id} not found.")
    if not is_partner_owned(operator.partner_id, point.partner_id):
        raise ValidationError(
            f"Service point '{point.name}' belongs to another partner "
            f"and cannot be assigned to operator {operator.id}."
        )


class AssignmentManager:
    """Single entry point for mutating operator assignments."""

    def __init__(self, transport, hard_delete: bool = ASSIGNMENT_HARD_DELETE):
        self.transport = transport
        self.hard_delete = hard_delete

    def _active_point_ids(self, operator_id: int) -> set:
        return {
            a.service_point_id
            for a in self.transport.list_assignments(operator_id, active=True)
            if a.is_active
        }

    def _lookup_unowned(self, service_point_id: int) -> Optional[ServicePoint]:
        """Fetch a point missing from the partner listing, for its name only."""
        try:
            return self.transport.get_service_point(service_point_id)
        except requests.HTTPError as e:
            status = getattr(e.response, "status_code", None)
            print(f"[WARN] service point {service_point_id} lookup failed ({status})", file=sys.stderr)
            raise ValidationError(
                f"Service point {service_point_id} is not owned by the operator's partner."
            ) from e

    # ── Reads ────────────────────────────────────────────────────────

    def get_operator(self, operator_id: int) -> Operator:
        return self.transport.get_operator(operator_id)

    def get_assignment(self, assignment_id: int) -> Assignment:
        return self.transport.get_assignment(assignment_id)

    def list_assignments(self, operator_id: int, active_only: bool = False) -> List[Assignment]:
        """All assignments of an operator, revoked rows included unless active_only."""
        if not active_only:
            return self.transport.list_assignments(operator_id)
        rows = self.transport.list_assignments(operator_id, active=True)
        return [a for a in rows if a.is_active]

    # ── Single assignment ────────────────────────────────────────────

    def assign(self, operator_id: int, service_point_id: int) -> Assignment:
        operator = self.transport.get_operator(operator_id)
        point = self.transport.get_service_point(service_point_id)
        check_ownership(operator, point, service_point_id)

        if service_point_id in self._active_point_ids(operator_id):
            raise Conflict(
                f"Operator {operator_id} is already assigned to service point '{point.name}'."
            )

        return self.transport.create_assignment(operator_id, service_point_id)

    # ── Bulk assignment ──────────────────────────────────────────────

    def bulk_assign(self, operator_id: int, service_point_ids: Iterable[int]) -> BulkResult:
        """Assign every requested point independently and report per item.

        Ids failing local validation are never sent. Whatever the backend
        accepts, rejects or leaves unanswered is merged into one BulkResult
        whose summary always adds up to the number of requested ids.
        """
        requested = [int(i) for i in service_point_ids]
        if not requested:
            return BulkResult()

        operator = self.transport.get_operator(operator_id)
        owned: Dict[int, ServicePoint] = {
            p.id: p for p in self.transport.list_partner_service_points(operator.partner_id)
        }
        active_ids = self._active_point_ids(operator_id)

        names: Dict[int, str] = {}
        failed: List[BulkFailure] = []
        to_send: List[int] = []

        for sp_id in requested:
            try:
                if sp_id in names:
                    raise Conflict(f"Service point {sp_id} is listed more than once.")
                point = owned.get(sp_id)
                if point is None:
                    point = self._lookup_unowned(sp_id)
                names[sp_id] = point.name if point else ""
                check_ownership(operator, point, sp_id)
                if sp_id in active_ids:
                    raise Conflict(f"Operator {operator_id} is already assigned to '{point.name}'.")
            except AssignmentError as e:
                failed.append(BulkFailure(sp_id, names.get(sp_id, ""), str(e), e.code))
                continue
            to_send.append(sp_id)

        succeeded: List[Assignment] = []
        if to_send:
            remote = self.transport.bulk_assign(operator_id, to_send)
            pending = set(to_send)

            for assignment in remote.succeeded:
                if assignment.service_point_id in pending:
                    pending.discard(assignment.service_point_id)
                    succeeded.append(assignment)

            for failure in remote.failed:
                if failure.service_point_id in pending:
                    pending.discard(failure.service_point_id)
                    if not failure.service_point_name:
                        failure.service_point_name = names.get(failure.service_point_id, "")
                    failed.append(failure)

            for sp_id in to_send:
                if sp_id in pending:
                    failed.append(BulkFailure(sp_id, names.get(sp_id, ""), "No result returned by server."))

        order = {sp_id: idx for idx, sp_id in reversed(list(enumerate(requested)))}
        failed.sort(key=lambda f: order.get(f.service_point_id, len(requested)))

        summary = BulkSummary(
            total_requested=len(requested),
            successful=len(succeeded),
            failed=len(failed),
        )
        print(
            f"[assign] bulk operator={operator_id}: requested={summary.total_requested} "
            f"successful={summary.successful} failed={summary.failed}",
            file=sys.stderr,
        )
        return BulkResult(succeeded=succeeded, failed=failed, summary=summary)

    # ── Toggle / revoke ──────────────────────────────────────────────

    def update_assignment(self, assignment_id: int, is_active: bool) -> Assignment:
        """Activate or deactivate an assignment. Setting the current value is a no-op."""
        current = self.transport.get_assignment(assignment_id)
        if current.is_active == bool(is_active):
            return current

        if is_active:
            operator = self.transport.get_operator(current.operator_id)
            point = self.transport.get_service_point(current.service_point_id)
            check_ownership(operator, point, current.service_point_id)

            others = self.transport.list_assignments(current.operator_id, active=True)
            if any(
                a.is_active and a.id != current.id and a.service_point_id == current.service_point_id
                for a in others
            ):
                raise Conflict(
                    f"Operator {current.operator_id} already has an active assignment "
                    f"to service point {current.service_point_id}."
                )

        return self.transport.update_assignment(assignment_id, bool(is_active))

    def unassign(self, assignment_id: int, hard: Optional[bool] = None) -> None:
        """Revoke an assignment: deactivate it, or DELETE it when hard delete is on."""
        if self.hard_delete if hard is None else hard:
            self.transport.delete_assignment(assignment_id)
            return
        self.update_assignment(assignment_id, False)
