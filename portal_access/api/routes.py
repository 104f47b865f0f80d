"""
Flask route handlers for the portal access API.

These endpoints mirror the derived capabilities for the UI; the booking
backend remains the authority for every mutation.
"""

import sys
import traceback

import requests
from flask import request, jsonify

from portal_access.access import can_access
from portal_access.errors import Conflict, ValidationError
from portal_access.filters import build_filters
from portal_access.models import ResourceKind
from portal_access.permissions import CAPABILITY_FLAGS, resolve, role_display_name, with_assignments
from portal_access.working_point import WorkingPointSelector
from portal_access.api.auth import token_required


def _is_id(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _capabilities_payload(caps):
    payload = {flag: getattr(caps, flag) for flag in CAPABILITY_FLAGS}
    payload.update({
        "role": caps.role.value if caps.role else None,
        "partner_id": caps.partner_id,
        "operator_id": caps.operator_id,
        "client_id": caps.client_id,
        "assigned_service_point_ids": (
            list(caps.assigned_service_point_ids)
            if caps.assigned_service_point_ids is not None else None
        ),
    })
    return payload


def register_routes(app, manager, store):
    """Register all API routes on the Flask *app*."""

    def current_capabilities():
        """Resolve the request actor, loading assignments for operators."""
        actor = request.actor
        caps = resolve(actor)
        if caps.is_operator and caps.operator_id is not None:
            active = manager.list_assignments(caps.operator_id, active_only=True)
            caps = resolve(with_assignments(actor, active))
        return caps

    def can_manage_operator(caps, operator_id):
        if not caps.can_manage_operators:
            return False
        if caps.has_full_access:
            return True
        operator = manager.get_operator(operator_id)
        return can_access(caps, ResourceKind.OPERATOR, resource_owner_id=operator.partner_id)

    def forbidden(message="Insufficient permissions"):
        return jsonify({"error": message}), 403

    def json_body():
        if not request.is_json:
            return None
        data = request.get_json(silent=True)
        if data is None:
            return {}
        return data if isinstance(data, dict) else None

    # ── Health / info ────────────────────────────────────────────────

    @app.route("/", methods=["GET"])
    def index():
        return jsonify({
            "service": "Booking Portal Access API",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "capabilities": "/api/me/capabilities",
                "filters": "/api/me/filters",
                "access_check": "/api/access/check",
                "assignments": "/api/operators/<id>/service_points",
                "working_point": "/api/me/working_point",
                "health": "/health",
            },
        })

    @app.route("/health", methods=["GET"])
    def health():
        checks = {"store": False, "backend_url": bool(manager.transport.base_url)}
        try:
            store.get("__health__")
            checks["store"] = True
        except Exception as e:
            print(f"[WARN] Session store health check failed: {e}", file=sys.stderr)

        all_healthy = all(checks.values())
        return jsonify({
            "status": "healthy" if all_healthy else "unhealthy",
            "checks": checks,
        }), 200 if all_healthy else 503

    # ── Capabilities / filters / access ──────────────────────────────

    @app.route("/api/me/capabilities", methods=["GET"])
    @token_required
    def get_capabilities():
        caps = current_capabilities()
        return jsonify({
            "success": True,
            "role_name": role_display_name(caps.role),
            "capabilities": _capabilities_payload(caps),
        }), 200

    @app.route("/api/me/filters", methods=["GET"])
    @token_required
    def get_filters():
        filters = build_filters(current_capabilities())
        return jsonify({
            "success": True,
            "filters": filters.query_params(),
            "restricted": filters.restricted,
            "matches_nothing": filters.matches_nothing,
        }), 200

    @app.route("/api/access/check", methods=["POST"])
    @token_required
    def check_access():
        data = json_body()
        if data is None:
            return jsonify({"error": "Request body must be a JSON object"}), 400
        if not data.get("resource_type"):
            return jsonify({"error": "resource_type is required"}), 400

        allowed = can_access(
            current_capabilities(),
            data.get("resource_type"),
            resource_owner_id=data.get("owner_id"),
            resource_id=data.get("resource_id"),
            service_point_id=data.get("service_point_id"),
        )
        return jsonify({"success": True, "allowed": allowed}), 200

    # ── Assignments ──────────────────────────────────────────────────

    @app.route("/api/operators/<int:operator_id>/service_points", methods=["GET"])
    @token_required
    def list_assignments(operator_id):
        caps = current_capabilities()
        own = caps.is_operator and caps.operator_id == operator_id
        if not own and not can_manage_operator(caps, operator_id):
            return forbidden()

        active_only = request.args.get("active", "").lower() == "true"
        rows = manager.list_assignments(operator_id, active_only=active_only)
        active_count = sum(1 for a in rows if a.is_active)
        return jsonify({
            "data": [a.to_dict() for a in rows],
            "meta": {"total": len(rows), "active": active_count, "inactive": len(rows) - active_count},
        }), 200

    @app.route("/api/operators/<int:operator_id>/service_points", methods=["POST"])
    @token_required
    def create_assignment(operator_id):
        data = json_body()
        if data is None:
            return jsonify({"error": "Request body must be a JSON object"}), 400
        if not can_manage_operator(current_capabilities(), operator_id):
            return forbidden()

        service_point_id = data.get("service_point_id")
        if not _is_id(service_point_id):
            return jsonify({"error": "service_point_id must be an integer"}), 400

        assignment = manager.assign(operator_id, service_point_id)
        return jsonify({"data": assignment.to_dict(), "message": "Operator assigned"}), 201

    @app.route("/api/operators/<int:operator_id>/service_points/bulk_assign", methods=["POST"])
    @token_required
    def bulk_assign(operator_id):
        data = json_body()
        if data is None:
            return jsonify({"error": "Request body must be a JSON object"}), 400
        if not can_manage_operator(current_capabilities(), operator_id):
            return forbidden()

        ids = data.get("service_point_ids")
        if not isinstance(ids, list) or not ids or not all(_is_id(i) for i in ids):
            return jsonify({"error": "service_point_ids must be a non-empty list of integers"}), 400

        result = manager.bulk_assign(operator_id, ids)
        body = result.to_dict()
        body["message"] = (
            f"Assigned {result.summary.successful} of {result.summary.total_requested} service points"
        )
        return jsonify(body), 200

    @app.route("/api/operator_service_points/<int:assignment_id>", methods=["PATCH"])
    @token_required
    def update_assignment(assignment_id):
        data = json_body()
        if data is None:
            return jsonify({"error": "Request body must be a JSON object"}), 400
        if not isinstance(data.get("is_active"), bool):
            return jsonify({"error": "is_active must be a boolean"}), 400

        current = manager.get_assignment(assignment_id)
        if not can_manage_operator(current_capabilities(), current.operator_id):
            return forbidden()

        assignment = manager.update_assignment(assignment_id, data["is_active"])
        return jsonify({"data": assignment.to_dict(), "message": "Assignment updated"}), 200

    @app.route("/api/operator_service_points/<int:assignment_id>", methods=["DELETE"])
    @token_required
    def delete_assignment(assignment_id):
        current = manager.get_assignment(assignment_id)
        if not can_manage_operator(current_capabilities(), current.operator_id):
            return forbidden()

        manager.unassign(assignment_id)
        return jsonify({"success": True, "message": "Assignment revoked"}), 200

    # ── Working point ────────────────────────────────────────────────

    @app.route("/api/me/working_point", methods=["GET"])
    @token_required
    def get_working_point():
        caps = current_capabilities()
        selector = WorkingPointSelector(store, request.actor)
        if not caps.is_operator or selector.operator_id is None:
            return forbidden("Only operators have a working point")

        active = manager.list_assignments(caps.operator_id, active_only=True)
        return jsonify({
            "success": True,
            "service_point_id": selector.current(active),
            "assigned_service_point_ids": [a.service_point_id for a in active],
        }), 200

    @app.route("/api/me/working_point", methods=["PUT"])
    @token_required
    def put_working_point():
        data = json_body()
        if data is None:
            return jsonify({"error": "Request body must be a JSON object"}), 400

        caps = current_capabilities()
        selector = WorkingPointSelector(store, request.actor)
        if not caps.is_operator or selector.operator_id is None:
            return forbidden("Only operators have a working point")

        service_point_id = data.get("service_point_id")
        if service_point_id is not None:
            if not _is_id(service_point_id):
                return jsonify({"error": "service_point_id must be an integer or null"}), 400
            if service_point_id not in (caps.assigned_service_point_ids or ()):
                raise ValidationError(
                    f"Service point {service_point_id} is not assigned to this operator."
                )

        selector.set_selection(service_point_id)
        return jsonify({"success": True, "service_point_id": service_point_id}), 200

    # ── Error handlers ───────────────────────────────────────────────

    @app.errorhandler(ValidationError)
    def validation_error(e):
        return jsonify({"error": "Validation failed", "details": str(e)}), 422

    @app.errorhandler(Conflict)
    def conflict(e):
        return jsonify({"error": "Conflict", "details": str(e)}), 409

    @app.errorhandler(requests.HTTPError)
    def upstream_http_error(e):
        status = e.response.status_code if e.response is not None else None
        print(f"[ERROR] Backend answered {status}: {e}", file=sys.stderr)
        return jsonify({"error": "Backend request failed", "upstream_status": status}), 502

    @app.errorhandler(requests.RequestException)
    def upstream_unavailable(e):
        print(f"[ERROR] Backend unreachable: {e}", file=sys.stderr)
        return jsonify({"error": "Backend unavailable", "details": str(e)}), 502

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Endpoint not found", "message": str(e)}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed", "message": str(e)}), 405

    @app.errorhandler(500)
    def internal_error(e):
        traceback.print_exc()
        return jsonify({"error": "Internal server error", "message": str(e)}), 500
