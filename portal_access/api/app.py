"""
Flask application factory and server entry-point.
"""

import os
import sys
import traceback

from flask import Flask
from flask_cors import CORS

from portal_access.assignments import AssignmentManager
from portal_access.config import ASSIGNMENT_HARD_DELETE, PORTAL_API_URL, TOKEN_EXPIRY_HOURS
from portal_access.storage import SqlKeyValueStore, init_engine
from portal_access.transport import AssignmentTransport
from portal_access.api.routes import register_routes


def create_app(transport=None, store=None):
    """Build and return a fully configured Flask application."""
    app = Flask(__name__)
    CORS(app)

    # ── Initialise shared resources ──────────────────────────────────
    try:
        if transport is None:
            print(f"[init] Booking backend: {PORTAL_API_URL}")
            transport = AssignmentTransport(token=os.getenv("PORTAL_SERVICE_TOKEN"))

        if store is None:
            print("[init] Initializing session store...")
            store = SqlKeyValueStore(init_engine())

        manager = AssignmentManager(transport, hard_delete=ASSIGNMENT_HARD_DELETE)
        print("[init] ✓ API server ready")
    except Exception as e:
        print(f"[FATAL] Failed to initialize: {e}", file=sys.stderr)
        traceback.print_exc()
        sys.exit(1)

    # ── Register routes ──────────────────────────────────────────────
    register_routes(app, manager, store)

    return app


def main():
    """Run the development server."""
    print("=" * 60)
    print("Booking Portal – Access API Server")
    print("=" * 60)

    app = create_app()

    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8100"))
    debug = os.getenv("FLASK_ENV") == "development"

    print(f"\n[server] Starting Flask API on {host}:{port}")
    print(f"[server] Debug mode: {debug}")
    print(f"[server] Hard delete on revoke: {ASSIGNMENT_HARD_DELETE}")
    print(f"[server] Token expiry: {TOKEN_EXPIRY_HOURS} hours")
    print("\nAPI Endpoints:")
    print(f"  - GET    http://{host}:{port}/api/me/capabilities")
    print(f"  - GET    http://{host}:{port}/api/me/filters")
    print(f"  - POST   http://{host}:{port}/api/access/check")
    print(f"  - GET    http://{host}:{port}/api/operators/<id>/service_points")
    print(f"  - POST   http://{host}:{port}/api/operators/<id>/service_points/bulk_assign")
    print(f"  - PATCH  http://{host}:{port}/api/operator_service_points/<id>")
    print(f"  - GET    http://{host}:{port}/api/me/working_point")
    print(f"  - GET    http://{host}:{port}/health")
    print("\n" + "=" * 60)

    app.run(host=host, port=port, debug=debug, threaded=True)


if __name__ == "__main__":
    main()
