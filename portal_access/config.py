"""
Centralised configuration constants, read from the environment.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# ── Booking backend ──────────────────────────────────────────────────
PORTAL_API_URL = os.getenv("PORTAL_API_URL", "http://localhost:8000/api/v1")
REQUEST_TIMEOUT_SECONDS = float(os.getenv("PORTAL_API_TIMEOUT", "15"))

# When True, unassign() calls DELETE instead of deactivating the row.
ASSIGNMENT_HARD_DELETE = os.getenv("ASSIGNMENT_HARD_DELETE", "false").lower() in {"1", "true", "yes"}

# ── Operators ────────────────────────────────────────────────────────
ACCESS_LEVEL_RANGE = range(1, 6)

# ── Working point persistence ────────────────────────────────────────
WORKING_POINT_KEY = "operator_selected_service_point"
SESSION_STORE_URI = os.getenv("SESSION_STORE_URI", "sqlite:///portal_sessions.db")

# ── Roles ────────────────────────────────────────────────────────────
ROLE_DISPLAY_NAMES = {
    "admin": "Administrator",
    "manager": "Manager",
    "partner": "Partner",
    "operator": "Operator",
    "client": "Client",
}

# ── API server ───────────────────────────────────────────────────────
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production")
TOKEN_EXPIRY_HOURS = 24
