"""
JWT identity helpers and middleware for the Flask API.

Tokens are issued by the portal's authentication service; the claims carry
the Actor snapshot and are never refreshed here.
"""

from datetime import datetime, timedelta
from functools import wraps
from typing import Any, Dict, Optional

import jwt
from flask import request, jsonify

from portal_access.config import SECRET_KEY, TOKEN_EXPIRY_HOURS
from portal_access.models import Actor


def generate_token(actor: Actor) -> str:
    """Generate a JWT token for an actor (development and tests)."""
    payload = {
        "sub": str(actor.id),
        "role": actor.role,
        "partner_id": actor.partner_id,
        "operator_id": actor.operator_id,
        "client_id": actor.client_id,
        "iat": datetime.utcnow(),
        "exp": datetime.utcnow() + timedelta(hours=TOKEN_EXPIRY_HOURS),
    }
    return jwt.encode(payload, SECRET_KEY, algorithm="HS256")


def verify_token(token: str) -> Optional[Dict[str, Any]]:
    """Verify a JWT token and return the decoded payload (or None)."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def actor_from_claims(claims: Dict[str, Any]) -> Actor:
    """Build an Actor from verified token claims."""
    def _id(name):
        value = claims.get(name)
        return int(value) if value is not None else None

    return Actor(
        id=int(claims["sub"]),
        role=str(claims.get("role") or ""),
        partner_id=_id("partner_id"),
        operator_id=_id("operator_id"),
        client_id=_id("client_id"),
    )


def token_required(f):
    """Decorator that attaches the token's Actor to the request."""
    @wraps(f)
    def decorated(*args, **kwargs):
        token = None

        if "Authorization" in request.headers:
            auth_header = request.headers["Authorization"]
            try:
                token = auth_header.split(" ")[1]
            except IndexError:
                return jsonify({"error": "Invalid authorization header format"}), 401

        if not token:
            token = request.args.get("token")

        if not token:
            return jsonify({"error": "Authentication token is missing"}), 401

        payload = verify_token(token)
        if not payload:
            return jsonify({"error": "Invalid or expired token"}), 401

        try:
            request.actor = actor_from_claims(payload)
        except (KeyError, TypeError, ValueError):
            return jsonify({"error": "Token does not describe an actor"}), 401
        request.token = token

        return f(*args, **kwargs)

    return decorated
