# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/dinoplay/routes/auth.py
"""
Authentication API routes

Accounts are provisioned by administrators (POST /api/admin/workers or the
CLI); there is no self-registration.
"""

from flask import Blueprint, request, jsonify, current_app, g

from .. import validation
from ..validation import ValidationError
from ..services import auth_service
from ..services import session_service
from ..decorators import require_auth, bearer_token


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Request body:
    {
        "email": "worker@dinoplay.local",
        "password": "..."
    }

    Token must be included in Authorization header for protected routes.
    """
    try:
        data = validation.json_object(request.get_json(silent=True))
        email = validation.string(data, "email")
        password = validation.string(data, "password")
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400

    if not all([email, password]):
        return jsonify({"error": "email and password required"}), 400

    try:
        user = auth_service.authenticate(email, password)

        if not user:
            current_app.logger.info("Failed login for %s", email)
            return jsonify({"error": "Invalid credentials"}), 401

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )

        return jsonify({
            "user": user.to_dict(),
            "role": user.role,
            "profile": user.profile_dict(),
            "token": token,
            "session": session.to_dict(),
            "message": "Login successful"
        }), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_auth
def logout_route():
    """Revoke the current session token."""
    session_service.revoke_session(bearer_token(), reason="User logout")
    return jsonify({"message": "Logged out"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current user, role and profile."""
    return jsonify(g.session_context.to_dict()), 200
