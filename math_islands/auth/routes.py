from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_user, logout_user

from .. import limiter
from ..db import db
from .helpers import AccountError, check_password, create_account, find_user

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _login_limit():
    return current_app.config.get("LOGIN_RATELIMIT", "5 per minute")


@auth_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    try:
        user = create_account(
            data.get("username"),
            data.get("email"),
            data.get("password"),
            is_teacher=bool(data.get("isTeacher")),
        )
    except AccountError as e:
        return jsonify({"error": str(e)}), e.status

    current_app.logger.info("Registered user %s (teacher=%s)", user.username, user.is_teacher)
    return jsonify({"message": "User created successfully"}), 201


@auth_bp.post("/login")
@limiter.limit(_login_limit)
def login():
    data = request.get_json(silent=True) or {}
    username = (data.get("username") or "").strip()
    password = data.get("password") or ""
    if not username or not password:
        return jsonify({"error": "Missing username or password"}), 400

    user = find_user(username)
    if not user or not check_password(password, user.password_hash):
        return jsonify({"error": "Invalid credentials"}), 401

    login_user(user, remember=True)
    user.last_login = datetime.now(timezone.utc)
    db.session.commit()
    return jsonify({"message": "Login successful", "user": user.to_dict()}), 200


@auth_bp.post("/logout")
def logout():
    if current_user.is_authenticated:
        logout_user()
    return jsonify({"message": "Logged out successfully"}), 200


@auth_bp.get("/me")
def me():
    if current_user.is_authenticated:
        return jsonify({"authenticated": True, "user": current_user.to_dict()}), 200
    return jsonify({"authenticated": False}), 200
