import re
from functools import wraps

import bcrypt
from flask import jsonify
from flask_login import current_user
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from ..db import db
from ..models import User

USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]{3,50}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD = 6


class AccountError(Exception):
    """Registration problem that should go back to the user as-is."""
    def __init__(self, message, status=400):
        super().__init__(message)
        self.status = status


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # not a bcrypt hash
        return False


def find_user(username: str):
    return User.query.filter(func.lower(User.username) == (username or "").strip().lower()).first()


def create_account(username, email, password, is_teacher=False) -> User:
    username = (username or "").strip()
    email = (email or "").strip().lower()
    password = password or ""

    if not username or not email or not password:
        raise AccountError("Missing required fields")
    if not USERNAME_RE.match(username):
        raise AccountError("Username must be 3-50 characters and contain only letters, numbers, and underscores")
    if not EMAIL_RE.match(email):
        raise AccountError("Invalid email format")
    if len(password) < MIN_PASSWORD:
        raise AccountError(f"Password must be at least {MIN_PASSWORD} characters long")

    # Pre-check to give a friendly message before we hit a DB constraint
    exists = (find_user(username)
              or User.query.filter(func.lower(User.email) == email).first())
    if exists:
        raise AccountError("Username or email already exists", status=409)

    user = User(username=username, email=email, password_hash=hash_password(password),
                is_teacher=bool(is_teacher))
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise AccountError("Username or email already exists", status=409)
    return user


def teacher_required(f):
    """Decorator for teacher-only JSON endpoints (401 anonymous, 403 students)."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            return jsonify({"error": "Not authenticated"}), 401
        if not current_user.is_teacher:
            return jsonify({"error": "Unauthorized - teachers only"}), 403
        return f(*args, **kwargs)
    return decorated_function
