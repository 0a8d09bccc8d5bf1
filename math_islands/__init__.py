# math_islands/__init__.py
from __future__ import annotations
import os
import random
import logging
import click
from flask import Flask, jsonify

from .db import db
from flask_migrate import Migrate
from flask_login import LoginManager
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# --- extensions ---
migrate = Migrate()
login_manager = LoginManager()
# storage comes from RATELIMIT_STORAGE_URI (memory:// unless set)
limiter = Limiter(get_remote_address)


def create_app(config_object=None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)

    # ---------------------------
    # Config
    # ---------------------------
    app.config.from_object(config_object or "math_islands.config.Config")
    if config_object is None:
        app.config.from_pyfile("config.py", silent=True)  # instance/config.py (optional)

    if not app.config.get("SQLALCHEMY_DATABASE_URI"):
        raise RuntimeError(
            "Missing SQLALCHEMY_DATABASE_URI (or DATABASE_URL). "
            "Set it via env or instance/config.py."
        )

    # ---------------------------
    # Logging
    # ---------------------------
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    app.logger.setLevel(level)
    for name in ("math_islands", "math_islands.games", "math_islands.games.core",
                 "math_islands.games.number_target", "math_islands.progress"):
        logging.getLogger(name).setLevel(level)

    # ---------------------------
    # Extensions init
    # ---------------------------
    if not app.config.get("SECRET_KEY"):
        app.config["SECRET_KEY"] = os.environ.get("SECRET_KEY") or os.urandom(32).hex()

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    limiter.init_app(app)

    from .models import User  # import after db/app set up

    @login_manager.user_loader
    def load_user(user_id):
        try:
            return db.session.get(User, int(user_id))
        except (TypeError, ValueError):
            return None

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"error": "Not authenticated"}), 401

    # ---------------------------
    # Blueprints
    # ---------------------------
    from .auth.routes import auth_bp
    from .home.routes import bp as home_bp
    from .progress.routes import bp as progress_bp
    from .games.number_target.routes import bp as number_target_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(home_bp)
    app.register_blueprint(progress_bp)
    app.register_blueprint(number_target_bp)
    # every board click is a request; only accounts and progress are limited
    limiter.exempt(number_target_bp)

    # ---------------------------
    # CLI commands
    # ---------------------------
    @app.cli.command("create-user")
    @click.argument("username")
    @click.argument("email")
    @click.password_option()
    @click.option("--teacher", is_flag=True, help="Give the account access to the stats dashboard.")
    def create_user(username, email, password, teacher):
        """Create a student (or teacher) account."""
        from .auth.helpers import create_account, AccountError
        try:
            user = create_account(username, email, password, is_teacher=teacher)
        except AccountError as e:
            raise click.ClickException(str(e))
        click.echo(f"✅ Created {'teacher' if user.is_teacher else 'student'} {user.username} (id={user.id})")

    @app.cli.command("number-target-sample")
    @click.option("--level", default=1, show_default=True, type=int)
    @click.option("--seed", default=None, type=int)
    @click.option("--solvable-only", is_flag=True)
    def number_target_sample(level, seed, solvable_only):
        """Deal one Number Target challenge and print a solution if there is one."""
        from .games.number_target.logic import generate, find_solution
        ch = generate(level, rng=random.Random(seed), solvable_only=solvable_only)
        click.echo(f"Level {ch.level}: numbers={list(ch.numbers)} target={ch.target}")
        path = find_solution(ch.numbers, ch.target)
        if path is None:
            click.echo("No solution within 4 steps.")
        else:
            for step in path:
                click.echo(f"  {step}")

    @app.errorhandler(429)
    def too_many_requests(e):
        return jsonify({"ok": False, "error": "Too many requests. Try again in a minute."}), 429

    @app.errorhandler(500)
    def internal_error(e):
        # Flask has already logged the traceback at this point
        db.session.rollback()
        return jsonify({"ok": False, "error": "internal_error"}), 500

    @app.after_request
    def set_security_headers(resp):
        resp.headers["X-Frame-Options"] = "DENY"
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return resp

    return app
