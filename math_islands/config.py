import os


def _env_int(name, default):
    raw = os.environ.get(name)
    try:
        return int(raw) if raw not in (None, "") else default
    except ValueError:
        return default


def _env_bool(name, default=False):
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///islands.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = _env_bool("SQLALCHEMY_ECHO")

    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = _env_bool("SESSION_COOKIE_SECURE", False)
    REMEMBER_COOKIE_SECURE = SESSION_COOKIE_SECURE
    REMEMBER_COOKIE_DURATION = 60 * 60 * 24 * 7  # 7 days

    RATELIMIT_ENABLED = _env_bool("RATELIMIT_ENABLED", True)
    RATELIMIT_STORAGE_URI = os.environ.get("RATELIMIT_STORAGE_URI", "memory://")
    # not applied to /games/* (see create_app)
    RATELIMIT_DEFAULT = "200 per hour; 50 per minute"
    LOGIN_RATELIMIT = "5 per minute"

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Number Target island
    NUMBER_TARGET_ISLAND_ID = 1
    GAME_COMPLETION_LEVEL = _env_int("GAME_COMPLETION_LEVEL", 10)
    NUMBER_TARGET_SOLVABLE_ONLY = _env_bool("NUMBER_TARGET_SOLVABLE_ONLY", False)  # faithful default
    NUMBER_TARGET_AUTO_APPLY = _env_bool("NUMBER_TARGET_AUTO_APPLY", False)
    COMPLETION_REDIRECT_MS = _env_int("COMPLETION_REDIRECT_MS", 2500)


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ECHO = False
    RATELIMIT_ENABLED = False
    GAME_COMPLETION_LEVEL = 10
    NUMBER_TARGET_SOLVABLE_ONLY = False
    NUMBER_TARGET_AUTO_APPLY = False
