# math_islands/models.py
from datetime import datetime, timezone
from flask_login import UserMixin
from sqlalchemy import func
from .db import db, JSONType


def _utcnow():
    return datetime.now(timezone.utc)


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id            = db.Column(db.Integer, primary_key=True)
    username      = db.Column(db.String(50), unique=True, nullable=False)
    email         = db.Column(db.String(255), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    is_teacher    = db.Column(db.Boolean, nullable=False, default=False)
    created_at    = db.Column(db.DateTime(timezone=True), default=_utcnow)
    last_login    = db.Column(db.DateTime(timezone=True))

    progress = db.relationship("UserProgress", back_populates="user", lazy="dynamic",
                               cascade="all, delete-orphan")

    def to_dict(self):
        return {"id": self.id, "username": self.username, "email": self.email,
                "isTeacher": bool(self.is_teacher)}

    def __repr__(self):
        return f"<User id={self.id} username={self.username!r}>"


class UserProgress(db.Model):
    """One row per (user, island). Score only ever goes up."""
    __tablename__ = "user_progress"
    __table_args__ = (
        db.UniqueConstraint("user_id", "island_id", name="uq_progress_user_island"),
    )

    id           = db.Column(db.Integer, primary_key=True)
    user_id      = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    island_id    = db.Column(db.Integer, nullable=False)
    completed    = db.Column(db.Boolean, nullable=False, default=False)
    score        = db.Column(db.Integer, nullable=False, default=0)
    completed_at = db.Column(db.DateTime(timezone=True))
    updated_at   = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow,
                             server_default=func.now())

    user = db.relationship("User", back_populates="progress")

    def __repr__(self):
        return f"<UserProgress user_id={self.user_id} island={self.island_id} score={self.score}>"


class Attempt(db.Model):
    """Finished level of a mini-game run (solved or skipped)."""
    __tablename__ = "attempts"

    id           = db.Column(db.Integer, primary_key=True)
    user_id      = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    island_id    = db.Column(db.Integer, nullable=False)
    session_uuid = db.Column(db.String(100))
    level        = db.Column(db.Integer, nullable=False)
    status       = db.Column(db.String(20), nullable=False)   # 'solved' | 'skipped'
    steps_used   = db.Column(db.Integer)
    score        = db.Column(db.Integer, default=0)
    detail_json  = db.Column(JSONType)
    created_at   = db.Column(db.DateTime(timezone=True), default=_utcnow)

    user = db.relationship("User", backref=db.backref("attempts", lazy="dynamic"))

    def __repr__(self):
        return f"<Attempt id={self.id} island={self.island_id} level={self.level} status={self.status!r}>"
