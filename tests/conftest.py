"""Shared fixtures: a fresh app + in-memory database per test.

Direct database reads in tests go through ``with app.app_context():``.
"""

from __future__ import annotations

import pytest

from math_islands import create_app
from math_islands.config import TestingConfig
from math_islands.db import db

PASSWORD = "secret123"


@pytest.fixture()
def app():
    # No app context stays pushed while tests run: each request must get its
    # own context (and its own flask.g / current_user).
    app = create_app(TestingConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


def register(client, username: str, teacher: bool = False, password: str = PASSWORD):
    return client.post("/api/auth/register", json={
        "username": username,
        "email": f"{username}@example.com",
        "password": password,
        "isTeacher": teacher,
    })


def login(client, username: str, password: str = PASSWORD):
    return client.post("/api/auth/login", json={"username": username, "password": password})


@pytest.fixture()
def make_user(app):
    """Factory: register + log in `username` on a fresh test client."""
    def _make(username: str, teacher: bool = False):
        c = app.test_client()
        assert register(c, username, teacher=teacher).status_code == 201
        assert login(c, username).status_code == 200
        return c
    return _make


@pytest.fixture()
def student(make_user):
    return make_user("alice")


@pytest.fixture()
def teacher(make_user):
    return make_user("mr_teach", teacher=True)
