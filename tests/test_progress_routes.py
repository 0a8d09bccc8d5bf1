"""HTTP tests for island progress, the island board and the teacher stats dashboard."""

from __future__ import annotations

import pytest
from sqlalchemy import event

from math_islands.db import db
from math_islands.models import Attempt, User, UserProgress
from math_islands.progress.service import teacher_stats, update_user_progress


def _update(client, island_id, score):
    return client.post("/api/progress/update", json={"islandId": island_id, "score": score})


# ---------------------------------------------------------------------------
# /api/progress
# ---------------------------------------------------------------------------

class TestProgress:
    def test_empty_for_new_user(self, student):
        data = student.get("/api/progress").get_json()
        assert data["progress"] == {}
        assert data["user"]["username"] == "alice"

    def test_update_then_read(self, student):
        assert _update(student, 1, 120).status_code == 200
        prog = student.get("/api/progress").get_json()["progress"]
        assert prog["1"]["completed"] is True
        assert prog["1"]["score"] == 120
        assert prog["1"]["completedAt"]

    def test_keeps_best_score(self, student):
        _update(student, 2, 300)
        _update(student, 2, 150)
        assert student.get("/api/progress").get_json()["progress"]["2"]["score"] == 300

    def test_completed_at_set_once(self, app, student):
        _update(student, 1, 100)
        with app.app_context():
            first = UserProgress.query.one().completed_at
        _update(student, 1, 500)
        with app.app_context():
            row = UserProgress.query.one()
            assert row.completed_at == first
            assert row.score == 500

    @pytest.mark.parametrize("island_id,score,error", [
        (0, 10, "Invalid island ID"),
        (6, 10, "Invalid island ID"),
        ("1", 10, "Invalid island ID"),
        (True, 10, "Invalid island ID"),
        (1, -5, "Invalid score"),
        (1, "100", "Invalid score"),
        (1, None, "Invalid score"),
    ])
    def test_invalid_input(self, student, island_id, score, error):
        resp = _update(student, island_id, score)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == error

    def test_users_do_not_see_each_other(self, student, make_user):
        _update(student, 1, 200)
        bob = make_user("bob")
        assert bob.get("/api/progress").get_json()["progress"] == {}

    def test_service_never_uncompletes(self, app, student):
        with app.app_context():
            uid = User.query.filter_by(username="alice").one().id
            assert update_user_progress(uid, 3, True, 50)
            assert update_user_progress(uid, 3, False, 10)
            row = UserProgress.query.filter_by(user_id=uid, island_id=3).one()
            assert row.completed is True
            assert row.score == 50


# ---------------------------------------------------------------------------
# Island board (home)
# ---------------------------------------------------------------------------

class TestBoard:
    def test_first_island_open(self, student):
        data = student.get("/").get_json()
        islands = data["islands"]
        assert [i["id"] for i in islands] == [1, 2, 3, 4, 5]
        assert [i["accessible"] for i in islands] == [True, False, False, False, False]
        assert islands[0]["play_url"] == "/games/number-target/api/start"
        assert islands[1]["play_url"] is None
        assert data["percent_complete"] == 0

    def test_completing_unlocks_next(self, student):
        _update(student, 1, 140)
        data = student.get("/").get_json()
        islands = data["islands"]
        assert islands[0]["completed"] is True
        assert islands[1]["accessible"] is True
        assert islands[2]["accessible"] is False
        assert data["completed"] == 1
        assert data["percent_complete"] == 20


# ---------------------------------------------------------------------------
# Teacher dashboard
# ---------------------------------------------------------------------------

class TestStats:
    def test_students_forbidden(self, student):
        resp = student.get("/api/stats")
        assert resp.status_code == 403
        assert resp.get_json()["error"] == "Unauthorized - teachers only"

    def test_anonymous(self, client):
        assert client.get("/api/stats").status_code == 401

    def test_teacher_sees_students_only(self, teacher, make_user):
        alice = make_user("alice")
        bob = make_user("bob")
        make_user("carl")
        _update(alice, 1, 140)
        _update(alice, 2, 100)
        _update(bob, 1, 300)

        data = teacher.get("/api/stats").get_json()
        users = data["users"]
        assert [u["username"] for u in users] == ["bob", "alice", "carl"]
        assert "mr_teach" not in {u["username"] for u in users}

        alice_row = users[1]
        assert alice_row["islandsStarted"] == 2
        assert alice_row["islandsCompleted"] == 2
        assert alice_row["totalScore"] == 240
        assert alice_row["lastActivity"]
        assert [p["islandId"] for p in alice_row["progress"]] == [1, 2]

        assert data["globalStats"] == {
            "totalStudents": 3,
            "totalIslandsCompleted": 3,
            "averageScore": 180,
            "studentsWithProgress": 2,
        }

    def test_no_students(self, teacher):
        data = teacher.get("/api/stats").get_json()
        assert data["users"] == []
        assert data["globalStats"]["averageScore"] == 0

    def test_query_count_flat_in_students(self, app, teacher, make_user):
        def stats_statements():
            seen = []

            def count(conn, cursor, statement, *args):
                seen.append(statement)

            with app.app_context():
                event.listen(db.engine, "before_cursor_execute", count)
                try:
                    teacher_stats()
                finally:
                    event.remove(db.engine, "before_cursor_execute", count)
            return len(seen)

        _update(make_user("alice"), 1, 140)
        one_student = stats_statements()
        for name in ("bob", "carl", "dana"):
            _update(make_user(name), 1, 100)
        assert stats_statements() == one_student

    def test_levels_solved_per_student(self, app, teacher, make_user):
        make_user("alice")
        make_user("bob")
        with app.app_context():
            alice = User.query.filter_by(username="alice").one()
            for level, status in ((1, "solved"), (2, "solved"), (3, "skipped")):
                db.session.add(Attempt(user_id=alice.id, island_id=1, level=level, status=status))
            db.session.commit()

        users = {u["username"]: u for u in teacher.get("/api/stats").get_json()["users"]}
        assert users["alice"]["levelsSolved"] == 2
        assert users["bob"]["levelsSolved"] == 0
