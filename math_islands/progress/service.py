# math_islands/progress/service.py
from __future__ import annotations
from datetime import datetime, timezone
from collections import defaultdict
from typing import Any, Callable, Dict, List
import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from ..db import db
from ..models import Attempt, User, UserProgress

logger = logging.getLogger(__name__)

ISLANDS: List[Dict[str, Any]] = [
    {"id": 1, "name": "Number Target Island", "slug": "number-target",
     "description": "Master basic arithmetic operations to hit target numbers"},
    {"id": 2, "name": "Bubble Pop Island", "slug": "bubble-pop",
     "description": "Pop bubbles by solving multiplication problems"},
    {"id": 3, "name": "Shape Quest Island", "slug": "shape-quest",
     "description": "Identify and learn about geometric shapes"},
    {"id": 4, "name": "Pattern Wizard Island", "slug": "pattern-wizard",
     "description": "Recognize and complete number patterns"},
    {"id": 5, "name": "Fraction Pizza Island", "slug": "fraction-pizza",
     "description": "Learn fractions through delicious pizza slices"},
]
ISLAND_IDS = {i["id"] for i in ISLANDS}


def get_user_progress(user_id: int) -> Dict[int, Dict[str, Any]]:
    """island_id -> {completed, score, completedAt}"""
    rows = (UserProgress.query.filter_by(user_id=user_id)
            .order_by(UserProgress.island_id).all())
    return {
        r.island_id: {
            "completed": bool(r.completed),
            "score": int(r.score or 0),
            "completedAt": r.completed_at.isoformat() if r.completed_at else None,
        }
        for r in rows
    }


def update_user_progress(user_id: int, island_id: int, completed: bool, score: int) -> bool:
    """
    Upsert one progress row. Keeps the best score, never un-completes an
    island, and stamps completed_at the first time it is completed.
    Returns False (and logs) on any database error.
    """
    now = datetime.now(timezone.utc)
    try:
        row = UserProgress.query.filter_by(user_id=user_id, island_id=island_id).first()
        if row is None:
            row = UserProgress(user_id=user_id, island_id=island_id, completed=False, score=0)
            db.session.add(row)
        if completed and not row.completed:
            row.completed_at = now
        row.completed = bool(row.completed or completed)
        row.score = max(int(row.score or 0), int(score))
        row.updated_at = now
        db.session.commit()
        return True
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Error updating progress for user %s island %s", user_id, island_id)
        return False


def completion_reporter(user_id: int) -> Callable[[int, int], bool]:
    """The outbound reportCompletion(island_id, score) bound to one player."""
    def report_completion(island_id: int, score: int) -> bool:
        return update_user_progress(user_id, island_id, True, score)
    return report_completion


def island_board(user_id: int) -> List[Dict[str, Any]]:
    """Islands in order; the first is always open, the rest open once the previous one is done."""
    progress = get_user_progress(user_id)
    out = []
    for island in ISLANDS:
        mine = progress.get(island["id"])
        prev = progress.get(island["id"] - 1)
        out.append({
            **island,
            "accessible": island["id"] == 1 or bool(prev and prev["completed"]),
            "completed": bool(mine and mine["completed"]),
            "score": mine["score"] if mine else 0,
        })
    return out


def teacher_stats() -> Dict[str, Any]:
    students = User.query.filter_by(is_teacher=False).order_by(User.id).all()
    ids = [u.id for u in students]

    by_user: Dict[int, List[UserProgress]] = defaultdict(list)
    solved: Dict[int, int] = {}
    if ids:
        for p in (UserProgress.query.filter(UserProgress.user_id.in_(ids))
                  .order_by(UserProgress.user_id, UserProgress.island_id)):
            by_user[p.user_id].append(p)
        solved = dict(
            db.session.query(Attempt.user_id, func.count(Attempt.id))
            .filter(Attempt.user_id.in_(ids), Attempt.status == "solved")
            .group_by(Attempt.user_id)
            .all()
        )

    rows = []
    for u in students:
        progress = by_user.get(u.id, [])
        last = max((p.updated_at for p in progress if p.updated_at), default=None)
        rows.append({
            "id": u.id,
            "username": u.username,
            "email": u.email,
            "createdAt": u.created_at.isoformat() if u.created_at else None,
            "islandsStarted": len({p.island_id for p in progress}),
            "islandsCompleted": sum(1 for p in progress if p.completed),
            "totalScore": sum(int(p.score or 0) for p in progress),
            "lastActivity": last.isoformat() if last else None,
            "levelsSolved": int(solved.get(u.id, 0)),
            "progress": [{
                "islandId": p.island_id,
                "completed": bool(p.completed),
                "score": int(p.score or 0),
                "completedAt": p.completed_at.isoformat() if p.completed_at else None,
            } for p in progress],
        })

    rows.sort(key=lambda r: (-r["totalScore"], r["username"]))
    total = len(rows)
    global_stats = {
        "totalStudents": total,
        "totalIslandsCompleted": sum(r["islandsCompleted"] for r in rows),
        "averageScore": round(sum(r["totalScore"] for r in rows) / total) if total else 0,
        "studentsWithProgress": sum(1 for r in rows if r["islandsStarted"] > 0),
    }
    return {"users": rows, "globalStats": global_stats}
