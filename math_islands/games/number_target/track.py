import logging
from sqlalchemy.exc import SQLAlchemyError
from ...db import db
from ...models import Attempt

logger = logging.getLogger(__name__)


def log_attempt(user_id: int, island_id: int, session_uuid: str, level: int, status: str,
                steps_used: int | None = None, score: int = 0, detail: dict | None = None):
    """Record a finished level. Best effort: returns None when the write fails."""
    a = Attempt(
        user_id=user_id,
        island_id=island_id,
        session_uuid=session_uuid,
        level=level,
        status=status,                  # 'solved' | 'skipped'
        steps_used=steps_used,
        score=score,
        detail_json=detail or {},
    )
    db.session.add(a)
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Could not log %s attempt for user %s level %s", status, user_id, level)
        return None
    return a.id
