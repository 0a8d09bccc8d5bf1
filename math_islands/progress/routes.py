# math_islands/progress/routes.py
import logging
from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from ..auth.helpers import teacher_required
from .service import ISLAND_IDS, get_user_progress, teacher_stats, update_user_progress

logger = logging.getLogger(__name__)

bp = Blueprint("progress", __name__, url_prefix="/api")


@bp.get("/progress")
@login_required
def progress():
    return jsonify({
        "user": current_user.to_dict(),
        "progress": get_user_progress(current_user.id),
    })


@bp.post("/progress/update")
@login_required
def progress_update():
    data = request.get_json(silent=True) or {}
    island_id = data.get("islandId")
    score = data.get("score")

    # bool is an int subclass; reject it explicitly
    if not isinstance(island_id, int) or isinstance(island_id, bool) or island_id not in ISLAND_IDS:
        return jsonify({"error": "Invalid island ID"}), 400
    if not isinstance(score, int) or isinstance(score, bool) or score < 0:
        return jsonify({"error": "Invalid score"}), 400

    if not update_user_progress(current_user.id, island_id, True, score):
        return jsonify({"error": "Failed to update progress"}), 500

    return jsonify({
        "message": "Progress updated successfully",
        "islandId": island_id,
        "score": score,
    })


@bp.get("/stats")
@teacher_required
def stats():
    return jsonify(teacher_stats())
