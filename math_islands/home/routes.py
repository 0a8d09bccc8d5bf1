# math_islands/home/routes.py
from flask import Blueprint, jsonify, url_for
from flask_login import current_user, login_required

from ..progress.service import island_board

bp = Blueprint("home", __name__)

# islands with a playable game on this server
PLAY_ENDPOINTS = {1: "number_target.api_start"}


@bp.get("/")
@login_required
def index():
    islands = island_board(current_user.id)
    for island in islands:
        endpoint = PLAY_ENDPOINTS.get(island["id"])
        island["play_url"] = url_for(endpoint) if endpoint else None

    done = sum(1 for i in islands if i["completed"])
    return jsonify({
        "user": current_user.to_dict(),
        "islands": islands,
        "completed": done,
        "percent_complete": round(done * 100 / len(islands)) if islands else 0,
    })
