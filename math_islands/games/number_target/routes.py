# math_islands/games/number_target/routes.py
from __future__ import annotations

import logging
import random
from typing import Any, Dict, Optional

from flask import Blueprint, current_app, jsonify, request, url_for
from flask_login import current_user, login_required

from math_islands.games.core.game_core import (
    SESSION_COOKIE,
    PlayerRun,
    PlayStats,
    get_or_create_session_id,
    runs,
)
from math_islands.games.core.progression import Phase
from math_islands.progress.service import completion_reporter

from .logic import NumberTargetGame, Outcome
from .track import log_attempt

logger = logging.getLogger(__name__)

GAME_KEY = "number_target"

bp = Blueprint("number_target", __name__, url_prefix="/games/number-target")


# -----------------------------------------------------------------------------
# Small per-request helpers
# -----------------------------------------------------------------------------
def _sid() -> str:
    return get_or_create_session_id(request)


def _run() -> Optional[PlayerRun]:
    """Current player's run, or None when there is none (or it belongs to someone else)."""
    run = runs(GAME_KEY).get(_sid())
    if run is None or run.user_id != current_user.id:
        return None
    return run


def _new_game(seed: Optional[int] = None) -> NumberTargetGame:
    cfg = current_app.config
    return NumberTargetGame.new(
        island_id=int(cfg["NUMBER_TARGET_ISLAND_ID"]),
        completion_level=int(cfg["GAME_COMPLETION_LEVEL"]),
        reporter=completion_reporter(current_user.id),
        rng=random.Random(seed),
        solvable_only=bool(cfg.get("NUMBER_TARGET_SOLVABLE_ONLY")),
        auto_apply=bool(cfg.get("NUMBER_TARGET_AUTO_APPLY")),
        redirect_delay_ms=int(cfg.get("COMPLETION_REDIRECT_MS", 2500)),
    )


def _payload(run: PlayerRun, outcome: Optional[Outcome] = None) -> Dict[str, Any]:
    game: NumberTargetGame = run.game
    payload: Dict[str, Any] = {"ok": True, "won": False}
    if outcome is not None:
        payload.update(outcome.to_dict())
    payload.update(game.to_dict())
    payload["stats"] = run.stats.to_dict()
    if game.driver.phase is Phase.COMPLETED and game.driver.redirect_after_ms is not None:
        payload["redirect_url"] = url_for("home.index")
        payload["redirect_after_ms"] = game.driver.redirect_after_ms
    return payload


def _no_run():
    return jsonify({"ok": False, "error": "No game in progress. Start a new one."}), 404


def _after_action(run: PlayerRun, outcome: Outcome) -> None:
    """Stats + attempt log bookkeeping shared by every gameplay endpoint."""
    game: NumberTargetGame = run.game
    level = game.driver.level
    if outcome.attempted:
        run.mark_played(level)
        run.stats.count_attempt(outcome.ok)
    if not outcome.won:
        return

    run.mark_played(level)
    run.stats.count_solved(level)
    elapsed_ms = run.stop_timer()
    log_attempt(
        user_id=current_user.id,
        island_id=game.driver.island_id,
        session_uuid=run.sid,
        level=level,
        status="solved",
        steps_used=game.puzzle.steps_before_target(),
        score=outcome.points,
        detail={
            "numbers": list(game.challenge.numbers),
            "target": game.challenge.target,
            "moves": [m.to_dict()["text"] for m in game.puzzle.history],
            "elapsed_ms": elapsed_ms,
        },
    )


# -----------------------------------------------------------------------------
# API
# -----------------------------------------------------------------------------
@bp.post("/api/start")
@login_required
def api_start():
    data = request.get_json(silent=True) or {}
    seed = data.get("seed")
    try:
        seed = int(seed) if seed is not None else None
    except (TypeError, ValueError):
        return jsonify({"ok": False, "error": "seed must be a whole number"}), 400

    sid = _sid()
    run = PlayerRun(sid=sid, user_id=current_user.id, game=_new_game(seed))
    run.start_timer()
    runs(GAME_KEY)[sid] = run
    logger.info("Number Target run started: user=%s sid=%s", current_user.id, sid)

    resp = jsonify(_payload(run))
    if not request.cookies.get(SESSION_COOKIE):
        resp.set_cookie(SESSION_COOKIE, sid.split(":", 1)[0], httponly=True, samesite="Lax")
    return resp


@bp.get("/api/state")
@login_required
def api_state():
    run = _run()
    if run is None:
        return _no_run()
    return jsonify(_payload(run))


@bp.post("/api/move")
@login_required
def api_move():
    run = _run()
    if run is None:
        return _no_run()
    data = request.get_json(silent=True) or {}
    first, second, op = data.get("first"), data.get("second"), data.get("op")
    if not first or not second or not op:
        return jsonify({"ok": False, "error": "first, second and op are required"}), 400

    out = run.game.apply_move(str(first), str(second), op)
    _after_action(run, out)
    return jsonify(_payload(run, out))


@bp.post("/api/select")
@login_required
def api_select():
    run = _run()
    if run is None:
        return _no_run()
    data = request.get_json(silent=True) or {}
    game: NumberTargetGame = run.game
    if data.get("token"):
        out = game.select_token(str(data["token"]))
    elif data.get("op"):
        out = game.select_operator(data["op"])
    elif data.get("calculate"):
        out = game.calculate()
    else:
        return jsonify({"ok": False, "error": "send a token, an op or calculate"}), 400
    _after_action(run, out)
    return jsonify(_payload(run, out))


@bp.post("/api/submit")
@login_required
def api_submit():
    run = _run()
    if run is None:
        return _no_run()
    out = run.game.submit()
    _after_action(run, out)
    return jsonify(_payload(run, out))


@bp.post("/api/reset")
@login_required
def api_reset():
    run = _run()
    if run is None:
        return _no_run()
    return jsonify(_payload(run, run.game.reset_round()))


@bp.post("/api/skip")
@login_required
def api_skip():
    run = _run()
    if run is None:
        return _no_run()
    game: NumberTargetGame = run.game
    skipped, level = game.challenge, game.driver.level
    out = game.skip()
    if out.ok:
        run.mark_played(level)
        run.stats.skipped += 1
        run.stop_timer()
        run.start_timer()
        log_attempt(
            user_id=current_user.id,
            island_id=game.driver.island_id,
            session_uuid=run.sid,
            level=level,
            status="skipped",
            detail={"numbers": list(skipped.numbers), "target": skipped.target},
        )
    return jsonify(_payload(run, out))


@bp.post("/api/next")
@login_required
def api_next():
    run = _run()
    if run is None:
        return _no_run()
    out = run.game.next_level()
    if out.ok:
        run.start_timer()
    return jsonify(_payload(run, out))


@bp.post("/api/hint")
@login_required
def api_hint():
    run = _run()
    if run is None:
        return _no_run()
    run.stats.hints += 1
    path = run.game.hint()
    payload = _payload(run)
    payload["has_solution"] = path is not None
    payload["solution"] = [str(step) for step in path] if path else []
    return jsonify(payload)


@bp.post("/api/restart")
@login_required
def api_restart():
    run = _run()
    if run is None:
        return _no_run()
    run.game.restart()
    run.stats = PlayStats()
    run.start_timer()
    return jsonify(_payload(run))


@bp.post("/api/exit")
@login_required
def api_exit():
    run = _run()
    if run is None:
        return jsonify({"ok": True, "next_url": url_for("home.index")})
    runs(GAME_KEY).pop(run.sid, None)
    run.stop_timer()
    final = run.stats.to_dict()
    logger.info("Number Target run exited: user=%s stats=%s", current_user.id, final)
    return jsonify({"ok": True, "next_url": url_for("home.index"), "stats": final,
                    "progress": run.game.driver.to_dict()})
