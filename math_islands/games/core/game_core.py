# math_islands/games/core/game_core.py
from __future__ import annotations
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional
import time
import uuid

from .store_registry import get_store

SESSION_COOKIE = "session_id"


def get_or_create_session_id(req, cookie_name: str = SESSION_COOKIE) -> str:
    """
    Key for a player's run: the session cookie (or a fresh uuid4), plus
    ':<client_id>' when the page sends one (query arg, header or JSON body)
    so two tabs keep separate runs.
    """
    base = req.cookies.get(cookie_name) or str(uuid.uuid4())
    client = req.args.get("client_id") or req.headers.get("X-Client-Session")
    if not client and req.is_json:
        client = (req.get_json(silent=True) or {}).get("client_id")
    return f"{base}:{str(client)[:64]}" if client else base


def runs(game_key: str) -> Dict[str, "PlayerRun"]:
    """session key -> PlayerRun for one game, held per app process."""
    return get_store(f"runs:{game_key}", dict)


@dataclass
class LevelTally:
    played: int = 0
    solved: int = 0


@dataclass
class PlayStats:
    """Counters for the stats panel of one run."""
    played: int = 0
    solved: int = 0
    skipped: int = 0
    hints: int = 0
    answer_attempts: int = 0
    answer_correct: int = 0
    answer_wrong: int = 0
    total_time: int = 0  # seconds
    by_level: Dict[str, LevelTally] = field(default_factory=dict)

    def level(self, level) -> LevelTally:
        return self.by_level.setdefault(str(level), LevelTally())

    def count_solved(self, level) -> None:
        self.solved += 1
        self.level(level).solved += 1

    def count_attempt(self, correct: bool) -> None:
        self.answer_attempts += 1
        if correct:
            self.answer_correct += 1
        else:
            self.answer_wrong += 1

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PlayerRun:
    """One player's live run of a game plus its stopwatch and stats."""
    sid: str
    user_id: int
    game: Any
    stats: PlayStats = field(default_factory=PlayStats)
    started_at: Optional[float] = None
    counted: bool = False  # current challenge already counted as played

    def start_timer(self) -> None:
        self.started_at = time.time()
        self.counted = False

    def stop_timer(self) -> int:
        """Fold the running stopwatch into total_time; returns the elapsed ms."""
        elapsed = 0
        if self.started_at:
            elapsed = int((time.time() - self.started_at) * 1000)
            self.stats.total_time += int(round(elapsed / 1000))
        self.started_at = None
        return elapsed

    def mark_played(self, level) -> None:
        """Count the current challenge as played, once, on first interaction."""
        if self.counted:
            return
        self.counted = True
        self.stats.played += 1
        self.stats.level(level).played += 1


__all__ = ["SESSION_COOKIE", "get_or_create_session_id", "runs", "LevelTally", "PlayStats", "PlayerRun"]
