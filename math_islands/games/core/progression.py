# math_islands/games/core/progression.py
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional
import logging

logger = logging.getLogger(__name__)

Reporter = Callable[[int, int], bool]  # (island_id, final_score) -> saved?

DEFAULT_COMPLETION_LEVEL = 10
DEFAULT_REDIRECT_MS = 2500


class Phase(str, Enum):
    IN_LEVEL = "in_level"
    WON = "won"
    COMPLETED = "completed"
    GAME_OVER = "game_over"


@dataclass
class ProgressionDriver:
    """
    Level sequencing for one mini-game run.

      in_level --win--> won --advance--> in_level (level + 1)
      in_level --win on the last level--> completed  (reported once)
      in_level --miss with no lives left--> game_over  (lives variant only)
    """
    island_id: int
    completion_level: int = DEFAULT_COMPLETION_LEVEL
    lives: Optional[int] = None          # None: play-to-completion games
    reporter: Optional[Reporter] = None
    redirect_delay_ms: int = DEFAULT_REDIRECT_MS

    level: int = 1
    score: int = 0
    phase: Phase = Phase.IN_LEVEL
    lives_left: Optional[int] = None
    reported: bool = False
    persisted: Optional[bool] = None
    redirect_after_ms: Optional[int] = None
    levels_won: int = 0
    _start_lives: Optional[int] = field(default=None, repr=False)

    def __post_init__(self):
        self._start_lives = self.lives
        if self.lives_left is None:
            self.lives_left = self.lives

    @property
    def is_terminal(self) -> bool:
        return self.phase in (Phase.COMPLETED, Phase.GAME_OVER)

    # ---- lifecycle ----
    def record_win(self, points: int) -> Phase:
        if self.phase is not Phase.IN_LEVEL:
            return self.phase
        self.score += int(points)
        self.levels_won += 1
        if self.level >= self.completion_level:
            self._complete()
        else:
            self.phase = Phase.WON
        return self.phase

    def advance(self) -> Phase:
        if self.phase is Phase.WON:
            self.level += 1
            self.phase = Phase.IN_LEVEL
        return self.phase

    def record_miss(self) -> Phase:
        if self.lives_left is None or self.phase is not Phase.IN_LEVEL:
            return self.phase
        self.lives_left -= 1
        if self.lives_left <= 0:
            self.lives_left = 0
            self.phase = Phase.GAME_OVER
            logger.info("Island %s run over at level %s with score %s (not saved)",
                        self.island_id, self.level, self.score)
        return self.phase

    def restart(self) -> None:
        self.level = 1
        self.score = 0
        self.levels_won = 0
        self.phase = Phase.IN_LEVEL
        self.lives_left = self._start_lives
        self.reported = False
        self.persisted = None
        self.redirect_after_ms = None

    # ---- completion ----
    def _complete(self) -> None:
        self.phase = Phase.COMPLETED
        if self.reported:
            return
        self.reported = True
        if self.reporter is None:
            logger.info("Island %s completed with %s points (no reporter)", self.island_id, self.score)
            return
        try:
            ok = bool(self.reporter(self.island_id, self.score))
        except Exception:
            logger.exception("Saving island %s completion failed", self.island_id)
            ok = False
        self.persisted = ok
        if ok:
            self.redirect_after_ms = self.redirect_delay_ms
            logger.info("Island %s completed with %s points", self.island_id, self.score)
        else:
            logger.warning("Island %s completion not saved; showing celebration anyway", self.island_id)

    def to_dict(self) -> Dict[str, object]:
        return {
            "island_id": self.island_id,
            "level": self.level,
            "completion_level": self.completion_level,
            "score": self.score,
            "phase": self.phase.value,
            "lives": self.lives_left,
            "persisted": self.persisted,
            "redirect_after_ms": self.redirect_after_ms,
        }
