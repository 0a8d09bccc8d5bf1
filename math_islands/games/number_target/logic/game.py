# math_islands/games/number_target/logic/game.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging
import random

from math_islands.games.core.progression import Phase, ProgressionDriver, Reporter
from math_islands.games.core.scoring import NUMBER_TARGET_SCORING, ScoreRule

from .challenge import Challenge, generate
from .evaluator import MoveRejected, Operator, UNKNOWN_OPERATOR
from .puzzle_state import Move, PuzzleState, check_win
from .solver import SolutionStep, find_solution

logger = logging.getLogger(__name__)

FEEDBACK_TTL_MS = 2000
NOT_YET = "Not quite! Keep calculating to reach the target."
LEVEL_OVER = "This level is finished. Press Next to keep going!"
PICK_FIRST = "Pick a number first."


@dataclass
class Outcome:
    """What the last action did, ready to hand to the UI."""
    ok: bool
    feedback: str = ""
    move: Optional[Move] = None
    won: bool = False
    points: int = 0
    attempted: bool = False  # an arithmetic step was actually tried

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"ok": self.ok, "won": self.won}
        if self.feedback:
            d["feedback"] = self.feedback
            d["feedback_ttl_ms"] = FEEDBACK_TTL_MS
        if self.move is not None:
            d["move"] = self.move.to_dict()
        if self.won:
            d["points"] = self.points
        return d


@dataclass
class Selection:
    first: Optional[str] = None
    second: Optional[str] = None
    operator: Optional[Operator] = None

    @property
    def complete(self) -> bool:
        return self.first is not None and self.second is not None and self.operator is not None

    def clear(self) -> None:
        self.first = self.second = None
        self.operator = None

    def to_dict(self) -> Dict[str, Any]:
        return {"first": self.first, "second": self.second,
                "operator": self.operator.value if self.operator else None}


@dataclass
class NumberTargetGame:
    """
    One player's Number Target run: the current challenge, its board, the
    pending selection and the level/score driver.
    """
    driver: ProgressionDriver
    rng: random.Random = field(default_factory=random.Random)
    rule: ScoreRule = NUMBER_TARGET_SCORING
    solvable_only: bool = False
    auto_apply: bool = False
    challenge: Optional[Challenge] = None
    puzzle: Optional[PuzzleState] = None
    selection: Selection = field(default_factory=Selection)
    last_points: int = 0
    skips: int = 0
    misses: int = 0

    @classmethod
    def new(cls, island_id: int, completion_level: int, reporter: Optional[Reporter] = None,
            rng: Optional[random.Random] = None, **kw) -> "NumberTargetGame":
        redirect_ms = kw.pop("redirect_delay_ms", None)
        driver = ProgressionDriver(island_id=island_id, completion_level=completion_level, reporter=reporter)
        if redirect_ms is not None:
            driver.redirect_delay_ms = int(redirect_ms)
        game = cls(driver=driver, rng=rng or random.Random(), **kw)
        game.deal()
        return game

    # ---- setup ----
    def deal(self, challenge: Optional[Challenge] = None) -> Challenge:
        """New challenge for the current level (or the one given)."""
        self.challenge = challenge or generate(self.driver.level, rng=self.rng, solvable_only=self.solvable_only)
        self.puzzle = PuzzleState.start(self.challenge)
        self.selection.clear()
        self.last_points = 0
        self.misses = 0
        logger.debug("Dealt level %s: %s", self.driver.level, self.challenge.to_dict())
        return self.challenge

    @property
    def accepting_moves(self) -> bool:
        return self.driver.phase is Phase.IN_LEVEL

    # ---- explicit flow ----
    def apply_move(self, first_id: str, second_id: str, op) -> Outcome:
        if not self.accepting_moves:
            return Outcome(ok=False, feedback=LEVEL_OVER)
        res = self.puzzle.consume_and_produce(first_id, second_id, op)
        if isinstance(res, MoveRejected):
            self.misses += 1
            logger.info("Move rejected (%s %s %s): %s", first_id, op, second_id, res.reason)
            return Outcome(ok=False, feedback=res.reason, attempted=True)
        logger.debug("Move accepted: %s", res.to_dict()["text"])
        if self.puzzle.is_won():
            return self._win(move=res)
        return Outcome(ok=True, move=res, attempted=True)

    def calculate(self) -> Outcome:
        """Apply the pending selection (the 'Calculate' button)."""
        sel = self.selection
        if not sel.complete:
            return Outcome(ok=False, feedback="Pick two numbers and an operation.")
        out = self.apply_move(sel.first, sel.second, sel.operator)
        if out.ok:
            sel.clear()
        else:
            # keep the first pick so the player can retry
            sel.second = None
            sel.operator = None
        return out

    def submit(self) -> Outcome:
        if not self.accepting_moves:
            return Outcome(ok=False, feedback=LEVEL_OVER)
        if check_win(self.puzzle.available_values(), self.puzzle.target):
            return self._win()
        return Outcome(ok=False, feedback=NOT_YET)

    # ---- reactive flow ----
    def select_token(self, token_id: str) -> Outcome:
        if not self.accepting_moves:
            return Outcome(ok=False, feedback=LEVEL_OVER)
        if self.puzzle.token(token_id) is None:
            return Outcome(ok=False, feedback="Pick two numbers from the board.")
        sel = self.selection
        if sel.first is None:
            sel.first = token_id
        elif token_id == sel.first:
            sel.clear()
        elif token_id == sel.second:
            sel.second = None
        elif sel.second is None:
            sel.second = token_id
        # both operands already picked: any other token is ignored
        return self._maybe_auto_apply()

    def select_operator(self, op) -> Outcome:
        if not self.accepting_moves:
            return Outcome(ok=False, feedback=LEVEL_OVER)
        operator = Operator.parse(op)
        if operator is None:
            return Outcome(ok=False, feedback=UNKNOWN_OPERATOR)
        if self.selection.first is None:
            return Outcome(ok=False, feedback=PICK_FIRST)
        self.selection.operator = operator
        return self._maybe_auto_apply()

    def _maybe_auto_apply(self) -> Outcome:
        if self.auto_apply and self.selection.complete:
            return self.calculate()
        return Outcome(ok=True)

    # ---- round / level controls ----
    def reset_round(self) -> Outcome:
        if not self.accepting_moves:
            return Outcome(ok=False, feedback=LEVEL_OVER)
        self.puzzle.reset_round()
        self.selection.clear()
        return Outcome(ok=True)

    def skip(self) -> Outcome:
        if not self.accepting_moves:
            return Outcome(ok=False, feedback=LEVEL_OVER)
        self.skips += 1
        logger.info("Level %s skipped: %s", self.driver.level, self.challenge.to_dict())
        self.deal()
        return Outcome(ok=True)

    def next_level(self) -> Outcome:
        if self.driver.phase is not Phase.WON:
            return Outcome(ok=False, feedback="Reach the target first!")
        self.driver.advance()
        self.deal()
        return Outcome(ok=True)

    def restart(self) -> None:
        self.driver.restart()
        self.skips = 0
        self.deal()

    def hint(self) -> Optional[List[SolutionStep]]:
        return find_solution(self.puzzle.available_values(), self.puzzle.target,
                             max_steps=self.puzzle.steps_left)

    # ---- scoring ----
    def _win(self, move: Optional[Move] = None) -> Outcome:
        steps = self.puzzle.steps_before_target()
        points = self.rule.points(steps_used=steps, prior_attempts=self.misses)
        self.last_points = points
        self.selection.clear()
        self.driver.record_win(points)
        logger.info("Level %s won in %s steps (+%s, total %s)",
                    self.driver.level, steps, points, self.driver.score)
        return Outcome(ok=True, move=move, won=True, points=points, attempted=move is not None,
                       feedback=f"Excellent! You reached {self.puzzle.target}!")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "challenge": self.challenge.to_dict() if self.challenge else None,
            "board": self.puzzle.to_dict() if self.puzzle else None,
            "selection": self.selection.to_dict(),
            "progress": self.driver.to_dict(),
            "last_points": self.last_points,
            "skips": self.skips,
        }
