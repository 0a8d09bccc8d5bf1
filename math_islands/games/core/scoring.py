# math_islands/games/core/scoring.py
from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class ScoreRule:
    """
    points = max(baseline - n * penalty, floor)

    `counts` picks what n is: 'steps' (moves used) or 'attempts'
    (wrong tries before the right one).
    """
    baseline: int
    penalty: int
    floor: int
    counts: str = "steps"

    def points(self, steps_used: int = 0, prior_attempts: int = 0) -> int:
        n = steps_used if self.counts == "steps" else prior_attempts
        n = max(0, int(n))
        return max(self.baseline - n * self.penalty, self.floor)


NUMBER_TARGET_SCORING = ScoreRule(baseline=200, penalty=30, floor=100, counts="steps")
BUBBLE_POP_SCORING = ScoreRule(baseline=150, penalty=25, floor=50, counts="attempts")


def score(steps_used: int, prior_attempts: int = 0, rule: ScoreRule = NUMBER_TARGET_SCORING) -> int:
    return rule.points(steps_used=steps_used, prior_attempts=prior_attempts)
