# math_islands/games/number_target/logic/challenge.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple
import logging
import random

logger = logging.getLogger(__name__)

NUMBERS_PER_CHALLENGE = 5


@dataclass(frozen=True)
class Tier:
    name: str
    max_number: int          # numbers are drawn from [1, max_number]
    target_range: Tuple[int, int]  # inclusive


TIERS = (
    Tier("easy", 10, (10, 29)),
    Tier("medium", 15, (20, 49)),
    Tier("hard", 25, (30, 79)),
)


@dataclass(frozen=True)
class Challenge:
    numbers: Tuple[int, ...]
    target: int
    level: int = 1

    def to_dict(self) -> dict:
        return {"numbers": list(self.numbers), "target": self.target, "level": self.level}


def tier_for(level: int) -> Tier:
    """Levels 1-3 easy, 4-6 medium, 7+ hard."""
    if level <= 3:
        return TIERS[0]
    if level <= 6:
        return TIERS[1]
    return TIERS[2]


def _draw(level: int, rng: random.Random) -> Challenge:
    tier = tier_for(level)
    numbers = tuple(rng.randint(1, tier.max_number) for _ in range(NUMBERS_PER_CHALLENGE))
    lo, hi = tier.target_range
    return Challenge(numbers=numbers, target=rng.randint(lo, hi), level=level)


def generate(level: int, rng: Optional[random.Random] = None,
             solvable_only: bool = False, max_tries: int = 60) -> Challenge:
    """
    Fresh challenge for `level`. Numbers and target are sampled independently,
    so by default nothing guarantees the target is reachable.

    With solvable_only, redraw until the solver finds a way (or give up after
    max_tries and hand back the last draw).
    """
    rng = rng or random.Random()
    level = max(1, int(level))
    challenge = _draw(level, rng)
    if not solvable_only:
        return challenge

    from .solver import is_solvable

    tries = 1
    while not is_solvable(challenge.numbers, challenge.target) and tries < max_tries:
        challenge = _draw(level, rng)
        tries += 1
    if tries >= max_tries and not is_solvable(challenge.numbers, challenge.target):
        logger.warning("No solvable challenge after %d tries at level %d; serving %s",
                       tries, level, challenge.to_dict())
    return challenge
