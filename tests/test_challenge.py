"""Tests for the Number Target challenge generator."""

from __future__ import annotations

import dataclasses
import random

import pytest

from math_islands.games.number_target.logic.challenge import Challenge, generate, tier_for
from math_islands.games.number_target.logic.solver import is_solvable


# ---------------------------------------------------------------------------
# Tiers
# ---------------------------------------------------------------------------

class TestTierFor:
    @pytest.mark.parametrize("level,name", [
        (1, "easy"), (3, "easy"), (4, "medium"), (6, "medium"), (7, "hard"), (12, "hard"),
    ])
    def test_thresholds(self, level, name):
        assert tier_for(level).name == name


class TestRanges:
    @pytest.mark.parametrize("level,max_number,lo,hi", [
        (1, 10, 10, 29),
        (5, 15, 20, 49),
        (9, 25, 30, 79),
    ])
    def test_draws_stay_in_band(self, level, max_number, lo, hi):
        rng = random.Random(1234)
        for _ in range(300):
            ch = generate(level, rng=rng)
            assert len(ch.numbers) == 5
            assert all(1 <= n <= max_number for n in ch.numbers)
            assert lo <= ch.target <= hi
            assert ch.level == level

    def test_band_edges_are_reachable(self):
        rng = random.Random(7)
        seen_numbers, seen_targets = set(), set()
        for _ in range(2000):
            ch = generate(1, rng=rng)
            seen_numbers.update(ch.numbers)
            seen_targets.add(ch.target)
        assert {1, 10} <= seen_numbers
        assert {10, 29} <= seen_targets


# ---------------------------------------------------------------------------
# Behaviour
# ---------------------------------------------------------------------------

class TestGenerate:
    def test_same_seed_same_challenge(self):
        assert generate(2, rng=random.Random(99)) == generate(2, rng=random.Random(99))

    def test_challenge_is_immutable(self):
        ch = generate(1, rng=random.Random(0))
        with pytest.raises(dataclasses.FrozenInstanceError):
            ch.target = 1

    def test_level_below_one_is_level_one(self):
        ch = generate(0, rng=random.Random(3))
        assert ch.level == 1
        assert 10 <= ch.target <= 29

    def test_to_dict(self):
        ch = Challenge(numbers=(4, 7, 2, 9, 5), target=22, level=1)
        assert ch.to_dict() == {"numbers": [4, 7, 2, 9, 5], "target": 22, "level": 1}

    def test_solvable_only(self):
        rng = random.Random(2024)
        for level in (1, 4, 8):
            ch = generate(level, rng=rng, solvable_only=True)
            assert is_solvable(ch.numbers, ch.target)

    def test_solvable_only_gives_up_after_max_tries(self, monkeypatch):
        from math_islands.games.number_target.logic import solver
        monkeypatch.setattr(solver, "is_solvable", lambda numbers, target: False)
        ch = generate(1, rng=random.Random(5), solvable_only=True, max_tries=3)
        assert isinstance(ch, Challenge)
