# math_islands/games/number_target/logic/solver.py
from __future__ import annotations
from functools import lru_cache
from typing import List, NamedTuple, Optional, Sequence, Tuple

from .evaluator import Operator, evaluate_move, is_rejected
from .puzzle_state import MAX_STEPS


class SolutionStep(NamedTuple):
    first: int
    operator: str
    second: int
    result: int

    def __str__(self) -> str:
        return f"{self.first} {self.operator} {self.second} = {self.result}"


def find_solution(numbers: Sequence[int], target: int, max_steps: int = MAX_STEPS) -> Optional[List[SolutionStep]]:
    """
    One way to reach `target` under the game rules (whole, positive results,
    operands in pick order, any subset of the numbers), or None.
    An empty list means the target is already on the board.
    """
    nums = tuple(sorted(int(x) for x in numbers))
    path = _search(nums, int(target), int(max_steps))
    return list(path) if path is not None else None


def is_solvable(numbers: Sequence[int], target: int, max_steps: int = MAX_STEPS) -> bool:
    return find_solution(numbers, target, max_steps) is not None


@lru_cache(maxsize=8192)
def _search(nums: Tuple[int, ...], target: int, steps_left: int) -> Optional[Tuple[SolutionStep, ...]]:
    if target in nums:
        return ()
    n = len(nums)
    if steps_left <= 0 or n < 2:
        return None
    for i in range(n):
        for j in range(n):
            if i == j:
                continue
            a, b = nums[i], nums[j]
            rest = [nums[k] for k in range(n) if k not in (i, j)]
            for op in Operator:
                # + and × were already tried with the operands swapped
                if op in (Operator.ADD, Operator.MUL) and i > j:
                    continue
                res = evaluate_move(a, b, op)
                if is_rejected(res):
                    continue
                tail = _search(tuple(sorted(rest + [res])), target, steps_left - 1)
                if tail is not None:
                    return (SolutionStep(a, op.value, b, res),) + tail
    return None
