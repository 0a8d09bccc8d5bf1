# math_islands/games/number_target/logic/__init__.py
from .challenge import Challenge, generate, tier_for
from .evaluator import MoveRejected, Operator, evaluate_move, is_rejected
from .puzzle_state import MAX_STEPS, Move, PuzzleState, Token, check_win
from .solver import find_solution, is_solvable
from .game import NumberTargetGame, Outcome

__all__ = [
    "Challenge", "generate", "tier_for",
    "MoveRejected", "Operator", "evaluate_move", "is_rejected",
    "MAX_STEPS", "Move", "PuzzleState", "Token", "check_win",
    "find_solution", "is_solvable",
    "NumberTargetGame", "Outcome",
]
