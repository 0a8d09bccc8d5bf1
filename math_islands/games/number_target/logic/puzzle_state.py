# math_islands/games/number_target/logic/puzzle_state.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Union
import itertools

from .evaluator import MoveRejected, Operator, evaluate_move, is_rejected, UNKNOWN_OPERATOR

MAX_STEPS = 4

PICK_AVAILABLE = "Pick two numbers from the board."
PICK_TWO_DIFFERENT = "Pick two different numbers."
NO_STEPS_LEFT = "No steps left! Press Reset to try again."


@dataclass(frozen=True)
class Token:
    """One selectable number on the board. Equal values keep separate ids."""
    id: str
    value: int

    def to_dict(self) -> Dict[str, object]:
        return {"id": self.id, "value": self.value}


@dataclass(frozen=True)
class Move:
    first: Token
    second: Token
    operator: Operator
    result: Token

    def to_dict(self) -> Dict[str, object]:
        return {
            "first": self.first.to_dict(),
            "second": self.second.to_dict(),
            "operator": self.operator.value,
            "result": self.result.to_dict(),
            "text": f"{self.first.value} {self.operator.value} {self.second.value} = {self.result.value}",
        }


def check_win(values: Iterable[int], target: int) -> bool:
    return int(target) in {int(v) for v in values}


@dataclass
class PuzzleState:
    """
    Available tokens + step history for one challenge.

    Every accepted move consumes two tokens and produces one, so the board
    shrinks by exactly one token per move.
    """
    target: int
    starting: List[Token] = field(default_factory=list)
    available: List[Token] = field(default_factory=list)
    history: List[Move] = field(default_factory=list)
    max_steps: int = MAX_STEPS
    positive_only: bool = True
    _ids: "itertools.count" = field(default_factory=lambda: itertools.count(1), repr=False)

    @classmethod
    def start(cls, challenge, max_steps: int = MAX_STEPS, positive_only: bool = True) -> "PuzzleState":
        state = cls(target=int(challenge.target), max_steps=max_steps, positive_only=positive_only)
        state.starting = [state._new_token(v) for v in challenge.numbers]
        state.available = list(state.starting)
        return state

    def _new_token(self, value: int) -> Token:
        return Token(id=f"t{next(self._ids)}", value=int(value))

    # ---- queries ----
    def token(self, token_id: Optional[str]) -> Optional[Token]:
        for t in self.available:
            if t.id == token_id:
                return t
        return None

    def available_values(self) -> List[int]:
        return [t.value for t in self.available]

    def has_value(self, value: int) -> bool:
        return check_win(self.available_values(), value)

    def is_won(self) -> bool:
        return self.has_value(self.target)

    @property
    def steps_used(self) -> int:
        return len(self.history)

    @property
    def steps_left(self) -> int:
        return max(0, self.max_steps - len(self.history))

    def steps_before_target(self) -> int:
        """
        How many moves came before the one that produced the target token
        (0 when the target was on the board from the start).
        """
        hit = next((t for t in self.available if t.value == self.target), None)
        if hit is None:
            return len(self.history)
        for i, mv in enumerate(self.history):
            if mv.result.id == hit.id:
                return i
        return 0

    # ---- transitions ----
    def consume_and_produce(self, first_id: str, second_id: str, op) -> Union[Move, MoveRejected]:
        operator = Operator.parse(op)
        if operator is None:
            return MoveRejected(UNKNOWN_OPERATOR)
        if first_id == second_id:
            return MoveRejected(PICK_TWO_DIFFERENT)
        first, second = self.token(first_id), self.token(second_id)
        if first is None or second is None:
            return MoveRejected(PICK_AVAILABLE)
        if len(self.history) >= self.max_steps:
            return MoveRejected(NO_STEPS_LEFT)

        result = evaluate_move(first.value, second.value, operator, positive_only=self.positive_only)
        if is_rejected(result):
            return result

        produced = self._new_token(result)
        self.available = [t for t in self.available if t.id not in (first.id, second.id)]
        self.available.append(produced)
        move = Move(first=first, second=second, operator=operator, result=produced)
        self.history.append(move)
        return move

    def reset_round(self) -> None:
        """Back to the five starting tokens; the target and id counter are kept."""
        self.available = list(self.starting)
        self.history = []

    def to_dict(self) -> Dict[str, object]:
        return {
            "target": self.target,
            "tokens": [t.to_dict() for t in self.available],
            "history": [m.to_dict() for m in self.history],
            "steps_used": self.steps_used,
            "steps_left": self.steps_left,
            "max_steps": self.max_steps,
        }
