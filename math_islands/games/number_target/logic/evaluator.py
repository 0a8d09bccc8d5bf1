# math_islands/games/number_target/logic/evaluator.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

DIVISION_NOT_WHOLE = "Division must result in a whole number."
NOT_POSITIVE = "Result must be a positive whole number."
UNKNOWN_OPERATOR = "Please choose +, −, × or ÷."


class Operator(str, Enum):
    ADD = "+"
    SUB = "−"
    MUL = "×"
    DIV = "÷"

    @classmethod
    def parse(cls, raw) -> Optional["Operator"]:
        """
        Accepts the kid-facing glyphs plus the usual keyboard variants:
          '+', '-', '−', '–', '*', 'x', '×', '/', '÷', 'add', 'sub', 'mul', 'div'
        Returns None for anything else.
        """
        if isinstance(raw, cls):
            return raw
        s = str(raw or "").strip().lower()
        return _ALIASES.get(s)

    @property
    def ascii(self) -> str:
        return {"+": "+", "−": "-", "×": "*", "÷": "/"}[self.value]


_ALIASES = {
    "+": Operator.ADD, "add": Operator.ADD, "plus": Operator.ADD,
    "-": Operator.SUB, "−": Operator.SUB, "–": Operator.SUB, "sub": Operator.SUB, "minus": Operator.SUB,
    "*": Operator.MUL, "x": Operator.MUL, "×": Operator.MUL, "·": Operator.MUL, "mul": Operator.MUL, "times": Operator.MUL,
    "/": Operator.DIV, "÷": Operator.DIV, "div": Operator.DIV,
}


@dataclass(frozen=True)
class MoveRejected:
    """A recoverable, user-visible 'try again' outcome. Never raised."""
    reason: str


MoveResult = Union[int, MoveRejected]


def evaluate_move(a: int, b: int, op, positive_only: bool = True) -> MoveResult:
    """
    Combine two numbers in selection order (a is the first pick, b the second).

    Division only counts when it comes out whole; with positive_only (the
    current game rules) anything <= 0 is refused too.
    """
    operator = Operator.parse(op)
    if operator is None:
        return MoveRejected(UNKNOWN_OPERATOR)

    a, b = int(a), int(b)
    if operator is Operator.ADD:
        result = a + b
    elif operator is Operator.SUB:
        result = a - b
    elif operator is Operator.MUL:
        result = a * b
    else:
        if b == 0 or a % b != 0:
            return MoveRejected(DIVISION_NOT_WHOLE)
        result = a // b

    if positive_only and result <= 0:
        return MoveRejected(NOT_POSITIVE)
    return result


def is_rejected(result: MoveResult) -> bool:
    return isinstance(result, MoveRejected)
