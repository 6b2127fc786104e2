"""Sparse state-value table for a single side."""

from typing import Dict, Iterator, Mapping, Optional, Tuple

from td_tictactoe.board import GameState, Piece, check_winner, is_full
from td_tictactoe.exceptions import InvariantViolation

WIN_VALUE = 1.0
LOSS_VALUE = 0.0
UNKNOWN_VALUE = 0.5


class ValueTable:
    """
    Mapping from GameState to the owner's estimated probability of winning.

    Entries are created lazily: evaluating an unseen state computes its
    initial value and memoizes it.

    Initial values, from the owner's point of view:
        - owner has three in a row: 1.0
        - opponent has three in a row, or full board with no winner: 0.0
        - anything else: 0.5
    """

    def __init__(self, piece: Piece, values: Optional[Mapping[GameState, float]] = None) -> None:
        if piece == Piece.EMPTY:
            raise InvariantViolation("A value table must belong to X or O")
        self.piece = piece
        self._values: Dict[GameState, float] = dict(values) if values else {}

    def initial_value(self, state: GameState) -> float:
        """Value of a state the table has never seen."""
        winner = check_winner(state)
        if winner is not None:
            return WIN_VALUE if winner == self.piece else LOSS_VALUE
        if is_full(state):
            return LOSS_VALUE
        return UNKNOWN_VALUE

    def evaluate(self, state: GameState) -> float:
        """Return the stored value, inserting the initial value if unseen."""
        value = self._values.get(state)
        if value is None:
            value = self.initial_value(state)
            self._values[state] = value
        return value

    def contains(self, state: GameState) -> bool:
        return state in self._values

    def set(self, state: GameState, value: float) -> None:
        if not 0.0 <= value <= 1.0:
            raise InvariantViolation(f"Value {value} is outside [0, 1]")
        self._values[state] = value

    def items(self) -> Iterator[Tuple[GameState, float]]:
        return iter(self._values.items())

    def __contains__(self, state: object) -> bool:
        return state in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValueTable):
            return NotImplemented
        return self.piece == other.piece and self._values == other._values
