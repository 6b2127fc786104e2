"""Tic-Tac-Toe board and the compact game-state codec."""

from enum import IntEnum
from typing import Iterator, List, Optional, Sequence, Tuple

from td_tictactoe.exceptions import (
    CellOccupiedError,
    InvalidMoveError,
    InvariantViolation,
)


class Piece(IntEnum):
    """Cell marker. ``X`` always moves first."""

    EMPTY = 0
    X = 1
    O = -1

    @property
    def opponent(self) -> "Piece":
        if self is Piece.EMPTY:
            raise InvariantViolation("EMPTY has no opponent")
        return Piece(-self.value)

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]


_SYMBOLS = {Piece.EMPTY: " ", Piece.X: "X", Piece.O: "O"}

# Flattened, row-major snapshot of the 3x3 board used as a table key.
GameState = Tuple[Piece, ...]
Move = Tuple[int, int]

BOARD_SIZE = 3
NUM_CELLS = BOARD_SIZE * BOARD_SIZE

EMPTY_STATE: GameState = (Piece.EMPTY,) * NUM_CELLS

WIN_LINES: Tuple[Tuple[int, int, int], ...] = (
    # rows
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    # columns
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    # diagonals
    (0, 4, 8),
    (6, 4, 2),
)

_ROW_LABELS = "abc"
_COL_LABELS = "123"


def make_state(cells: Sequence[int]) -> GameState:
    """Build a GameState from any 9-element sequence of markers."""
    if len(cells) != NUM_CELLS:
        raise ValueError(f"A game state needs {NUM_CELLS} cells, got {len(cells)}")
    return tuple(Piece(int(c)) for c in cells)


def check_winner(state: Sequence[int]) -> Optional[Piece]:
    """Return the marker holding a full row, column or diagonal, if any."""
    for a, b, c in WIN_LINES:
        if state[a] != Piece.EMPTY and state[a] == state[b] == state[c]:
            return Piece(state[a])
    return None


def is_full(state: Sequence[int]) -> bool:
    """True when no empty cell remains."""
    return all(cell != Piece.EMPTY for cell in state)


def is_terminal(state: Sequence[int]) -> bool:
    """True for a won or drawn position."""
    return check_winner(state) is not None or is_full(state)


def empty_cells(state: Sequence[int]) -> List[Move]:
    """Moves targeting every empty cell of ``state``, in row-major order."""
    return [divmod(i, BOARD_SIZE) for i, cell in enumerate(state) if cell == Piece.EMPTY]


def next_states(state: GameState, piece: Piece) -> Iterator[Tuple[Move, GameState]]:
    """
    Yield ``(move, resulting_state)`` for each empty cell of ``state``.

    Each resulting state is built on a scratch copy; ``state`` itself is
    never modified.
    """
    if piece == Piece.EMPTY:
        raise InvariantViolation("Cannot place an EMPTY marker")
    scratch = list(state)
    for row, col in empty_cells(state):
        idx = row * BOARD_SIZE + col
        if scratch[idx] != Piece.EMPTY:
            raise InvariantViolation(f"Cell {(row, col)} is not empty")
        scratch[idx] = piece
        yield (row, col), tuple(scratch)
        scratch[idx] = Piece.EMPTY


def parse_move(move_specification: str) -> Move:
    """
    Parse a human move such as ``"b2"`` into ``(row, col)``.

    Rows are ``a``-``c`` (case-insensitive), columns ``1``-``3``.
    """
    spec = move_specification.strip().lower()
    if len(spec) != 2 or spec[0] not in _ROW_LABELS or spec[1] not in _COL_LABELS:
        raise InvalidMoveError(f"Invalid move '{move_specification}'")
    return _ROW_LABELS.index(spec[0]), _COL_LABELS.index(spec[1])


def to_human_move(move: Move) -> str:
    """Inverse of :func:`parse_move`."""
    row, col = move
    return f"{_ROW_LABELS[row]}{_COL_LABELS[col]}"


class Board:
    """
    Mutable 3x3 Tic-Tac-Toe board.

    Cell layout (row, col):
        (0,0) (0,1) (0,2)
        (1,0) (1,1) (1,2)
        (2,0) (2,1) (2,2)

    Humans address cells as ``a1`` .. ``c3``.
    """

    def __init__(self) -> None:
        self.cells: List[Piece] = list(EMPTY_STATE)

    def clear(self) -> None:
        """Reset the board to all-empty."""
        self.cells = list(EMPTY_STATE)

    def get_compact_state(self) -> GameState:
        """Read-only snapshot of the board."""
        return tuple(self.cells)

    def apply_move(self, row: int, col: int, piece: Piece) -> None:
        """
        Place an automated player's marker.

        Automated players only pick from enumerated empty cells, so an
        occupied target or an EMPTY marker is a broken invariant.
        """
        if piece == Piece.EMPTY:
            raise InvariantViolation("Cannot place an EMPTY marker")
        if not (0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE):
            raise InvariantViolation(f"Move {(row, col)} is off the board")
        idx = row * BOARD_SIZE + col
        if self.cells[idx] != Piece.EMPTY:
            raise InvariantViolation(f"Cell {(row, col)} is not empty")
        self.cells[idx] = piece

    def player_move(self, move_specification: str, piece: Piece) -> Move:
        """
        Apply a human move such as ``"b2"``.

        Raises:
            InvalidMoveError: if the specification cannot be parsed
            CellOccupiedError: if the target cell is taken
        """
        row, col = parse_move(move_specification)
        if self.cells[row * BOARD_SIZE + col] != Piece.EMPTY:
            raise CellOccupiedError(f"Cell {to_human_move((row, col))} is occupied")
        self.apply_move(row, col, piece)
        return row, col

    def legal_moves(self) -> List[Move]:
        return empty_cells(self.cells)

    def check_winner(self) -> Optional[Piece]:
        return check_winner(self.cells)

    def is_full(self) -> bool:
        return is_full(self.cells)

    def render(self) -> str:
        """
        Render the board as a string.

        Returns:
            Grid with row letters and column numbers
        """
        lines = ["    1   2   3"]
        for r in range(BOARD_SIZE):
            row = self.cells[r * BOARD_SIZE:(r + 1) * BOARD_SIZE]
            lines.append(f"{_ROW_LABELS[r]}   " + " | ".join(p.symbol for p in row))
            if r < BOARD_SIZE - 1:
                lines.append("   ---+---+---")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.render()
