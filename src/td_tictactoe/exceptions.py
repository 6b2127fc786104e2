"""Exception classes for td-tictactoe."""


class TicTacToeError(Exception):
    """Base exception for all recoverable td-tictactoe errors."""

    pass


class PersistenceError(TicTacToeError):
    """Raised when an agent cannot be saved or restored."""

    pass


class InvalidFileError(PersistenceError):
    """Raised when a save file cannot be opened or created."""

    pass


class UnableToReadError(PersistenceError):
    """Raised when a save file was opened but could not be decoded."""

    pass


class UnableToSaveError(PersistenceError):
    """Raised when an agent could not be encoded or written."""

    pass


class InvalidPlayersError(TicTacToeError):
    """Raised when training is requested for two agents of the same side."""

    pass


class ConfigurationError(TicTacToeError):
    """Raised when configuration is invalid."""

    pass


class BoardError(TicTacToeError):
    """Base exception for rejected human moves."""

    pass


class InvalidMoveError(BoardError):
    """Raised when a move specification cannot be parsed."""

    pass


class CellOccupiedError(BoardError):
    """Raised when a human move targets an occupied cell."""

    pass


class InvariantViolation(RuntimeError):
    """Raised on a broken internal invariant.

    Not a ``TicTacToeError``: these indicate programming errors and must
    abort the current operation instead of being handled.
    """

    pass
