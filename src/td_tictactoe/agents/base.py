"""Protocol for Tic-Tac-Toe agents."""

from typing import Protocol

from td_tictactoe.board import GameState, Move, Piece


class Agent(Protocol):
    """Protocol for Tic-Tac-Toe agents."""

    piece: Piece

    def select_move(self, state: GameState) -> Move:
        """
        Select a move given the current state.

        Args:
            state: Current board state (9-cell tuple)

        Returns:
            (row, col) of an empty cell
        """
        ...

    def reset(self) -> None:
        """
        Reset agent state (if any) at the start of a new episode.

        Optional for stateless agents.
        """
        ...
