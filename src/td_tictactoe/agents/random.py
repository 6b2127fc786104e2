"""Random agent that plays uniformly at random among empty cells."""

import numpy as np

from td_tictactoe.board import GameState, Move, Piece, empty_cells


class RandomAgent:
    """Agent that selects moves uniformly at random from empty cells."""

    def __init__(self, piece: Piece, seed: int | None = None) -> None:
        """
        Initialize the random agent.

        Args:
            piece: Side the agent plays
            seed: Random seed for reproducibility (optional)
        """
        self.piece = piece
        self.rng = np.random.default_rng(seed)

    def select_move(self, state: GameState) -> Move:
        moves = empty_cells(state)
        if not moves:
            raise ValueError("No legal moves available")
        return moves[int(self.rng.integers(len(moves)))]

    def reset(self) -> None:
        """Reset agent state (no-op for stateless agent)."""
        pass
