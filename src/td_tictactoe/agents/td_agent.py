"""Temporal-difference value-learning agent for Tic-Tac-Toe."""

import logging
from typing import List, Optional, Tuple

import numpy as np

from td_tictactoe.agents.value_table import LOSS_VALUE, ValueTable
from td_tictactoe.annealing import (
    INITIAL_EXPLORATION_RATE,
    INITIAL_LEARNING_RATE,
    Schedule,
    exploration_rate_schedule,
    learning_rate_schedule,
)
from td_tictactoe.board import GameState, Move, Piece, next_states
from td_tictactoe.exceptions import InvariantViolation

logger = logging.getLogger(__name__)


class TDAgent:
    """
    Tabular state-value agent trained by self-play.

    Keeps an estimate V(s) of its own probability of winning from every
    state it has looked at. Mostly plays greedily towards the highest
    valued next state and occasionally explores a worse one.

    After each greedy move the current state is moved towards the best
    next state:
        V(s_t) <- V(s_t) + lr * [V(s_{t+1}) - V(s_t)]

    Learning and exploration rates are read from the injected annealing
    schedules using the iteration the trainer last set.
    """

    def __init__(
        self,
        piece: Piece,
        initial_learning_rate: float = INITIAL_LEARNING_RATE,
        initial_exploration_rate: float = INITIAL_EXPLORATION_RATE,
        learning_schedule: Optional[Schedule] = None,
        exploration_schedule: Optional[Schedule] = None,
        seed: int | None = None,
        value_table: Optional[ValueTable] = None,
        iteration: int = 0,
    ) -> None:
        """
        Initialize the agent.

        Args:
            piece: Side the agent plays for its whole lifetime (X or O)
            initial_learning_rate: Learning rate at iteration 0
            initial_exploration_rate: Exploration rate at iteration 0
            learning_schedule: Annealing schedule for the learning rate
            exploration_schedule: Annealing schedule for the exploration rate
            seed: Random seed for reproducibility
            value_table: Previously learned table (restored agents)
            iteration: Iteration counter (restored agents)
        """
        if piece == Piece.EMPTY:
            raise InvariantViolation("An agent must play X or O")
        if value_table is not None and value_table.piece != piece:
            raise InvariantViolation("Value table belongs to the other side")
        for name, rate in (
            ("initial_learning_rate", initial_learning_rate),
            ("initial_exploration_rate", initial_exploration_rate),
        ):
            if not 0.0 <= rate <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got {rate}")

        self.piece = piece
        self.initial_learning_rate = initial_learning_rate
        self.initial_exploration_rate = initial_exploration_rate
        self.learning_schedule: Schedule = learning_schedule or learning_rate_schedule()
        self.exploration_schedule: Schedule = exploration_schedule or exploration_rate_schedule()
        self.rng = np.random.default_rng(seed)
        self.value_table = value_table if value_table is not None else ValueTable(piece)
        self.iteration = iteration

        # When False the agent plays greedily and never writes a TD update;
        # evaluated states are still memoized.
        self.training_mode = True

    @property
    def learning_rate(self) -> float:
        """Learning rate at the current iteration."""
        return self.learning_schedule(self.initial_learning_rate, self.iteration)

    @property
    def exploration_rate(self) -> float:
        """Exploration rate at the current iteration."""
        return self.exploration_schedule(self.initial_exploration_rate, self.iteration)

    def update_iteration(self, iteration: int) -> None:
        """Set the current iteration (the trainer's episode index)."""
        if iteration < 0:
            raise ValueError("iteration must be non-negative")
        self.iteration = iteration

    def set_training_mode(self, mode: bool) -> None:
        """Enable or disable exploration and TD updates."""
        self.training_mode = mode

    def evaluate(self, state: GameState) -> float:
        return self.value_table.evaluate(state)

    def candidate_moves(self, state: GameState) -> Tuple[List[Move], List[float]]:
        """
        Evaluate every legal next state.

        Evaluating memoizes each candidate in the value table.

        Returns:
            Tuple of (moves, values), index-aligned
        """
        moves: List[Move] = []
        values: List[float] = []
        for move, next_state in next_states(state, self.piece):
            moves.append(move)
            values.append(self.value_table.evaluate(next_state))
        if not moves:
            raise InvariantViolation("No legal moves: cannot select a move on a full board")
        return moves, values

    def select_move(self, state: GameState) -> Move:
        """
        Select a move using the epsilon-greedy policy.

        Args:
            state: Current board state

        Returns:
            (row, col) of an empty cell
        """
        if self.training_mode and self.rng.random() < self.exploration_rate:
            return self._exploratory_move(state)
        return self._greedy_move(state)

    def _greedy_move(self, state: GameState) -> Move:
        moves, values = self.candidate_moves(state)
        max_value = max(values)
        best = [m for m, v in zip(moves, values) if v == max_value]
        move = best[int(self.rng.integers(len(best)))]
        self._td_update(state, max_value)
        return move

    def _exploratory_move(self, state: GameState) -> Move:
        moves, values = self.candidate_moves(state)
        max_value = max(values)
        worse = [m for m, v in zip(moves, values) if v < max_value]
        pool = worse or moves
        return pool[int(self.rng.integers(len(pool)))]

    def _td_update(self, state: GameState, target: float) -> None:
        if not self.training_mode:
            return
        old_value = self.value_table.evaluate(state)
        new_value = old_value + self.learning_rate * (target - old_value)
        self.value_table.set(state, new_value)

    def show_losing_state(
        self, prior_state: GameState, final_state: Optional[GameState] = None
    ) -> None:
        """
        Learn from a game the opponent ended.

        Moves the value of ``prior_state`` (the board right after this
        agent's last move) towards the value of the terminal state reached.

        Args:
            prior_state: Board immediately after this agent's own last move
            final_state: Terminal board, if known; otherwise a loss is assumed
        """
        target = LOSS_VALUE if final_state is None else self.value_table.evaluate(final_state)
        logger.debug("%s updating prior state towards %.3f", self.piece.name, target)
        self._td_update(prior_state, target)

    def get_stats(self) -> dict:
        """Get statistics about the value table."""
        return {
            "num_states": len(self.value_table),
            "iteration": self.iteration,
            "learning_rate": self.learning_rate,
            "exploration_rate": self.exploration_rate,
        }

    def reset(self) -> None:
        """No per-episode state; the trainer tracks prior boards."""
        pass
