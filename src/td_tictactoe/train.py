"""Self-play training for a pair of TD agents."""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from rich.progress import Progress

from td_tictactoe.agents.td_agent import TDAgent
from td_tictactoe.board import EMPTY_STATE, Board, GameState, Piece
from td_tictactoe.exceptions import InvalidFileError, InvalidPlayersError
from td_tictactoe.persistence import save_agent

logger = logging.getLogger(__name__)

PLAYER_X_FILE = "player_x_save.ttr"
PLAYER_O_FILE = "player_o_save.ttr"


class TrainingMetrics:
    """Track self-play outcomes over episodes."""

    def __init__(self) -> None:
        """Initialize metrics tracking."""
        self.episodes: List[int] = []
        self.x_wins: List[int] = []
        self.o_wins: List[int] = []
        self.draws: List[int] = []
        self.x_win_rates: List[float] = []
        self.o_win_rates: List[float] = []
        self.draw_rates: List[float] = []
        self.exploration_rates: List[float] = []
        self.learning_rates: List[float] = []
        self.x_table_sizes: List[int] = []
        self.o_table_sizes: List[int] = []

    def record(
        self,
        episode: int,
        x_wins: int,
        o_wins: int,
        draws: int,
        agent_x: TDAgent,
        agent_o: TDAgent,
    ) -> None:
        """Record metrics for the window ending at ``episode``."""
        total = x_wins + o_wins + draws

        self.episodes.append(episode)
        self.x_wins.append(x_wins)
        self.o_wins.append(o_wins)
        self.draws.append(draws)
        self.x_win_rates.append(x_wins / total if total > 0 else 0.0)
        self.o_win_rates.append(o_wins / total if total > 0 else 0.0)
        self.draw_rates.append(draws / total if total > 0 else 0.0)
        self.exploration_rates.append(agent_x.exploration_rate)
        self.learning_rates.append(agent_x.learning_rate)
        self.x_table_sizes.append(len(agent_x.value_table))
        self.o_table_sizes.append(len(agent_o.value_table))

    def to_dict(self) -> Dict[str, List]:
        """Convert metrics to dictionary."""
        return {
            "episodes": self.episodes,
            "x_wins": self.x_wins,
            "o_wins": self.o_wins,
            "draws": self.draws,
            "x_win_rates": self.x_win_rates,
            "o_win_rates": self.o_win_rates,
            "draw_rates": self.draw_rates,
            "exploration_rates": self.exploration_rates,
            "learning_rates": self.learning_rates,
            "x_table_sizes": self.x_table_sizes,
            "o_table_sizes": self.o_table_sizes,
        }


def play_training_episode(board: Board, agent_x: TDAgent, agent_o: TDAgent) -> Optional[Piece]:
    """
    Play one self-play episode on a cleared board.

    Each agent's prior board is the board right after its own previous
    move. When one side wins, the other is shown its prior board so it
    can learn from the loss. If the loser never moved, the empty board
    is what it is shown.

    Returns:
        Winning piece, or None for a draw
    """
    board.clear()
    prior: Dict[Piece, GameState] = {Piece.X: EMPTY_STATE, Piece.O: EMPTY_STATE}
    agents = (agent_x, agent_o)
    turn = 0

    while True:
        agent = agents[turn % 2]
        opponent = agents[(turn + 1) % 2]

        row, col = agent.select_move(board.get_compact_state())
        board.apply_move(row, col, agent.piece)

        final_state = board.get_compact_state()
        if board.check_winner() is not None:
            opponent.show_losing_state(prior[opponent.piece], final_state)
            return agent.piece
        if board.is_full():
            return None

        prior[agent.piece] = final_state
        turn += 1


def train(
    agent_a: TDAgent,
    agent_b: TDAgent,
    episode_count: int,
    output_dir: str | Path,
    progress_bar: bool = False,
    metrics: Optional[TrainingMetrics] = None,
    eval_interval: int = 100,
) -> Tuple[Path, Path]:
    """
    Train two agents against each other and save both.

    Args:
        agent_a: One agent (either side)
        agent_b: The agent playing the other side
        episode_count: Number of self-play episodes
        output_dir: Directory receiving the two save files
        progress_bar: Show a progress bar while training
        metrics: Optional TrainingMetrics to fill in
        eval_interval: Episodes between metric recordings

    Returns:
        Tuple of (player X save path, player O save path)

    Raises:
        InvalidPlayersError: If both agents play the same side
        InvalidFileError, UnableToSaveError: If saving fails
    """
    if agent_a.piece == agent_b.piece:
        raise InvalidPlayersError(f"Both agents play {agent_a.piece.name}")
    if episode_count < 0:
        raise ValueError("episode_count must be non-negative")
    if eval_interval < 1:
        raise ValueError("eval_interval must be at least 1")

    agent_x, agent_o = (agent_a, agent_b) if agent_a.piece == Piece.X else (agent_b, agent_a)
    output_dir = Path(output_dir)
    board = Board()
    outcomes = {Piece.X: 0, Piece.O: 0, None: 0}

    logger.info("Training for %d episodes", episode_count)

    with Progress(disable=not progress_bar, transient=True) as progress:
        task = progress.add_task("Training", total=episode_count)
        for episode in range(episode_count):
            agent_x.update_iteration(episode)
            agent_o.update_iteration(episode)

            winner = play_training_episode(board, agent_x, agent_o)
            outcomes[winner] += 1
            progress.advance(task)

            if (episode + 1) % eval_interval == 0:
                if metrics is not None:
                    metrics.record(
                        episode + 1, outcomes[Piece.X], outcomes[Piece.O], outcomes[None],
                        agent_x, agent_o,
                    )
                logger.info(
                    "Episode %d/%d | X: %d | O: %d | Draw: %d | lr: %.3f | eps: %.3f | states: %d/%d",
                    episode + 1, episode_count,
                    outcomes[Piece.X], outcomes[Piece.O], outcomes[None],
                    agent_x.learning_rate, agent_x.exploration_rate,
                    len(agent_x.value_table), len(agent_o.value_table),
                )
                outcomes = {Piece.X: 0, Piece.O: 0, None: 0}

    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise InvalidFileError(f"Cannot create output directory {output_dir}: {e}") from e
    path_x = save_agent(agent_x, output_dir / PLAYER_X_FILE)
    path_o = save_agent(agent_o, output_dir / PLAYER_O_FILE)
    return path_x, path_o
