"""Evaluation utilities for comparing agents."""

from typing import Any, Dict, Optional, Tuple

from td_tictactoe.agents.base import Agent
from td_tictactoe.board import Board, Piece


def play_game(board: Board, agent_x: Agent, agent_o: Agent) -> Tuple[Optional[Piece], int]:
    """
    Play a single game between two agents.

    Args:
        board: Board instance (cleared before play)
        agent_x: Agent playing as X (moves first)
        agent_o: Agent playing as O

    Returns:
        Tuple of (winner, num_moves)
        - winner: Piece.X, Piece.O, or None for a draw
        - num_moves: Total number of moves played
    """
    board.clear()
    agent_x.reset()
    agent_o.reset()

    agents = (agent_x, agent_o)
    num_moves = 0

    while True:
        agent = agents[num_moves % 2]
        row, col = agent.select_move(board.get_compact_state())
        board.apply_move(row, col, agent.piece)
        num_moves += 1

        winner = board.check_winner()
        if winner is not None:
            return winner, num_moves
        if board.is_full():
            return None, num_moves


def evaluate_agents(
    agent_x: Agent,
    agent_o: Agent,
    x_name: str,
    o_name: str,
    num_games: int = 100,
) -> Dict[str, Any]:
    """
    Evaluate two agents against each other.

    Args:
        agent_x: First agent (plays as X)
        agent_o: Second agent (plays as O)
        x_name: Name of the X agent for display
        o_name: Name of the O agent for display
        num_games: Number of games to play

    Returns:
        Dictionary with evaluation results
    """
    if num_games < 1:
        raise ValueError("num_games must be at least 1")

    board = Board()
    x_wins = 0
    o_wins = 0
    draws = 0
    total_moves = 0

    for _ in range(num_games):
        winner, moves = play_game(board, agent_x, agent_o)
        total_moves += moves

        if winner == Piece.X:
            x_wins += 1
        elif winner == Piece.O:
            o_wins += 1
        else:
            draws += 1

    return {
        "x_name": x_name,
        "o_name": o_name,
        "num_games": num_games,
        "x_wins": x_wins,
        "o_wins": o_wins,
        "draws": draws,
        "x_win_rate": x_wins / num_games,
        "o_win_rate": o_wins / num_games,
        "draw_rate": draws / num_games,
        "avg_moves_per_game": total_moves / num_games,
    }
