"""
td-tictactoe: a Tic-Tac-Toe agent that learns by self-play.

Each side keeps a table of state values, plays epsilon-greedily and
improves its estimates with temporal-difference updates.
"""

__version__ = "0.1.0"

from td_tictactoe.agents import RandomAgent, TDAgent, ValueTable
from td_tictactoe.board import Board, Piece
from td_tictactoe.exceptions import TicTacToeError
from td_tictactoe.persistence import load_agent, save_agent
from td_tictactoe.train import train

__all__ = [
    "Board",
    "Piece",
    "RandomAgent",
    "TDAgent",
    "TicTacToeError",
    "ValueTable",
    "__version__",
    "load_agent",
    "save_agent",
    "train",
]
