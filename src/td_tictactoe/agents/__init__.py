"""Agent implementations for Tic-Tac-Toe."""

from td_tictactoe.agents.base import Agent
from td_tictactoe.agents.random import RandomAgent
from td_tictactoe.agents.td_agent import TDAgent
from td_tictactoe.agents.value_table import ValueTable

__all__ = ["Agent", "RandomAgent", "TDAgent", "ValueTable"]
