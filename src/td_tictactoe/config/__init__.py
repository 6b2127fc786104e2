"""Configuration for td-tictactoe."""

from td_tictactoe.config.loader import load_config, save_config
from td_tictactoe.config.models import (
    AgentSettings,
    LoggingSettings,
    ScheduleSettings,
    TicTacToeConfig,
    TrainingSettings,
)

__all__ = [
    "AgentSettings",
    "LoggingSettings",
    "ScheduleSettings",
    "TicTacToeConfig",
    "TrainingSettings",
    "load_config",
    "save_config",
]
