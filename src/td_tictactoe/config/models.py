"""Configuration models for td-tictactoe."""

import os
import re
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from td_tictactoe.annealing import (
    INITIAL_EXPLORATION_RATE,
    INITIAL_LEARNING_RATE,
    ConstantSchedule,
    ExponentialDecaySchedule,
    Schedule,
    StepDecaySchedule,
)


class AgentSettings(BaseModel):
    """Hyperparameters for freshly created agents."""

    initial_learning_rate: float = Field(
        default=INITIAL_LEARNING_RATE, description="Learning rate at iteration 0"
    )
    initial_exploration_rate: float = Field(
        default=INITIAL_EXPLORATION_RATE, description="Exploration rate at iteration 0"
    )
    seed: Optional[int] = Field(default=None, description="Random seed")

    @field_validator("initial_learning_rate", "initial_exploration_rate")
    @classmethod
    def validate_rate(cls, v: float) -> float:
        """Validate that a rate lies in [0, 1]."""
        if not 0.0 <= v <= 1.0:
            raise ValueError("rates must be between 0 and 1")
        return v


class ScheduleSettings(BaseModel):
    """Annealing schedule configuration."""

    kind: str = Field(default="step", description="Schedule type")
    decay: float = Field(default=0.9, description="Decay factor")
    step_size: int = Field(default=10, description="Iterations per step (step decay)")

    @field_validator("kind")
    @classmethod
    def validate_kind(cls, v: str) -> str:
        """Validate schedule type."""
        valid_kinds = ["step", "exponential", "constant"]
        if v not in valid_kinds:
            raise ValueError(f"kind must be one of: {', '.join(valid_kinds)}")
        return v

    @field_validator("decay")
    @classmethod
    def validate_decay(cls, v: float) -> float:
        """Validate decay factor."""
        if not 0.0 < v <= 1.0:
            raise ValueError("decay must be in (0, 1]")
        return v

    @field_validator("step_size")
    @classmethod
    def validate_step_size(cls, v: int) -> int:
        """Validate step size."""
        if v < 1:
            raise ValueError("step_size must be at least 1")
        return v

    def build(self) -> Schedule:
        """Create the schedule object."""
        if self.kind == "step":
            return StepDecaySchedule(decay=self.decay, step_size=self.step_size)
        if self.kind == "exponential":
            return ExponentialDecaySchedule(decay=self.decay)
        return ConstantSchedule()


class TrainingSettings(BaseModel):
    """Self-play training configuration."""

    iterations: int = Field(default=1000, description="Number of training episodes")
    output_directory: str = Field(default=".", description="Where save files are written")
    progress_bar: bool = Field(default=False, description="Show a progress bar")
    eval_interval: int = Field(default=100, description="Episodes between metric records")

    @field_validator("iterations")
    @classmethod
    def validate_iterations(cls, v: int) -> int:
        """Validate episode count."""
        if v < 0:
            raise ValueError("iterations must be non-negative")
        if v > 2**32 - 1:
            raise ValueError("iterations must fit in an unsigned 32-bit counter")
        return v

    @field_validator("eval_interval")
    @classmethod
    def validate_eval_interval(cls, v: int) -> int:
        """Validate metric interval."""
        if v < 1:
            raise ValueError("eval_interval must be at least 1")
        return v


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR"]
        if v.upper() not in valid_levels:
            raise ValueError(f"level must be one of: {', '.join(valid_levels)}")
        return v.upper()


class TicTacToeConfig(BaseModel):
    """Main td-tictactoe configuration."""

    agent: AgentSettings = Field(default_factory=AgentSettings, description="Agent settings")
    learning_schedule: ScheduleSettings = Field(
        default_factory=lambda: ScheduleSettings(kind="step", decay=0.9, step_size=20),
        description="Learning-rate schedule",
    )
    exploration_schedule: ScheduleSettings = Field(
        default_factory=lambda: ScheduleSettings(kind="step", decay=0.9, step_size=10),
        description="Exploration-rate schedule",
    )
    training: TrainingSettings = Field(
        default_factory=TrainingSettings, description="Training settings"
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings, description="Logging settings"
    )

    def resolve_env_vars(self) -> "TicTacToeConfig":
        """Resolve environment variables in configuration values."""
        config_dict = self.model_dump()
        resolved_dict = _resolve_env_vars_recursive(config_dict)
        return TicTacToeConfig(**resolved_dict)

    def get_output_dir(self) -> Path:
        """Get the training output directory as a Path object."""
        return Path(self.training.output_directory).expanduser().resolve()


def _resolve_env_vars_recursive(obj: Any) -> Any:
    """Recursively resolve environment variables in configuration."""
    if isinstance(obj, dict):
        return {key: _resolve_env_vars_recursive(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_resolve_env_vars_recursive(item) for item in obj]
    elif isinstance(obj, str):
        return _resolve_env_var_string(obj)
    else:
        return obj


def _resolve_env_var_string(value: str) -> str:
    """Resolve ${VAR_NAME} or ${VAR_NAME:default} in a string."""
    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replace_var(match):
        var_name = match.group(1)
        default_value = match.group(2) if match.group(2) is not None else ""
        return os.getenv(var_name, default_value)

    return re.sub(pattern, replace_var, value)
