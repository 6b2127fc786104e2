"""Learning-rate and exploration-rate annealing schedules.

A schedule is any callable ``(initial_rate, iteration) -> rate``. Agents
receive their schedules at construction time, so the decay curve can be
swapped without touching the agent or the trainer.
"""

from dataclasses import dataclass
from typing import Protocol

INITIAL_LEARNING_RATE = 0.75
INITIAL_EXPLORATION_RATE = 0.2


class Schedule(Protocol):
    """Protocol for annealing schedules."""

    def __call__(self, initial_rate: float, iteration: int) -> float:
        ...


@dataclass(frozen=True)
class StepDecaySchedule:
    """``initial_rate * decay ** (iteration // step_size)``."""

    decay: float = 0.9
    step_size: int = 10

    def __post_init__(self) -> None:
        if self.step_size < 1:
            raise ValueError("step_size must be at least 1")
        if not 0.0 <= self.decay <= 1.0:
            raise ValueError("decay must be in [0, 1]")

    def __call__(self, initial_rate: float, iteration: int) -> float:
        return initial_rate * self.decay ** (iteration // self.step_size)


@dataclass(frozen=True)
class ExponentialDecaySchedule:
    """``initial_rate * decay ** iteration``."""

    decay: float = 0.995

    def __post_init__(self) -> None:
        if not 0.0 <= self.decay <= 1.0:
            raise ValueError("decay must be in [0, 1]")

    def __call__(self, initial_rate: float, iteration: int) -> float:
        return initial_rate * self.decay ** iteration


@dataclass(frozen=True)
class ConstantSchedule:
    """Keeps the initial rate for every iteration."""

    def __call__(self, initial_rate: float, iteration: int) -> float:
        return initial_rate


def learning_rate_schedule() -> StepDecaySchedule:
    """Default learning-rate schedule: 10% drop every 20 iterations."""
    return StepDecaySchedule(decay=0.9, step_size=20)


def exploration_rate_schedule() -> StepDecaySchedule:
    """Default exploration-rate schedule: 10% drop every 10 iterations."""
    return StepDecaySchedule(decay=0.9, step_size=10)
