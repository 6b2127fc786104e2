"""Saving and restoring learned agents.

A ``.ttr`` file is a compressed numpy archive holding:
    piece                     int8      side marker (1 = X, -1 = O)
    state_keys                int8      (n, 9) table keys
    state_values              float64   (n,) table values
    initial_learning_rate     float64
    initial_exploration_rate  float64
    iteration                 uint32

Annealing schedules are policy, not state, and are supplied when loading.
"""

import logging
import zipfile
import zlib
from pathlib import Path
from typing import Dict, Optional

import numpy as np

from td_tictactoe.agents.td_agent import TDAgent
from td_tictactoe.agents.value_table import ValueTable
from td_tictactoe.annealing import Schedule
from td_tictactoe.board import NUM_CELLS, GameState, Piece
from td_tictactoe.exceptions import (
    InvalidFileError,
    UnableToReadError,
    UnableToSaveError,
)

logger = logging.getLogger(__name__)

SAVE_EXTENSION = ".ttr"

_FIELDS = (
    "piece",
    "state_keys",
    "state_values",
    "initial_learning_rate",
    "initial_exploration_rate",
    "iteration",
)
_MAX_ITERATION = int(np.iinfo(np.uint32).max)
_VALID_MARKERS = {int(p) for p in Piece}


def save_agent(agent: TDAgent, path: str | Path) -> Path:
    """
    Save an agent's learned table and hyperparameters.

    Args:
        agent: Agent to save
        path: Target file (written as-is, no extension is appended)

    Returns:
        Path of the written file

    Raises:
        InvalidFileError: If the target cannot be created
        UnableToSaveError: If encoding or writing fails
    """
    path = Path(path)
    try:
        arrays = _encode(agent)
    except (ValueError, TypeError, OverflowError) as e:
        raise UnableToSaveError(f"Failed to encode {agent.piece.name} agent: {e}") from e

    try:
        f = open(path, "wb")
    except OSError as e:
        raise InvalidFileError(f"Cannot create {path}: {e}") from e

    try:
        with f:
            np.savez_compressed(f, **arrays)
    except (OSError, ValueError) as e:
        raise UnableToSaveError(f"Failed to write {path}: {e}") from e

    logger.info("Saved %s agent (%d states) to %s", agent.piece.name, len(agent.value_table), path)
    return path


def load_agent(
    path: str | Path,
    learning_schedule: Optional[Schedule] = None,
    exploration_schedule: Optional[Schedule] = None,
    seed: int | None = None,
) -> TDAgent:
    """
    Restore an agent saved with :func:`save_agent`.

    Args:
        path: Save file
        learning_schedule: Learning-rate schedule for the restored agent
        exploration_schedule: Exploration-rate schedule for the restored agent
        seed: Seed for the restored agent's random generator

    Returns:
        Restored TDAgent

    Raises:
        InvalidFileError: If the file cannot be opened
        UnableToReadError: If the contents cannot be decoded
    """
    path = Path(path)
    try:
        f = open(path, "rb")
    except OSError as e:
        raise InvalidFileError(f"Cannot open {path}: {e}") from e

    try:
        with f:
            archive = np.load(f, allow_pickle=False)
            if not hasattr(archive, "files"):
                raise UnableToReadError(f"{path} is not an agent archive")
            with archive:
                arrays = {name: archive[name] for name in _FIELDS}
    except (OSError, ValueError, KeyError, EOFError, zipfile.BadZipFile, zlib.error) as e:
        raise UnableToReadError(f"Failed to decode {path}: {e}") from e

    agent = _decode(arrays, path, learning_schedule, exploration_schedule, seed)
    logger.info("Loaded %s agent (%d states) from %s", agent.piece.name, len(agent.value_table), path)
    return agent


def _encode(agent: TDAgent) -> Dict[str, np.ndarray]:
    if not 0 <= agent.iteration <= _MAX_ITERATION:
        raise OverflowError(f"iteration {agent.iteration} does not fit in uint32")

    entries = list(agent.value_table.items())
    keys = np.array([state for state, _ in entries], dtype=np.int8).reshape(len(entries), NUM_CELLS)
    values = np.array([value for _, value in entries], dtype=np.float64)
    return {
        "piece": np.array(int(agent.piece), dtype=np.int8),
        "state_keys": keys,
        "state_values": values,
        "initial_learning_rate": np.array(agent.initial_learning_rate, dtype=np.float64),
        "initial_exploration_rate": np.array(agent.initial_exploration_rate, dtype=np.float64),
        "iteration": np.array(agent.iteration, dtype=np.uint32),
    }


def _decode(
    arrays: Dict[str, np.ndarray],
    path: Path,
    learning_schedule: Optional[Schedule],
    exploration_schedule: Optional[Schedule],
    seed: int | None,
) -> TDAgent:
    keys = arrays["state_keys"]
    values = arrays["state_values"]
    expected = {
        "piece": np.int8,
        "state_keys": np.int8,
        "state_values": np.float64,
        "initial_learning_rate": np.float64,
        "initial_exploration_rate": np.float64,
        "iteration": np.uint32,
    }
    for name, dtype in expected.items():
        if arrays[name].dtype != dtype:
            raise UnableToReadError(f"{path}: field '{name}' has dtype {arrays[name].dtype}")
    for name in ("piece", "initial_learning_rate", "initial_exploration_rate", "iteration"):
        if arrays[name].shape != ():
            raise UnableToReadError(f"{path}: field '{name}' is not a scalar")
    if keys.ndim != 2 or keys.shape[1] != NUM_CELLS or values.shape != (keys.shape[0],):
        raise UnableToReadError(f"{path}: table shape {keys.shape} / {values.shape} is invalid")

    piece_value = int(arrays["piece"])
    if piece_value not in (int(Piece.X), int(Piece.O)):
        raise UnableToReadError(f"{path}: invalid side marker {piece_value}")
    if not set(np.unique(keys).tolist()) <= _VALID_MARKERS:
        raise UnableToReadError(f"{path}: table contains invalid cell markers")
    if values.size and (not np.all(np.isfinite(values)) or values.min() < 0.0 or values.max() > 1.0):
        raise UnableToReadError(f"{path}: table values fall outside [0, 1]")
    for name in ("initial_learning_rate", "initial_exploration_rate"):
        if not 0.0 <= float(arrays[name]) <= 1.0:
            raise UnableToReadError(f"{path}: {name} falls outside [0, 1]")

    piece = Piece(piece_value)
    table: Dict[GameState, float] = {
        tuple(Piece(int(c)) for c in row): float(v) for row, v in zip(keys, values)
    }
    if len(table) != keys.shape[0]:
        raise UnableToReadError(f"{path}: table contains duplicate states")

    return TDAgent(
        piece,
        initial_learning_rate=float(arrays["initial_learning_rate"]),
        initial_exploration_rate=float(arrays["initial_exploration_rate"]),
        learning_schedule=learning_schedule,
        exploration_schedule=exploration_schedule,
        seed=seed,
        value_table=ValueTable(piece, table),
        iteration=int(arrays["iteration"]),
    )
