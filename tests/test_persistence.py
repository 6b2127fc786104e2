"""Tests for saving and loading agents."""

from pathlib import Path

import numpy as np
import pytest

from td_tictactoe.agents.td_agent import TDAgent
from td_tictactoe.annealing import ConstantSchedule, StepDecaySchedule
from td_tictactoe.board import Piece
from td_tictactoe.exceptions import (
    InvalidFileError,
    UnableToReadError,
    UnableToSaveError,
)
from td_tictactoe.persistence import load_agent, save_agent
from td_tictactoe.train import train


def _write_archive(path: Path, **overrides) -> None:
    fields = {
        "piece": np.array(1, dtype=np.int8),
        "state_keys": np.zeros((1, 9), dtype=np.int8),
        "state_values": np.array([0.5], dtype=np.float64),
        "initial_learning_rate": np.array(0.75, dtype=np.float64),
        "initial_exploration_rate": np.array(0.2, dtype=np.float64),
        "iteration": np.array(3, dtype=np.uint32),
    }
    fields.update(overrides)
    fields = {k: v for k, v in fields.items() if v is not None}
    with open(path, "wb") as f:
        np.savez_compressed(f, **fields)


@pytest.fixture
def trained_agent(tmp_path: Path) -> TDAgent:
    agent_x = TDAgent(Piece.X, initial_learning_rate=0.6, initial_exploration_rate=0.3, seed=5)
    agent_o = TDAgent(Piece.O, seed=6)
    train(agent_x, agent_o, 25, tmp_path / "training")
    return agent_o


class TestSaveAndLoad:
    """Test the save/load round trip."""

    def test_round_trip(self, tmp_path: Path, trained_agent: TDAgent) -> None:
        """Test that side, table, rates and iteration survive."""
        path = tmp_path / "agent.ttr"
        save_agent(trained_agent, path)
        loaded = load_agent(path)

        assert loaded.piece == trained_agent.piece
        assert loaded.value_table == trained_agent.value_table
        assert len(loaded.value_table) > 0
        assert loaded.initial_learning_rate == trained_agent.initial_learning_rate
        assert loaded.initial_exploration_rate == trained_agent.initial_exploration_rate
        assert loaded.iteration == trained_agent.iteration == 24

    def test_keeps_file_name(self, tmp_path: Path) -> None:
        """Test that no extension is appended to the target."""
        path = tmp_path / "player.ttr"
        assert save_agent(TDAgent(Piece.X), path) == path
        assert path.exists()
        assert not (tmp_path / "player.ttr.npz").exists()

    def test_schedules_are_supplied_on_load(self, tmp_path: Path) -> None:
        """Test that the caller's schedules are attached to the loaded agent."""
        path = tmp_path / "agent.ttr"
        save_agent(TDAgent(Piece.O, initial_learning_rate=0.8), path)

        learning = ConstantSchedule()
        exploration = StepDecaySchedule(decay=0.5, step_size=1)
        loaded = load_agent(path, learning, exploration)

        assert loaded.learning_schedule is learning
        assert loaded.exploration_schedule is exploration
        assert loaded.learning_rate == 0.8

    def test_loaded_agent_keeps_learning(self, tmp_path: Path, trained_agent: TDAgent) -> None:
        """Test that a restored agent can play and update."""
        path = tmp_path / "agent.ttr"
        save_agent(trained_agent, path)
        loaded = load_agent(path, seed=0)
        before = len(loaded.value_table)
        loaded.select_move((Piece.X,) + (Piece.EMPTY,) * 8)
        assert len(loaded.value_table) >= before


class TestSaveErrors:
    """Test failures while saving."""

    def test_missing_directory(self, tmp_path: Path) -> None:
        """Test that an uncreatable target raises InvalidFileError."""
        with pytest.raises(InvalidFileError):
            save_agent(TDAgent(Piece.X), tmp_path / "missing" / "agent.ttr")

    def test_iteration_out_of_range(self, tmp_path: Path) -> None:
        """Test that an iteration beyond uint32 cannot be encoded."""
        agent = TDAgent(Piece.X)
        agent.update_iteration(2**32)
        with pytest.raises(UnableToSaveError):
            save_agent(agent, tmp_path / "agent.ttr")


class TestLoadErrors:
    """Test failures while loading."""

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test that a missing file raises InvalidFileError."""
        with pytest.raises(InvalidFileError):
            load_agent(tmp_path / "nope.ttr")

    def test_garbage_file(self, tmp_path: Path) -> None:
        """Test that arbitrary bytes fail to decode."""
        path = tmp_path / "agent.ttr"
        path.write_bytes(b"definitely not an agent")
        with pytest.raises(UnableToReadError):
            load_agent(path)

    def test_empty_file(self, tmp_path: Path) -> None:
        """Test that an empty file fails to decode."""
        path = tmp_path / "agent.ttr"
        path.write_bytes(b"")
        with pytest.raises(UnableToReadError):
            load_agent(path)

    def test_truncated_file(self, tmp_path: Path) -> None:
        """Test that a truncated archive fails to decode."""
        path = tmp_path / "agent.ttr"
        _write_archive(path)
        data = path.read_bytes()
        path.write_bytes(data[: len(data) // 2])
        with pytest.raises(UnableToReadError):
            load_agent(path)

    def test_plain_array_file(self, tmp_path: Path) -> None:
        """Test that a single .npy array is not accepted."""
        path = tmp_path / "agent.ttr"
        with open(path, "wb") as f:
            np.save(f, np.zeros(3))
        with pytest.raises(UnableToReadError):
            load_agent(path)

    def test_missing_field(self, tmp_path: Path) -> None:
        """Test that an archive without all fields is rejected."""
        path = tmp_path / "agent.ttr"
        _write_archive(path, iteration=None)
        with pytest.raises(UnableToReadError):
            load_agent(path)

    def test_valid_archive_loads(self, tmp_path: Path) -> None:
        """Test that the hand-written archive helper produces a loadable file."""
        path = tmp_path / "agent.ttr"
        _write_archive(path)
        agent = load_agent(path)
        assert agent.piece == Piece.X
        assert agent.iteration == 3
        assert len(agent.value_table) == 1

    @pytest.mark.parametrize(
        "overrides",
        [
            {"piece": np.array(0, dtype=np.int8)},
            {"piece": np.array(1, dtype=np.int64)},
            {"state_keys": np.full((1, 9), 5, dtype=np.int8)},
            {"state_keys": np.zeros((1, 8), dtype=np.int8)},
            {"state_values": np.array([1.5], dtype=np.float64)},
            {"state_values": np.array([0.5], dtype=np.float32)},
            {"iteration": np.array([3], dtype=np.uint32)},
            {"initial_learning_rate": np.array(1.5, dtype=np.float64)},
            {"initial_exploration_rate": np.array(-0.2, dtype=np.float64)},
            {"state_keys": np.zeros((2, 9), dtype=np.int8),
             "state_values": np.array([0.5, 0.5], dtype=np.float64)},
        ],
    )
    def test_incompatible_layout(self, tmp_path: Path, overrides) -> None:
        """Test that mismatched fields fail instead of being misread."""
        path = tmp_path / "agent.ttr"
        _write_archive(path, **overrides)
        with pytest.raises(UnableToReadError):
            load_agent(path)
