"""Tests for td-tictactoe CLI commands."""

from pathlib import Path
from typing import List

import pytest
from click.testing import CliRunner

from td_tictactoe.agents.random import RandomAgent
from td_tictactoe.agents.td_agent import TDAgent
from td_tictactoe.board import Move, Piece
from td_tictactoe.cli.main import cli
from td_tictactoe.exceptions import ConfigurationError
from td_tictactoe.persistence import load_agent, save_agent
from td_tictactoe.train import PLAYER_O_FILE, PLAYER_X_FILE


class TestCLI:
    """Test CLI commands."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def test_cli_help(self):
        """Test CLI help output."""
        result = self.runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "td-tictactoe" in result.output
        assert "train" in result.output
        assert "play" in result.output
        assert "evaluate" in result.output

    def test_train_zero_iterations(self, tmp_path: Path):
        """Test that training writes both save files."""
        result = self.runner.invoke(cli, ["train", "-i", "0", "-o", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert "Training iterations: 0" in result.output
        assert "Training Summary" in result.output
        assert load_agent(tmp_path / PLAYER_X_FILE).piece == Piece.X
        assert load_agent(tmp_path / PLAYER_O_FILE).piece == Piece.O

    def test_train_uses_config_file(self, tmp_path: Path):
        """Test that hyperparameters come from the configuration file."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text(
            "agent:\n"
            "  initial_learning_rate: 0.5\n"
            "  seed: 11\n"
            "training:\n"
            "  iterations: 20\n"
            "  eval_interval: 10\n"
        )
        out = tmp_path / "models"
        plot = tmp_path / "curves.png"

        result = self.runner.invoke(
            cli, ["-c", str(config_path), "train", "-o", str(out), "--plot", str(plot)]
        )

        assert result.exit_code == 0, result.output
        assert "Training iterations: 20" in result.output
        loaded = load_agent(out / PLAYER_X_FILE)
        assert loaded.initial_learning_rate == 0.5
        assert loaded.iteration == 19
        assert plot.exists()

    def test_train_plot_without_metrics(self, tmp_path: Path):
        """Test that plotting is skipped when nothing was recorded."""
        plot = tmp_path / "curves.png"
        result = self.runner.invoke(
            cli, ["train", "-i", "0", "-o", str(tmp_path), "--plot", str(plot)]
        )
        assert result.exit_code == 0
        assert "Not enough episodes" in result.output
        assert not plot.exists()

    def test_train_rejects_negative_iterations(self, tmp_path: Path):
        """Test that the iteration count must be non-negative."""
        result = self.runner.invoke(cli, ["train", "-i", "-3", "-o", str(tmp_path)])
        assert result.exit_code != 0

    def test_invalid_config(self, tmp_path: Path):
        """Test that a bad configuration file fails the command."""
        config_path = tmp_path / "config.yaml"
        config_path.write_text("agent:\n  initial_exploration_rate: 2\n")

        result = self.runner.invoke(cli, ["-c", str(config_path), "train", "-i", "0"])

        assert result.exit_code == 1
        assert isinstance(result.exception, ConfigurationError)

    def test_evaluate_after_training(self, tmp_path: Path):
        """Test evaluation of freshly trained agents."""
        train_result = self.runner.invoke(cli, ["train", "-i", "30", "-o", str(tmp_path)])
        assert train_result.exit_code == 0

        result = self.runner.invoke(
            cli, ["evaluate", "-t", str(tmp_path), "-g", "10", "--seed", "0"]
        )

        assert result.exit_code == 0, result.output
        assert "Trained vs Random (10 games)" in result.output

    def test_evaluate_missing_files(self, tmp_path: Path):
        """Test that evaluation needs trained agents."""
        result = self.runner.invoke(cli, ["evaluate", "-t", str(tmp_path)])
        assert result.exit_code == 1
        assert result.exception is not None

    def test_evaluate_opponent_seed_differs(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        """Test that the random opponent does not share the trained agent's seed."""
        seeds: List[int] = []

        class RecordingRandomAgent(RandomAgent):
            def __init__(self, piece: Piece, seed=None) -> None:
                seeds.append(seed)
                super().__init__(piece, seed)

        monkeypatch.setattr("td_tictactoe.cli.main.RandomAgent", RecordingRandomAgent)
        self.runner.invoke(cli, ["train", "-i", "5", "-o", str(tmp_path)])

        result = self.runner.invoke(
            cli, ["evaluate", "-t", str(tmp_path), "-g", "3", "--seed", "5"]
        )

        assert result.exit_code == 0, result.output
        assert seeds == [6, 6]


class TestPlayCommand:
    """Test interactive play."""

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def test_two_player_win(self, tmp_path: Path):
        """Test a two player game that X wins along the top row."""
        moves = "2\na1\nb1\na2\nb2\na3\nn\n"
        result = self.runner.invoke(cli, ["play", "-t", str(tmp_path)], input=moves)

        assert result.exit_code == 0, result.output
        assert "Welcome to td-tictactoe!" in result.output
        assert "Congratulations Player X, You Win!" in result.output
        assert "Thank you for playing!" in result.output

    def test_two_player_occupied_cell(self, tmp_path: Path):
        """Test that an occupied cell is rejected and the turn repeats."""
        moves = "2\na1\na1\nq\n"
        result = self.runner.invoke(cli, ["play", "-t", str(tmp_path)], input=moves)

        assert result.exit_code == 0
        assert "Sorry, that space is occupied" in result.output
        assert "Player O, please enter your move" in result.output

    def test_two_player_draw(self, tmp_path: Path):
        """Test a drawn two player game."""
        # X O X / X O O / O X X
        moves = "2\na1\na2\na3\nb2\nb1\nb3\nc2\nc1\nc3\nn\n"
        result = self.runner.invoke(cli, ["play", "-t", str(tmp_path)], input=moves)

        assert result.exit_code == 0, result.output
        assert "No Winner!" in result.output

    def test_single_player_without_trained_agent(self, tmp_path: Path):
        """Test that a missing save file falls back to a fresh agent."""
        result = self.runner.invoke(cli, ["play", "-t", str(tmp_path)], input="1\nX\nq\n")

        assert result.exit_code == 0, result.output
        assert "Couldn't find trained automatic player, creating a new one" in result.output
        assert "Thank you for playing!" in result.output

    def test_single_player_invalid_move(self, tmp_path: Path):
        """Test that malformed moves are rejected."""
        result = self.runner.invoke(
            cli, ["play", "-t", str(tmp_path)], input="1\nX\nz9\nq\n"
        )

        assert result.exit_code == 0
        assert "Sorry, invalid move, try again" in result.output

    def test_single_player_computer_opens_as_x(self, tmp_path: Path):
        """Test that the trained X agent moves first when the human plays O."""
        self.runner.invoke(cli, ["train", "-i", "10", "-o", str(tmp_path)])
        result = self.runner.invoke(cli, ["play", "-t", str(tmp_path)], input="1\nO\nq\n")

        assert result.exit_code == 0, result.output
        assert "Computer plays" in result.output
        assert "Couldn't find trained automatic player" not in result.output


def _script_computer(monkeypatch: pytest.MonkeyPatch, moves: List[Move]) -> None:
    remaining = list(moves)
    monkeypatch.setattr(TDAgent, "select_move", lambda self, state: remaining.pop(0))


class TestSinglePlayerLearning:
    """Test that single player games teach and re-save the computer."""

    # X: a1, b1; O: a2, b2. X then wins with c1.
    PRIOR_O = (
        Piece.X, Piece.O, Piece.EMPTY,
        Piece.X, Piece.O, Piece.EMPTY,
        Piece.EMPTY, Piece.EMPTY, Piece.EMPTY,
    )

    def setup_method(self):
        """Set up test environment."""
        self.runner = CliRunner()

    def _save_computer(self, trained_dir: Path) -> Path:
        path = trained_dir / PLAYER_O_FILE
        save_agent(TDAgent(Piece.O, initial_exploration_rate=0.0), path)
        return path

    def test_human_win_teaches_computer(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        """Test that the computer's prior board loses value and is saved."""
        path = self._save_computer(tmp_path)
        _script_computer(monkeypatch, [(0, 1), (1, 1)])

        result = self.runner.invoke(
            cli, ["play", "-t", str(tmp_path)], input="1\nX\na1\nb1\nc1\nq\n"
        )

        assert result.exit_code == 0, result.output
        assert "Congratulations Player! You Win!" in result.output
        reloaded = load_agent(path)
        assert self.PRIOR_O in reloaded.value_table
        assert reloaded.value_table.evaluate(self.PRIOR_O) < 0.5

    def test_computer_win(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        """Test a game the computer wins along the middle row."""
        path = self._save_computer(tmp_path)
        _script_computer(monkeypatch, [(1, 0), (1, 1), (1, 2)])

        result = self.runner.invoke(
            cli, ["play", "-t", str(tmp_path)], input="1\nX\na1\na2\nc3\nq\n"
        )

        assert result.exit_code == 0, result.output
        assert "Oh No! You have been defeated by a computer!" in result.output
        assert load_agent(path).piece == Piece.O

    def test_draw(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        """Test a drawn game against the computer."""
        # X O X / X O O / O X X
        path = self._save_computer(tmp_path)
        _script_computer(monkeypatch, [(0, 1), (1, 1), (2, 0), (1, 2)])

        result = self.runner.invoke(
            cli, ["play", "-t", str(tmp_path)], input="1\nX\na1\na3\nb1\nc2\nc3\nq\n"
        )

        assert result.exit_code == 0, result.output
        assert "Sorry, it's a tie." in result.output
        assert len(load_agent(path).value_table) == 0
