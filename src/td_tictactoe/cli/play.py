"""Interactive games against a trained agent or another human."""

import logging
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from td_tictactoe.agents.td_agent import TDAgent
from td_tictactoe.annealing import (
    INITIAL_EXPLORATION_RATE,
    INITIAL_LEARNING_RATE,
    exploration_rate_schedule,
    learning_rate_schedule,
)
from td_tictactoe.board import EMPTY_STATE, Board, Piece, to_human_move
from td_tictactoe.exceptions import (
    CellOccupiedError,
    InvalidMoveError,
    PersistenceError,
)
from td_tictactoe.persistence import load_agent, save_agent
from td_tictactoe.train import PLAYER_O_FILE, PLAYER_X_FILE

logger = logging.getLogger(__name__)

QUIT_WORDS = {"q", "quit"}


def agent_file(trained_dir: Path, piece: Piece) -> Path:
    """Save file for the agent playing ``piece``."""
    return trained_dir / (PLAYER_X_FILE if piece == Piece.X else PLAYER_O_FILE)


def load_opponent(console: Console, trained_dir: Path, piece: Piece) -> TDAgent:
    """Load the trained agent for ``piece``, or create a fresh one."""
    try:
        return load_agent(
            agent_file(trained_dir, piece),
            learning_rate_schedule(),
            exploration_rate_schedule(),
        )
    except PersistenceError as e:
        logger.debug("Falling back to a fresh agent: %s", e)
        console.print("[yellow]Couldn't find trained automatic player, creating a new one[/yellow]")
        return TDAgent(
            piece,
            INITIAL_LEARNING_RATE,
            INITIAL_EXPLORATION_RATE,
            learning_rate_schedule(),
            exploration_rate_schedule(),
        )


def _ask_move(prompt: str) -> str:
    return click.prompt(prompt, type=str).strip()


def play_against_computer(console: Console, board: Board, human: Piece, computer: TDAgent) -> Optional[str]:
    """
    Play one game against ``computer``.

    Returns:
        "human", "computer", "draw", or None if the human quit
    """
    board.clear()
    # Board right after the computer's last move, shown to it if the human wins
    prior = EMPTY_STATE

    if computer.piece == Piece.X:
        move = computer.select_move(board.get_compact_state())
        board.apply_move(*move, computer.piece)
        console.print(f"Computer plays [bold]{to_human_move(move)}[/bold]")
        prior = board.get_compact_state()

    while True:
        console.print(board.render())
        choice = _ask_move("Please select your move (q to quit)")
        if choice.lower() in QUIT_WORDS:
            return None
        try:
            board.player_move(choice, human)
        except InvalidMoveError:
            console.print("[red]Sorry, invalid move, try again[/red]")
            continue
        except CellOccupiedError:
            console.print("[red]Sorry, that space is occupied[/red]")
            continue

        if board.check_winner() is not None:
            console.print(board.render())
            console.print("[green]Congratulations Player! You Win![/green]")
            computer.show_losing_state(prior, board.get_compact_state())
            return "human"
        if board.is_full():
            console.print(board.render())
            console.print("Sorry, it's a tie.")
            return "draw"

        move = computer.select_move(board.get_compact_state())
        board.apply_move(*move, computer.piece)
        console.print(f"Computer plays [bold]{to_human_move(move)}[/bold]")

        if board.check_winner() is not None:
            console.print(board.render())
            console.print("[red]Oh No! You have been defeated by a computer! :-([/red]")
            return "computer"
        if board.is_full():
            console.print(board.render())
            console.print("Sorry, it's a tie.")
            return "draw"
        prior = board.get_compact_state()


def single_player(console: Console, trained_dir: Path) -> None:
    """Play games against the trained agents until the human quits."""
    board = Board()
    while True:
        side = click.prompt(
            "Would you like to play as X or O? (q to quit)",
            type=click.Choice(["X", "O", "Q"], case_sensitive=False),
        ).upper()
        if side == "Q":
            return
        human = Piece.X if side == "X" else Piece.O
        computer = load_opponent(console, trained_dir, human.opponent)

        result = play_against_computer(console, board, human, computer)
        if result is None:
            return

        try:
            save_agent(computer, agent_file(trained_dir, computer.piece))
        except PersistenceError as e:
            console.print(f"[yellow]Couldn't save automated player state:[/yellow] {e}")


def two_player(console: Console) -> bool:
    """
    Play one game between two humans.

    Returns:
        True if another game is wanted
    """
    board = Board()
    current = Piece.X

    while True:
        console.print(board.render())
        choice = _ask_move(f"Player {current.symbol}, please enter your move (q to quit)")
        if choice.lower() in QUIT_WORDS:
            return False
        try:
            board.player_move(choice, current)
        except InvalidMoveError:
            console.print("[red]Sorry, invalid move[/red]")
            continue
        except CellOccupiedError:
            console.print("[red]Sorry, that space is occupied[/red]")
            continue

        winner = board.check_winner()
        if winner is not None:
            console.print(board.render())
            console.print(f"[green]Congratulations Player {winner.symbol}, You Win![/green]")
            break
        if board.is_full():
            console.print(board.render())
            console.print("No Winner!")
            break
        current = current.opponent

    return click.confirm("Would you like to play again?", default=False)
