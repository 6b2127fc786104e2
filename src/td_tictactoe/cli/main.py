"""Main CLI entry point for td-tictactoe."""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from td_tictactoe.agents.random import RandomAgent
from td_tictactoe.agents.td_agent import TDAgent
from td_tictactoe.board import Piece
from td_tictactoe.cli.play import agent_file, single_player, two_player
from td_tictactoe.config import TicTacToeConfig, load_config
from td_tictactoe.evaluate import evaluate_agents
from td_tictactoe.exceptions import TicTacToeError
from td_tictactoe.log import configure_logging
from td_tictactoe.persistence import load_agent
from td_tictactoe.train import TrainingMetrics, train

console = Console()


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Optional[Path]) -> None:
    """td-tictactoe: a Tic-Tac-Toe agent that learns by self-play.

    \b
    Examples:
        td-tictactoe train -i 5000 -o models -p   # Train both sides
        td-tictactoe play -t models               # Play against them
        td-tictactoe evaluate -t models           # Trained agents vs random
    """
    ctx.ensure_object(dict)
    config = load_config(config_path)
    configure_logging("DEBUG" if verbose else config.logging.level, console=Console(stderr=True))
    ctx.obj["config"] = config


@cli.command("train")
@click.option("--iterations", "-i", type=click.IntRange(min=0), help="Number of training episodes")
@click.option(
    "--output-directory",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    help="Where the trained player data will be saved to",
)
@click.option("--progress-bar", "-p", is_flag=True, help="Show a progress bar")
@click.option("--plot", type=click.Path(dir_okay=False, path_type=Path), help="Save learning curves")
@click.pass_context
def train_command(
    ctx: click.Context,
    iterations: Optional[int],
    output_directory: Optional[Path],
    progress_bar: bool,
    plot: Optional[Path],
) -> None:
    """Train an X and an O agent against each other."""
    config: TicTacToeConfig = ctx.obj["config"]
    iterations = config.training.iterations if iterations is None else iterations
    output_directory = output_directory or config.get_output_dir()
    progress_bar = progress_bar or config.training.progress_bar

    agents = [_new_agent(config, piece) for piece in (Piece.X, Piece.O)]
    metrics = TrainingMetrics()

    console.print(f"Training iterations: {iterations}")
    path_x, path_o = train(
        agents[0],
        agents[1],
        iterations,
        output_directory,
        progress_bar=progress_bar,
        metrics=metrics,
        eval_interval=config.training.eval_interval,
    )

    table = Table(title="Training Summary")
    table.add_column("Side")
    table.add_column("States", justify="right")
    table.add_column("Save file")
    table.add_row("X", str(len(agents[0].value_table)), str(path_x))
    table.add_row("O", str(len(agents[1].value_table)), str(path_o))
    console.print(table)

    if plot is not None:
        if metrics.episodes:
            from td_tictactoe.visualize import plot_learning_curves

            plot_learning_curves(metrics.to_dict(), save_path=str(plot))
        else:
            console.print("[yellow]Not enough episodes recorded to plot[/yellow]")


@cli.command("play")
@click.option(
    "--trained-directory",
    "-t",
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory containing the trained players",
)
def play_command(trained_directory: Optional[Path]) -> None:
    """Play Tic-Tac-Toe against a trained agent or a friend."""
    trained_directory = trained_directory or Path.cwd()
    console.print("Welcome to td-tictactoe!")
    while True:
        players = click.prompt("One or two players?", type=click.Choice(["1", "2"]))
        if players == "1":
            single_player(console, trained_directory)
            break
        if not two_player(console):
            break
    console.print("Thank you for playing!")


@cli.command("evaluate")
@click.option(
    "--trained-directory",
    "-t",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    required=True,
    help="Directory containing the trained players",
)
@click.option("--games", "-g", type=click.IntRange(min=1), default=100, show_default=True)
@click.option("--seed", type=int, default=None, help="Seed for the random opponent")
def evaluate_command(trained_directory: Path, games: int, seed: Optional[int]) -> None:
    """Play the trained agents greedily against a random opponent."""
    table = Table(title=f"Trained vs Random ({games} games)")
    table.add_column("Matchup")
    table.add_column("X wins", justify="right")
    table.add_column("O wins", justify="right")
    table.add_column("Draws", justify="right")
    table.add_column("Avg moves", justify="right")

    opponent_seed = None if seed is None else seed + 1
    for piece in (Piece.X, Piece.O):
        trained = load_agent(agent_file(trained_directory, piece), seed=seed)
        trained.set_training_mode(False)
        opponent = RandomAgent(piece.opponent, seed=opponent_seed)

        if piece == Piece.X:
            results = evaluate_agents(trained, opponent, "Trained", "Random", num_games=games)
        else:
            results = evaluate_agents(opponent, trained, "Random", "Trained", num_games=games)

        table.add_row(
            f"{results['x_name']} (X) vs {results['o_name']} (O)",
            f"{results['x_wins']} ({results['x_win_rate']:.1%})",
            f"{results['o_wins']} ({results['o_win_rate']:.1%})",
            f"{results['draws']} ({results['draw_rate']:.1%})",
            f"{results['avg_moves_per_game']:.1f}",
        )

    console.print(table)


def _new_agent(config: TicTacToeConfig, piece: Piece) -> TDAgent:
    seed = config.agent.seed
    if seed is not None and piece == Piece.O:
        seed += 1
    return TDAgent(
        piece,
        initial_learning_rate=config.agent.initial_learning_rate,
        initial_exploration_rate=config.agent.initial_exploration_rate,
        learning_schedule=config.learning_schedule.build(),
        exploration_schedule=config.exploration_schedule.build(),
        seed=seed,
    )


def main() -> None:
    """Main entry point for the CLI."""
    try:
        cli()
    except TicTacToeError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
