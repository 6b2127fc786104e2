"""Visualization utilities for self-play training metrics."""

import logging
from typing import Dict, List, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np

logger = logging.getLogger(__name__)

# (title, y label, [(series label, values)]) per panel
Panel = Tuple[str, str, Sequence[Tuple[str, Sequence[float]]]]


def _panels(metrics: Dict[str, List]) -> List[Panel]:
    return [
        (
            "Outcome Rates",
            "Rate",
            [
                ("X Win Rate", metrics["x_win_rates"]),
                ("O Win Rate", metrics["o_win_rates"]),
                ("Draw Rate", metrics["draw_rates"]),
            ],
        ),
        (
            "Annealed Rates",
            "Rate",
            [
                ("Exploration", metrics["exploration_rates"]),
                ("Learning", metrics["learning_rates"]),
            ],
        ),
        (
            "Value Table Size",
            "States",
            [("X", metrics["x_table_sizes"]), ("O", metrics["o_table_sizes"])],
        ),
        (
            "Cumulative Outcomes",
            "Games",
            [
                ("X Wins", np.cumsum(metrics["x_wins"])),
                ("O Wins", np.cumsum(metrics["o_wins"])),
                ("Draws", np.cumsum(metrics["draws"])),
            ],
        ),
    ]


def plot_learning_curves(
    metrics: Dict[str, List],
    title: str = "Self-Play Training Progress",
    save_path: str | None = None,
) -> None:
    """
    Plot learning curves from training metrics.

    Args:
        metrics: Dictionary of metrics from TrainingMetrics.to_dict()
        title: Plot title
        save_path: Path to save figure (if None, display only)

    Raises:
        ValueError: If no metrics were recorded
    """
    episodes = metrics["episodes"]
    if not episodes:
        raise ValueError("No training metrics to plot")

    fig, axes = plt.subplots(2, 2, figsize=(14, 10))
    fig.suptitle(title, fontsize=16, fontweight="bold")

    for ax, (panel_title, ylabel, series) in zip(axes.flat, _panels(metrics)):
        for label, values in series:
            ax.plot(episodes, values, label=label, linewidth=2)
        ax.set_title(panel_title)
        ax.set_xlabel("Episode")
        ax.set_ylabel(ylabel)
        ax.legend()
        ax.grid(True, alpha=0.3)

    # rates share a fixed scale
    for ax in axes[0]:
        ax.set_ylim([-0.05, 1.05])

    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")
        logger.info("Saved plot to %s", save_path)
    else:
        plt.show()
    plt.close(fig)
