"""Configuration loading and saving."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from td_tictactoe.config.models import TicTacToeConfig
from td_tictactoe.exceptions import ConfigurationError

PROJECT_CONFIG_NAME = "td_tictactoe.yaml"


def load_config(config_path: Optional[Path] = None) -> TicTacToeConfig:
    """Load configuration.

    Values from the file override the built-in defaults. Without an
    explicit path, ``./td_tictactoe.yaml`` is used when it exists.

    Args:
        config_path: Explicit path to a configuration file

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If configuration is invalid or cannot be loaded
    """
    path = config_path or _get_project_config_path()
    if config_path is not None and not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    config_data: Dict[str, Any] = {}
    if path is not None and path.exists():
        config_data = _load_yaml_file(path)

    try:
        config = TicTacToeConfig(**config_data)
        return config.resolve_env_vars()
    except ValidationError as e:
        raise ConfigurationError(f"Configuration validation failed: {e}") from e


def save_config(config: TicTacToeConfig, config_path: Path) -> None:
    """Save configuration to a YAML file.

    Raises:
        ConfigurationError: If configuration cannot be saved
    """
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_dict = config.model_dump(exclude_none=True, mode="json")
        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False, indent=2)
    except OSError as e:
        raise ConfigurationError(
            f"Failed to save configuration to {config_path}: {e}"
        ) from e


def _get_project_config_path() -> Optional[Path]:
    """Get the project configuration file path, if present."""
    path = Path.cwd() / PROJECT_CONFIG_NAME
    return path if path.exists() else None


def _load_yaml_file(file_path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file.

    Raises:
        ConfigurationError: If file cannot be loaded or parsed
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {file_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to read {file_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Configuration file must contain a YAML object, got {type(data).__name__}"
        )
    return data
