"""YAML configuration loader utility."""

from pathlib import Path
from typing import Any

import yaml


def load_config(path: str | Path) -> dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        path: Path to the YAML file.

    Returns:
        Dictionary containing the parsed configuration.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        yaml.YAMLError: If the file contains invalid YAML.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    return config if config is not None else {}


def load_roster_names(path: str | Path) -> list[str]:
    """
    Load team member names from a YAML roster file.

    Accepts either a top-level list or a mapping with a ``roster`` list:

        roster:
          - Jane Doe
          - John Roe

    Args:
        path: Path to the YAML roster file.

    Returns:
        List of raw (unnormalized) names, blanks removed.

    Raises:
        ValueError: If the file holds neither shape.
    """
    data: Any = load_config(path)
    if isinstance(data, dict):
        data = data.get("roster", [])
    if not isinstance(data, list):
        raise ValueError(f"Roster file {path} must contain a list of names")
    return [str(name).strip() for name in data if name is not None and str(name).strip()]
