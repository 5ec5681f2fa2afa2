# PathResolver.py
"""
Path resolution relative to the entry script.

Models, config and logs live in directories next to main.py.
"""
from dataclasses import dataclass
from pathlib import Path

CONFIG_FILE_NAME = "number_explorer_config.json"


@dataclass(frozen=True)
class ResolvedPaths:
    """Immutable container for all resolved application paths."""
    root_dir: Path
    models_dir: Path
    config_dir: Path
    logs_dir: Path


class PathResolver:
    """
    Resolves application paths next to the entry script.

    Args:
        script_path: Path of the entry script (main.py)
    """

    def __init__(self, script_path: Path):
        root_dir = script_path.resolve().parent
        self._paths = ResolvedPaths(
            root_dir=root_dir,
            models_dir=root_dir / "models",
            config_dir=root_dir / "config",
            logs_dir=root_dir / "logs",
        )

    @property
    def paths(self) -> ResolvedPaths:
        return self._paths

    def get_config_path(self, config_name: str = CONFIG_FILE_NAME) -> Path:
        return self._paths.config_dir / config_name

    def ensure_local_dir_structure(self) -> None:
        """Ensures directories models, config and logs exist."""
        self._paths.models_dir.mkdir(parents=True, exist_ok=True)
        self._paths.config_dir.mkdir(parents=True, exist_ok=True)
        self._paths.logs_dir.mkdir(parents=True, exist_ok=True)
