"""Configuration loading for commitgraph (.commitgraph.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".commitgraph.yml"
DEFAULT_MAX_COMMITS = 300


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class GraphConfig:
    """Graph loading settings from .commitgraph.yml."""

    root: Path
    max_commits: int = DEFAULT_MAX_COMMITS
    branches: Optional[List[str]] = None
    hide_remotes: List[str] = field(default_factory=list)
    show_uncommitted_changes: bool = True
    show_stashes: bool = True


def load_config(config_path: Path) -> GraphConfig:
    """Load configuration from disk; a missing file yields the defaults."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return GraphConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    graph_data = _as_dict(data.get("graph"))
    config = GraphConfig(root=root)
    if not graph_data:
        return config

    max_commits = _as_int(graph_data.get("max_commits"))
    if max_commits is not None:
        if max_commits < 1:
            raise ConfigError("graph.max_commits must be a positive integer")
        config.max_commits = max_commits

    if graph_data.get("branches") is not None:
        config.branches = _as_str_list(graph_data.get("branches"))
    config.hide_remotes = _as_str_list(graph_data.get("hide_remotes"))

    show_uncommitted = _as_bool(graph_data.get("show_uncommitted_changes"))
    if show_uncommitted is not None:
        config.show_uncommitted_changes = show_uncommitted
    show_stashes = _as_bool(graph_data.get("show_stashes"))
    if show_stashes is not None:
        config.show_stashes = show_stashes

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []
