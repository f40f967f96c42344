"""Configuration loading and management."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv

# Config directory names
PROJECT_DIR = ".phasetrace"
USER_DIR_NAME = ".phasetrace"

CONFIG_FILENAMES = ("config.yaml", "config.yml", "config.json")

ENV_TRACE_FILE = "PHASETRACE_TRACE"
ENV_TRACE_DIR = "PHASETRACE_TRACE_DIR"
ENV_DEBUG = "PHASETRACE_DEBUG"
ENV_JSON_LOGS = "PHASETRACE_LOG_JSON"


@dataclass(slots=True)
class TraceConfig:
    """Merged configuration from all sources.

    Priority: CLI args > env vars > project config > user config > defaults
    """

    # Output sink (exactly one must be set before a session starts)
    trace_file: str | None = None
    trace_dir: str | None = None

    # Trace records
    process_id: int = 1
    thread_id: int = 1
    resolve_paths: bool = False

    # Logging
    debug: bool = False
    json_logs: bool = False

    # Paths
    working_directory: str = ""


def find_project_root(start: Path | None = None) -> Path | None:
    """Find the project root by looking for .phasetrace/ or .git/."""
    current = start or Path.cwd()
    for parent in [current, *current.parents]:
        if (parent / PROJECT_DIR).exists():
            return parent
        if (parent / ".git").exists():
            return parent
    return None


def get_user_config_dir() -> Path:
    """Get the user-level config directory (~/.phasetrace/)."""
    return Path.home() / USER_DIR_NAME


def load_json_config(path: Path) -> dict[str, Any]:
    """Load a JSON config file, returning empty dict if not found."""
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return data if isinstance(data, dict) else {}
    except (json.JSONDecodeError, OSError):
        return {}


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load a YAML config file, returning empty dict if not found."""
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
        return data if isinstance(data, dict) else {}
    except (yaml.YAMLError, OSError):
        return {}


def load_config_dir(directory: Path) -> dict[str, Any]:
    """Load the first config file present in *directory*."""
    for name in CONFIG_FILENAMES:
        path = directory / name
        if path.exists():
            if path.suffix == ".json":
                return load_json_config(path)
            return load_yaml_config(path)
    return {}


def _env_flag(value: str) -> bool:
    return value.lower() in ("1", "true", "yes")


def load_config(
    *,
    cli_args: dict[str, Any] | None = None,
    working_dir: str | None = None,
) -> TraceConfig:
    """Load configuration from all sources with proper priority.

    Priority: CLI args > env vars > project config > user config > defaults
    """
    load_dotenv(find_dotenv(usecwd=True))
    config = TraceConfig()
    cli_args = cli_args or {}

    config.working_directory = working_dir or os.getcwd()

    # 1. User-level config (~/.phasetrace/config.yaml)
    user_config = load_config_dir(get_user_config_dir())
    _apply_sink(config, user_config)
    _apply_dict(config, user_config)

    # 2. Project-level config (.phasetrace/config.yaml)
    project_root = find_project_root(Path(config.working_directory))
    if project_root:
        project_config = load_config_dir(project_root / PROJECT_DIR)
        _apply_sink(config, project_config)
        _apply_dict(config, project_config)

    # 3. Environment variables
    env: dict[str, Any] = {}
    if trace_file := os.environ.get(ENV_TRACE_FILE):
        env["trace_file"] = trace_file
    if trace_dir := os.environ.get(ENV_TRACE_DIR):
        env["trace_dir"] = trace_dir
    if debug := os.environ.get(ENV_DEBUG):
        env["debug"] = _env_flag(debug)
    if json_logs := os.environ.get(ENV_JSON_LOGS):
        env["json_logs"] = _env_flag(json_logs)
    _apply_sink(config, env)
    _apply_dict(config, env)

    # 4. CLI args (highest priority)
    _apply_sink(config, cli_args)
    _apply_dict(config, cli_args)

    return config


def _apply_sink(config: TraceConfig, data: dict[str, Any]) -> None:
    """A higher-priority source selecting one sink replaces the other."""
    if data.get("trace_file") or data.get("traceFile") or data.get("trace"):
        config.trace_dir = None
    elif data.get("trace_dir") or data.get("traceDir"):
        config.trace_file = None


def _apply_dict(config: TraceConfig, data: dict[str, Any]) -> None:
    """Apply dictionary values to config, only for known fields."""
    field_map = {
        "trace_file": "trace_file",
        "trace_dir": "trace_dir",
        "process_id": "process_id",
        "thread_id": "thread_id",
        "resolve_paths": "resolve_paths",
        "debug": "debug",
        "json_logs": "json_logs",
        "working_directory": "working_directory",
        # Aliases from JSON config
        "trace": "trace_file",
        "traceFile": "trace_file",
        "traceDir": "trace_dir",
        "processId": "process_id",
        "threadId": "thread_id",
        "resolvePaths": "resolve_paths",
        "jsonLogs": "json_logs",
    }
    for key, attr in field_map.items():
        if key in data and data[key] is not None:
            setattr(config, attr, data[key])
