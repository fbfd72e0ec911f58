# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Configuration system for qdispatch.

This module defines dataclasses representing the configurable aspects of
qdispatch itself: environment variables, polling and retry timings of the
completion monitor and result aggregator, the shape of the generated wrapper
script, the on-disk layout of a submission, and exit codes.

Note that this is not the queue config file (`conf/queue.conf`) translating
abstract options into scheduler flags; that one is handled by
`qdispatch_lib.options.queue_config`.

The `Config` class loads user configuration from a TOML file (if available)
and provides a globally accessible `CFG` instance.
"""

import os
import tomllib
from dataclasses import dataclass, field, fields, is_dataclass
from pathlib import Path
from typing import Any, Self


@dataclass
class FileSuffixes:
    """File suffixes used by qdispatch."""

    # Suffix of the generated wrapper scripts.
    script: str = ".sh"
    # Suffix of the dispatch record files.
    dispatch_info: str = ".qdinfo"


@dataclass
class EnvironmentVariables:
    """Environment variable names used by qdispatch."""

    # Enables qdispatch debug mode.
    debug_mode: str = "QDISPATCH_DEBUG"
    # Name of the batch system to submit to.
    batch_system: str = "QDISPATCH_BATCH_SYSTEM"
    # Path to the qdispatch settings file.
    config: str = "QDISPATCH_CONFIG"


@dataclass
class MonitorSettings:
    """Settings for CompletionMonitor."""

    # Initial interval (in seconds) between checks for a marker file.
    initial_wait: float = 0.1
    # Factor by which the interval grows after each check.
    growth_factor: float = 1.2
    # Maximal interval (in seconds) between checks for a marker file.
    max_wait: float = 3.0
    # Ask the batch system whether the job still exists on every n-th check.
    liveness_check_period: int = 10
    # Waits (in seconds) before each staleness kick once the job disappeared from the queue.
    vanished_job_waits: list[float] = field(default_factory=lambda: [3.0, 7.0, 60.0])
    # Time (in seconds) the kick sentinel is kept in place during the later kicks.
    kick_hold: float = 1.0


@dataclass
class AggregatorSettings:
    """Settings for ResultAggregator."""

    # Number of trailing log lines searched for the exit status record.
    tail_lines: int = 10
    # Waits (in seconds) between successive attempts to read the exit status.
    status_waits: list[float] = field(
        default_factory=lambda: [
            0.1,
            0.2,
            0.2,
            0.3,
            0.5,
            0.5,
            1.0,
            2.0,
            5.0,
            5.0,
            5.0,
            10.0,
            25.0,
        ]
    )


@dataclass
class WrapperSettings:
    """Settings for the generated wrapper script."""

    # Interpreter of the wrapper script.
    shell: str = "/bin/bash"
    # Environment bootstrap file sourced (if present) before running the command.
    bootstrap_file: str = "path.sh"
    # Exit status of a command killed by SIGKILL (128 + 9), typically by the OOM killer.
    killed_status: int = 137
    # Status the wrapper exits with when the command was killed, marking the task as rerunnable.
    retryable_status: int = 100


@dataclass
class LayoutSettings:
    """Settings for the on-disk layout of a submission."""

    # Name of the directory holding the queue transcript, wrapper script, and markers.
    queue_dir: str = "q"
    # Names of log directories whose sibling is used as the queue directory.
    log_dir_names: list[str] = field(default_factory=lambda: ["log", "LOG"])
    # Prefix of the marker files.
    marker_prefix: str = "done"
    # Name of the sentinel file used to refresh a stale view of the queue directory.
    kick_file: str = ".kick"
    # Time (in seconds) to wait after creating a queue directory so that shared storage catches up.
    queue_dir_settle_wait: float = 5.0
    # Queue config file used when no `--config` option is given.
    default_queue_config: str = "conf/queue.conf"


@dataclass
class DateFormats:
    """Date and time format strings."""

    # Standard date format used by qdispatch.
    standard: str = "%Y-%m-%d %H:%M:%S"


@dataclass
class ExitCodes:
    """Exit codes of the qdispatch process."""

    # Returned on usage, configuration, submission errors and on task failures.
    default: int = 1
    # Returned on an unexpected or unhandled error.
    unexpected_error: int = 1


@dataclass
class Config:
    """Main configuration for qdispatch."""

    suffixes: FileSuffixes = field(default_factory=FileSuffixes)
    env_vars: EnvironmentVariables = field(default_factory=EnvironmentVariables)
    monitor: MonitorSettings = field(default_factory=MonitorSettings)
    aggregator: AggregatorSettings = field(default_factory=AggregatorSettings)
    wrapper: WrapperSettings = field(default_factory=WrapperSettings)
    layout: LayoutSettings = field(default_factory=LayoutSettings)
    date_formats: DateFormats = field(default_factory=DateFormats)
    exit_codes: ExitCodes = field(default_factory=ExitCodes)

    # Name of the qdispatch binary.
    binary_name: str = "qdispatch"

    @classmethod
    def load(cls, config_path: Path | None = None) -> Self:
        """
        Load configuration from TOML file or use defaults.

        Args:
            config_path: Explicit path to config file. If None, searches standard locations.

        Returns:
            Config instance with loaded or default values.
        """
        if config_path is None:
            config_path = Config._get_config_path()

        try:
            if config_path and config_path.exists():
                with config_path.open("rb") as f:
                    config_data = tomllib.load(f)
                return _dict_to_dataclass(cls, config_data)
        except Exception as e:
            raise ValueError(f"Could not read qdispatch config '{config_path}': {e}.")

        # no config found - use defaults
        return cls()

    @staticmethod
    def _get_config_path() -> Path | None:
        """
        Search for config file in standard locations (XDG compliant).
        Returns the first existing config file, or None.
        """
        config_locations: list[Path | None] = [
            # 1. Explicit environment variable (highest priority)
            Path(env_path) if (env_path := os.getenv("QDISPATCH_CONFIG")) else None,
            # 2. Current working directory (for development/override)
            Path.cwd() / "qdispatch_config.toml",
            # 3. XDG config home (standard user config location)
            Path(os.getenv("XDG_CONFIG_HOME", Path.home() / ".config"))
            / "qdispatch"
            / "config.toml",
        ]

        for path in config_locations:
            if path and path.is_file():
                return path

        return None


def _dict_to_dataclass(cls, data: dict[str, Any]):
    """
    Recursively convert a dictionary to a dataclass instance.
    Handles nested dataclasses properly.
    """
    if not is_dataclass(cls):
        return data

    field_values = {}
    for field_info in fields(cls):
        field_name = field_info.name
        field_type = field_info.type

        if field_name in data:
            value = data[field_name]
            if is_dataclass(field_type) and isinstance(value, dict):
                field_values[field_name] = _dict_to_dataclass(field_type, value)
            else:
                field_values[field_name] = value

    return cls(**field_values)


# Global configuration for qdispatch.
CFG = Config.load()
