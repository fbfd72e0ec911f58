# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
General utility functions for the qdispatch library.

This module provides helpers for YAML I/O, reading the tail of log files,
quoting command-line tokens for the wrapper script, and normalizing
option names.
"""

import re
from collections import deque
from collections.abc import Iterable
from functools import lru_cache
from pathlib import Path

import yaml

from .logger import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def load_yaml_dumper() -> type[yaml.Dumper]:
    """Return the fastest available YAML dumper (CDumper if possible)."""
    try:
        from yaml import CDumper as Dumper  # type: ignore[attr-defined]

        logger.debug("Loaded YAML CDumper.")
    except ImportError:
        from yaml import Dumper

        logger.debug("Loaded default YAML dumper.")
    return Dumper


@lru_cache(maxsize=1)
def load_yaml_loader() -> type[yaml.SafeLoader]:
    """Return the fastest available safe YAML loader (CSafeLoader if possible)."""
    try:
        from yaml import (
            CSafeLoader as SafeLoader,  # ty: ignore[possibly-missing-import]
        )

        logger.debug("Loaded YAML CLoader.")
    except ImportError:
        from yaml import SafeLoader

        logger.debug("Loaded default YAML loader.")

    return SafeLoader


def tail_lines(file: Path, n: int) -> list[str]:
    """
    Return the last `n` lines of a text file without trailing newlines.

    Undecodable bytes are replaced, since the file usually contains
    arbitrary output of the executed command.

    Args:
        file (Path): The file to read.
        n (int): Maximal number of lines to return.

    Returns:
        list[str]: The last lines of the file (fewer if the file is shorter).

    Raises:
        OSError: If the file cannot be read.
    """
    with file.open("r", errors="replace") as f:
        return [line.rstrip("\n") for line in deque(f, maxlen=n)]


def quote_token(token: str) -> str:
    """
    Quote a single command-line token for inclusion in the wrapper script.

    Tokens without whitespace are kept as they are, so that shell constructs
    passed as separate tokens (e.g., `|`) are still interpreted by the shell.
    Tokens containing whitespace are double-quoted, unless they contain
    a double quote, in which case they are single-quoted.

    Args:
        token (str): The token to quote.

    Returns:
        str: The quoted token.
    """
    if re.fullmatch(r"\S+", token):
        return token
    if '"' in token:
        return f"'{token}'"
    return f'"{token}"'


def join_command(tokens: Iterable[str]) -> str:
    """
    Join command-line tokens into a single command string using `quote_token`.
    """
    return " ".join(quote_token(t) for t in tokens)


def to_snake_case(s: str) -> str:
    """
    Convert a dashed option name to snake_case.

    Args:
        s (str): The input string, e.g., `max-jobs-run`.

    Returns:
        str: The converted string, e.g., `max_jobs_run`.
    """
    return s.replace("-", "_")
