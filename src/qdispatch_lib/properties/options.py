# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Resolved scheduler options of a single dispatch.

`SubmissionOptions` is produced by `OptionResolver` and never modified
afterwards. It keeps both the flat, ordered list of flag fragments passed
to the submission command and the structured view of how each abstract
option (`--mem`, `--gpu`, ...) was translated.
"""

import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


@dataclass(frozen=True)
class SubmissionOptions:
    """
    Immutable set of options passed to the batch system's submission command.
    """

    # Ordered flag fragments, e.g. ('-q all.q', '-l mem_free=4G,ram_free=4G').
    flags: tuple[str, ...] = ()

    # Abstract option name mapped to the flag fragment it resolved to.
    bindings: Mapping[str, str] = field(default_factory=dict)

    # Number of threads used by each task (reported in the accounting line).
    num_threads: int = 1

    # Whether the submission command blocks until the job finishes.
    sync: bool = False

    # Maximal number of tasks of an array job running concurrently.
    max_concurrent: int | None = None

    def __post_init__(self):
        object.__setattr__(self, "flags", tuple(self.flags))
        object.__setattr__(self, "bindings", MappingProxyType(dict(self.bindings)))

    def toArgs(self) -> list[str]:
        """
        Split the flag fragments into individual command-line arguments.
        """
        return [arg for flag in self.flags for arg in shlex.split(flag)]

    def __str__(self) -> str:
        return " ".join(self.flags)
