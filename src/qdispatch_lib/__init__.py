# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core implementation of the qdispatch command-line tool.

This package runs a command, optionally as an array of indexed tasks, on
a batch scheduling system and reliably determines whether and how each task
finished. It defines the abstractions for batch systems, concrete backends
(Grid Engine and Slurm), the translation of generic options into scheduler
flags, the generated wrapper script, and the monitoring of a shared
filesystem that may present a stale view of the job's progress.
"""

from .qdispatch import __version__, cli

__all__ = [
    "__version__",
    "cli",
    "aggregate",
    "batch",
    "core",
    "dispatch",
    "info",
    "monitor",
    "options",
    "properties",
    "submit",
    "wrapper",
]
