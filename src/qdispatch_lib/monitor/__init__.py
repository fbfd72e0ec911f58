# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Waiting for submitted jobs to finish.

`CompletionMonitor` polls for the marker files created by the wrapper script,
with the intervals given by `BackoffPolicy`, and detects jobs that vanished
from the batch system without finishing.
"""

from .backoff import BackoffPolicy
from .monitor import CompletionMonitor

__all__ = ["BackoffPolicy", "CompletionMonitor"]
