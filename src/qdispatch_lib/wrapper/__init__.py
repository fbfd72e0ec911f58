# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Generation of the wrapper script executed by the batch system.

- `QueueLayout` computes where the transcript, the wrapper script,
  the markers and the dispatch record of a submission live, and creates
  the required directories.

- `WrapperGenerator` removes the artifacts of a previous run and writes
  the wrapper script with its accounting and completion signaling.
"""

from .generator import WrapperGenerator
from .layout import QueueLayout

__all__ = [
    "QueueLayout",
    "WrapperGenerator",
]
