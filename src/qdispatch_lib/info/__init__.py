# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Dispatch record stored in the queue directory.

`DispatchInfo` is written as YAML next to the wrapper script after the job
is submitted and updated with the final state once its result is known.
"""

from .info import DispatchInfo

__all__ = ["DispatchInfo"]
