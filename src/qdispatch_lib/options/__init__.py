# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Resolution of the qdispatch command line into scheduler options.

- `InvocationParser` splits the raw command line into scheduler flags,
  abstract options (`--mem 4G`), the array range, the log path,
  and the command to execute.

- `QueueConfig` parses the site-specific queue config file which maps
  abstract options onto scheduler flags.

- `OptionResolver` combines both (or the built-in policy of the batch system
  when no queue config file is available) into `SubmissionOptions`.
"""

from .parser import Invocation, InvocationParser
from .queue_config import QueueConfig
from .resolver import OptionResolver

__all__ = [
    "Invocation",
    "InvocationParser",
    "OptionResolver",
    "QueueConfig",
]
