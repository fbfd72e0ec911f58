# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Abstractions for integrating qdispatch with batch scheduling systems.

- `BatchInterface`: the abstract interface every batch-system backend
  implements. It defines how to build the submission command, how to read
  the job identifier from the submission acknowledgment, how to check
  whether a job still exists, and how to translate the generic options
  (exported environment, parallel environment, synchronous submission,
  built-in resource policy) into scheduler flags.

- `BatchMeta`: a metaclass that registers available backends and selects
  one from an environment variable or by probing system availability.
  The `@batch_system` decorator registers implementations.
"""

from .interface import BatchInterface
from .meta import BatchMeta, batch_system

__all__ = [
    "BatchInterface",
    "BatchMeta",
    "batch_system",
]
