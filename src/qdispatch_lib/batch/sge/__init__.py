# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Grid Engine backend for qdispatch.

Submits wrapper scripts with `qsub` (task arrays via `-t`), reads the job
identifier from the `Your job ... has been submitted` acknowledgment, and
checks job liveness with `qstat -j`.
"""

from .sge import SGE

__all__ = ["SGE"]
