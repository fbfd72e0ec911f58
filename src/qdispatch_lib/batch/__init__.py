# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Batch-system support for qdispatch.

This module groups the components that allow qdispatch to submit to and
observe batch schedulers: the abstract interface with its registry, and the
concrete backends for Grid Engine and Slurm.
"""

# import so that these batch systems are registered but do not export them from here
# registration order is the order in which availability is probed
from .sge import SGE as _SGE
from .slurm import Slurm as _Slurm

_SGE, _Slurm
