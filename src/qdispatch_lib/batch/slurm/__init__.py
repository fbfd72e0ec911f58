# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Slurm backend for qdispatch.

Submits wrapper scripts with `sbatch` (task arrays via `--array`), reads the
job identifier from the `Submitted batch job ...` acknowledgment, and checks
job liveness with `squeue -j`.
"""

from .slurm import Slurm

__all__ = ["Slurm"]
