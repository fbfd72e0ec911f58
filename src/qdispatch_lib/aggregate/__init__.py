# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Collection of the exit statuses of finished tasks.
"""

from .aggregator import ResultAggregator

__all__ = ["ResultAggregator"]
