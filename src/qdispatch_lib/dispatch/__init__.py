# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Orchestration of a single dispatch.

`DispatcherFactory` turns the raw command line into a validated job and
resolved scheduler options, selects the batch system, and builds a
`Dispatcher`.

`Dispatcher` drives the whole lifecycle: directory preparation, wrapper
generation, submission, completion monitoring and result collection,
keeping the dispatch record in the queue directory up to date.

The `dispatch` click command is the `qdispatch` entry point.
"""

from .dispatcher import Dispatcher
from .factory import DispatcherFactory

__all__ = ["Dispatcher", "DispatcherFactory"]
