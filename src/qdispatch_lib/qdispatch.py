# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from qdispatch_lib.dispatch.cli import dispatch

__version__ = "0.1.0"

cli = dispatch
