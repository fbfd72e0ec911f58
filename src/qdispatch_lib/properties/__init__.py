# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Value types describing a dispatch.

This package contains the immutable data structures passed between the
stages of a dispatch: the array range and the job specification built from
the command line, the resolved submission options, the files of each task,
the per-task and aggregate results, and the enumerations of job states.
"""
