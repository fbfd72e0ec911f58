# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Submission of the wrapper script to the batch system.

`Submitter` runs the submission command built by the batch system backend,
appends its output to the transcript of the dispatch, and extracts the job
identifier from the acknowledgment. A failed submission, an acknowledgment
without an identifier, or one with several identifiers is fatal, except in
synchronous mode where the job has already run by the time the submission
command returns.
"""

from .submitter import Submitter

__all__ = ["Submitter"]
