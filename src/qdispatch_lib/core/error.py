# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Exception types used throughout qdispatch.

Structural errors (usage, configuration, submission) abort a dispatch before
any monitoring starts. Lost jobs and undeterminable task statuses abort it
during monitoring or result collection. A task that merely finished with a
non-zero status is not an exception; it is reported through `JobResult`.

Each exception carries the exit code of the qdispatch process.
"""

from pathlib import Path

from qdispatch_lib.core.config import CFG


class QDError(Exception):
    """Common exception type for all qdispatch errors."""

    exit_code = CFG.exit_codes.default


class QDUsageError(QDError):
    """Raised when qdispatch is invoked with malformed arguments."""

    pass


class QDConfigError(QDError):
    """Raised when the queue config is unparseable or does not describe an option."""

    pass


class QDSubmissionError(QDError):
    """
    Raised when the submission command fails or its acknowledgment
    cannot be interpreted.
    """

    def __init__(self, message: str, transcript: Path | None = None):
        super().__init__(message)
        self.transcript = transcript


class QDLostJobError(QDError):
    """
    Raised when a job disappeared from the batch system without creating
    its marker and its log does not indicate a successful completion.
    """

    pass


class QDStatusUnknownError(QDError):
    """Raised when the exit status of a task cannot be read from its log."""

    pass
