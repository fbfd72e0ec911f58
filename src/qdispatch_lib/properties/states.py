# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Enumerations of job states as seen by qdispatch.

`JobPresence` is the answer of a batch system to a liveness check.
`MonitorState` is the state of the completion monitor.
`DispatchState` is the state of a whole dispatch stored in its dispatch record.
"""

from enum import Enum
from typing import Self

from qdispatch_lib.core.error import QDError


class JobPresence(Enum):
    """
    Whether a job is still known to the batch system.
    """

    # The job is queued, running, or held by the batch system.
    PRESENT = 1
    # The batch system does not know the job anymore.
    ABSENT = 2
    # The batch system could not be queried.
    UNKNOWN = 3

    def __str__(self):
        return self.name.lower()


class MonitorState(Enum):
    """
    State of the completion monitor.
    """

    SUBMITTED = 1
    WAITING = 2
    LIVENESS_CHECK_FAILED = 3
    ALL_MARKERS_SEEN = 4
    DONE = 5

    def __str__(self):
        return self.name.lower()


class DispatchState(Enum):
    """
    State of a dispatch as recorded in its dispatch record.
    """

    SUBMITTED = 1
    SUCCEEDED = 2
    FAILED = 3
    LOST = 4

    def __str__(self):
        return self.name.lower()

    @classmethod
    def fromStr(cls, s: str) -> Self:
        """
        Convert a string to the corresponding DispatchState enum variant.

        Args:
            s (str): String representation of the state (case-insensitive).

        Returns:
            DispatchState variant.

        Raises:
            QDError if the string corresponds to no DispatchState.
        """
        try:
            return cls[s.upper()]
        except KeyError:
            raise QDError(f"Could not recognize a dispatch state '{s}'.")
