# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Index range of an array job.

This module defines `ArrayRange`, the parsed form of the `NAME=START:END`
(or `NAME=N`) token that turns a dispatch into an array of indexed tasks.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Self

from qdispatch_lib.core.error import QDUsageError

# NAME=START:END
_RANGE_PATTERN = re.compile(r"^([A-Za-z_]\w*)=(\d+):(\d+)$")
# NAME=N
_SINGLE_PATTERN = re.compile(r"^([A-Za-z_]\w*)=(\d+)$")


@dataclass(frozen=True)
class ArrayRange:
    """
    Inclusive range of task indices of an array job together with the name
    of the placeholder substituted by the task index.
    """

    # Placeholder substituted by the task index (e.g., `JOB`).
    var_name: str

    # First task index.
    start: int

    # Last task index (inclusive).
    end: int

    def __post_init__(self):
        if self.start > self.end:
            raise QDUsageError(
                f"Invalid job range '{self.var_name}={self.start}:{self.end}': start is larger than end."
            )

    def __len__(self) -> int:
        return self.end - self.start + 1

    def __iter__(self) -> Iterator[int]:
        return iter(range(self.start, self.end + 1))

    def __str__(self) -> str:
        return f"{self.var_name}={self.start}:{self.end}"

    @classmethod
    def fromStr(cls, token: str) -> Self | None:
        """
        Parse an array range token.

        Args:
            token (str): Token in the form `NAME=START:END` or `NAME=N`.

        Returns:
            ArrayRange | None: The parsed range or None if the token is not an array range.

        Raises:
            QDUsageError: If the token is a range with start larger than end.
        """
        if match := _RANGE_PATTERN.match(token):
            return cls(match.group(1), int(match.group(2)), int(match.group(3)))

        if match := _SINGLE_PATTERN.match(token):
            index = int(match.group(2))
            return cls(match.group(1), index, index)

        return None

    @staticmethod
    def looksLikeRange(token: str) -> bool:
        """
        Check whether a token resembles an array range without being a valid one
        (e.g., `JOB=1:n`).
        """
        return re.match(r"^.+=.*:.*$", token) is not None
