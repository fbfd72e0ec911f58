# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from typing import Self

from qdispatch_lib.core.config import CFG


class BackoffPolicy:
    """
    Geometrically growing interval between checks, capped at a ceiling.
    """

    def __init__(self, initial: float, factor: float, ceiling: float):
        self._initial = initial
        self._factor = factor
        self._ceiling = ceiling
        self._current = initial

    @classmethod
    def fromConfig(cls) -> Self:
        """Create the policy using the monitor settings of qdispatch."""
        return cls(
            CFG.monitor.initial_wait,
            CFG.monitor.growth_factor,
            CFG.monitor.max_wait,
        )

    def next(self) -> float:
        """
        Return the interval to wait now and grow the following one.
        """
        wait = self._current
        self._current = min(self._current * self._factor, self._ceiling)
        return wait

    def atCeiling(self) -> bool:
        """Return True if the interval stopped growing."""
        return self._current >= self._ceiling

    def reset(self) -> None:
        self._current = self._initial
