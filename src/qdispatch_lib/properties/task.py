# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class TaskArtifacts:
    """
    Files through which a single task of a dispatch reports back.
    """

    # Index of the task; None for a non-array job.
    index: int | None

    # Marker created by the wrapper once the task finished.
    marker: Path

    # Log file written by the wrapper.
    log: Path

    def label(self) -> str:
        """Human-readable name of the task."""
        return "job" if self.index is None else f"task {self.index}"
