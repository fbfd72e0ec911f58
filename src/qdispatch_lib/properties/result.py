# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Outcome of a dispatch.

`TaskResult` holds the exit status of one task as recorded in its log,
`JobResult` aggregates all tasks of a dispatch into a single verdict.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class TaskResult:
    """Exit status of a single task."""

    # Index of the task; None for a non-array job.
    index: int | None

    # Log file the status was read from.
    log: Path

    # Exit status of the executed command.
    status: int

    def succeeded(self) -> bool:
        return self.status == 0


@dataclass(frozen=True)
class JobResult:
    """
    Aggregated result of all tasks of a dispatch.
    """

    # Results of the individual tasks in the order of their indices.
    tasks: tuple[TaskResult, ...]

    # Log path pattern (placeholder replaced by `*` for array jobs).
    log_pattern: str

    @property
    def num_tasks(self) -> int:
        return len(self.tasks)

    @property
    def num_failed(self) -> int:
        return sum(not t.succeeded() for t in self.tasks)

    @property
    def succeeded(self) -> bool:
        """True if every task finished with status 0."""
        return self.num_failed == 0

    def failedTasks(self) -> list[TaskResult]:
        """Return results of the tasks that finished with a non-zero status."""
        return [t for t in self.tasks if not t.succeeded()]

    def failedLogs(self) -> list[Path]:
        """Return paths to the logs of the failed tasks."""
        return [t.log for t in self.failedTasks()]

    def describe(self) -> str:
        """
        Return a short human-readable verdict.

        A single failed task is reported with its status and log path.
        For several tasks, only the number of failures and the log path
        pattern are reported.
        """
        if self.succeeded:
            if self.num_tasks == 1:
                return "Job finished successfully."
            return f"All {self.num_tasks} tasks finished successfully."

        if self.num_tasks == 1:
            task = self.tasks[0]
            message = f"Job failed with status {task.status}, log is in '{task.log}'."
            if "JOB" in str(task.log):
                message += "\nProbably you forgot to put JOB=1:$nj in your script."
            return message

        return f"{self.num_failed} / {self.num_tasks} failed, log is in '{self.log_pattern}'."
