# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import re
from pathlib import Path

from qdispatch_lib.core.common import tail_lines
from qdispatch_lib.core.config import CFG
from qdispatch_lib.core.error import QDStatusUnknownError
from qdispatch_lib.core.logger import get_logger
from qdispatch_lib.core.retryer import Retryer
from qdispatch_lib.properties.result import JobResult, TaskResult
from qdispatch_lib.properties.task import TaskArtifacts

logger = get_logger(__name__)


class ResultAggregator:
    """
    Reads the exit status of every task from its log and combines them
    into a single `JobResult`.

    The status record may not be visible right after the marker appeared
    (delayed writes, a stale filesystem view), so reading is retried
    following the configured schedule.
    """

    # status record appended by the wrapper script
    STATUS_PATTERN = re.compile(r"finished .* with status (-?\d+)", re.IGNORECASE)

    def __init__(self, tasks: list[TaskArtifacts], log_pattern: str):
        """
        Initialize the aggregator.

        Args:
            tasks (list[TaskArtifacts]): Markers and logs of all tasks of the job.
            log_pattern (str): Log path pattern reported for failed array jobs.
        """
        self._tasks = tasks
        self._log_pattern = log_pattern

    def collect(self) -> JobResult:
        """
        Read the exit statuses of all tasks.

        Returns:
            JobResult: Statuses of all tasks.

        Raises:
            QDStatusUnknownError: If the status of any task cannot be read
                even after all attempts.
        """
        results = []
        for task in self._tasks:
            status = Retryer(
                ResultAggregator.readStatus,
                task.log,
                wait_seconds=CFG.aggregator.status_waits,
                retry_on=(QDStatusUnknownError,),
            ).run()
            logger.debug(f"{task.label().capitalize()} finished with status {status}.")
            results.append(TaskResult(index=task.index, log=task.log, status=status))

        return JobResult(tasks=tuple(results), log_pattern=self._log_pattern)

    @staticmethod
    def readStatus(log: Path) -> int:
        """
        Extract the exit status from the last lines of a log.

        Output of the command that was delayed may follow the status record,
        so several trailing lines are searched and the last record wins.

        Raises:
            QDStatusUnknownError: If the log does not exist or contains no status record.
        """
        try:
            lines = tail_lines(log, CFG.aggregator.tail_lines)
        except FileNotFoundError as e:
            raise QDStatusUnknownError(f"Log-file '{log}' does not exist.") from e
        except OSError as e:
            raise QDStatusUnknownError(f"Could not read log-file '{log}': {e}.") from e

        for line in reversed(lines):
            if match := ResultAggregator.STATUS_PATTERN.search(line):
                return int(match.group(1))

        raise QDStatusUnknownError(
            f"The last lines of log-file '{log}' do not indicate the return status as expected."
        )
