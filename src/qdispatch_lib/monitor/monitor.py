# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import time
from collections.abc import Callable

from qdispatch_lib.batch.interface import BatchInterface
from qdispatch_lib.core.common import tail_lines
from qdispatch_lib.core.config import CFG
from qdispatch_lib.core.error import QDLostJobError
from qdispatch_lib.core.logger import get_logger
from qdispatch_lib.properties.states import JobPresence, MonitorState
from qdispatch_lib.properties.task import TaskArtifacts
from qdispatch_lib.wrapper.layout import QueueLayout

from .backoff import BackoffPolicy

logger = get_logger(__name__, show_time=True)


class CompletionMonitor:
    """
    Waits until every task of a submitted job created its marker.

    The markers live on a shared filesystem whose view may be stale, so the
    monitor polls with a growing interval, periodically refreshes its view
    of the queue directory, and every few polls asks the batch system
    whether the job still exists. A job that disappeared without creating
    its marker is given some more time before it is declared lost.
    """

    def __init__(
        self,
        batch_system: type[BatchInterface],
        job_id: str | None,
        tasks: list[TaskArtifacts],
        layout: QueueLayout,
        backoff: BackoffPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
        start_time: float | None = None,
    ):
        """
        Initialize the monitor.

        Args:
            batch_system (type[BatchInterface]): The batch system the job was submitted to.
            job_id (str | None): Identifier of the submitted job.
            tasks (list[TaskArtifacts]): Markers and logs of all tasks of the job.
            layout (QueueLayout): Layout of the dispatch.
            backoff (BackoffPolicy | None): Polling intervals. Defaults to the configured ones.
            sleep (Callable[[float], None]): Function used for waiting.
            start_time (float | None): Timestamp the dispatch started at. Logs modified
                before it are not trusted. Defaults to now.
        """
        self._batch_system = batch_system
        self._job_id = job_id
        self._tasks = tasks
        self._layout = layout
        self._backoff = backoff or BackoffPolicy.fromConfig()
        self._sleep = sleep
        self._start = time.time() if start_time is None else start_time
        self._polls = 0
        self.state = MonitorState.SUBMITTED

    def wait(self) -> None:
        """
        Block until the markers of all tasks are present, then remove them.

        Raises:
            QDLostJobError: If the job disappeared from the batch system without
                creating a marker and its log does not show a successful finish.
        """
        self.state = MonitorState.WAITING
        logger.debug(f"Waiting for {len(self._tasks)} marker(s) of job '{self._job_id}'.")

        for task in self._tasks:
            self._waitFor(task)

        self.state = MonitorState.ALL_MARKERS_SEEN
        logger.debug(f"All markers of job '{self._job_id}' are present.")

        self.cleanup()
        self.state = MonitorState.DONE

    def cleanup(self) -> None:
        """
        Remove the markers of all tasks and the kick sentinel.
        """
        for task in self._tasks:
            task.marker.unlink(missing_ok=True)
        self._layout.kick.unlink(missing_ok=True)

    def refreshStaleView(self, hold: float | None = None) -> None:
        """
        Modify and list the queue directory so that a stale network
        filesystem client revalidates its cached view of it.

        Args:
            hold (float | None): If None, the kick sentinel is toggled (created if
                missing, removed otherwise). Otherwise the sentinel is created,
                kept for `hold` seconds, and removed.
        """
        kick = self._layout.kick
        try:
            if hold is None:
                if kick.exists():
                    kick.unlink()
                else:
                    kick.touch()
            else:
                kick.touch()
                if hold > 0:
                    self._sleep(hold)
                kick.unlink(missing_ok=True)

            list(self._layout.queue_dir.iterdir())
        except OSError as e:
            logger.debug(f"Could not refresh the view of '{self._layout.queue_dir}': {e}.")

    def _waitFor(self, task: TaskArtifacts) -> None:
        self._backoff.reset()

        while not task.marker.is_file():
            self._sleep(self._backoff.next())
            if self._backoff.atCeiling():
                self.refreshStaleView()

            self._polls += 1
            if self._polls % CFG.monitor.liveness_check_period != 0:
                continue

            if task.marker.is_file():
                break
            if not self._isAlive(task):
                break

    def _isAlive(self, task: TaskArtifacts) -> bool:
        """
        Check whether the job still exists.

        Returns:
            bool: True if the task should still be waited for (the job exists,
                its presence is unknown, or the marker appeared in the meantime).
                False if the job is gone but the log indicates a successful finish.

        Raises:
            QDLostJobError: If the job is gone and the task did not finish.
        """
        presence = self._batch_system.getJobPresence(self._job_id)

        if presence == JobPresence.UNKNOWN:
            logger.warning(
                f"Could not determine whether job '{self._job_id}' still exists in {self._batch_system}."
            )
            return True

        if presence == JobPresence.PRESENT:
            return True

        self.state = MonitorState.LIVENESS_CHECK_FAILED
        logger.debug(
            f"Job '{self._job_id}' is not known to {self._batch_system} but the marker of {task.label()} is missing."
        )

        # the marker may only be delayed by the filesystem
        for i, wait in enumerate(CFG.monitor.vanished_job_waits):
            self._sleep(wait)
            self.refreshStaleView(hold=CFG.monitor.kick_hold if i > 0 else 0.0)
            if task.marker.is_file():
                self.state = MonitorState.WAITING
                return True

        last_line = self._lastLine(task)
        if last_line.endswith("status 0") and self._modifiedSinceStart(task):
            logger.warning(
                f"Marker '{task.marker}' was not created but {task.label()} seems to have finished OK. "
                "Probably your filesystem has problems."
            )
            self.state = MonitorState.WAITING
            return False

        raise QDLostJobError(
            f"Unfinished {task.label()} of job '{self._job_id}' no longer exists, log is in '{task.log}', "
            f"last line is '{last_line}', marker is '{task.marker}'.\n"
            "Possible reasons: a) Exceeded time limit? -> Use more jobs! "
            "b) Shutdown/Frozen machine? -> Run again!"
        )

    @staticmethod
    def _lastLine(task: TaskArtifacts) -> str:
        try:
            lines = tail_lines(task.log, 1)
        except OSError:
            return ""
        return lines[-1] if lines else ""

    def _modifiedSinceStart(self, task: TaskArtifacts) -> bool:
        try:
            # the start time is only trusted to the second
            return task.log.stat().st_mtime >= int(self._start)
        except OSError:
            return False
