# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import getpass
import socket
import time
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import qdispatch_lib
from qdispatch_lib.aggregate import ResultAggregator
from qdispatch_lib.batch.interface import BatchInterface
from qdispatch_lib.core.error import QDLostJobError, QDStatusUnknownError
from qdispatch_lib.core.logger import get_logger
from qdispatch_lib.info import DispatchInfo
from qdispatch_lib.monitor import CompletionMonitor
from qdispatch_lib.properties.job_spec import JobSpec
from qdispatch_lib.properties.options import SubmissionOptions
from qdispatch_lib.properties.result import JobResult
from qdispatch_lib.properties.states import DispatchState
from qdispatch_lib.submit import Submitter
from qdispatch_lib.wrapper import QueueLayout, WrapperGenerator

logger = get_logger(__name__)


class Dispatcher:
    """
    Runs a job on the batch system and reports how its tasks finished.

    Responsibilities:
        - Prepare the log and queue directories.
        - Generate the wrapper script and submit it.
        - Record the dispatch in the queue directory.
        - Wait for all tasks to finish (unless the submission itself waited).
        - Collect the exit statuses of all tasks.
    """

    def __init__(
        self,
        batch_system: type[BatchInterface],
        job: JobSpec,
        options: SubmissionOptions,
        cwd: Path | None = None,
        pid: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize a Dispatcher instance.

        Args:
            batch_system (type[BatchInterface]): The batch system to submit to.
            job (JobSpec): The job to run.
            options (SubmissionOptions): Resolved scheduler options.
            cwd (Path | None): Directory the job is run in. Defaults to the current working directory.
            pid (int | None): Identifier making the markers unique. Defaults to the id of this process.
            sleep (Callable[[float], None]): Function used for waiting.
        """
        self._batch_system = batch_system
        self._job = job
        self._options = options
        self._cwd = cwd or Path.cwd()
        self._sleep = sleep
        self._start = time.time()

        self._layout = QueueLayout.fromJobSpec(job, pid, self._cwd)
        self._tasks = self._layout.tasks(job, self._cwd)

    @property
    def layout(self) -> QueueLayout:
        return self._layout

    def dispatch(self) -> JobResult:
        """
        Submit the job, wait for it to finish, and collect the results.

        Returns:
            JobResult: Exit statuses of all tasks.

        Raises:
            QDError: If the directories or the wrapper script cannot be created.
            QDSubmissionError: If the job could not be submitted.
            QDLostJobError: If the job vanished from the batch system without finishing.
            QDStatusUnknownError: If the exit status of a task cannot be determined.
        """
        self._layout.prepare(self._tasks, self._sleep)

        command = self._batch_system.translateSubmit(
            self._layout.script,
            self._layout.transcript,
            self._options,
            self._job.array,
            self._cwd,
        )
        WrapperGenerator(
            self._job,
            self._layout,
            self._tasks,
            self._batch_system,
            self._options,
            self._cwd,
        ).generate(command)

        job_id = Submitter(
            self._batch_system, command, self._layout.transcript, self._options.sync
        ).submit()

        info = self._createInfo(job_id)
        info.toFile(self._layout.info_file)

        monitor = CompletionMonitor(
            self._batch_system,
            job_id,
            self._tasks,
            self._layout,
            sleep=self._sleep,
            start_time=self._start,
        )

        try:
            if self._options.sync:
                # the submission command returned after the job finished
                monitor.cleanup()
            else:
                monitor.wait()

            result = ResultAggregator(
                self._tasks, str(self._cwd / self._job.logPattern())
            ).collect()
        except (QDLostJobError, QDStatusUnknownError):
            self._updateInfo(info, DispatchState.LOST)
            raise

        self._updateInfo(
            info,
            DispatchState.SUCCEEDED if result.succeeded else DispatchState.FAILED,
            [t.index for t in result.failedTasks() if t.index is not None],
        )
        return result

    def _createInfo(self, job_id: str | None) -> DispatchInfo:
        return DispatchInfo(
            batch_system=self._batch_system,
            qdispatch_version=qdispatch_lib.__version__,
            username=getpass.getuser(),
            command=self._job.commandLine(
                self._job.array.var_name if self._job.array else ""
            ),
            options=str(self._options),
            log_template=str(self._job.log_template),
            host=socket.getfqdn(),
            cwd=self._cwd,
            script=self._layout.script,
            state=DispatchState.SUBMITTED,
            submission_time=datetime.now(),
            job_id=job_id,
            array=str(self._job.array) if self._job.array else None,
            num_tasks=len(self._tasks),
        )

    def _updateInfo(
        self,
        info: DispatchInfo,
        state: DispatchState,
        failed_tasks: list[int] | None = None,
    ) -> None:
        info.state = state
        info.completion_time = datetime.now()
        info.failed_tasks = failed_tasks or []
        info.toFile(self._layout.info_file)
