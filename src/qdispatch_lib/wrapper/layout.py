# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import os
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from time import sleep as _sleep
from typing import Self

from qdispatch_lib.core.config import CFG
from qdispatch_lib.core.error import QDError
from qdispatch_lib.core.logger import get_logger
from qdispatch_lib.properties.job_spec import JobSpec
from qdispatch_lib.properties.task import TaskArtifacts

logger = get_logger(__name__)


@dataclass(frozen=True)
class QueueLayout:
    """
    On-disk layout of a single dispatch.

    The queue directory `q` is placed next to the log directory if the log
    directory is called `log` (or `LOG`), otherwise inside it. It holds the
    transcript of the batch system, the wrapper script, the marker files
    and the dispatch record.

    All paths are absolute.
    """

    # Directory containing the logs of the tasks.
    log_dir: Path

    # Directory holding the transcript, the script, the markers and the record.
    queue_dir: Path

    # File collecting the output of the batch system.
    transcript: Path

    # Generated wrapper script.
    script: Path

    # Sentinel file used to refresh a stale view of the queue directory.
    kick: Path

    # Dispatch record.
    info_file: Path

    # Marker path without the task index, e.g. `.../q/done.1234`.
    marker_base: Path

    @classmethod
    def fromJobSpec(
        cls, job: JobSpec, pid: int | None = None, cwd: Path | None = None
    ) -> Self:
        """
        Compute the layout for the given job.

        Args:
            job (JobSpec): The job being dispatched.
            pid (int | None): Identifier making the markers unique. Defaults
                to the id of the current process.
            cwd (Path | None): Directory relative paths are resolved against.
                Defaults to the current working directory.

        Returns:
            QueueLayout: The layout of the dispatch.
        """
        cwd = cwd or Path.cwd()
        pid = os.getpid() if pid is None else pid

        log_path = cwd / job.log_template.collapse()
        log_dir = log_path.parent

        if log_dir.name in CFG.layout.log_dir_names:
            queue_dir = log_dir.parent / CFG.layout.queue_dir
        else:
            queue_dir = log_dir / CFG.layout.queue_dir

        transcript = queue_dir / log_path.name
        script_name, n = re.subn(
            r"\.[a-zA-Z]{1,5}$", CFG.suffixes.script, transcript.name
        )
        if n == 0:
            script_name += CFG.suffixes.script
        script = queue_dir / script_name

        return cls(
            log_dir=log_dir,
            queue_dir=queue_dir,
            transcript=transcript,
            script=script,
            kick=queue_dir / CFG.layout.kick_file,
            info_file=queue_dir / f"{script.stem}{CFG.suffixes.dispatch_info}",
            marker_base=queue_dir / f"{CFG.layout.marker_prefix}.{pid}",
        )

    def markerPath(self, index: int | None) -> Path:
        """
        Return the path to the marker of the task with the given index.
        """
        if index is None:
            return self.marker_base
        return self.marker_base.with_name(f"{self.marker_base.name}.{index}")

    def tasks(self, job: JobSpec, cwd: Path | None = None) -> list[TaskArtifacts]:
        """
        Return the marker and the log of every task of the job.
        """
        cwd = cwd or Path.cwd()
        return [
            TaskArtifacts(
                index=index, marker=self.markerPath(index), log=cwd / job.logPath(index)
            )
            for index in job.indices()
        ]

    def prepare(
        self, tasks: list[TaskArtifacts], sleep: Callable[[float], None] = _sleep
    ) -> None:
        """
        Create the log directories and the queue directory.

        Already existing directories are not an error, since several
        dispatchers may be creating them at the same time. If the queue
        directory did not exist before, waits for a while so that the
        directory becomes visible on the execution hosts.

        Raises:
            QDError: If a directory could not be created.
        """
        try:
            for directory in sorted({self.log_dir} | {t.log.parent for t in tasks}):
                directory.mkdir(parents=True, exist_ok=True)

            fresh = not self.queue_dir.is_dir()
            self.queue_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise QDError(f"Could not create directory: {e}.") from e

        if fresh:
            logger.debug(
                f"Created queue directory '{self.queue_dir}'. Waiting {CFG.layout.queue_dir_settle_wait} seconds."
            )
            sleep(CFG.layout.queue_dir_settle_wait)
