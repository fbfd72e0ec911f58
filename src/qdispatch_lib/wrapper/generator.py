# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from pathlib import Path

from qdispatch_lib.batch.interface import BatchInterface
from qdispatch_lib.core.common import join_command, quote_token
from qdispatch_lib.core.config import CFG
from qdispatch_lib.core.error import QDError
from qdispatch_lib.core.logger import get_logger
from qdispatch_lib.properties.job_spec import JobSpec
from qdispatch_lib.properties.options import SubmissionOptions
from qdispatch_lib.properties.task import TaskArtifacts

from .layout import QueueLayout

logger = get_logger(__name__)


class WrapperGenerator:
    """
    Generates the script submitted to the batch system.

    The wrapper changes to the submission directory, sources the environment
    bootstrap file if present, runs the command with its output redirected
    into the log, appends the accounting and exit status records, and finally
    signals completion by creating the marker of the task.

    A single script serves every task of an array job; the index is read
    from the environment variable provided by the batch system.
    """

    def __init__(
        self,
        job: JobSpec,
        layout: QueueLayout,
        tasks: list[TaskArtifacts],
        batch_system: type[BatchInterface],
        options: SubmissionOptions,
        cwd: Path | None = None,
    ):
        self._job = job
        self._layout = layout
        self._tasks = tasks
        self._batch_system = batch_system
        self._options = options
        self._cwd = cwd or Path.cwd()

    def generate(self, submit_command: list[str]) -> Path:
        """
        Remove the artifacts of a previous run and write the wrapper script.

        Args:
            submit_command (list[str]): Command used to submit the script,
                recorded at the end of the script.

        Returns:
            Path: Path to the written script.

        Raises:
            QDError: If the old files could not be removed or the script could not be written.
        """
        self.clean()

        try:
            self._layout.script.write_text(self.render(submit_command))
            self._layout.script.chmod(0o755)
        except OSError as e:
            raise QDError(
                f"Could not write wrapper script '{self._layout.script}': {e}."
            ) from e

        logger.debug(f"Wrote wrapper script '{self._layout.script}'.")
        return self._layout.script

    def clean(self) -> None:
        """
        Remove stale markers, the previous transcript, and the previous task logs.
        """
        stale = [self._layout.transcript]
        for task in self._tasks:
            stale.extend([task.marker, task.log])

        try:
            for file in stale:
                file.unlink(missing_ok=True)
        except OSError as e:
            raise QDError(f"Could not remove file from a previous run: {e}.") from e

    def render(self, submit_command: list[str]) -> str:
        """
        Return the text of the wrapper script.
        """
        index = self._indexReference()
        command = self._job.commandLine(index)
        log = quote_token(str(self._cwd / self._job.log_template.render(index)))

        marker = str(self._layout.marker_base)
        if self._job.isArray():
            marker += f".{index}"

        bootstrap = CFG.wrapper.bootstrap_file

        lines = [
            f"#!{CFG.wrapper.shell}",
            f"cd {quote_token(str(self._cwd))}",
            f"[ -f ./{bootstrap} ] && . ./{bootstrap}",
            "( echo '#' Running on `hostname`",
            "  echo '#' Started at `date`",
            "  echo -n '# '; cat <<EOF",
            command,
            "EOF",
            f") >{log}",
            'time1=`date +"%s"`',
            f" ( {command} ) 2>>{log} >>{log}",
            "ret=$?",
            'time2=`date +"%s"`',
            f"echo '#' Accounting: time=$(($time2-$time1)) threads={self._options.num_threads} >>{log}",
            f"echo '#' Finished at `date` with status $ret >>{log}",
            # a killed task must not be reported as finished
            f"[ $ret -eq {CFG.wrapper.killed_status} ] && exit {CFG.wrapper.retryable_status};",
            f"touch {quote_token(marker)}",
            "exit $(( ret ? 1 : 0 ))",
            "## submitted with:",
            f"# {join_command(submit_command)}",
        ]
        return "\n".join(lines) + "\n"

    def _indexReference(self) -> str:
        """
        Shell expression expanding to the index of the running task.
        """
        if not self._job.isArray():
            return ""
        return f"${{{self._batch_system.taskIdVariable()}}}"
