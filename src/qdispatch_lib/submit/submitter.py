# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import subprocess
from pathlib import Path

from qdispatch_lib.batch.interface import BatchInterface
from qdispatch_lib.core.common import tail_lines
from qdispatch_lib.core.error import QDSubmissionError
from qdispatch_lib.core.logger import get_logger

logger = get_logger(__name__)


class Submitter:
    """
    Class to hand the wrapper script over to the batch system.

    Responsibilities:
        - Run the submission command of the batch system.
        - Record its output in the transcript of the dispatch.
        - Extract the identifier of the submitted job from the acknowledgment.
    """

    # number of transcript lines included in error messages
    TRANSCRIPT_TAIL = 10

    def __init__(
        self,
        batch_system: type[BatchInterface],
        command: list[str],
        transcript: Path,
        sync: bool = False,
    ):
        """
        Initialize a Submitter instance.

        Args:
            batch_system (type[BatchInterface]): The batch system class implementing
                the BatchInterface used for job submission.
            command (list[str]): The submission command, as built by the batch system.
            transcript (Path): File collecting the output of the batch system.
            sync (bool): Whether the submission command blocks until the job finishes.
        """
        self._batch_system = batch_system
        self._command = command
        self._transcript = transcript
        self._sync = sync

    def submit(self) -> str | None:
        """
        Submit the job to the batch system.

        In synchronous mode, the submission command exits only after the job
        finished. A non-zero exit status then means that the job itself failed,
        which is reported later by the result aggregator, as long as the
        output of the submission command acknowledges the submission.

        Returns:
            str | None: The identifier of the submitted job. None is only returned
                in synchronous mode if the acknowledgment contains no identifier.

        Raises:
            QDSubmissionError: If the submission command fails or its acknowledgment
                does not contain exactly one job identifier.
        """
        logger.debug(f"Submitting: {' '.join(self._command)}")
        try:
            result = subprocess.run(
                self._command,
                text=True,
                check=False,
                capture_output=True,
                errors="replace",
            )
        except OSError as e:
            raise QDSubmissionError(
                f"Could not execute '{self._command[0]}': {e}.", self._transcript
            ) from e

        output = result.stdout + result.stderr
        self._record(output)
        job_ids = self._batch_system.parseJobIds(output)

        if result.returncode != 0:
            if self._sync and job_ids:
                logger.debug(
                    f"Synchronous job '{job_ids[-1]}' exited with status {result.returncode}."
                )
                return job_ids[-1]

            raise QDSubmissionError(
                self._failure(f"return status was {result.returncode}"),
                self._transcript,
            )

        if not job_ids:
            if self._sync:
                logger.debug("No job id found in the output of a synchronous job.")
                return None
            raise QDSubmissionError(
                self._failure("the output does not specify the job id"),
                self._transcript,
            )

        if len(job_ids) > 1:
            raise QDSubmissionError(
                self._failure(
                    f"the job seems to have been submitted more than once ({', '.join(job_ids)})"
                ),
                self._transcript,
            )

        logger.info(f"Submitted job '{job_ids[0]}' to {self._batch_system}.")
        return job_ids[0]

    def _record(self, output: str) -> None:
        """
        Append the output of the submission command to the transcript.
        """
        try:
            with self._transcript.open("a") as f:
                f.write(output)
        except OSError as e:
            raise QDSubmissionError(
                f"Could not write to transcript '{self._transcript}': {e}.",
                self._transcript,
            ) from e

    def _failure(self, reason: str) -> str:
        """
        Build the message of a failed submission including the end of the transcript.
        """
        try:
            tail = "\n".join(tail_lines(self._transcript, Submitter.TRANSCRIPT_TAIL))
        except OSError:
            tail = ""

        return (
            f"Error submitting job to {self._batch_system} ({reason}).\n"
            f"Transcript is in '{self._transcript}', command was: {' '.join(self._command)}\n"
            f"{tail}"
        ).rstrip()
