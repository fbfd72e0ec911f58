# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import subprocess
from abc import ABC
from collections.abc import Mapping
from pathlib import Path

from qdispatch_lib.core.error import QDConfigError, QDError
from qdispatch_lib.core.logger import get_logger
from qdispatch_lib.properties.array import ArrayRange
from qdispatch_lib.properties.options import SubmissionOptions
from qdispatch_lib.properties.states import JobPresence

logger = get_logger(__name__)


class BatchInterface(ABC):
    """
    Abstract base class for batch system integrations.

    Concrete batch system classes must implement these methods to allow
    qdispatch to submit to and observe different batch systems uniformly.

    All functions should raise QDError (or one of its subclasses) when encountering an error.
    """

    @staticmethod
    def envName() -> str:
        """
        Return the name of the batch system environment.

        Returns:
            str: The batch system name.
        """
        raise NotImplementedError(
            "envName method is not implemented for this batch system implementation"
        )

    @staticmethod
    def isAvailable() -> bool:
        """
        Determine whether the batch system is available on the current host.

        Implementations typically verify this by checking for the presence
        of the submission command.

        Returns:
            bool: True if the batch system is available, False otherwise.
        """
        raise NotImplementedError(
            "isAvailable method is not implemented for this batch system implementation"
        )

    @staticmethod
    def taskIdVariable() -> str:
        """
        Return the name of the environment variable holding the index
        of an array task on the execution host.

        Returns:
            str: Name of the variable (without `$`).
        """
        raise NotImplementedError(
            "taskIdVariable method is not implemented for this batch system implementation"
        )

    @staticmethod
    def translateExportEnv() -> str:
        """
        Return the flag exporting the whole submission environment to the job.
        """
        raise NotImplementedError(
            "translateExportEnv method is not implemented for this batch system implementation"
        )

    @staticmethod
    def translateParallelEnv(name: str, num_threads: int) -> str:
        """
        Return the flag requesting a parallel environment.

        Args:
            name (str): Name of the parallel environment.
            num_threads (int): Number of slots (threads) requested for each task.
        """
        raise NotImplementedError(
            "translateParallelEnv method is not implemented for this batch system implementation"
        )

    @staticmethod
    def translateSync() -> str:
        """
        Return the flag making the submission command wait for the job to finish.
        """
        raise NotImplementedError(
            "translateSync method is not implemented for this batch system implementation"
        )

    @staticmethod
    def fallbackStandardOptions(abstract_options: Mapping[str, str]) -> list[str]:
        """
        Return the flags added to every submission by the built-in policy of the
        batch system, independently of any single abstract option.

        Used only when no queue config file is available.

        Args:
            abstract_options (Mapping[str, str]): Abstract option names mapped to their values.
        """
        raise NotImplementedError(
            "fallbackStandardOptions method is not implemented for this batch system implementation"
        )

    @staticmethod
    def fallbackOptions(abstract_options: Mapping[str, str]) -> list[tuple[str, str]]:
        """
        Translate abstract options using the built-in policy of the batch system.

        Used only when no queue config file is available.

        Args:
            abstract_options (Mapping[str, str]): Abstract option names mapped to their values.

        Returns:
            list[tuple[str, str]]: Pairs of (abstract option name, flag fragment).

        Raises:
            QDConfigError: If an option is not known to the built-in policy.
        """
        raise NotImplementedError(
            "fallbackOptions method is not implemented for this batch system implementation"
        )

    @staticmethod
    def translateSubmit(
        script: Path,
        transcript: Path,
        options: SubmissionOptions,
        array: ArrayRange | None,
        cwd: Path,
    ) -> list[str]:
        """
        Build the command submitting the wrapper script.

        Args:
            script (Path): Path to the wrapper script.
            transcript (Path): File collecting the output of the batch system.
            options (SubmissionOptions): Resolved submission options.
            array (ArrayRange | None): Array range, if this is an array job.
            cwd (Path): Directory the job is run in.

        Returns:
            list[str]: The submission command split into arguments.
        """
        raise NotImplementedError(
            "translateSubmit method is not implemented for this batch system implementation"
        )

    @staticmethod
    def parseJobIds(transcript: str) -> list[str]:
        """
        Extract the job identifiers acknowledged by the submission command.

        Args:
            transcript (str): Content of the submission transcript.

        Returns:
            list[str]: All acknowledged job identifiers, in order of appearance.
        """
        raise NotImplementedError(
            "parseJobIds method is not implemented for this batch system implementation"
        )

    @staticmethod
    def getJobPresence(job_id: str) -> JobPresence:
        """
        Ask the batch system whether the job still exists.

        Args:
            job_id (str): Identifier of the job.

        Returns:
            JobPresence: PRESENT, ABSENT, or UNKNOWN if the answer could not be obtained.
        """
        raise NotImplementedError(
            "getJobPresence method is not implemented for this batch system implementation"
        )

    @staticmethod
    def _parseCount(name: str, value: str) -> int:
        """
        Convert the value of a numeric abstract option to an integer.

        Raises:
            QDConfigError: If the value is not a non-negative integer.
        """
        try:
            count = int(value)
        except ValueError:
            count = -1

        if count < 0:
            raise QDConfigError(
                f"Option '--{name.replace('_', '-')}' requires a non-negative integer, got '{value}'."
            )
        return count

    @staticmethod
    def _runQuery(command: list[str]) -> subprocess.CompletedProcess[str]:
        """
        Run a read-only batch system command and capture its output.

        Args:
            command (list[str]): The command to run.

        Returns:
            subprocess.CompletedProcess[str]: The finished process.

        Raises:
            QDError: If the command cannot be executed at all.
        """
        logger.debug(" ".join(command))
        try:
            return subprocess.run(
                command,
                text=True,
                check=False,
                capture_output=True,
                errors="replace",
            )
        except OSError as e:
            raise QDError(f"Could not execute '{command[0]}': {e}.") from e
