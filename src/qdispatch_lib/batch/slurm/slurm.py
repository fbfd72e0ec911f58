# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import re
import shutil
from collections.abc import Mapping
from pathlib import Path

from qdispatch_lib.batch.interface import BatchInterface, BatchMeta, batch_system
from qdispatch_lib.core.error import QDConfigError
from qdispatch_lib.core.logger import get_logger
from qdispatch_lib.properties.array import ArrayRange
from qdispatch_lib.properties.options import SubmissionOptions
from qdispatch_lib.properties.states import JobPresence

logger = get_logger(__name__)


@batch_system
class Slurm(BatchInterface, metaclass=BatchMeta):
    """
    Implementation of BatchInterface for the Slurm workload manager.
    """

    # acknowledgment printed by sbatch
    ACK_PATTERN = re.compile(r"Submitted batch job (\d+)")

    def envName() -> str:
        return "Slurm"

    def isAvailable() -> bool:
        return shutil.which("sbatch") is not None

    def taskIdVariable() -> str:
        return "SLURM_ARRAY_TASK_ID"

    def translateExportEnv() -> str:
        return "--export=ALL"

    def translateParallelEnv(_name: str, num_threads: int) -> str:
        # Slurm has no named parallel environments
        return f"--cpus-per-task={num_threads}"

    def translateSync() -> str:
        return "--wait"

    def fallbackStandardOptions(abstract_options: Mapping[str, str]) -> list[str]:
        return []

    def fallbackOptions(abstract_options: Mapping[str, str]) -> list[tuple[str, str]]:
        translated = []

        for name, value in abstract_options.items():
            match name:
                case "gpu":
                    if (n := Slurm._parseCount(name, value)) > 0:
                        translated.append((name, f"--gres=gpu:{n}"))
                    else:
                        translated.append((name, ""))
                case "mem":
                    translated.append((name, f"--mem={value}"))
                case "num_threads":
                    if (n := Slurm._parseCount(name, value)) > 1:
                        translated.append((name, f"--cpus-per-task={n}"))
                    else:
                        translated.append((name, ""))
                case "max_jobs_run":
                    # throttling is part of the --array specification
                    Slurm._parseCount(name, value)
                    translated.append((name, ""))
                case _:
                    raise QDConfigError(
                        f"Option '--{name.replace('_', '-')}' is not supported without a queue config file."
                    )

        return translated

    def translateSubmit(
        script: Path,
        transcript: Path,
        options: SubmissionOptions,
        array: ArrayRange | None,
        cwd: Path,
    ) -> list[str]:
        command = [
            "sbatch",
            # keep PATH of the submitting shell; overridden by a later --export
            "--export=PATH",
            "-D",
            str(cwd),
            "-o",
            str(transcript),
            *options.toArgs(),
        ]

        if array:
            array_spec = f"--array={array.start}-{array.end}"
            if options.max_concurrent:
                array_spec += f"%{options.max_concurrent}"
            command.append(array_spec)

        command.append(str(script))
        return command

    def parseJobIds(transcript: str) -> list[str]:
        return Slurm.ACK_PATTERN.findall(transcript)

    def getJobPresence(job_id: str) -> JobPresence:
        result = Slurm._runQuery(["squeue", "-h", "-j", job_id, "-o", "%i"])

        if result.returncode == 0:
            return JobPresence.PRESENT if result.stdout.strip() else JobPresence.ABSENT

        # squeue fails for job ids that are no longer remembered by the controller
        if "Invalid job id" in result.stderr:
            return JobPresence.ABSENT

        logger.debug(
            f"squeue -j {job_id} returned status {result.returncode}: {result.stderr.strip()}"
        )
        return JobPresence.UNKNOWN
