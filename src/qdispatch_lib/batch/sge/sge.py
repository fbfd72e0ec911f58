# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import re
import shutil
from collections.abc import Mapping
from pathlib import Path

from qdispatch_lib.batch.interface import BatchInterface, BatchMeta, batch_system
from qdispatch_lib.core.config import CFG
from qdispatch_lib.core.error import QDConfigError
from qdispatch_lib.core.logger import get_logger
from qdispatch_lib.properties.array import ArrayRange
from qdispatch_lib.properties.options import SubmissionOptions
from qdispatch_lib.properties.states import JobPresence

logger = get_logger(__name__)


@batch_system
class SGE(BatchInterface, metaclass=BatchMeta):
    """
    Implementation of BatchInterface for (Sun/Son of/Univa) Grid Engine.
    """

    # acknowledgment printed by qsub, e.g.
    # 'Your job 123 ("foo.sh") has been submitted' or
    # 'Your job-array 123.1-10:1 ("foo.sh") has been submitted'
    ACK_PATTERN = re.compile(r"Your job\S* (\d+)[. ].+ has been submitted")

    # exit code of `qstat -j` for a job that does not exist
    QSTAT_NO_JOB = 1

    def envName() -> str:
        return "SGE"

    def isAvailable() -> bool:
        # PBS also provides qsub, qconf is specific to grid engine
        return shutil.which("qsub") is not None and shutil.which("qconf") is not None

    def taskIdVariable() -> str:
        return "SGE_TASK_ID"

    def translateExportEnv() -> str:
        return "-V"

    def translateParallelEnv(name: str, num_threads: int) -> str:
        return f"-pe {name} {num_threads}"

    def translateSync() -> str:
        return "-sync y"

    def fallbackStandardOptions(abstract_options: Mapping[str, str]) -> list[str]:
        # with --gpu, the queue is selected by its translation
        if "gpu" in abstract_options:
            return []
        return ["-q all.q"]

    def fallbackOptions(abstract_options: Mapping[str, str]) -> list[tuple[str, str]]:
        translated = []

        for name, value in abstract_options.items():
            match name:
                case "gpu":
                    if SGE._parseCount(name, value) > 0:
                        translated.append((name, f"-q gpu.q -l gpu={value}"))
                    else:
                        translated.append((name, "-q all.q"))
                case "mem":
                    translated.append((name, f"-l ram_free={value},mem_free={value}"))
                case "num_threads":
                    if (n := SGE._parseCount(name, value)) > 1:
                        translated.append((name, f"-pe smp {n}"))
                    else:
                        translated.append((name, ""))
                case "max_jobs_run":
                    translated.append(
                        (name, f"-tc {SGE._parseCount(name, value)}")
                    )
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
            "qsub",
            "-S",
            CFG.wrapper.shell,
            # keep PATH of the submitting shell
            "-v",
            "PATH",
            "-wd",
            str(cwd),
            "-j",
            "y",
            "-o",
            str(transcript),
            *options.toArgs(),
        ]

        if array:
            command.extend(["-t", f"{array.start}:{array.end}"])

        command.append(str(script))
        return command

    def parseJobIds(transcript: str) -> list[str]:
        return SGE.ACK_PATTERN.findall(transcript)

    def getJobPresence(job_id: str) -> JobPresence:
        result = SGE._runQuery(["qstat", "-j", job_id])

        if result.returncode == 0:
            return JobPresence.PRESENT

        if result.returncode == SGE.QSTAT_NO_JOB:
            return JobPresence.ABSENT

        logger.debug(
            f"qstat -j {job_id} returned status {result.returncode}: {result.stderr.strip()}"
        )
        return JobPresence.UNKNOWN
