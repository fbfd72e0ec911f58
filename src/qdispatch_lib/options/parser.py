# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import shlex
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from qdispatch_lib.core.common import to_snake_case
from qdispatch_lib.core.error import QDUsageError
from qdispatch_lib.core.logger import get_logger
from qdispatch_lib.properties.array import ArrayRange

logger = get_logger(__name__)


@dataclass(frozen=True)
class Invocation:
    """
    Parsed qdispatch command line.

    Scheduler flags are split into the categories that need special treatment
    (exported environment, parallel environment, synchronous submission,
    abstract options) and the flags that are passed through verbatim.
    """

    # Path to the log file (possibly containing the array placeholder).
    log_path: str

    # Tokens of the command to execute.
    command: tuple[str, ...]

    # Flag fragments passed to the batch system as they are.
    passthrough: tuple[str, ...] = ()

    # Abstract options (`--mem 4G` -> {'mem': '4G'}) in the order they were given.
    abstract_options: Mapping[str, str] = field(default_factory=dict)

    # Whether the whole submission environment should be exported to the job.
    export_env: bool = False

    # Name of the parallel environment and the number of threads.
    parallel_env: tuple[str, int] | None = None

    # Whether the submission should block until the job finishes.
    sync: bool = False

    # Array range, if this is an array job.
    array: ArrayRange | None = None

    def __post_init__(self):
        object.__setattr__(
            self, "abstract_options", MappingProxyType(dict(self.abstract_options))
        )


class InvocationParser:
    """
    Parser of the qdispatch command line:

        [scheduler-flags] [NAME=START:END | NAME=N] <log-path> <command> [args...]

    Flags and the array range may be interleaved.
    """

    # flags that take no value
    BOOLEAN_FLAGS = {"-V"}

    # number of passes over flags interleaved with the array range
    MAX_ROUNDS = 3

    def __init__(self, tokens: list[str]):
        """
        Initialize the parser.

        Args:
            tokens (list[str]): Raw command-line tokens following the program name.
        """
        self._tokens = list(tokens)

    def parse(self) -> Invocation:
        """
        Parse the command-line tokens.

        Returns:
            Invocation: The parsed command line.

        Raises:
            QDUsageError: If the command line is malformed, e.g. the log path or
                the command is missing, an array range is invalid or repeated,
                or the parallel environment is incomplete.
        """
        args = list(self._tokens)
        if len(args) < 2:
            raise QDUsageError("Both a log file and a command to execute are required.")

        passthrough: list[str] = []
        abstract_options: dict[str, str] = {}
        export_env = False
        parallel_env: tuple[str, int] | None = None
        sync = False
        array: ArrayRange | None = None

        for _ in range(InvocationParser.MAX_ROUNDS):
            while len(args) >= 2 and args[0].startswith("-"):
                switch = args.pop(0)

                if switch in InvocationParser.BOOLEAN_FLAGS:
                    export_env = True
                    continue

                value = args.pop(0)
                if value.startswith("-"):
                    logger.warning(
                        f"Suspicious argument '{value}' to '{switch}'; starts with '-'."
                    )

                if switch == "-sync" and value[:1] in ("y", "Y"):
                    sync = True
                elif switch == "-pe":
                    parallel_env = InvocationParser._parseParallelEnv(value, args)
                elif switch.startswith("--"):
                    name = to_snake_case(switch[2:])
                    abstract_options[name] = value
                    logger.debug(f"Read config option '--{switch[2:]} {value}'.")
                else:
                    passthrough.append(f"{switch} {shlex.quote(value)}")
                    logger.debug(f"Read option '{switch} {value}'.")

            if not args:
                break

            if parsed := ArrayRange.fromStr(args[0]):
                if array:
                    raise QDUsageError(
                        f"Only one array range can be specified, got '{array}' and '{parsed}'."
                    )
                array = parsed
                args.pop(0)
            elif ArrayRange.looksLikeRange(args[0]):
                logger.warning(f"Suspicious first argument '{args[0]}'.")

        if len(args) < 2:
            raise QDUsageError("Both a log file and a command to execute are required.")

        return Invocation(
            log_path=args[0],
            command=tuple(args[1:]),
            passthrough=tuple(passthrough),
            abstract_options=abstract_options,
            export_env=export_env,
            parallel_env=parallel_env,
            sync=sync,
            array=array,
        )

    @staticmethod
    def _parseParallelEnv(name: str, args: list[str]) -> tuple[str, int]:
        """
        Consume the number of threads following the name of a parallel environment.
        """
        if not args:
            raise QDUsageError(f"Option '-pe {name}' requires the number of threads.")

        raw = args.pop(0)
        try:
            num_threads = int(raw)
        except ValueError as e:
            raise QDUsageError(
                f"Invalid number of threads '{raw}' for option '-pe {name}'."
            ) from e

        if num_threads < 1:
            raise QDUsageError(
                f"Invalid number of threads '{raw}' for option '-pe {name}'."
            )

        return name, num_threads
