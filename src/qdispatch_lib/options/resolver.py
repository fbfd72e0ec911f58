# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from pathlib import Path

from qdispatch_lib.batch.interface import BatchInterface
from qdispatch_lib.core.config import CFG
from qdispatch_lib.core.logger import get_logger
from qdispatch_lib.properties.options import SubmissionOptions

from .parser import Invocation
from .queue_config import QueueConfig

logger = get_logger(__name__)


class OptionResolver:
    """
    Turns a parsed command line into the final set of scheduler options.

    Flags given directly on the command line are kept in the order they were
    given. Abstract options (`--mem 4G`, ...) are translated using the queue
    config file. If the queue config file cannot be opened, the built-in
    policy of the batch system is used instead.

    The queue config file is only consulted if at least one abstract option
    (including `--config` itself) was provided.
    """

    def __init__(self, invocation: Invocation, batch_system: type[BatchInterface]):
        """
        Initialize the resolver.

        Args:
            invocation (Invocation): The parsed command line.
            batch_system (type[BatchInterface]): The batch system to submit to.
        """
        self._invocation = invocation
        self._batch_system = batch_system

    def resolve(self) -> SubmissionOptions:
        """
        Resolve the submission options.

        Returns:
            SubmissionOptions: The resolved options.

        Raises:
            QDConfigError: If the queue config file is malformed or an abstract
                option cannot be translated.
        """
        invocation = self._invocation
        flags = list(invocation.passthrough)

        if invocation.export_env:
            flags.append(self._batch_system.translateExportEnv())
        if invocation.parallel_env:
            flags.append(self._batch_system.translateParallelEnv(*invocation.parallel_env))
        if invocation.sync:
            flags.append(self._batch_system.translateSync())

        abstract_options = dict(invocation.abstract_options)
        config_path = Path(
            abstract_options.pop("config", CFG.layout.default_queue_config)
        )

        bindings: dict[str, str] = {}
        if invocation.abstract_options:
            if config := self._loadQueueConfig(config_path):
                flags.extend(config.standard_opts)
                for name, value in config.defaults.items():
                    abstract_options.setdefault(name, value)
                for name, value in abstract_options.items():
                    bindings[name] = config.translate(name, value)
            else:
                flags.extend(self._batch_system.fallbackStandardOptions(abstract_options))
                bindings.update(self._batch_system.fallbackOptions(abstract_options))

            for name, flag in bindings.items():
                option = f"--{name.replace('_', '-')} {abstract_options.get(name, '')}"
                logger.info(f"Option '{option.strip()}' resolved to '{flag}'.")
                if flag:
                    flags.append(flag)

        return SubmissionOptions(
            flags=tuple(flags),
            bindings=bindings,
            num_threads=self._numThreads(abstract_options),
            sync=invocation.sync,
            max_concurrent=OptionResolver._maxConcurrent(abstract_options),
        )

    def _loadQueueConfig(self, path: Path) -> QueueConfig | None:
        """
        Load the queue config file or return None if it cannot be opened.
        """
        try:
            return QueueConfig.fromFile(path)
        except OSError as e:
            logger.warning(
                f"Could not open queue config file '{path}' ({e.strerror}). Using default options of {self._batch_system}."
            )
            return None

    def _numThreads(self, abstract_options: dict[str, str]) -> int:
        """
        Number of threads per task: the parallel environment takes precedence
        over the `--num-threads` option.
        """
        if self._invocation.parallel_env:
            return self._invocation.parallel_env[1]

        try:
            return max(1, int(abstract_options.get("num_threads", 1)))
        except ValueError:
            return 1

    @staticmethod
    def _maxConcurrent(abstract_options: dict[str, str]) -> int | None:
        try:
            value = int(abstract_options["max_jobs_run"])
        except (KeyError, ValueError):
            return None
        return value if value > 0 else None
