# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from qdispatch_lib.batch.interface import BatchInterface, BatchMeta
from qdispatch_lib.options import InvocationParser, OptionResolver
from qdispatch_lib.properties.job_spec import JobSpec

from .dispatcher import Dispatcher


class DispatcherFactory:
    """
    Factory class to construct a Dispatcher from the raw command line.
    """

    def __init__(
        self,
        tokens: list[str],
        batch_system: type[BatchInterface] | None = None,
    ):
        """
        Initialize the factory.

        Args:
            tokens (list[str]): Command-line tokens following the program name.
            batch_system (type[BatchInterface] | None): Batch system to submit to.
                If None, it is selected from the environment variable or guessed.
        """
        self._tokens = tokens
        self._batch_system = batch_system

    def makeDispatcher(self) -> Dispatcher:
        """
        Construct and return a Dispatcher instance.

        The job itself is validated before the scheduler options are resolved,
        so that malformed command lines are reported as usage errors.

        Returns:
            Dispatcher: A dispatcher ready to submit the job.

        Raises:
            QDUsageError: If the command line is malformed.
            QDConfigError: If the scheduler options cannot be resolved.
            QDError: If no batch system is available.
        """
        invocation = InvocationParser(self._tokens).parse()
        job = JobSpec.fromTokens(
            invocation.log_path, list(invocation.command), invocation.array
        )

        BatchSystem = self._batch_system or BatchMeta.fromEnvVarOrGuess()
        options = OptionResolver(invocation, BatchSystem).resolve()

        return Dispatcher(BatchSystem, job, options)
