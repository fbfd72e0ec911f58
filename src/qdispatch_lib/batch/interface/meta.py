# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import os
from abc import ABCMeta

from qdispatch_lib.batch.interface.interface import BatchInterface
from qdispatch_lib.core.config import CFG
from qdispatch_lib.core.error import QDError
from qdispatch_lib.core.logger import get_logger

logger = get_logger(__name__)


class BatchMeta(ABCMeta):
    """
    Metaclass for batch system classes.
    """

    # registry of supported batch systems
    _registry: dict[str, type[BatchInterface]] = {}

    def __str__(cls: type[BatchInterface]):
        """
        Get the string representation of the batch system class.
        """
        return cls.envName()

    @classmethod
    def register(cls, batch_cls: type[BatchInterface]):
        """
        Register a batch system class in the metaclass registry.

        Args:
            batch_cls: Subclass of BatchInterface to register.
        """
        cls._registry[batch_cls.envName()] = batch_cls

    @classmethod
    def fromStr(mcs, name: str) -> type[BatchInterface]:
        """
        Return the batch system class registered with the given name.

        Raises:
            QDError: If no class is registered for the given name.
        """
        try:
            return mcs._registry[name]
        except KeyError as e:
            raise QDError(
                f"No batch system registered as '{name}'. Known batch systems: {', '.join(mcs._registry)}."
            ) from e

    @classmethod
    def guess(mcs) -> type[BatchInterface]:
        """
        Attempt to select an appropriate batch system implementation.

        The method scans through all registered batch systems in the order
        they were registered and returns the first one that reports itself
        as available.

        Raises:
            QDError: If no available batch system is found among the registered ones.

        Returns:
            type[BatchInterface]: The first available batch system class.
        """
        for BatchSystem in mcs._registry.values():
            if BatchSystem.isAvailable():
                logger.debug(f"Guessed batch system: {str(BatchSystem)}.")
                return BatchSystem

        # raise error if there is no available batch system
        raise QDError(
            "Could not guess a batch system. No registered batch system available."
        )

    @classmethod
    def fromEnvVarOrGuess(mcs) -> type[BatchInterface]:
        """
        Select a batch system based on the environment variable or by guessing.

        Returns:
            type[BatchInterface]: The selected batch system class.

        Raises:
            QDError: If the environment variable is set to an unknown batch system name,
                    or if no available batch system can be guessed.
        """
        name = os.environ.get(CFG.env_vars.batch_system)
        if name:
            logger.debug(
                f"Using batch system name from an environment variable: {name}."
            )
            return BatchMeta.fromStr(name)

        return BatchMeta.guess()


def batch_system(cls: type[BatchInterface]) -> type[BatchInterface]:
    """
    Class decorator registering a batch system implementation in `BatchMeta`.
    """
    BatchMeta.register(cls)
    return cls
