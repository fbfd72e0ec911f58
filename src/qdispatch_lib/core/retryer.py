# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from collections.abc import Callable, Sequence
from time import sleep
from typing import Any

from .error import QDError
from .logger import get_logger

logger = get_logger(__name__, show_time=True)


class Retryer:
    """
    Retryer repeatedly executes a function until it succeeds or max attempts are reached.

    The wait between attempts is either constant or follows a schedule:
    with a schedule, the wait after the n-th failed attempt is the n-th item
    of the schedule and the number of attempts is one more than the length
    of the schedule.

    Attributes:
        func (Callable): The function or method to execute.
        args (Tuple): Positional arguments to pass to the function.
        kwargs (Dict): Keyword arguments to pass to the function.
        max_tries (int): Maximum number of attempts.
        wait_seconds (float | Sequence[float]): Time to wait between attempts.
        retry_on (tuple[type[Exception], ...]): Exceptions that trigger another attempt.
    """

    def __init__(
        self,
        func: Callable,
        *args: Any,
        wait_seconds: float | Sequence[float],
        max_tries: int | None = None,
        retry_on: tuple[type[Exception], ...] = (Exception,),
        **kwargs: Any,
    ):
        self._func = func
        self._args = args
        self._kwargs = kwargs
        self._retry_on = retry_on

        if isinstance(wait_seconds, int | float):
            if max_tries is None:
                raise QDError("Retryer with a constant wait requires 'max_tries'.")
            self._waits = [float(wait_seconds)] * (max_tries - 1)
        else:
            self._waits = list(wait_seconds)

        self._max_tries = max_tries or len(self._waits) + 1

    def run(self) -> Any:
        """
        Execute the function repeatedly until it succeeds or max_tries is reached.

        Any situation when the function does not raise an exception is considered a success.
        Exceptions not listed in `retry_on` propagate immediately.

        Returns:
            Any: The return value of the function if successful.

        Raises:
            Exception: The last exception raised if all attempts fail.
        """
        for attempt in range(1, self._max_tries + 1):
            try:
                return self._func(*self._args, **self._kwargs)
            except self._retry_on as e:
                if attempt == self._max_tries:
                    raise type(e)(
                        f"{e}\nThis was attempt {attempt} of {self._max_tries}. Attempts exhausted."
                    ) from e

                wait = self._waits[min(attempt - 1, len(self._waits) - 1)]
                logger.warning(
                    f"{e}\nThis was attempt {attempt} of {self._max_tries}. Attempting again in {wait} seconds."
                )
                sleep(wait)

        # should never get here
        raise QDError(
            "Execution got into an unexpected part of the Retryer.run method. This is a bug, please report it."
        )
