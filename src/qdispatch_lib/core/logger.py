# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import logging
import os

from rich.console import Console
from rich.logging import RichHandler

from .config import CFG


def get_logger(name: str, show_time: bool = False) -> logging.Logger:
    """
    Return the logger of a qdispatch module.

    Records are printed to stderr using rich's RichHandler. If the debug
    environment variable is set, debug records are printed as well and
    every record carries a timestamp.

    Args:
        name (str): Name of the logger, usually `__name__`.
        show_time (bool): Print timestamps even outside of debug mode.
    """
    debug_mode = os.environ.get(CFG.env_vars.debug_mode) is not None
    level = logging.DEBUG if debug_mode else logging.INFO

    handler = RichHandler(
        console=Console(stderr=True),
        level=level,
        rich_tracebacks=True,
        show_path=False,
        show_time=show_time or debug_mode,
        log_time_format=CFG.date_formats.standard,
    )

    logger = logging.getLogger(name)
    logger.setLevel(level)
    # one handler per logger, even if requested repeatedly
    logger.handlers = [handler]
    logger.propagate = False

    return logger
