# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab


import sys
from typing import NoReturn

import click

import qdispatch_lib
from qdispatch_lib.core.click_format import DispatchCommand
from qdispatch_lib.core.config import CFG
from qdispatch_lib.core.error import QDError, QDUsageError
from qdispatch_lib.core.logger import get_logger

from .factory import DispatcherFactory

logger = get_logger(__name__)

# scheduler flags are collected as raw tokens, so only long options of qdispatch itself are recognized
_CONTEXT_SETTINGS = {
    "help_option_names": ["--help"],
    "ignore_unknown_options": True,
    "allow_interspersed_args": False,
}


@click.command(
    short_help="Run a command on a batch system and wait for it to finish.",
    help=f"""
Run a command (or an array of indexed copies of it) on a batch system,
wait until it finishes, and report whether it succeeded.

{click.style("[SCHEDULER-FLAGS]", fg="green")}   Flags passed to the batch system, e.g. '-q all.q' or '-pe smp 4'.
                    Options of the form '--name VALUE' (e.g. '--mem 4G', '--num-threads 2', '--gpu 1')
                    are translated using the queue config file ('--config PATH', default 'conf/queue.conf').
{click.style("[NAME=START:END]", fg="green")}    Run the command as an array of tasks with indices START to END.
                    NAME is replaced by the index in the log path and in the command.
{click.style("LOG", fg="green")}                 Path to the log file of the command (of each task).
{click.style("COMMAND", fg="green")}             Command to execute with its arguments.

Examples:
  {CFG.binary_name} -q all.q --mem 4G JOB=1:10 exp/log/align.JOB.log align.sh --part JOB
  {CFG.binary_name} --num-threads 8 exp/log/train.log train.sh

Exits with 0 if every task succeeded and with 1 otherwise.
""",
    cls=DispatchCommand,
    help_options_color="bright_blue",
    context_settings=_CONTEXT_SETTINGS,
)
@click.option(
    "--version",
    is_flag=True,
    help=f"Print the current version of {CFG.binary_name} and exit.",
)
@click.argument(
    "args",
    nargs=-1,
    type=click.UNPROCESSED,
    metavar=click.style("[SCHEDULER-FLAGS] [NAME=START:END] LOG COMMAND...", fg="green"),
)
@click.pass_context
def dispatch(ctx: click.Context, version: bool, args: tuple[str, ...]) -> NoReturn:
    """
    Run a command on a batch system and wait for it to finish.
    """
    if version:
        print(qdispatch_lib.__version__)
        sys.exit(0)

    try:
        dispatcher = DispatcherFactory(list(args)).makeDispatcher()
        result = dispatcher.dispatch()

        if result.succeeded:
            logger.info(result.describe())
            sys.exit(0)

        logger.error(result.describe())
        sys.exit(CFG.exit_codes.default)
    except QDUsageError as e:
        logger.error(e)
        click.echo(ctx.get_help(), err=True)
        sys.exit(e.exit_code)
    except QDError as e:
        logger.error(e)
        sys.exit(e.exit_code)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)
