"""recordkit CLI entry point.

Defines the top-level ``recordkit`` command (via Click-Extra), sets up
logging for every subcommand, and registers the subcommands.

Commands
- ``recordkit check TARGET FILE`` validates JSON records against a record class.
- ``recordkit rules`` lists the registered rule names.

Examples
    $ recordkit --version
    $ recordkit check myapp.records:Payment payments.json --scenario refund
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import click
import click_extra as clickx
from platformdirs import user_log_dir

from recordkit import __version__
from recordkit.logging import config_console_handler, config_flight_recorder, log_startup

from .check import check, rules
from .helpers import hyperlink
from .helpers.log_level_parser import parse_log_level

if TYPE_CHECKING:
    from logging import Handler

logger = logging.getLogger(__name__)


HELP = """recordkit command-line interface.

    recordkit validates keyed records (for example decoded JSON) against
    declared fields and rules, reporting every failing field at once.
    """


EPILOG = "\b\n" + "\n".join(
    [
        f"{click.style('See Also:', fg='blue', bold=True, underline=True)}",
        "  Rules : run " + click.style("recordkit rules", bold=True),
        "  Python: " + hyperlink("https://docs.python.org/3/library/logging.html", "logging"),
    ]
)


@clickx.extra_group(
    version=__version__,
    help=HELP,
    params=[
        clickx.ColorOption(show_envvar=True),
        clickx.TimerOption(show_envvar=True),
        clickx.ExtraVersionOption(),
    ],
    epilog=EPILOG,
)
@click.option(
    "--verbose",
    "-v",
    "verbose_count",
    count=True,
    help="Raise console verbosity one level above WARNING per repetition.",
    default=0,
)
@click.option(
    "--quiet",
    "-q",
    "quiet_count",
    count=True,
    help="Lower console verbosity one level below WARNING per repetition.",
    default=0,
)
@click.option(
    "--debug/--no-debug",
    help="Debug console output: DEBUG level with timestamps and source locations.",
    default=False,
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="File the flight recorder writes to.",
    default=Path(user_log_dir("recordkit", appauthor=False, ensure_exists=True)) / "latest.log",
    envvar="RECORDKIT_LOG_PATH",
    show_default=True,
    show_envvar=True,
)
@click.option(
    "--flight-recorder-capacity",
    type=int,
    default=2000,
    hidden=True,
    envvar="RECORDKIT_FLIGHT_RECORDER_CAPACITY",
    show_envvar=True,
    help="Number of log records the flight recorder keeps in memory.",
)
@click.option(
    "--flight-recorder/--no-flight-recorder",
    "flight_recorder",
    help=(
        "Keep recent DEBUG records in memory and write them to --log-path when a "
        "WARNING or ERROR is logged (or on exit with --force-flush). Console "
        "verbosity is unchanged."
    ),
    default=True,
    show_envvar=True,
)
@click.option(
    "--force-flush/--no-force-flush",
    "force_flush_flight_recorder",
    help="Write the flight recorder buffer to --log-path on exit even without warnings.",
    default=False,
    show_default=True,
    show_envvar=True,
)
@click.option(
    "-L",
    "--logger-level",
    "logger_levels",
    multiple=True,
    callback=parse_log_level,
    help=(
        "Set the minimum level of a logger (NAME=LEVEL), for console and flight "
        "recorder alike. Repeatable, or a comma/space list in RECORDKIT_LOGGER_LEVEL."
    ),
    default=("markdown_it=WARNING",),
    show_default=True,
    show_envvar=True,
)
@clickx.pass_context
def recordkit(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    verbose_count: int,
    quiet_count: int,
    debug: bool,
    log_path: Path,
    flight_recorder_capacity: int,
    flight_recorder: bool,
    force_flush_flight_recorder: bool,
    logger_levels: dict[str, int],
) -> None:
    """recordkit command-line interface."""

    level = logging.WARNING - (10 * verbose_count) + (10 * quiet_count)
    level = max(logging.DEBUG, min(logging.CRITICAL, level))

    handlers: list[Handler] = [
        config_console_handler(level=level, debug_mode=debug, color=ctx.color is not False)
    ]
    if flight_recorder:
        handlers.append(
            config_flight_recorder(
                path=log_path,
                capacity=flight_recorder_capacity,
                flush_on_close=force_flush_flight_recorder,
            )
        )

    # Handlers do the filtering; the root logger passes everything.
    logging.basicConfig(level=logging.DEBUG, handlers=handlers, force=True)

    for name, lvl in logger_levels.items():
        logging.getLogger(name).setLevel(lvl)

    log_startup(
        logger,
        app_version=__version__,
        level=level,
        handlers=handlers,
        log_path=log_path,
        flight_recorder=flight_recorder,
        flight_capacity=flight_recorder_capacity if flight_recorder else None,
        force_flush_fr=force_flush_flight_recorder,
        logger_levels=logger_levels,
    )

    ctx.call_on_close(logging.shutdown)


recordkit.add_command(check)
recordkit.add_command(rules)
