"""``recordkit check`` and ``recordkit rules`` commands."""

import json
import logging
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.table import Table

from recordkit.config import UpdateMode
from recordkit.errors import (
    InvalidRuleError,
    InvalidUpdateModeError,
    UnknownFieldError,
    UnknownRuleError,
    ValidationException,
)
from recordkit.records import Collection
from recordkit.validation import default_registry

from .helpers import error, load_record_class, success, warn

logger = logging.getLogger(__name__)

UNKNOWN_FIELDS_KEY = "*"
UNKNOWN_FIELDS_RULE = "unknownFields"


def _load_target(ctx: click.Context, param: click.Parameter, value: str) -> type[Collection]:  # pylint: disable=unused-argument
    return load_record_class(value)


def _read_records(path: Path) -> list[dict[str, Any]]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{path}: invalid JSON: {e}") from e
    items = data if isinstance(data, list) else [data]
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            raise click.ClickException(f"{path}: record {index} is not a JSON object")
    return items


def _check_one(
    record_class: type[Collection], item: dict[str, Any], scenario: str | None, mode: str | None
) -> dict[str, dict[str, str]]:
    try:
        record = record_class(item, mode=mode)
        record.validate(scenario)  # type: ignore[attr-defined]
    except UnknownFieldError as e:
        return {UNKNOWN_FIELDS_KEY: {UNKNOWN_FIELDS_RULE: str(e)}}
    except ValidationException as e:
        return e.to_dict()
    if unknown := record.unknown_fields:
        warn(f"Skipped unknown fields: {', '.join(unknown)}")
    return {}


def _render_table(results: list[dict[str, Any]], color: bool) -> None:
    table = Table(title="Validation errors", show_lines=False)
    table.add_column("Record", justify="right")
    table.add_column("Field", style="cyan")
    table.add_column("Rule", style="magenta")
    table.add_column("Message")
    for result in results:
        for field, rules_ in result["errors"].items():
            for rule_name, message in rules_.items():
                table.add_row(str(result["index"]), field, rule_name, message)
    Console(color_system="auto" if color else None, soft_wrap=False).print(table)


@click.command()
@click.argument("target", callback=_load_target)
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--scenario", "-s", default=None, help="Scenario whose rules to apply.")
@click.option(
    "--mode",
    type=click.Choice([m.value for m in UpdateMode], case_sensitive=False),
    default=None,
    help="How to treat keys the record does not declare [default: RECORDKIT_UPDATE_MODE or lenient].",
)
@click.option("--json", "as_json", is_flag=True, help="Print the results as JSON.")
@click.pass_context
def check(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    target: type[Collection],
    file: Path,
    scenario: str | None,
    mode: str | None,
    as_json: bool,
) -> None:
    """Validate the records in FILE against the record class TARGET.

    TARGET is ``package.module:ClassName``. FILE holds one JSON object or a
    list of them. Exits with status 1 when any record is invalid.
    """
    items = _read_records(file)
    logger.info("Checking %d record(s) from %s as %s", len(items), file, target.__name__)

    results = []
    for index, item in enumerate(items):
        try:
            errors = _check_one(target, item, scenario, mode)
        except (UnknownRuleError, InvalidRuleError, InvalidUpdateModeError) as e:
            raise click.ClickException(str(e)) from e
        results.append({"index": index, "valid": not errors, "errors": errors})

    failed = sum(1 for result in results if not result["valid"])
    if as_json:
        click.echo(json.dumps(results, indent=2))
    elif failed:
        _render_table([r for r in results if not r["valid"]], color=ctx.color is not False)

    if failed:
        logger.debug("%d of %d record(s) failed", failed, len(results))
        error(f"{failed} of {len(results)} record(s) failed validation.")
        ctx.exit(1)
    success(f"{len(results)} record(s) valid.")


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Print the rule names as a JSON list.")
def rules(as_json: bool) -> None:
    """List the registered validation rules."""
    names = default_registry.names()
    if as_json:
        click.echo(json.dumps(names))
        return
    for name in names:
        suffix = " (multi-field)" if default_registry.resolve(name).multi else ""
        click.echo(f"{name}{suffix}")
