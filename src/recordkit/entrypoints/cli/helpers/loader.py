"""Loading record classes named on the command line."""

import importlib

import click

from recordkit.records import Collection
from recordkit.validation import Validates


def load_record_class(target: str) -> type[Collection]:
    """Import ``package.module:ClassName`` and check it is a validating record.

    Raises:
        click.BadParameter: If the target is malformed, cannot be imported, or
            is not a `Collection` that implements `Validates`.
    """
    module_name, sep, class_name = target.partition(":")
    if not sep or not module_name or not class_name:
        raise click.BadParameter(f"Expected package.module:ClassName, got {target!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"Cannot import {module_name}: {e}") from e

    obj = module
    for part in class_name.split("."):
        if (obj := getattr(obj, part, None)) is None:
            raise click.BadParameter(f"{module_name} has no attribute {class_name}")

    if not (isinstance(obj, type) and issubclass(obj, Collection) and issubclass(obj, Validates)):
        raise click.BadParameter(f"{target} is not a validating record class")
    return obj
