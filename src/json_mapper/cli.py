"""Command-line interface for the JSON Mapper."""

import importlib
import logging
import sys
from pathlib import Path
from typing import Any

import click

from . import __version__
from .error_handler import ErrorHandler
from .object_mapper import ObjectMapper
from .types import MappingError


def load_target(reference: str) -> type:
    """Import ``package.module:ClassName`` and return the class."""
    module_name, _, qualname = reference.partition(":")
    if not module_name or not qualname:
        raise click.BadParameter(f"expected 'module:Class', got '{reference}'")

    if "" not in sys.path:
        sys.path.insert(0, "")
    try:
        target = importlib.import_module(module_name)
    except ImportError as e:
        raise click.BadParameter(f"cannot import module '{module_name}': {e}") from e

    for part in qualname.split("."):
        try:
            target = getattr(target, part)
        except AttributeError:
            raise click.BadParameter(f"module '{module_name}' has no attribute '{qualname}'") from None
    return target


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )


def _report(error: MappingError, handler: ErrorHandler) -> None:
    response = handler.handle_mapping_error(error)
    click.echo(f"❌ {error.error_type.value} at {response.path}: {error}", err=True)
    click.echo(f"   • {response.suggested_action}", err=True)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output')
def main(verbose: bool):
    """JSON Mapper - Convert between dataclasses and JSON."""
    _configure_logging(verbose)


@main.command()
@click.argument('target')
def describe(target: str):
    """Show the mapped fields of TARGET (module:Class) in serialization order."""
    cls = load_target(target)
    mapper = ObjectMapper()
    try:
        descriptors = mapper.describe(cls)
    except MappingError as e:
        _report(e, mapper.error_handler)
        sys.exit(1)

    click.echo(f"{cls.__name__}: {len(descriptors)} mapped field(s)")
    for descriptor in descriptors:
        flag = "required" if descriptor.required else "optional"
        click.echo(f"  {descriptor.name:<24} {descriptor.attribute:<24} {flag:<9} {descriptor.shape.describe()}")


@main.command()
@click.argument('target')
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--output', '-o', help='Output JSON file path')
@click.option('--profile', is_flag=True, help='Print performance metrics')
@click.option('--pretty', is_flag=True, help='Indent the output instead of writing compact JSON')
def normalize(target: str, input_file: Path, output: str, profile: bool, pretty: bool):
    """Read INPUT_FILE into TARGET (module:Class) and write it back as JSON."""
    cls = load_target(target)
    mapper = ObjectMapper(enable_profiling=profile)

    try:
        value = mapper.read_value(input_file.read_text(encoding='utf-8'), cls)
        if pretty:
            json_string = mapper.parser.dumps_pretty(mapper.convert_value(value, Any))
        else:
            json_string = mapper.write_value_as_string(value)
    except MappingError as e:
        _report(e, mapper.error_handler)
        sys.exit(1)

    if output:
        output_path = Path(output)
        output_path.write_text(json_string, encoding='utf-8')
        click.echo(f"✅ Successfully wrote JSON to {output_path}")
    else:
        click.echo(json_string)

    if profile:
        click.echo(mapper.profiler.export_metrics("summary"), err=True)


@main.command()
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def validate(input_file: Path):
    """Check that INPUT_FILE contains valid JSON."""
    handler = ErrorHandler()
    result = handler.validate_input(input_file.read_text(encoding='utf-8'))

    for warning in result.warnings:
        click.echo(f"⚠️  {warning}")

    if result.is_valid:
        click.echo(f"✅ {input_file} is valid JSON")
        return

    click.echo(f"❌ {input_file} is not valid JSON:")
    for error in result.errors:
        location = f" ({error.location})" if error.location else ""
        click.echo(f"   • {error.message}{location}")
    sys.exit(1)


if __name__ == '__main__':
    main()
