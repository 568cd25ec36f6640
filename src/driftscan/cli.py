"""CLI entry point for driftscan."""

import json
import logging
import sys
from pathlib import Path

import click

from driftscan.analyzer import PolyglotAnalyzer
from driftscan.config import load_config
from driftscan.errors import DriftscanError
from driftscan.inspector import InspectOptions, inspect
from driftscan.log import configure_logging
from driftscan.report import render_result


def _fail(error: DriftscanError) -> click.ClickException:
    return click.ClickException(f"Inspection failed: {error}\nHint: {error.hint}")


@click.group()
def main():
    """driftscan: detect drift between foundation specs and code."""
    pass


@main.command(name="inspect")
@click.argument("root", default=".", type=click.Path(file_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print the result as JSON.")
@click.option("--strict", is_flag=True, help="Exit with status 1 on any warning.")
@click.option("--use-descriptors", is_flag=True, help="Check <module>.module.yaml expectations.")
@click.option("--depth", default=1, type=click.IntRange(1, 3), help="Depth of analysis (1=structure, 2=+API, 3=+signatures).")
@click.option("--check-api", is_flag=True, help="Validate API contracts regardless of depth.")
@click.option("--check-signatures", is_flag=True, help="Validate function signatures regardless of depth.")
@click.option("-v", "--verbose", is_flag=True, help="Log progress to stderr.")
def inspect_cmd(
    root: Path,
    as_json: bool,
    strict: bool,
    use_descriptors: bool,
    depth: int,
    check_api: bool,
    check_signatures: bool,
    verbose: bool,
):
    """Compare foundation specs and API docs with the code in ROOT."""
    configure_logging(logging.DEBUG if verbose else logging.WARNING)

    try:
        config = load_config(root)
        options = InspectOptions(
            root_dir=root,
            foundation_path=config.foundation_path(root),
            blueprints_path=config.blueprints_path(root),
            ignore_dirs=config.ignore_dirs,
            use_descriptors=use_descriptors,
            depth=depth,
            check_api=check_api,
            check_signatures=check_signatures,
        )
        result = inspect(options)
    except DriftscanError as e:
        raise _fail(e) from e

    if as_json:
        click.echo(result.model_dump_json(indent=2))
    else:
        click.echo(render_result(result))

    if not result.success or (strict and result.warnings):
        sys.exit(1)


@main.command()
@click.argument("root", default=".", type=click.Path(file_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print endpoints as JSON.")
@click.option("-v", "--verbose", is_flag=True, help="Log progress to stderr.")
def endpoints(root: Path, as_json: bool, verbose: bool):
    """List the HTTP endpoints found in the code in ROOT."""
    configure_logging(logging.DEBUG if verbose else logging.WARNING)

    try:
        config = load_config(root)
        found = PolyglotAnalyzer.default().extract_all_endpoints(root, config.ignore_set())
    except DriftscanError as e:
        raise _fail(e) from e

    if as_json:
        data = [ep.model_dump(mode="json", include={"method", "path", "handler", "file", "line", "language"}) for ep in found]
        click.echo(json.dumps(data, indent=2))
        return

    for ep in found:
        handler = f" -> {ep.handler}" if ep.handler else ""
        click.echo(f"{ep.method:7} {ep.path}{handler}  ({ep.file}:{ep.line})")
    click.echo(f"Found {len(found)} endpoints.")
