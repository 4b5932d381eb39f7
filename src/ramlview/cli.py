"""CLI entry point for ramlview."""

import logging
import sys
from pathlib import Path

import click
from pydantic import ValidationError

from ramlview.builder.api import build_view_model
from ramlview.builder.models import ApiDocument
from ramlview.config import BuildConfig
from ramlview.exceptions import RamlViewError
from ramlview.raml.loader import load_api

logger = logging.getLogger(__name__)

NOT_RAML_MESSAGE = "provided file is not a correct RAML file!"


def _build_document(raml_path: Path, config: BuildConfig) -> ApiDocument:
    """Load and convert a RAML file; exits the process if it is not RAML."""
    try:
        api = load_api(raml_path)
        return build_view_model(api, config)
    except RamlViewError as e:
        logger.debug("Failed to load %s: %s", raml_path, e.message)
        click.secho(NOT_RAML_MESSAGE, fg="red", err=True)
        sys.exit(1)


def _load_config() -> BuildConfig:
    try:
        return BuildConfig.from_env()
    except ValidationError as e:
        fields = ", ".join(str(error["loc"][0]) for error in e.errors() if error["loc"])
        raise click.UsageError(f"invalid RAMLVIEW_* environment setting: {fields}") from e


def _configure_logging(verbose: int) -> None:
    if verbose == 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@click.group()
@click.option("-v", "--verbose", count=True, help="Log discovered endpoints (-vv for debug output).")
def main(verbose: int):
    """ramlview — turn RAML API definitions into documentation view models."""
    _configure_logging(verbose)


@main.command()
@click.argument("raml_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("-o", "--output", default=None, type=click.Path(path_type=Path), help="Output JSON file (stdout if omitted).")
@click.option("--markdown/--no-markdown", "render_markdown", default=None, help="Render descriptions as HTML.")
@click.option("--indent", default=2, type=int, help="JSON indentation.")
def build(raml_path: Path, output: Path | None, render_markdown: bool | None, indent: int):
    """Build the documentation view model of a RAML file."""
    config = _load_config()
    if render_markdown is not None:
        config = config.model_copy(update={"render_markdown": render_markdown})

    document = _build_document(raml_path, config)
    payload = document.model_dump_json(by_alias=True, indent=indent)

    if output is None:
        click.echo(payload)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(payload, encoding="utf-8")
    click.echo(f"View model saved to {output}")


@main.command()
@click.argument("raml_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def endpoints(raml_path: Path):
    """List the endpoints of a RAML file, grouped by resource."""
    document = _build_document(raml_path, _load_config())
    for resource in document.resources:
        click.echo(f"{resource.name} ({resource.uri})")
        for endpoint in resource.endpoints:
            click.echo(f"  {endpoint.method.upper()} {endpoint.uri}")
    count = sum(len(resource.endpoints) for resource in document.resources)
    click.echo(f"Found {count} endpoints.")
