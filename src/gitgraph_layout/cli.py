"""Command-line interface: lay out or render a JSON commit list."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

import click
from pydantic import ValidationError

from gitgraph_layout import api
from gitgraph_layout.config import GraphConfig

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


def _graph_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that runs a layout."""
    fn = click.option("--head", default=None, help="Hash of the checked-out commit.")(fn)
    fn = click.option("--first-parent", is_flag=True, default=False, help="Only follow first parents.")(fn)
    fn = click.option(
        "--priority",
        "priorities",
        multiple=True,
        help="Branch pinned to the next leftmost column (repeatable).",
    )(fn)
    fn = click.option(
        "--config",
        "config_path",
        type=click.Path(exists=True, dir_okay=False),
        default=None,
        help="JSON graph settings file.",
    )(fn)
    fn = click.argument("input_file", type=click.File("r"), default="-")(fn)
    return fn


def _build_config(config_path: str | None, priorities: tuple[str, ...], first_parent: bool) -> GraphConfig:
    config = GraphConfig.from_file(config_path) if config_path else GraphConfig()
    updates: dict[str, Any] = {}
    if priorities:
        updates["priority_branches"] = list(priorities)
    if first_parent:
        updates["only_follow_first_parent"] = True
    if updates:
        config = GraphConfig.model_validate({**config.model_dump(), **updates})
    return config


def _run(
    fn: Callable[..., str],
    input_file: Any,
    config_path: str | None,
    priorities: tuple[str, ...],
    first_parent: bool,
    head: str | None,
) -> str:
    try:
        config = _build_config(config_path, priorities, first_parent)
        return fn(input_file.read(), config, head)
    except json.JSONDecodeError as e:
        raise click.ClickException(f"Invalid JSON: {e}") from e
    except ValidationError as e:
        raise click.ClickException(f"Invalid input: {e}") from e
    except ValueError as e:
        raise click.ClickException(str(e)) from e


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log layout decisions to stderr.")
def cli(verbose: bool) -> None:
    """Compute commit graph layouts from JSON commit lists."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command("layout")
@_graph_options
def layout_cmd(
    input_file: Any,
    config_path: str | None,
    priorities: tuple[str, ...],
    first_parent: bool,
    head: str | None,
) -> None:
    """Print the layout of INPUT_FILE (default stdin) as JSON."""
    click.echo(_run(api.layout_json, input_file, config_path, priorities, first_parent, head))


@cli.command("render")
@_graph_options
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["svg", "ascii"]),
    default="ascii",
    show_default=True,
    help="Output format.",
)
def render_cmd(
    input_file: Any,
    config_path: str | None,
    priorities: tuple[str, ...],
    first_parent: bool,
    head: str | None,
    fmt: str,
) -> None:
    """Render INPUT_FILE (default stdin) as SVG or ASCII."""
    fn = api.render_svg if fmt == "svg" else api.render_ascii
    click.echo(_run(fn, input_file, config_path, priorities, first_parent, head))


def main() -> None:
    """CLI entry point used by the `gitgraph-layout` console script."""
    cli()
