"""Command group: load and inspect the tuist project graph."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import click

from tuistgraph.services.graph import GraphService

if TYPE_CHECKING:
    from tuistgraph.commands._context import AppContext


def _load_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that loads the graph."""
    func = click.option(
        "--env",
        "environment_keys",
        multiple=True,
        metavar="NAME",
        help="Environment variable to forward to tuist (repeatable).",
    )(func)
    return click.option(
        "--path",
        "project_path",
        default=None,
        type=click.Path(file_okay=False),
        help="Project root to load. Defaults to tuist's working directory.",
    )(func)


@click.group()
def graph() -> None:
    """Load and inspect the project graph produced by tuist."""


@graph.command()
@_load_options
@click.pass_obj
def show(app: AppContext, project_path: str | None, environment_keys: tuple[str, ...]) -> None:
    """Summarize the projects in the graph."""
    service = GraphService(app.loader())
    app.emit(service.summary(project_path, app.environment_keys(environment_keys)))


@graph.command()
@_load_options
@click.pass_obj
def targets(app: AppContext, project_path: str | None, environment_keys: tuple[str, ...]) -> None:
    """List every target with its product and dependency count."""
    service = GraphService(app.loader())
    app.emit(service.targets(project_path, app.environment_keys(environment_keys)))


@graph.command()
@_load_options
@click.pass_obj
def order(app: AppContext, project_path: str | None, environment_keys: tuple[str, ...]) -> None:
    """Print targets in dependency order (dependencies first)."""
    service = GraphService(app.loader())
    app.emit(service.order(project_path, app.environment_keys(environment_keys)))
