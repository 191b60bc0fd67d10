"""AppContext: shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Builds the graph loader from settings and routes
results to stdout/stderr with the right exit code.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

import click

from tuistgraph.config.logging import configure_logging
from tuistgraph.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from tuistgraph.config.settings import TuistGraphSettings
    from tuistgraph.loader import GraphLoader
    from tuistgraph.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: TuistGraphSettings) -> None:
        self.settings = settings
        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    def loader(self) -> GraphLoader:
        """A GraphLoader configured from the ``[loader]`` settings."""
        from tuistgraph.loader import GraphLoader

        config = self.settings.loader
        return GraphLoader(
            temp_root=config.temp_root,
            cleanup_on_success=config.cleanup_on_success,
            binary=config.binary,
        )

    def environment_keys(self, extra: Iterable[str]) -> set[str]:
        """Configured forwarded variables plus those given on the command line."""
        return {*self.settings.loader.environment_keys, *extra}

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout. Warnings go to stderr (except in
          JSON mode, where they are part of the payload).
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
