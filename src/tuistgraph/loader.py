"""Load a project graph by running ``tuist graph --format json``.

A call creates a scratch directory, runs tuist with that directory as
the output path, decodes ``graph.json`` from it and removes the
directory again. Failures propagate unchanged in kind:

* :class:`~tuistgraph.errors.InvocationError` when tuist fails,
* :class:`OSError` when the output cannot be read (or tuist cannot be
  spawned),
* :class:`~tuistgraph.errors.GraphDecodeError` when the JSON is malformed
  or does not match the graph schema.

Calls share no writable state, so concurrent loads are safe.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path

from pydantic import ValidationError

from tuistgraph.domain.graph import Graph
from tuistgraph.errors import GraphDecodeError
from tuistgraph.infrastructure.filesystem import read_output_file, scratch_directory
from tuistgraph.infrastructure.process import Runner, run

logger = logging.getLogger(__name__)

BINARY_PATH_ENV_VAR = "TUIST_CONFIG_BINARY_PATH"
FORCE_CONFIG_CACHE_DIRECTORY_ENV_VAR = "TUIST_CONFIG_FORCE_CONFIG_CACHE_DIRECTORY"
DEFAULT_BINARY = "tuist"
GRAPH_FILENAME = "graph.json"


def resolve_binary(environ: Mapping[str, str], fallback: str | None = None) -> str:
    """Return the tuist executable to run.

    ``TUIST_CONFIG_BINARY_PATH`` wins when set (tuist exports it to the
    tasks it runs). Otherwise *fallback*, then plain ``tuist`` looked up
    on ``PATH``.
    """
    override = environ.get(BINARY_PATH_ENV_VAR)
    if override:
        return override
    return fallback or DEFAULT_BINARY


def build_arguments(output_path: Path, path: str | os.PathLike[str] | None = None) -> list[str]:
    """Build the ``tuist graph`` argument list."""
    arguments = [
        "graph",
        "--format",
        "json",
        "--output-path",
        str(output_path),
    ]
    if path is not None:
        arguments += ["--path", os.fspath(path)]
    return arguments


def build_environment(
    environment_keys: Iterable[str],
    environ: Mapping[str, str],
) -> dict[str, str]:
    """Copy the requested variables, plus the cache-directory override.

    Only variables that are set and non-empty in *environ* are copied.

    Raises:
        TypeError: *environment_keys* is a single string rather than a
            collection of names.
    """
    if isinstance(environment_keys, str):
        raise TypeError(
            f"environment_keys must be a collection of names, not the string {environment_keys!r}"
        )
    keys = set(environment_keys) | {FORCE_CONFIG_CACHE_DIRECTORY_ENV_VAR}
    environment: dict[str, str] = {}
    for key in sorted(keys):
        value = environ.get(key)
        if value:
            environment[key] = value
    return environment


def decode_graph(data: bytes, source: Path) -> Graph:
    """Decode ``graph.json`` bytes into a :class:`Graph`."""
    try:
        return Graph.model_validate_json(data)
    except ValidationError as exc:
        raise GraphDecodeError(str(source), _summarize(exc)) from exc


def _summarize(exc: ValidationError) -> str:
    errors = exc.errors(include_url=False)
    first = errors[0]
    location = ".".join(str(part) for part in first["loc"]) or "<root>"
    summary = f"{location}: {first['msg']}"
    if len(errors) > 1:
        summary += f" (and {len(errors) - 1} more)"
    return summary


class GraphLoader:
    """Loads graphs with injectable collaborators.

    Args:
        environ: Environment provider. Read for the binary override and
            the forwarded variables. Defaults to ``os.environ``.
        runner: Process runner, :func:`~tuistgraph.infrastructure.process.run`
            by default.
        temp_root: Parent of the scratch directories. Defaults to the
            system temp directory.
        cleanup_on_success: Remove the scratch directory after a
            successful load. When False it is left for the OS temp
            cleanup; failed loads always remove it.
        binary: Executable used when ``TUIST_CONFIG_BINARY_PATH`` is unset.
    """

    def __init__(
        self,
        *,
        environ: Mapping[str, str] | None = None,
        runner: Runner = run,
        temp_root: Path | None = None,
        cleanup_on_success: bool = True,
        binary: str | None = None,
    ) -> None:
        self._environ = environ if environ is not None else os.environ
        self._runner = runner
        self._temp_root = temp_root
        self._cleanup_on_success = cleanup_on_success
        self._binary = binary

    def load(
        self,
        path: str | os.PathLike[str] | None = None,
        environment_keys: Iterable[str] = (),
    ) -> Graph:
        """Run tuist for *path* (default: its cwd) and return the decoded graph.

        Args:
            path: Project root to analyze. Omitted from the command line
                when None.
            environment_keys: Names of variables to forward to tuist when
                set and non-empty. Order and duplicates are irrelevant.
        """
        executable = resolve_binary(self._environ, self._binary)
        environment = build_environment(environment_keys, self._environ)

        with scratch_directory(
            self._temp_root, cleanup_on_success=self._cleanup_on_success
        ) as output_path:
            arguments = build_arguments(output_path, path)
            self._runner(executable, arguments, environment)
            graph_path = output_path / GRAPH_FILENAME
            graph = decode_graph(read_output_file(graph_path), graph_path)

        logger.debug(
            "Loaded graph %r with %d project(s)", graph.name, len(graph.projects)
        )
        return graph


def load_graph(
    path: str | os.PathLike[str] | None = None,
    environment_keys: Iterable[str] = (),
    *,
    environ: Mapping[str, str] | None = None,
    runner: Runner = run,
    temp_root: Path | None = None,
    cleanup_on_success: bool = True,
    binary: str | None = None,
) -> Graph:
    """Load the graph at *path* with a one-off :class:`GraphLoader`.

    The keyword arguments are those of :class:`GraphLoader`.
    """
    loader = GraphLoader(
        environ=environ,
        runner=runner,
        temp_root=temp_root,
        cleanup_on_success=cleanup_on_success,
        binary=binary,
    )
    return loader.load(path, environment_keys)
