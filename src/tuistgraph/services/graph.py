"""GraphService: load the tuist graph and report on it.

Each operation runs one graph load through a
:class:`~tuistgraph.loader.GraphLoader` and converts loader failures into
``ServiceResult`` errors. Target ids are the dependency-engine keys
(``"<project path>::<target name>"``).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from typing import Any

from tuistgraph.domain.graph import Graph
from tuistgraph.errors import (
    DependencyCycleError,
    GraphDecodeError,
    InvocationError,
    SignalledError,
)
from tuistgraph.infrastructure.graph.engine import (
    build_dependency_graph,
    order_targets,
    target_key,
)
from tuistgraph.loader import GraphLoader
from tuistgraph.services.result import ServiceResult

logger = logging.getLogger(__name__)

_PathArg = str | os.PathLike[str] | None


class GraphService:
    """Graph operations for the CLI."""

    def __init__(self, loader: GraphLoader) -> None:
        self._loader = loader

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    def _load(
        self,
        op: str,
        path: _PathArg,
        environment_keys: Iterable[str],
    ) -> Graph | ServiceResult:
        """Load the graph, or return the failure result for *op*."""
        try:
            return self._loader.load(path, environment_keys)
        except InvocationError as exc:
            code = "SIGNALLED" if isinstance(exc, SignalledError) else "TERMINATED"
            return ServiceResult.failure(
                op,
                code,
                exc.message,
                command=exc.command,
                status=exc.code,
                stderr=exc.stderr_text or "",
            )
        except GraphDecodeError as exc:
            return ServiceResult.failure(
                op, "DECODE_ERROR", str(exc), path=exc.path, reason=exc.reason
            )
        except OSError as exc:
            logger.debug("Graph load failed with an I/O error", exc_info=True)
            return ServiceResult.failure(
                op,
                "IO_ERROR",
                str(exc),
                filename=os.fspath(exc.filename) if exc.filename else None,
            )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def summary(self, path: _PathArg = None, environment_keys: Iterable[str] = ()) -> ServiceResult:
        """Load the graph and summarize its projects."""
        loaded = self._load("load_graph", path, environment_keys)
        if isinstance(loaded, ServiceResult):
            return loaded

        projects: list[dict[str, Any]] = [
            {
                "name": project.name,
                "path": project.path,
                "targets": len(project.targets),
                "external": project.is_external,
            }
            for _, project in sorted(loaded.projects.items())
        ]
        return ServiceResult(
            ok=True,
            op="load_graph",
            data={
                "name": loaded.name,
                "path": loaded.path,
                "project_count": len(projects),
                "target_count": sum(p["targets"] for p in projects),
                "projects": projects,
            },
        )

    def targets(self, path: _PathArg = None, environment_keys: Iterable[str] = ()) -> ServiceResult:
        """List every target with its project, product and dependency count."""
        loaded = self._load("list_targets", path, environment_keys)
        if isinstance(loaded, ServiceResult):
            return loaded

        items = [
            {
                "id": target_key(project.path, target.name),
                "name": target.name,
                "project": project.name,
                "product": target.product,
                "bundle_id": target.bundle_id,
                "dependencies": len(target.dependencies),
            }
            for project, target in loaded.targets()
        ]
        return ServiceResult(ok=True, op="list_targets", data={"count": len(items), "items": items})

    def order(self, path: _PathArg = None, environment_keys: Iterable[str] = ()) -> ServiceResult:
        """Order targets so each comes after everything it depends on."""
        loaded = self._load("build_order", path, environment_keys)
        if isinstance(loaded, ServiceResult):
            return loaded

        g = build_dependency_graph(loaded)
        try:
            ordered = order_targets(g)
        except DependencyCycleError as exc:
            return ServiceResult.failure("build_order", "CYCLE", str(exc), cycle=exc.cycle)

        items = [
            {
                "position": position,
                "id": key,
                "name": g.nodes[key]["name"],
                "project": g.nodes[key]["project"],
            }
            for position, key in enumerate(ordered, start=1)
        ]
        return ServiceResult(ok=True, op="build_order", data={"count": len(items), "items": items})
