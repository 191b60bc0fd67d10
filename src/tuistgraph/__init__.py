"""tuistgraph: load a Tuist project graph from Python."""

from __future__ import annotations

from tuistgraph.domain.graph import Graph
from tuistgraph.errors import (
    GraphDecodeError,
    InvocationError,
    SignalledError,
    TerminatedError,
    TuistGraphError,
)
from tuistgraph.loader import GraphLoader, load_graph

__version__ = "0.1.0"

__all__ = [
    "Graph",
    "GraphDecodeError",
    "GraphLoader",
    "InvocationError",
    "SignalledError",
    "TerminatedError",
    "TuistGraphError",
    "__version__",
    "load_graph",
]
