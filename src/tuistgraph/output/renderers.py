"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from collections.abc import Callable
from io import StringIO
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

if TYPE_CHECKING:
    from tuistgraph.services.result import ServiceResult

_Renderer = Callable[..., None]

_THEME = Theme(
    {
        "graph.ok": "bold green",
        "graph.error": "bold red",
        "graph.op": "bold cyan",
        "graph.key": "dim",
        "graph.path": "dim",
        "graph.product": "magenta",
        "graph.target_id": "bold blue",
    }
)


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a string via Rich."""
    # Rendered into a buffer; AppContext.emit decides where the text goes.
    buffer = StringIO()
    console = Console(file=buffer, theme=_THEME, highlight=False, width=120)
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)
    return buffer.getvalue().rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode: ids only for lists."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    items = result.data.get("items")
    if isinstance(items, list):
        ids = (item.get("id") for item in items if isinstance(item, dict))
        return "\n".join(str(i) for i in ids if i is not None)
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="graph.ok"), Text(f"  {result.op}", style="graph.op"))


def _field(console: Console, key: str, value: Any) -> None:
    line = Text(f"  {key}: ", style="graph.key")
    line.append(str(value), style="graph.path" if key == "path" else None)
    console.print(line)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(Text("ERROR", style="graph.error"), Text(f"  {result.op}", style="graph.op"))
    console.print(msg, markup=False, soft_wrap=True)

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(f"    {k}: {v}", markup=False, soft_wrap=True)


# ── Graph renderers ───────────────────────────────────────────────────


def _render_summary(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    for key in ("name", "path", "project_count", "target_count"):
        _field(console, key, d.get(key, ""))

    projects = d.get("projects") or []
    if not projects:
        return
    console.print()
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("Project", style="bold")
    table.add_column("Targets", justify="right")
    table.add_column("External")
    if verbose:
        table.add_column("Path", style="graph.path")
    for project in projects:
        row = [
            str(project["name"]),
            str(project["targets"]),
            "yes" if project["external"] else "",
        ]
        if verbose:
            row.append(str(project["path"]))
        table.add_row(*row)
    console.print(table)


def _render_targets(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "count", result.data.get("count", 0))
    items = result.data.get("items") or []
    if not items:
        return
    console.print()
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("Target", style="bold")
    table.add_column("Project")
    table.add_column("Product", style="graph.product")
    table.add_column("Deps", justify="right")
    if verbose:
        table.add_column("Bundle ID", style="dim")
    for item in items:
        row = [item["name"], item["project"], item["product"], str(item["dependencies"])]
        if verbose:
            row.append(item["bundle_id"])
        table.add_row(*row)
    console.print(table)


def _render_order(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for item in result.data.get("items") or []:
        line = Text(f"  {item['position']:>3}. ")
        line.append(item["name"], style="bold")
        line.append(f"  ({item['project']})", style="dim")
        if verbose:
            line.append(f"  {item['id']}", style="graph.target_id")
        console.print(line)


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, _Renderer] = {
    "load_graph": _render_summary,
    "list_targets": _render_targets,
    "build_order": _render_order,
}
