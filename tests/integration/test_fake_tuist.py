"""End-to-end loads through a real subprocess standing in for tuist."""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from tuistgraph.errors import GraphDecodeError, SignalledError, TerminatedError
from tuistgraph.loader import (
    BINARY_PATH_ENV_VAR,
    FORCE_CONFIG_CACHE_DIRECTORY_ENV_VAR,
    GraphLoader,
)

# Echo the --path value (or "cwd") back as the graph name.
_ECHO_PATH_TOOL = """\
name="${7:-cwd}"
printf '{"name": "%s", "path": "%s"}' "$name" "$name" > "$5/graph.json"
"""


def _loader(tool: Path, scratch_root: Path, **environ: str) -> GraphLoader:
    return GraphLoader(
        environ={BINARY_PATH_ENV_VAR: str(tool), **environ},
        temp_root=scratch_root,
    )


class TestSuccess:
    def test_empty_object(self, make_tool: Callable[[str], Path], scratch_root: Path) -> None:
        tool = make_tool("printf '{}' > \"$5/graph.json\"")
        graph = _loader(tool, scratch_root).load()
        assert graph.projects == {}
        assert list(scratch_root.iterdir()) == []

    def test_path_argument(self, make_tool: Callable[[str], Path], scratch_root: Path) -> None:
        tool = make_tool(_ECHO_PATH_TOOL)
        loader = _loader(tool, scratch_root)
        assert loader.load().name == "cwd"
        assert loader.load("/work/App").name == "/work/App"

    def test_cache_directory_forwarded(
        self, make_tool: Callable[[str], Path], scratch_root: Path
    ) -> None:
        tool = make_tool(
            f"printf '{{\"name\": \"%s\"}}' \"${FORCE_CONFIG_CACHE_DIRECTORY_ENV_VAR}\" "
            "> \"$5/graph.json\""
        )
        loader = _loader(tool, scratch_root, **{FORCE_CONFIG_CACHE_DIRECTORY_ENV_VAR: "/cache"})
        assert loader.load().name == "/cache"

    def test_concurrent_loads_do_not_interfere(
        self, make_tool: Callable[[str], Path], scratch_root: Path
    ) -> None:
        tool = make_tool(_ECHO_PATH_TOOL)
        loader = _loader(tool, scratch_root)
        paths = [f"/work/Project{i}" for i in range(8)]

        with ThreadPoolExecutor(max_workers=4) as pool:
            names = list(pool.map(lambda p: loader.load(p).name, paths))

        assert names == paths
        assert list(scratch_root.iterdir()) == []


class TestFailure:
    def test_exit_code_with_stderr(
        self, make_tool: Callable[[str], Path], scratch_root: Path
    ) -> None:
        tool = make_tool("printf 'missing config' >&2; exit 1")
        with pytest.raises(TerminatedError) as exc_info:
            _loader(tool, scratch_root).load()
        message = str(exc_info.value)
        assert "1" in message
        assert "missing config" in message
        assert list(scratch_root.iterdir()) == []

    def test_exit_code_without_stderr(
        self, make_tool: Callable[[str], Path], scratch_root: Path
    ) -> None:
        tool = make_tool("exit 1")
        with pytest.raises(TerminatedError) as exc_info:
            _loader(tool, scratch_root).load()
        assert str(exc_info.value).endswith("exited with error code 1")
        assert list(scratch_root.iterdir()) == []

    def test_command_joins_arguments_without_separator(
        self, make_tool: Callable[[str], Path], scratch_root: Path
    ) -> None:
        tool = make_tool("exit 1")
        with pytest.raises(TerminatedError) as exc_info:
            _loader(tool, scratch_root).load("/w")
        assert exc_info.value.command.startswith(f"{tool}graph--formatjson--output-path")
        assert exc_info.value.command.endswith("--path/w")

    def test_signal(self, make_tool: Callable[[str], Path], scratch_root: Path) -> None:
        tool = make_tool("kill -9 $$")
        with pytest.raises(SignalledError):
            _loader(tool, scratch_root).load()
        assert list(scratch_root.iterdir()) == []

    def test_missing_output_file(
        self, make_tool: Callable[[str], Path], scratch_root: Path
    ) -> None:
        tool = make_tool("exit 0")
        with pytest.raises(FileNotFoundError):
            _loader(tool, scratch_root).load()
        assert list(scratch_root.iterdir()) == []

    def test_malformed_json(self, make_tool: Callable[[str], Path], scratch_root: Path) -> None:
        tool = make_tool("printf '{\"projects\": ' > \"$5/graph.json\"")
        with pytest.raises(GraphDecodeError):
            _loader(tool, scratch_root).load()
        assert list(scratch_root.iterdir()) == []
