"""Shared pytest fixtures and test helpers for tuistgraph tests."""

from __future__ import annotations

import json
import sys
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

SAMPLE_GRAPH: dict[str, Any] = {
    "name": "Workspace",
    "path": "/work",
    "projects": {
        "/work/App": {
            "name": "App",
            "path": "/work/App",
            "isExternal": False,
            "packages": [{"remote": {"url": "https://github.com/pointfreeco/swift-tagged"}}],
            "targets": [
                {
                    "name": "App",
                    "product": "app",
                    "bundleId": "io.tuist.App",
                    "productName": "App",
                    "sources": ["/work/App/Sources/App.swift"],
                    "resources": [],
                    "dependencies": [
                        {"target": {"name": "AppKitCore"}},
                        {"project": {"target": "Networking", "path": "/work/Networking"}},
                        {"sdk": {"name": "StoreKit.framework", "status": "required"}},
                    ],
                },
                {
                    "name": "AppKitCore",
                    "product": "framework",
                    "bundleId": "io.tuist.AppKitCore",
                    "dependencies": [
                        {"project": {"target": "Networking", "path": "/work/Networking"}},
                    ],
                },
            ],
            "schemes": [{"name": "App", "testActionTargets": ["AppTests"]}],
        },
        "/work/Networking": {
            "name": "Networking",
            "path": "/work/Networking",
            "targets": [
                {
                    "name": "Networking",
                    "product": "staticFramework",
                    "bundleId": "io.tuist.Networking",
                    "dependencies": [{"package": {"product": "Tagged"}}],
                }
            ],
        },
    },
}


class FakeRunner:
    """Stands in for the process runner.

    Records every call and, unless *error* is set, writes *payload* to
    ``graph.json`` in the requested output directory.
    """

    def __init__(
        self,
        payload: bytes | None = b"{}",
        error: BaseException | None = None,
    ) -> None:
        self.payload = payload
        self.error = error
        self.calls: list[tuple[str, list[str], dict[str, str]]] = []
        self.output_paths: list[Path] = []

    def __call__(
        self,
        executable: str,
        arguments: Sequence[str],
        environment: Mapping[str, str],
    ) -> None:
        self.calls.append((executable, list(arguments), dict(environment)))
        output_path = Path(arguments[arguments.index("--output-path") + 1])
        self.output_paths.append(output_path)
        assert output_path.is_dir()
        if self.error is not None:
            raise self.error
        if self.payload is not None:
            (output_path / "graph.json").write_bytes(self.payload)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def scratch_root(tmp_path: Path) -> Path:
    """Parent directory for scratch directories, empty when a test starts."""
    root = tmp_path / "scratch"
    root.mkdir()
    return root


@pytest.fixture
def sample_graph_bytes() -> bytes:
    return json.dumps(SAMPLE_GRAPH).encode("utf-8")


@pytest.fixture
def make_tool(tmp_path: Path) -> Callable[[str], Path]:
    """Write an executable ``/bin/sh`` script standing in for tuist.

    The script sees the tuist argument list, so ``$5`` is the output
    directory and ``$7`` the ``--path`` value when one is given. It runs
    with only the forwarded environment, so it must stick to shell
    builtins.
    """
    if sys.platform == "win32":
        pytest.skip("fake tuist is a POSIX shell script")

    def _make(body: str) -> Path:
        tool = tmp_path / "bin" / "tuist"
        tool.parent.mkdir(exist_ok=True)
        tool.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
        tool.chmod(0o755)
        return tool

    return _make


@pytest.fixture
def fake_runner() -> type[FakeRunner]:
    """The :class:`FakeRunner` class, for building runners per test."""
    return FakeRunner
