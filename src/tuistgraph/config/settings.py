"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  (CLI flags passed by Click)
  2. Env vars     (``TUISTGRAPH_*`` prefix, ``__`` for nested sections)
  3. TOML file    (``-c``, ``TUISTGRAPH_CONFIG``, or ``tuistgraph.toml``
                   in the cwd or one of its parents)
  4. Code defaults baked into the section models
"""

from __future__ import annotations

import os
import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from tuistgraph.config.models import LoaderConfig

CONFIG_FILENAME = "tuistgraph.toml"
CONFIG_ENV_VAR = "TUISTGRAPH_CONFIG"


def locate_config_file(config_path: str | None = None, start: Path | None = None) -> Path | None:
    """Pick the TOML file to read, or None to run on defaults.

    An explicit *config_path* (the ``-c`` flag) wins, then
    ``TUISTGRAPH_CONFIG``. A path named either way that is not a file
    means "no config"; the search does not continue past it. Otherwise
    the nearest ``tuistgraph.toml`` in *start* (default: cwd) or one of
    its parents is used, so the file can sit next to ``Project.swift``
    or at the workspace root.
    """
    named = config_path or os.environ.get(CONFIG_ENV_VAR)
    if named:
        candidate = Path(named)
        return candidate if candidate.is_file() else None

    here = (start or Path.cwd()).resolve()
    return next(
        (d / CONFIG_FILENAME for d in (here, *here.parents) if (d / CONFIG_FILENAME).is_file()),
        None,
    )


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``tuistgraph.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                raise click.ClickException(f"Invalid TOML in {toml_path}: {exc}") from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# TOML path handed to settings_customise_sources during construction.
_tls = threading.local()


class TuistGraphSettings(BaseSettings):
    """Settings for the tuistgraph CLI, frozen after construction.

    Stored on the :class:`~tuistgraph.commands._context.AppContext` that
    the root command creates.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "TUISTGRAPH_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    loader: LoaderConfig = Field(default_factory=LoaderConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start: Path | None = None,
        **cli_flags: Any,
    ) -> TuistGraphSettings:
        """Construct settings from a CLI invocation.

        The TOML file is chosen by :func:`locate_config_file`.
        """
        toml_path = locate_config_file(config_path, start)

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None
