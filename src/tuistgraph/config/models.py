"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, ``tuistgraph.toml`` only
contains overrides.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class LoaderConfig(BaseModel):
    """[loader] section."""

    model_config = {"frozen": True}

    # Used when TUIST_CONFIG_BINARY_PATH is unset.
    binary: str | None = None
    # Variables forwarded to tuist in addition to those given with --env.
    environment_keys: list[str] = Field(default_factory=list)
    cleanup_on_success: bool = True
    temp_root: Path | None = None

