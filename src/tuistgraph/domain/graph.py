"""Pydantic models for the graph that ``tuist graph --format json`` writes.

The schema belongs to tuist. Matching is structural: every field has a
default (so ``{}`` is a valid, empty graph), unknown keys are ignored,
and JSON keys are camelCase while attributes are snake_case.

Enum-like values (target dependencies, packages) arrive either as a
single-key object such as ``{"target": {"name": "Core"}}`` or with an
explicit ``"kind"`` field. Both shapes decode to the same model.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    extra="ignore",
    alias_generator=to_camel,
    populate_by_name=True,
)


def _unwrap_tagged(value: Any) -> Any:
    """Turn ``{"<kind>": {...}}`` into ``{"kind": "<kind>", ...}``."""
    if not isinstance(value, dict) or "kind" in value or len(value) != 1:
        return value
    ((kind, payload),) = value.items()
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return value
    return {"kind": kind, **payload}


class TargetDependency(BaseModel):
    """One entry of a target's ``dependencies`` list.

    ``kind`` is one of ``target``, ``project``, ``framework``,
    ``xcframework``, ``library``, ``package``, ``sdk``, ``xctest`` or
    ``macro``; unknown kinds are kept verbatim.
    """

    model_config = _MODEL_CONFIG

    kind: str
    name: str | None = None
    target: str | None = None
    path: str | None = None
    product: str | None = None
    status: str | None = None

    @model_validator(mode="before")
    @classmethod
    def unwrap_kind(cls, data: Any) -> Any:
        return _unwrap_tagged(data)

    @property
    def label(self) -> str:
        """Human-readable reference: the name, target, product or path."""
        return self.name or self.target or self.product or self.path or self.kind


class Package(BaseModel):
    """A Swift package referenced by a project (``remote`` or ``local``)."""

    model_config = _MODEL_CONFIG

    kind: str
    url: str | None = None
    path: str | None = None

    @model_validator(mode="before")
    @classmethod
    def unwrap_kind(cls, data: Any) -> Any:
        return _unwrap_tagged(data)


class Scheme(BaseModel):
    model_config = _MODEL_CONFIG

    name: str = ""
    test_action_targets: list[str] = Field(default_factory=list)


class Target(BaseModel):
    model_config = _MODEL_CONFIG

    name: str = ""
    product: str = ""
    bundle_id: str = ""
    product_name: str = ""
    sources: list[str] = Field(default_factory=list)
    resources: list[str] = Field(default_factory=list)
    dependencies: list[TargetDependency] = Field(default_factory=list)


class Project(BaseModel):
    model_config = _MODEL_CONFIG

    name: str = ""
    path: str = ""
    is_external: bool = False
    packages: list[Package] = Field(default_factory=list)
    targets: list[Target] = Field(default_factory=list)
    schemes: list[Scheme] = Field(default_factory=list)


class Graph(BaseModel):
    """The whole project graph.

    Attributes:
        name: Name of the workspace or root project.
        path: Absolute path the graph was loaded from.
        projects: Projects keyed by their absolute path.
    """

    model_config = _MODEL_CONFIG

    name: str = ""
    path: str = ""
    projects: dict[str, Project] = Field(default_factory=dict)

    def targets(self) -> Iterator[tuple[Project, Target]]:
        """Yield every ``(project, target)`` pair, projects in path order."""
        for key in sorted(self.projects):
            project = self.projects[key]
            for target in project.targets:
                yield project, target

    def find_target(self, name: str) -> tuple[Project, Target] | None:
        """Return the first target called *name*, or None."""
        for project, target in self.targets():
            if target.name == name:
                return project, target
        return None
