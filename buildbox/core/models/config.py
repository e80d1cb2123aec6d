"""
Project configuration model — loaded from buildbox.yml.

Every key is optional.  An empty file (or no file at all) gives a
project with services under ``services/``, libraries under
``libraries/`` and an empty lock table.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

# Requirement name → version lock (operator included, e.g. "==1.2.3").
LockTable = dict[str, str]


class ProjectSettings(BaseModel):
    """Where things live inside the project."""

    model_config = ConfigDict(extra="forbid")

    services_path: Path = Path("services")
    libraries_path: Path = Path("libraries")
    cache_path: Path = Path(".buildbox")


class BuildboxConfig(BaseModel):
    """Root configuration — project layout plus the requirement lock table."""

    project: ProjectSettings = Field(default_factory=ProjectSettings)
    requirement_lock: LockTable = Field(default_factory=dict)
