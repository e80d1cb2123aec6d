"""
Manifest and closure models — what a BUILD file declares and what a
service transitively needs.

A ``Manifest`` is one parsed BUILD file.  A ``DependencyClosure`` is
the union of every manifest reachable from a service, built up by the
resolver and read by the locker, the sandbox builder and the change
detector.

Every path in these models is relative to the project root.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator


def normalize_path(path: Path | str) -> Path:
    """Collapse ``.`` and ``..`` segments without touching the filesystem."""
    return Path(os.path.normpath(str(path)))


class Manifest(BaseModel):
    """A parsed BUILD file.

    All three keys are optional and default to empty lists.  Unknown
    keys are ignored so newer manifests still parse with older tools.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    requirements: list[StrictStr] = Field(default_factory=list)
    libraries: list[Path] = Field(default_factory=list)
    paths: list[Path] = Field(default_factory=list)

    @field_validator("libraries", "paths", mode="before")
    @classmethod
    def _paths_are_strings(cls, value: Any) -> Any:
        # BUILD files only allow arrays of strings here.
        if not isinstance(value, list):
            raise ValueError(f"expected an array of strings, got {type(value).__name__}")
        for item in value:
            if not isinstance(item, str):
                raise ValueError(
                    f"expected an array of strings, found {type(item).__name__} {item!r}"
                )
        return [normalize_path(item) for item in value]


class DependencyClosure(BaseModel):
    """Everything a service depends on, transitively.

    Sets deduplicate on insert, so merging the same manifest twice is a
    no-op.  Only the resolver mutates a closure; once ``resolve()``
    returns it is treated as read-only.
    """

    service_path: Path
    requirements: set[str] = Field(default_factory=set)
    libraries: set[Path] = Field(default_factory=set)
    paths: set[Path] = Field(default_factory=set)

    def merge(self, manifest: Manifest, *, include_libraries: bool = True) -> None:
        """Fold a manifest's declarations into the closure."""
        self.requirements.update(manifest.requirements)
        self.paths.update(manifest.paths)
        if include_libraries:
            self.libraries.update(manifest.libraries)

    def all_paths(self) -> list[Path]:
        """Every source path the service build reads from.

        Service directory first, then libraries and extra paths in
        sorted order.  Used by change detection to decide whether a
        rebuild is needed at all.
        """
        return [self.service_path, *sorted(self.libraries), *sorted(self.paths)]

    def to_dict(self) -> dict:
        return {
            "service_path": self.service_path.as_posix(),
            "requirements": sorted(self.requirements),
            "libraries": [p.as_posix() for p in sorted(self.libraries)],
            "paths": [p.as_posix() for p in sorted(self.paths)],
        }
