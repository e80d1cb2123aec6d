"""
BuildSandbox — the assembled directory handed to the image builder.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class BuildSandbox(BaseModel):
    """A fresh, self-contained build directory.

    ``root`` is absolute.  ``service_path`` is the service's location
    relative to ``root``, mirroring its location in the project, so
    the Dockerfile can be found at a predictable subpath.
    """

    root: Path
    service_path: Path
    requirements_file: Path
    markers_created: list[Path] = Field(default_factory=list)

    @property
    def service_dir(self) -> Path:
        """Absolute path to the copied service directory."""
        return self.root / self.service_path

    def to_dict(self) -> dict:
        return {
            "root": str(self.root),
            "service_path": self.service_path.as_posix(),
            "service_dir": str(self.service_dir),
            "requirements_file": str(self.requirements_file),
            "markers_created": len(self.markers_created),
        }
