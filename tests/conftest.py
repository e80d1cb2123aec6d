"""
Shared test fixtures and configuration.
"""

import json
import textwrap
from collections.abc import Callable
from pathlib import Path

import pytest


def _toml_array(values: list[str]) -> str:
    return "[" + ", ".join(json.dumps(v) for v in values) + "]"


@pytest.fixture
def write_manifest(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper that writes a BUILD file under tmp_path.

    ``write_manifest("libs/a", requirements=["x"], libraries=["libs/b"])``
    creates ``tmp_path/libs/a/BUILD`` and returns its directory.
    """

    def _write(
        directory: str,
        *,
        requirements: list[str] | None = None,
        libraries: list[str] | None = None,
        paths: list[str] | None = None,
    ) -> Path:
        target = tmp_path / directory
        target.mkdir(parents=True, exist_ok=True)
        lines = []
        if requirements is not None:
            lines.append(f"requirements = {_toml_array(requirements)}")
        if libraries is not None:
            lines.append(f"libraries = {_toml_array(libraries)}")
        if paths is not None:
            lines.append(f"paths = {_toml_array(paths)}")
        (target / "BUILD").write_text("\n".join(lines) + "\n")
        return target

    return _write


@pytest.fixture
def sample_project(tmp_path: Path, write_manifest: Callable[..., Path]) -> Path:
    """A small project: one service, two libraries, one shared config path.

    services/api     → requires flask, uses libraries/core
    libraries/core   → requires pydantic, uses libraries/util, ships config/core.yml
    libraries/util   → requires click
    """
    write_manifest("services/api", requirements=["flask"], libraries=["libraries/core"])
    write_manifest(
        "libraries/core",
        requirements=["pydantic"],
        libraries=["libraries/util"],
        paths=["config/core.yml"],
    )
    write_manifest("libraries/util", requirements=["click"])

    (tmp_path / "services/api/Dockerfile").write_text("FROM python:3.12-slim\n")
    (tmp_path / "services/api/app.py").write_text("print('api')\n")
    (tmp_path / "libraries/core/models.py").write_text("MODEL = 1\n")
    (tmp_path / "libraries/core/nested").mkdir()
    (tmp_path / "libraries/core/nested/helpers.py").write_text("HELP = 1\n")
    (tmp_path / "libraries/util/__init__.py").write_text("# util package\n")
    (tmp_path / "config").mkdir()
    (tmp_path / "config/core.yml").write_text("debug: false\n")

    (tmp_path / "buildbox.yml").write_text(textwrap.dedent("""\
        project:
          services_path: services
          libraries_path: libraries
        requirement_lock:
          flask: "==3.0.0"
          pydantic: ">=2.5,<3"
          click: "==8.1.7"
    """))
    return tmp_path
