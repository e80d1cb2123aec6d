"""
Sandbox builder — materializes a closure as a fresh build directory.

Layout of a sandbox (every path mirrors its place in the project)::

    <cache>/builds/<uuid>/
        services/api/              ← the service directory
        services/api/requirements.txt
        libraries/shared/          ← each resolved library
        libraries/shared/__init__.py   (synthesized if missing)
        config/settings.yml        ← each extra path

Copies never overwrite: a file already present at the destination is
left as it is, so overlapping libraries and paths can be placed in any
order without the last one clobbering the first.

The build cache itself is never copied, even when a library or path
(for example ``.``) contains it.

No cleanup happens on failure.  A half-built sandbox stays on disk for
inspection until ``clean_cache`` removes the whole cache.
"""

from __future__ import annotations

import logging
import shutil
import uuid
from collections.abc import Callable, Mapping
from pathlib import Path

from buildbox.core.errors import AssembleError
from buildbox.core.models.config import ProjectSettings
from buildbox.core.models.manifest import DependencyClosure, normalize_path
from buildbox.core.models.sandbox import BuildSandbox
from buildbox.core.services.requirements import REQUIREMENTS_FILE, render_requirements

logger = logging.getLogger(__name__)

BUILDS_DIR = "builds"
PACKAGE_MARKER = "__init__.py"


# ═══════════════════════════════════════════════════════════════════
#  Copy primitives
# ═══════════════════════════════════════════════════════════════════


def _copy_if_absent(src: str, dst: str) -> str:
    """copytree copy_function that keeps files already in place."""
    if Path(dst).exists():
        logger.debug("Skipping existing %s", dst)
        return dst
    return shutil.copy2(src, dst)


def _skip_cache(cache_root: Path) -> Callable[[str, list[str]], set[str]]:
    """copytree ignore hook that leaves ``cache_root`` out of a copy."""
    cache_root = cache_root.resolve()

    def _ignore(directory: str, names: list[str]) -> set[str]:
        parent = Path(directory).resolve()
        if parent != cache_root.parent:
            return set()
        return {name for name in names if parent / name == cache_root}

    return _ignore


def copy_into(source: Path, destination: Path, *, exclude: Path | None = None) -> None:
    """Copy a file or directory tree to ``destination``, skipping existing files.

    Missing parent directories are created.  Existing destination files
    are never overwritten.  ``exclude`` names a directory left out of
    tree copies (the build cache).

    Raises:
        AssembleError: ``source`` does not exist or the copy failed.
    """
    logger.debug("Copying %s → %s", source, destination)
    try:
        if source.is_file():
            destination.parent.mkdir(parents=True, exist_ok=True)
            _copy_if_absent(str(source), str(destination))
        elif source.is_dir():
            shutil.copytree(
                source,
                destination,
                ignore=_skip_cache(exclude) if exclude is not None else None,
                copy_function=_copy_if_absent,
                dirs_exist_ok=True,
            )
        else:
            raise AssembleError(source, "source does not exist")
    except (OSError, shutil.Error) as e:
        raise AssembleError(source, e) from e


def _destination(sandbox_root: Path, relative: Path) -> Path:
    """Map a project-relative path into the sandbox."""
    relative = normalize_path(relative)
    if relative.is_absolute() or (relative.parts and relative.parts[0] == ".."):
        raise AssembleError(relative, "path escapes the project root")
    return sandbox_root / relative


# ═══════════════════════════════════════════════════════════════════
#  Sandbox steps
# ═══════════════════════════════════════════════════════════════════


def allocate_sandbox(cache_root: Path) -> Path:
    """Create a new, never-before-used directory under ``cache_root``."""
    path = cache_root / BUILDS_DIR / uuid.uuid4().hex
    try:
        path.mkdir(parents=True, exist_ok=False)
    except OSError as e:
        raise AssembleError(path, e) from e
    logger.debug("Allocated sandbox %s", path)
    return path


def write_package_markers(library_root: Path) -> list[Path]:
    """Create an empty ``__init__.py`` in every directory under ``library_root``.

    The root itself is included.  Directories that already have one
    are left alone.  Returns the markers that were created.
    """
    if not library_root.is_dir():
        logger.debug("No library tree at %s — no markers needed", library_root)
        return []

    directories = [library_root, *sorted(p for p in library_root.rglob("*") if p.is_dir())]
    created: list[Path] = []
    for directory in directories:
        marker = directory / PACKAGE_MARKER
        if marker.exists():
            continue
        try:
            marker.touch()
        except OSError as e:
            raise AssembleError(marker, e) from e
        created.append(marker)

    logger.debug("Created %d package markers under %s", len(created), library_root)
    return created


def assemble(
    service_path: Path,
    closure: DependencyClosure,
    lock_table: Mapping[str, str],
    *,
    project_root: Path,
    settings: ProjectSettings,
) -> BuildSandbox:
    """Build a fresh sandbox for ``service_path`` from its closure.

    Steps run strictly in order: lock requirements, allocate, copy the
    service, copy libraries and paths, write requirements.txt, then
    synthesize package markers over the copied library tree.

    Args:
        service_path: Service directory relative to ``project_root``.
        closure: The resolved closure for that service.
        lock_table: Requirement name → version lock.
        project_root: Directory all closure paths are relative to.
        settings: Project layout (cache location, libraries root).

    Raises:
        UnlockedRequirement: Before anything touches the disk.
        AssembleError: A source lies inside the build cache, or a copy
            or write failed.
    """
    service_path = normalize_path(service_path)

    # Lock first so a missing pin never leaves a sandbox behind.
    requirements_text = render_requirements(closure.requirements, lock_table)

    cache_root = (project_root / settings.cache_path).resolve()
    sources = [service_path, *sorted(closure.libraries), *sorted(closure.paths)]
    for relative in sources:
        if (project_root / relative).resolve().is_relative_to(cache_root):
            raise AssembleError(relative, "path lies inside the build cache")

    root = allocate_sandbox(cache_root)
    for relative in sources:
        copy_into(project_root / relative, _destination(root, relative), exclude=cache_root)

    requirements_file = _destination(root, service_path) / REQUIREMENTS_FILE
    try:
        requirements_file.write_text(requirements_text, encoding="utf-8")
    except OSError as e:
        raise AssembleError(requirements_file, e) from e

    markers = write_package_markers(root / settings.libraries_path)

    sandbox = BuildSandbox(
        root=root,
        service_path=service_path,
        requirements_file=requirements_file,
        markers_created=markers,
    )
    logger.info("Assembled sandbox for %s at %s", service_path, root)
    return sandbox


def clean_cache(cache_root: Path) -> bool:
    """Remove the whole build cache. Returns False if there was nothing to remove."""
    if not cache_root.exists():
        logger.debug("Cache %s does not exist", cache_root)
        return False
    shutil.rmtree(cache_root)
    logger.info("Removed build cache %s", cache_root)
    return True
