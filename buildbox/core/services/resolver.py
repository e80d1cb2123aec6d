"""
Dependency resolver — walks the library graph from a service's BUILD.

Starting from ``<service>/BUILD``, every declared library directory is
searched recursively for further BUILD files.  Each one found is
parsed once, its directory is recorded as a library, and its own
declarations are folded into the closure.  Newly declared libraries go
onto a worklist until nothing new turns up.

The traversal is an explicit worklist plus visited sets (no recursion),
so cycles between libraries terminate and deep graphs never hit the
interpreter's recursion limit.

All paths are relative to the project root.  A library declared as
``libraries/shared`` means ``<project_root>/libraries/shared`` no matter
which manifest declares it.
"""

from __future__ import annotations

import logging
from pathlib import Path

from buildbox.core.errors import ManifestError, ResolveError
from buildbox.core.models.manifest import DependencyClosure, normalize_path
from buildbox.core.services.manifest import MANIFEST_FILE, parse_manifest

logger = logging.getLogger(__name__)


def _project_relative(path: Path, project_root: Path) -> Path:
    """Express ``path`` relative to the project root."""
    if path.is_absolute():
        try:
            path = path.resolve().relative_to(project_root.resolve())
        except ValueError as e:
            raise ResolveError(path, ValueError(f"outside project root {project_root}")) from e
    return normalize_path(path)


def _find_manifests(
    library: Path, project_root: Path, skip: Path | None = None
) -> list[Path]:
    """Every BUILD file at or below ``library``, as project-relative paths.

    Manifests under ``skip`` (the build cache) are left out, so copies
    in earlier sandboxes are never mistaken for libraries.
    """
    lib_dir = project_root / library
    if not lib_dir.is_dir():
        logger.warning("Library %s does not exist under %s", library, project_root)
        return []

    try:
        found = sorted(lib_dir.glob(f"**/{MANIFEST_FILE}"))
    except OSError as e:
        raise ResolveError(library, e) from e

    skip_parts = normalize_path(skip).parts if skip is not None else None
    manifests = []
    for manifest in found:
        if not manifest.is_file():
            continue
        relative = normalize_path(library / manifest.relative_to(lib_dir))
        if skip_parts and relative.parts[: len(skip_parts)] == skip_parts:
            continue
        manifests.append(relative)
    return manifests


def resolve(
    service_path: Path, project_root: Path, *, cache_path: Path | None = None
) -> DependencyClosure:
    """Compute the transitive dependency closure of a service.

    Args:
        service_path: The service directory, relative to ``project_root``
            (absolute paths inside the project are accepted).
        project_root: Directory every manifest path is relative to.
        cache_path: Project-relative build cache; BUILD files below it
            are ignored.

    Returns:
        The complete closure.  Partial closures are never returned.

    Raises:
        ManifestNotFound: The service has no BUILD file.
        ManifestMalformed: The service's own BUILD file is invalid.
        ResolveError: A library's BUILD file failed to parse.
    """
    service_path = _project_relative(Path(service_path), project_root)
    root_manifest = parse_manifest(project_root / service_path / MANIFEST_FILE)

    closure = DependencyClosure(service_path=service_path)
    closure.merge(root_manifest)

    # Manifest directories already parsed; the service itself counts.
    visited: set[Path] = {service_path}
    worklist: list[Path] = sorted(closure.libraries, reverse=True)

    while worklist:
        library = worklist.pop()

        for manifest_rel in _find_manifests(library, project_root, cache_path):
            manifest_dir = manifest_rel.parent
            if manifest_dir in visited:
                continue
            visited.add(manifest_dir)
            closure.libraries.add(manifest_dir)

            try:
                manifest = parse_manifest(project_root / manifest_rel)
            except ManifestError as e:
                raise ResolveError(manifest_rel, e) from e

            closure.merge(manifest, include_libraries=False)
            for declared in manifest.libraries:
                if declared not in closure.libraries:
                    closure.libraries.add(declared)
                    worklist.append(declared)

    logger.info(
        "Resolved %s: %d requirements, %d libraries, %d paths",
        service_path,
        len(closure.requirements),
        len(closure.libraries),
        len(closure.paths),
    )
    return closure
