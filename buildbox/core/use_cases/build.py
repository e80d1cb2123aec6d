"""
Build use cases — resolve a service, assemble its sandbox, hand it to docker.

Both entry points load configuration, run the core, and fold any
``BuildboxError`` into the result's ``error`` field so the CLI can
report it and exit non-zero.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from buildbox.core.config.loader import find_config_file, load_config, project_root
from buildbox.core.errors import BuildboxError
from buildbox.core.models.manifest import DependencyClosure
from buildbox.core.models.sandbox import BuildSandbox
from buildbox.core.services.changes import any_paths_changed, changed_files
from buildbox.core.services.image_build import docker_build
from buildbox.core.services.resolver import resolve
from buildbox.core.services.sandbox import assemble

logger = logging.getLogger(__name__)


@dataclass
class ResolveResult:
    """Outcome of resolving one service."""

    service_path: Path
    project_root: Path | None = None
    closure: DependencyClosure | None = None
    error: str | None = None
    error_type: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error, "error_type": self.error_type}
        assert self.closure is not None
        return {
            "project_root": str(self.project_root),
            "closure": self.closure.to_dict(),
        }


@dataclass
class BuildResult:
    """Outcome of a build: skipped, assembled, or assembled and built."""

    service_path: Path
    project_root: Path | None = None
    closure: DependencyClosure | None = None
    sandbox: BuildSandbox | None = None
    skipped: bool = False
    image_built: bool = False
    changed: list[str] = field(default_factory=list)
    error: str | None = None
    error_type: str | None = None

    def to_dict(self) -> dict:
        result: dict = {"service_path": self.service_path.as_posix()}
        if self.error:
            result["error"] = self.error
            result["error_type"] = self.error_type
            return result
        result["skipped"] = self.skipped
        result["image_built"] = self.image_built
        if self.closure:
            result["closure"] = self.closure.to_dict()
        if self.sandbox:
            result["sandbox"] = self.sandbox.to_dict()
        return result


def _locate(config_path: Path | None) -> tuple[Path | None, Path]:
    if config_path is None:
        config_path = find_config_file()
    return config_path, project_root(config_path)


def resolve_service(service_path: Path, config_path: Path | None = None) -> ResolveResult:
    """Resolve a service's closure without touching the build cache.

    Args:
        service_path: Service directory, relative to the project root.
        config_path: Optional explicit path to buildbox.yml.
    """
    result = ResolveResult(service_path=Path(service_path))
    try:
        config_path, root = _locate(config_path)
        config = load_config(config_path)
        result.project_root = root
        result.closure = resolve(
            result.service_path, root, cache_path=config.project.cache_path
        )
    except BuildboxError as e:
        result.error = str(e)
        result.error_type = type(e).__name__
    return result


def build_service(
    service_path: Path,
    config_path: Path | None = None,
    *,
    check_ref: str | None = None,
    docker_args: Sequence[str] = (),
    run_docker: bool = True,
) -> BuildResult:
    """Resolve, optionally short-circuit on git changes, assemble, build.

    Args:
        service_path: Service directory, relative to the project root.
        config_path: Optional explicit path to buildbox.yml.
        check_ref: If set, skip the build when nothing the service reads
            from changed since this git ref.
        docker_args: Extra arguments passed through to ``docker build``.
        run_docker: If False, stop after the sandbox is assembled.
    """
    result = BuildResult(service_path=Path(service_path))
    try:
        config_path, root = _locate(config_path)
        config = load_config(config_path)
        result.project_root = root

        closure = resolve(result.service_path, root, cache_path=config.project.cache_path)
        result.closure = closure

        if check_ref is not None:
            result.changed = changed_files(check_ref, root)
            if not any_paths_changed(result.changed, closure.all_paths()):
                logger.info("No files under %s changed since %s", closure.service_path, check_ref)
                result.skipped = True
                return result

        result.sandbox = assemble(
            closure.service_path,
            closure,
            config.requirement_lock,
            project_root=root,
            settings=config.project,
        )

        if run_docker:
            docker_build(result.sandbox, docker_args)
            result.image_built = True

    except BuildboxError as e:
        result.error = str(e)
        result.error_type = type(e).__name__

    return result
