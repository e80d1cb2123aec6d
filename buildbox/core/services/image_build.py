"""
Image build hand-off — runs ``docker build`` against an assembled sandbox.

The sandbox root is the build context; the Dockerfile is the one in
the copied service directory.  Output streams straight to the
terminal so the user sees docker's progress as it happens.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Sequence

from buildbox.core.errors import ImageBuildError
from buildbox.core.models.sandbox import BuildSandbox

logger = logging.getLogger(__name__)

DOCKERFILE = "Dockerfile"


def docker_build_command(sandbox: BuildSandbox, extra_args: Sequence[str] = ()) -> list[str]:
    """The docker invocation for a sandbox, without running it."""
    return [
        "docker",
        "build",
        str(sandbox.root),
        "--file",
        str(sandbox.service_dir / DOCKERFILE),
        *extra_args,
    ]


def docker_build(
    sandbox: BuildSandbox,
    extra_args: Sequence[str] = (),
    *,
    timeout: int = 1800,
) -> None:
    """Build the service image from the sandbox.

    Raises:
        ImageBuildError: docker is missing, the service has no
            Dockerfile, the build timed out or exited non-zero.
    """
    if shutil.which("docker") is None:
        raise ImageBuildError("docker not found on PATH")

    dockerfile = sandbox.service_dir / DOCKERFILE
    if not dockerfile.is_file():
        raise ImageBuildError(f"No {DOCKERFILE} in {sandbox.service_dir}")

    cmd = docker_build_command(sandbox, extra_args)
    logger.info("Running: %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, cwd=str(sandbox.root), timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise ImageBuildError(f"docker build timed out after {timeout}s") from e

    if result.returncode != 0:
        raise ImageBuildError(f"docker build exited with code {result.returncode}")
