"""
Error taxonomy — every failure the core can surface.

All errors derive from ``BuildboxError`` so the CLI can catch them in
one place, print the message and exit non-zero.  Each error keeps the
offending path or name as an attribute so callers can inspect it
without parsing the message.
"""

from __future__ import annotations

from pathlib import Path


class BuildboxError(Exception):
    """Base class for all buildbox errors."""


# ── Manifests ───────────────────────────────────────────────────


class ManifestError(BuildboxError):
    """A single BUILD manifest could not be parsed."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(message)


class ManifestNotFound(ManifestError):
    """The manifest file does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(path, f"Manifest not found: {path}")


class ManifestMalformed(ManifestError):
    """The manifest exists but its content has the wrong shape."""

    def __init__(self, path: Path, reason: str, field: str | None = None) -> None:
        self.field = field
        self.reason = reason
        where = f"{path} (field '{field}')" if field else str(path)
        super().__init__(path, f"Malformed manifest {where}: {reason}")


# ── Resolution ──────────────────────────────────────────────────


class ResolveError(BuildboxError):
    """A nested manifest failed while walking the library graph."""

    def __init__(self, manifest_path: Path, cause: Exception) -> None:
        self.manifest_path = manifest_path
        self.cause = cause
        super().__init__(f"Failed to resolve {manifest_path}: {cause}")


class UnlockedRequirement(BuildboxError):
    """A requirement has no entry in the lock table."""

    def __init__(self, requirement: str) -> None:
        self.requirement = requirement
        super().__init__(
            f"Requirement '{requirement}' has no entry in requirement_lock"
        )


# ── Assembly ────────────────────────────────────────────────────


class AssembleError(BuildboxError):
    """Copying or writing into the sandbox failed."""

    def __init__(self, path: Path, cause: Exception | str) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to assemble {path}: {cause}")


# ── Collaborators ───────────────────────────────────────────────


class ConfigError(BuildboxError):
    """Raised when project configuration is invalid or missing."""


class ChangeDetectionError(BuildboxError):
    """git could not report changed files."""


class ImageBuildError(BuildboxError):
    """The docker build hand-off failed."""
