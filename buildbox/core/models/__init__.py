"""
Domain models — Pydantic types for buildbox.

All models are re-exported here for convenient access:

    from buildbox.core.models import Manifest, DependencyClosure, BuildSandbox
"""

from buildbox.core.models.config import BuildboxConfig, LockTable, ProjectSettings
from buildbox.core.models.manifest import DependencyClosure, Manifest, normalize_path
from buildbox.core.models.sandbox import BuildSandbox

__all__ = [
    # sandbox.py
    "BuildSandbox",
    # config.py
    "BuildboxConfig",
    # manifest.py
    "DependencyClosure",
    "LockTable",
    "Manifest",
    "ProjectSettings",
    "normalize_path",
]
