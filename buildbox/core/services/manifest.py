"""
Manifest parser — one BUILD file in, one ``Manifest`` out.

BUILD files are TOML with three optional array keys::

    requirements = ["requests", "flask"]
    libraries    = ["libraries/shared"]
    paths        = ["config/", "assets/data.json"]

A missing file is an error; a missing key is not.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

from pydantic import ValidationError

from buildbox.core.errors import ManifestMalformed, ManifestNotFound
from buildbox.core.models.manifest import Manifest

logger = logging.getLogger(__name__)

MANIFEST_FILE = "BUILD"


def parse_manifest_text(text: str, source: Path) -> Manifest:
    """Parse manifest content already read from ``source``."""
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ManifestMalformed(source, f"invalid TOML: {e}") from e

    try:
        return Manifest.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]
        loc = first.get("loc") or ()
        field = str(loc[0]) if loc else None
        raise ManifestMalformed(source, first.get("msg", str(e)), field=field) from e


def parse_manifest(path: Path) -> Manifest:
    """Read and parse the BUILD file at ``path``.

    Raises:
        ManifestNotFound: The file does not exist.
        ManifestMalformed: The file is unreadable, not TOML, or a key
            has the wrong shape.
    """
    if not path.is_file():
        raise ManifestNotFound(path)

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestMalformed(path, f"cannot read file: {e}") from e

    manifest = parse_manifest_text(text, path)
    logger.debug(
        "Parsed %s: %d requirements, %d libraries, %d paths",
        path,
        len(manifest.requirements),
        len(manifest.libraries),
        len(manifest.paths),
    )
    return manifest
