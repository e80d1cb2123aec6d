"""
Tests for the manifest parser — BUILD file shape, defaults and errors.
"""

import textwrap
from pathlib import Path

import pytest

from buildbox.core.errors import ManifestMalformed, ManifestNotFound
from buildbox.core.models import Manifest
from buildbox.core.services.manifest import parse_manifest, parse_manifest_text

SOURCE = Path("svc/BUILD")


class TestParseManifestText:
    def test_empty_manifest_defaults(self):
        manifest = parse_manifest_text("", SOURCE)
        assert manifest.requirements == []
        assert manifest.libraries == []
        assert manifest.paths == []
        assert manifest == Manifest()

    def test_all_fields(self):
        manifest = parse_manifest_text(
            textwrap.dedent("""\
                requirements = ["requests", "flask"]
                libraries = ["lib1", "lib2"]
                paths = ["path1", "path2"]
            """),
            SOURCE,
        )
        assert manifest.requirements == ["requests", "flask"]
        assert manifest.libraries == [Path("lib1"), Path("lib2")]
        assert manifest.paths == [Path("path1"), Path("path2")]

    def test_partial_fields(self):
        manifest = parse_manifest_text('requirements = ["requests"]\n', SOURCE)
        assert manifest.requirements == ["requests"]
        assert manifest.libraries == []

    def test_unknown_keys_ignored(self):
        manifest = parse_manifest_text(
            'requirements = ["a"]\nowner = "team-x"\n[extra]\nkey = 1\n',
            SOURCE,
        )
        assert manifest.requirements == ["a"]

    def test_paths_are_normalised(self):
        manifest = parse_manifest_text(
            'paths = ["config/", "./assets/../data/file.json"]\n', SOURCE
        )
        assert manifest.paths == [Path("config"), Path("data/file.json")]

    def test_scalar_requirements_rejected(self):
        with pytest.raises(ManifestMalformed) as exc:
            parse_manifest_text('requirements = "requests"\n', SOURCE)
        assert exc.value.field == "requirements"
        assert exc.value.path == SOURCE
        assert "requirements" in str(exc.value)

    def test_non_string_requirement_rejected(self):
        with pytest.raises(ManifestMalformed) as exc:
            parse_manifest_text("requirements = [1, 2]\n", SOURCE)
        assert exc.value.field == "requirements"

    def test_scalar_libraries_rejected(self):
        with pytest.raises(ManifestMalformed) as exc:
            parse_manifest_text('libraries = "lib1"\n', SOURCE)
        assert exc.value.field == "libraries"

    def test_table_paths_rejected(self):
        with pytest.raises(ManifestMalformed) as exc:
            parse_manifest_text("[paths]\nconfig = true\n", SOURCE)
        assert exc.value.field == "paths"

    def test_invalid_toml(self):
        with pytest.raises(ManifestMalformed, match="invalid TOML") as exc:
            parse_manifest_text("requirements = [", SOURCE)
        assert exc.value.field is None


class TestParseManifest:
    def test_reads_file(self, tmp_path: Path):
        path = tmp_path / "BUILD"
        path.write_text('requirements = ["flask"]\nlibraries = ["libraries/core"]\n')
        manifest = parse_manifest(path)
        assert manifest.requirements == ["flask"]
        assert manifest.libraries == [Path("libraries/core")]

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "BUILD"
        path.write_text("")
        assert parse_manifest(path) == Manifest()

    def test_missing_file(self, tmp_path: Path):
        path = tmp_path / "BUILD"
        with pytest.raises(ManifestNotFound) as exc:
            parse_manifest(path)
        assert exc.value.path == path
        assert str(path) in str(exc.value)

    def test_directory_is_not_a_manifest(self, tmp_path: Path):
        path = tmp_path / "BUILD"
        path.mkdir()
        with pytest.raises(ManifestNotFound):
            parse_manifest(path)

    def test_malformed_file_names_path(self, tmp_path: Path):
        path = tmp_path / "BUILD"
        path.write_text("paths = 3\n")
        with pytest.raises(ManifestMalformed) as exc:
            parse_manifest(path)
        assert exc.value.path == path
        assert exc.value.field == "paths"


class TestManifestMalformed:
    def test_reason_then_field(self):
        err = ManifestMalformed(SOURCE, "expected an array of strings", "libraries")
        assert err.path == SOURCE
        assert err.reason == "expected an array of strings"
        assert err.field == "libraries"
        assert "(field 'libraries')" in str(err)

    def test_field_optional(self):
        err = ManifestMalformed(SOURCE, "invalid TOML")
        assert err.field is None
        assert str(err) == f"Malformed manifest {SOURCE}: invalid TOML"
