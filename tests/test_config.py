"""
Tests for configuration loading — buildbox.yml parsing and validation.
"""

import textwrap
from pathlib import Path

import pytest

from buildbox.core.config.loader import (
    ConfigError,
    find_config_file,
    load_config,
    project_root,
)
from buildbox.core.use_cases.config_check import check_config


@pytest.fixture
def valid_config_yml(tmp_path: Path) -> Path:
    """Create a full buildbox.yml in a temp directory."""
    content = textwrap.dedent("""\
        project:
          services_path: my_services
          libraries_path: my_libraries
          cache_path: .cache/buildbox
        requirement_lock:
          my_package: "==1.0.0"
          my_other_package: "==2.0.0"
    """)
    path = tmp_path / "buildbox.yml"
    path.write_text(content)
    return path


class TestLoadConfig:
    """Tests for load_config()."""

    def test_load_valid_config(self, valid_config_yml: Path):
        config = load_config(valid_config_yml)
        assert config.project.services_path == Path("my_services")
        assert config.project.libraries_path == Path("my_libraries")
        assert config.project.cache_path == Path(".cache/buildbox")
        assert config.requirement_lock == {
            "my_package": "==1.0.0",
            "my_other_package": "==2.0.0",
        }

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        path = tmp_path / "buildbox.yml"
        path.write_text("")
        config = load_config(path)
        assert config.project.services_path == Path("services")
        assert config.project.libraries_path == Path("libraries")
        assert config.project.cache_path == Path(".buildbox")
        assert config.requirement_lock == {}

    def test_no_file_anywhere_gives_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        isolated = tmp_path / "isolated"
        isolated.mkdir()
        monkeypatch.chdir(isolated)
        config = load_config(None)
        assert config.requirement_lock == {}

    def test_missing_explicit_file_raises(self, tmp_path: Path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "nonexistent.yml")

    def test_invalid_yaml_raises(self, tmp_path: Path):
        path = tmp_path / "buildbox.yml"
        path.write_text(":: invalid: yaml: [")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(path)

    def test_non_mapping_raises(self, tmp_path: Path):
        path = tmp_path / "buildbox.yml"
        path.write_text("- just\n- a\n- list\n")
        with pytest.raises(ConfigError, match="Expected a YAML mapping"):
            load_config(path)

    def test_unquoted_numeric_lock_rejected(self, tmp_path: Path):
        path = tmp_path / "buildbox.yml"
        path.write_text("requirement_lock:\n  requests: 2.0\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)

    def test_unknown_project_key_rejected(self, tmp_path: Path):
        path = tmp_path / "buildbox.yml"
        path.write_text("project:\n  service_path: typo\n")
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(path)


class TestFindConfigFile:
    """Tests for find_config_file()."""

    def test_find_in_current_dir(self, tmp_path: Path):
        (tmp_path / "buildbox.yml").write_text("")
        result = find_config_file(tmp_path)
        assert result is not None
        assert result.name == "buildbox.yml"

    def test_find_in_parent_dir(self, tmp_path: Path):
        (tmp_path / "buildbox.yml").write_text("")
        subdir = tmp_path / "services" / "api"
        subdir.mkdir(parents=True)
        result = find_config_file(subdir)
        assert result is not None
        assert result.parent == tmp_path.resolve()

    def test_not_found_returns_none(self, tmp_path: Path):
        subdir = tmp_path / "deep" / "nested"
        subdir.mkdir(parents=True)
        assert find_config_file(subdir) is None


class TestProjectRoot:
    def test_from_config_path(self, valid_config_yml: Path):
        assert project_root(valid_config_yml) == valid_config_yml.parent.resolve()

    def test_without_config_is_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(tmp_path)
        assert project_root(None) == tmp_path.resolve()


class TestCheckConfig:
    def test_valid_project(self, sample_project: Path):
        result = check_config(sample_project / "buildbox.yml")
        assert result.valid
        assert result.warnings == []
        assert result.to_dict()["locked_requirements"] == 3

    def test_missing_directories_warn(self, valid_config_yml: Path):
        result = check_config(valid_config_yml)
        assert result.valid
        assert any("Services path" in w for w in result.warnings)
        assert any("Libraries path" in w for w in result.warnings)

    def test_empty_lock_is_an_error(self, tmp_path: Path):
        path = tmp_path / "buildbox.yml"
        path.write_text('requirement_lock:\n  flask: ""\n')
        result = check_config(path)
        assert not result.valid
        assert any("flask" in e for e in result.errors)

    def test_no_config(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(tmp_path)
        result = check_config(None)
        assert not result.valid
        assert "No buildbox.yml found." in result.errors
