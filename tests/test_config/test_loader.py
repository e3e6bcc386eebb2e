"""Unit tests for configuration loading functions.

Tests cover:
- YAML file loading (load_yaml)
- TOML file loading (load_toml)
- Configuration file search and loading (load_config)
- Command-line override merging (apply_overrides)
- Error handling for missing/invalid files
"""

from pathlib import Path

import pytest
import yaml

from release_sync.config.loader import apply_overrides, load_config, load_toml, load_yaml
from release_sync.config.models import SyncConfig
from release_sync.exceptions import ConfigurationError


class TestLoadYaml:
    """Tests for load_yaml function."""

    def test_load_valid_yaml(self, temp_dir: Path) -> None:
        """load_yaml parses valid YAML file into dictionary."""
        yaml_file = temp_dir / "release_sync.yml"
        yaml_file.write_text(yaml.safe_dump({"gitee": {"owner": "octo"}}))

        result = load_yaml(yaml_file)
        assert result["gitee"]["owner"] == "octo"

    def test_load_empty_yaml(self, temp_dir: Path) -> None:
        """load_yaml returns empty dict for empty YAML file."""
        yaml_file = temp_dir / "empty.yml"
        yaml_file.write_text("")

        assert load_yaml(yaml_file) == {}

    def test_load_missing_yaml(self, temp_dir: Path) -> None:
        """load_yaml raises ConfigurationError for missing file."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_yaml(temp_dir / "nonexistent.yml")
        assert "not found" in str(exc_info.value)
        assert exc_info.value.fix_hint is not None

    def test_load_invalid_yaml(self, temp_dir: Path) -> None:
        """load_yaml raises ConfigurationError for malformed YAML."""
        yaml_file = temp_dir / "invalid.yml"
        yaml_file.write_text("foo: [bar: baz")

        with pytest.raises(ConfigurationError) as exc_info:
            load_yaml(yaml_file)
        assert "Invalid YAML" in str(exc_info.value)

    def test_load_non_mapping_yaml(self, temp_dir: Path) -> None:
        """A top-level list is rejected."""
        yaml_file = temp_dir / "list.yml"
        yaml_file.write_text("- github\n- gitee\n")

        with pytest.raises(ConfigurationError) as exc_info:
            load_yaml(yaml_file)
        assert "mapping" in str(exc_info.value)


class TestLoadToml:
    """Tests for load_toml function."""

    def test_load_valid_toml(self, temp_dir: Path) -> None:
        toml_file = temp_dir / "release_sync.toml"
        toml_file.write_text('[github]\nowner = "octo"\nrepo = "app"\n')

        result = load_toml(toml_file)
        assert result == {"github": {"owner": "octo", "repo": "app"}}

    def test_load_missing_toml(self, temp_dir: Path) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            load_toml(temp_dir / "nonexistent.toml")
        assert "not found" in str(exc_info.value)

    def test_load_invalid_toml(self, temp_dir: Path) -> None:
        toml_file = temp_dir / "invalid.toml"
        toml_file.write_text("[github\nowner = ")

        with pytest.raises(ConfigurationError) as exc_info:
            load_toml(toml_file)
        assert "Invalid TOML" in str(exc_info.value)


class TestLoadConfig:
    """Tests for load_config function."""

    def test_defaults_when_no_file(self, temp_dir: Path) -> None:
        """No config file is fine: defaults are used."""
        config = load_config(project_root=temp_dir)

        assert isinstance(config, SyncConfig)
        assert config.github.token == ""
        assert config.timeouts.upload == 300

    def test_finds_config_in_config_dir(self, temp_dir: Path) -> None:
        (temp_dir / "config").mkdir()
        (temp_dir / "config" / "release_sync.yml").write_text(
            yaml.safe_dump({"gitee": {"owner": "octo", "repo": "app", "probe_retries": 2}})
        )

        config = load_config(project_root=temp_dir)

        assert config.gitee.owner == "octo"
        assert config.gitee.probe_retries == 2

    def test_finds_toml_in_root(self, temp_dir: Path) -> None:
        (temp_dir / "release_sync.toml").write_text("[timeouts]\nupload = 120\n")

        config = load_config(project_root=temp_dir)

        assert config.timeouts.upload == 120

    def test_explicit_relative_path(self, temp_dir: Path) -> None:
        (temp_dir / "custom.yaml").write_text(yaml.safe_dump({"github": {"owner": "me"}}))

        config = load_config(Path("custom.yaml"), project_root=temp_dir)

        assert config.github.owner == "me"

    def test_explicit_missing_file_raises(self, temp_dir: Path) -> None:
        """An explicitly requested file must exist."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(temp_dir / "missing.yml")
        assert "not found" in str(exc_info.value)

    def test_unsupported_format(self, temp_dir: Path) -> None:
        config_file = temp_dir / "release_sync.json"
        config_file.write_text("{}")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(config_file)
        assert "Unsupported config format" in str(exc_info.value)

    def test_invalid_values(self, temp_dir: Path) -> None:
        """Pydantic validation errors become ConfigurationError."""
        config_file = temp_dir / "release_sync.yml"
        config_file.write_text(yaml.safe_dump({"timeouts": {"upload": 5}}))

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(config_file)
        assert "Invalid configuration" in str(exc_info.value)

    def test_env_overrides_defaults(
        self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("RELEASE_SYNC_GITHUB__TOKEN", "from-env")

        config = load_config(project_root=temp_dir)

        assert config.github.token == "from-env"


class TestApplyOverrides:
    """Tests for apply_overrides function."""

    def test_sets_values(self) -> None:
        config = apply_overrides(SyncConfig(), {"gitee": {"owner": "octo", "token": "t"}})

        assert config.gitee.owner == "octo"
        assert config.gitee.token == "t"

    def test_none_and_empty_are_ignored(self) -> None:
        """Omitted options never blank out configured values."""
        base = apply_overrides(SyncConfig(), {"github": {"owner": "octo"}})

        config = apply_overrides(base, {"github": {"owner": None, "repo": ""}})

        assert config.github.owner == "octo"
        assert config.github.repo == ""

    def test_original_is_unchanged(self) -> None:
        base = SyncConfig()

        apply_overrides(base, {"github": {"owner": "octo"}})

        assert base.github.owner == ""

    def test_unknown_section(self) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            apply_overrides(SyncConfig(), {"bitbucket": {"token": "t"}})
        assert "bitbucket" in str(exc_info.value)

    def test_invalid_value(self) -> None:
        with pytest.raises(ConfigurationError):
            apply_overrides(SyncConfig(), {"gitee": {"probe_retries": 99}})
