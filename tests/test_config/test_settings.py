"""Tests for BuilderSettings and settings file loading."""

import logging
from pathlib import Path

import pytest

from sofle_build.config.settings import (
    DEFAULT_BOARD,
    DEFAULT_IMAGE,
    BuilderSettings,
    default_config_paths,
    load_settings,
)
from sofle_build.core.errors import ConfigError


class TestBuilderSettingsDefaults:
    """Test default values and validation."""

    def test_defaults(self):
        """Test default values match the standard Sofle build."""
        settings = BuilderSettings()

        assert settings.board == DEFAULT_BOARD == "nice_nano_v2"
        assert settings.image == DEFAULT_IMAGE == "zmkfirmware/zmk-build-arm:stable"
        assert settings.config_dir == Path("config")
        assert settings.output_dir == Path("firmware")
        assert settings.workspace == "/workspace"
        assert settings.log_level == "WARNING"
        assert settings.docker_user_mapping is False
        assert settings.icon_mode == "emoji"

    def test_log_level_normalized(self):
        settings = BuilderSettings(log_level="debug")

        assert settings.log_level == "DEBUG"
        assert settings.get_log_level_int() == logging.DEBUG

    @pytest.mark.parametrize(
        "field, value",
        [
            ("board", ""),
            ("board", "nice nano"),
            ("image", "   "),
            ("workspace", "relative/path"),
            ("log_level", "LOUD"),
            ("icon_mode", "ascii"),
        ],
    )
    def test_invalid_values_rejected(self, field, value):
        """Test invalid values raise a validation error."""
        with pytest.raises(ValueError):
            BuilderSettings(**{field: value})

    def test_workspace_trailing_slash_stripped(self):
        assert BuilderSettings(workspace="/ws/").workspace == "/ws"


class TestEnvironmentOverrides:
    """Test SOFLE_BUILD_ environment variables."""

    def test_env_variable_sets_board(self, monkeypatch):
        monkeypatch.setenv("SOFLE_BUILD_BOARD", "nice_nano")

        assert BuilderSettings().board == "nice_nano"

    def test_env_overrides_file_values(self, tmp_path, monkeypatch):
        """Test environment variables win over values from the YAML file."""
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("board: from_file\nimage: file/image:1\n")
        monkeypatch.setenv("SOFLE_BUILD_BOARD", "from_env")

        settings = load_settings(config_file)

        assert settings.board == "from_env"
        assert settings.image == "file/image:1"


class TestLoadSettings:
    """Test load_settings file discovery and override handling."""

    def test_no_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        settings = load_settings()

        assert settings.board == DEFAULT_BOARD

    def test_explicit_file(self, tmp_path):
        config_file = tmp_path / "custom.yaml"
        config_file.write_text(
            "board: nrfmicro_13\noutput_dir: out\ndocker_user_mapping: true\n"
        )

        settings = load_settings(config_file)

        assert settings.board == "nrfmicro_13"
        assert settings.output_dir == Path("out")
        assert settings.docker_user_mapping is True

    def test_explicit_file_missing(self, tmp_path):
        """Test a missing --config file is an error, not a silent fallback."""
        with pytest.raises(ConfigError, match="Settings file not found"):
            load_settings(tmp_path / "nope.yaml")

    def test_project_file_discovered(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "sofle-build.yaml").write_text("image: local/zmk:dev\n")

        assert load_settings().image == "local/zmk:dev"

    def test_xdg_file_discovered(self, tmp_path, monkeypatch):
        """Test the user settings file under XDG_CONFIG_HOME is used."""
        monkeypatch.chdir(tmp_path)
        xdg_dir = tmp_path / "xdg" / "sofle-build"
        xdg_dir.mkdir(parents=True)
        (xdg_dir / "config.yaml").write_text("board: from_xdg\n")

        assert load_settings().board == "from_xdg"

    def test_empty_file_uses_defaults(self, tmp_path):
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")

        assert load_settings(config_file).board == DEFAULT_BOARD

    def test_invalid_yaml(self, tmp_path):
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("board: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_settings(config_file)

    def test_non_mapping_top_level(self, tmp_path):
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- board\n- image\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_settings(config_file)

    def test_invalid_value_in_file(self, tmp_path):
        config_file = tmp_path / "invalid.yaml"
        config_file.write_text("log_level: LOUD\n")

        with pytest.raises(ConfigError, match="Invalid settings"):
            load_settings(config_file)

    def test_cli_overrides_win(self, tmp_path):
        """Test command-line overrides take precedence over file values."""
        config_file = tmp_path / "settings.yaml"
        config_file.write_text("board: from_file\n")

        settings = load_settings(config_file, board="from_cli", image=None)

        assert settings.board == "from_cli"
        assert settings.image == DEFAULT_IMAGE

    def test_invalid_cli_override(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ConfigError):
            load_settings(board="two words")


def test_default_config_paths_order(tmp_path, monkeypatch):
    """Test the explicit path is searched first, then project, then XDG."""
    monkeypatch.chdir(tmp_path)
    explicit = tmp_path / "explicit.yaml"

    paths = default_config_paths(explicit)

    assert paths[0] == explicit.resolve()
    assert paths[1].name == "sofle-build.yaml"
    assert paths[2].name == ".sofle-build.yml"
    assert paths[3] == tmp_path / "xdg" / "sofle-build" / "config.yaml"
