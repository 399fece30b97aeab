"""Unit tests for configuration loading and editing."""

import logging
from pathlib import Path

import pytest
import yaml

from exo.core.config import (
    DEFAULT_EDITOR,
    JsonFormatter,
    LogConfig,
    build_config,
    default_config_path,
    get_config_value,
    load_config,
    sanitize_path,
    save_config,
    set_config_value,
    setup_logging,
)
from exo.core.errors import ConfigError


@pytest.fixture
def restore_logging():
    """Restore root logging handlers after setup_logging()."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


class TestSanitizePath:
    """Tests for sanitize_path()."""

    def test_expands_tilde(self, tmp_path: Path):
        """~/ is expanded against the given home."""
        assert sanitize_path("~/notes", tmp_path) == str(tmp_path / "notes")

    def test_bare_tilde(self, tmp_path: Path):
        """~ alone is the home directory."""
        assert sanitize_path("~", tmp_path) == str(tmp_path)

    def test_relative_made_absolute(self, tmp_path: Path):
        """Relative paths are resolved against home."""
        assert sanitize_path("notes/../data", tmp_path) == str(tmp_path / "data")

    def test_absolute_unchanged(self, tmp_path: Path):
        """Absolute paths are kept."""
        assert sanitize_path("/srv/exo", tmp_path) == "/srv/exo"


class TestBuildConfig:
    """Tests for build_config() defaults and validation."""

    def test_defaults(self, tmp_path: Path):
        """Empty config resolves every directory under data_home."""
        config = build_config({}, home=tmp_path)
        data_home = tmp_path / ".local" / "share" / "exo"

        assert config.general.editor == DEFAULT_EDITOR
        assert config.dir.data_home == str(data_home)
        assert config.dir.template_dir == str(data_home / "templates")
        assert config.dir.periodic_dir == str(data_home / "periodic")
        assert config.dir.zettel_dir == str(data_home / "zettel")
        assert config.dir.projects_dir == str(data_home / "projects")
        assert config.dir.inbox_dir == str(data_home / "0-inbox")
        assert config.dir.idea_dir == str(data_home / "ideas")
        assert config.log.level == "warning"

    def test_data_home_from_env(self, tmp_path: Path, monkeypatch):
        """EXO_DATA_HOME sets the default data home."""
        monkeypatch.setenv("EXO_DATA_HOME", str(tmp_path / "exo-data"))
        config = build_config({}, home=tmp_path)
        assert config.dir.data_home == str(tmp_path / "exo-data")

    def test_explicit_subdir_is_kept(self, tmp_path: Path):
        """Configured sub-directories are not derived from data_home."""
        config = build_config(
            {"dir": {"data_home": "~/exo", "inbox_dir": "~/inbox"}}, home=tmp_path
        )
        assert config.dir.data_home == str(tmp_path / "exo")
        assert config.dir.inbox_dir == str(tmp_path / "inbox")
        assert config.dir.idea_dir == str(tmp_path / "exo" / "ideas")

    def test_empty_sections_allowed(self, tmp_path: Path):
        """Sections left empty in YAML fall back to defaults."""
        config = build_config({"general": None, "dir": None, "log": None}, home=tmp_path)
        assert config.general.editor == DEFAULT_EDITOR

    def test_unknown_key_rejected(self, tmp_path: Path):
        """Typos in config raise ConfigError."""
        with pytest.raises(ConfigError, match="Invalid configuration"):
            build_config({"general": {"editr": "vim"}}, home=tmp_path)

    def test_empty_editor_rejected(self, tmp_path: Path):
        """Editor cannot be blank."""
        with pytest.raises(ConfigError):
            build_config({"general": {"editor": "  "}}, home=tmp_path)

    def test_log_level_normalized(self, tmp_path: Path):
        """Log levels are case-insensitive and warn means warning."""
        config = build_config({"log": {"level": "WARN"}}, home=tmp_path)
        assert config.log.level == "warning"

    def test_log_file_output_requires_file(self, tmp_path: Path):
        """File output without a file path is invalid."""
        with pytest.raises(ConfigError):
            build_config({"log": {"output": "file"}}, home=tmp_path)

    def test_render_timeout_must_be_positive(self, tmp_path: Path):
        """A zero render timeout is invalid."""
        with pytest.raises(ConfigError):
            build_config({"general": {"render_timeout": 0}}, home=tmp_path)

    def test_config_is_frozen(self, tmp_path: Path):
        """Config cannot be mutated after loading."""
        config = build_config({}, home=tmp_path)
        with pytest.raises(Exception):
            config.general.editor = "vim"


class TestLoadConfig:
    """Tests for load_config()."""

    def test_default_path_uses_config_home(self, tmp_path: Path, monkeypatch):
        """EXO_CONFIG_HOME moves the default config file."""
        monkeypatch.setenv("EXO_CONFIG_HOME", str(tmp_path / "cfg"))
        assert default_config_path() == tmp_path / "cfg" / "config.yaml"

    def test_missing_default_file_gives_defaults(self, tmp_path: Path):
        """No config file means defaults."""
        config = load_config(home=tmp_path)
        assert config.general.editor == DEFAULT_EDITOR

    def test_missing_explicit_file_raises(self, tmp_path: Path):
        """An explicit config file must exist."""
        with pytest.raises(ConfigError, match="not accessible"):
            load_config(tmp_path / "missing.yaml", home=tmp_path)

    def test_loads_yaml(self, tmp_path: Path):
        """Values are read from the YAML file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("""
general:
  editor: vim
dir:
  data_home: ~/notes
log:
  level: debug
  format: json
""")
        config = load_config(config_file, home=tmp_path)

        assert config.general.editor == "vim"
        assert config.dir.data_home == str(tmp_path / "notes")
        assert config.log.level == "debug"
        assert config.log.format == "json"

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        """An empty config file means defaults."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")
        config = load_config(config_file, home=tmp_path)
        assert config.general.editor == DEFAULT_EDITOR

    def test_invalid_yaml_raises(self, tmp_path: Path):
        """Malformed YAML raises ConfigError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("invalid: yaml: content: [")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config(config_file, home=tmp_path)

    def test_non_mapping_raises(self, tmp_path: Path):
        """A YAML list is not a config."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="must be a mapping"):
            load_config(config_file, home=tmp_path)

    def test_editor_env_overrides_file(self, tmp_path: Path, monkeypatch):
        """$EDITOR wins over the configured editor."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("general:\n  editor: vim\n")
        monkeypatch.setenv("EDITOR", "code --wait")

        config = load_config(config_file, home=tmp_path)
        assert config.general.editor == "code --wait"


class TestSaveConfig:
    """Tests for save_config()."""

    def test_round_trip(self, tmp_path: Path):
        """A saved config loads back unchanged."""
        config = build_config({"general": {"editor": "vim"}}, home=tmp_path)
        path = save_config(config, tmp_path / "nested" / "config.yaml")

        assert path.exists()
        assert yaml.safe_load(path.read_text())["general"]["editor"] == "vim"
        assert load_config(path, home=tmp_path) == config


class TestConfigValues:
    """Tests for get_config_value() and set_config_value()."""

    def test_get_value(self, tmp_path: Path):
        """Flat and dotted keys are supported."""
        config = build_config({"log": {"level": "info"}}, home=tmp_path)
        assert get_config_value(config, "editor") == DEFAULT_EDITOR
        assert get_config_value(config, "log.level") == "info"

    def test_get_value_alias(self, tmp_path: Path):
        """Keys without underscores are accepted."""
        config = build_config({}, home=tmp_path)
        assert get_config_value(config, "DataHome") == config.dir.data_home

    def test_unknown_key(self, tmp_path: Path):
        """Unknown keys raise ConfigError."""
        config = build_config({}, home=tmp_path)
        with pytest.raises(ConfigError, match="Invalid configuration key"):
            get_config_value(config, "colour")

    def test_set_value_returns_new_config(self, tmp_path: Path):
        """Setting a value does not mutate the original."""
        config = build_config({}, home=tmp_path)
        updated = set_config_value(config, "editor", "hx", home=tmp_path)

        assert updated.general.editor == "hx"
        assert config.general.editor == DEFAULT_EDITOR

    def test_set_path_is_sanitized(self, tmp_path: Path):
        """Directory values are expanded like in the config file."""
        config = build_config({}, home=tmp_path)
        updated = set_config_value(config, "inbox_dir", "~/in", home=tmp_path)
        assert updated.dir.inbox_dir == str(tmp_path / "in")

    def test_set_invalid_value(self, tmp_path: Path):
        """Invalid values raise ConfigError."""
        config = build_config({}, home=tmp_path)
        with pytest.raises(ConfigError):
            set_config_value(config, "log.format", "xml", home=tmp_path)


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_returns_exo_logger(self, restore_logging):
        """The package logger is returned and the level applied."""
        logger = setup_logging(LogConfig(level="debug"))
        assert logger.name == "exo"
        assert logging.getLogger().level == logging.DEBUG

    def test_file_output(self, tmp_path: Path, restore_logging):
        """Logs go to the configured file."""
        log_file = tmp_path / "logs" / "exo.log"
        logger = setup_logging(LogConfig(level="info", output="file", file=str(log_file)))
        logger.info("hello file")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "hello file" in log_file.read_text()

    def test_json_formatter(self):
        """JSON formatter emits one object per record."""
        record = logging.LogRecord("exo.test", logging.INFO, __file__, 1, "hi %s", ("there",), None)
        line = JsonFormatter().format(record)
        assert '"msg": "hi there"' in line
        assert '"level": "info"' in line
