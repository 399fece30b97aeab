"""Configuration management for exo.

Configuration is read from ``~/.config/exo/config.yaml`` (or an explicit
file), overlaid with environment variables, and resolved into a frozen
``ExoConfig`` whose directories are all absolute. Notes receive the resolved
config through dependency injection and never read it from module state.
"""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic import model_validator

from exo.core.errors import ConfigError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "nvim"
DEFAULT_LOG_LEVEL = "warning"
DEFAULT_LOG_FORMAT = "text"
DEFAULT_LOG_OUTPUT = "stderr"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

CONFIG_FILENAME = "config.yaml"

# Sub-directories derived from data_home when not configured
_DEFAULT_SUBDIRS = {
    "template_dir": "templates",
    "periodic_dir": "periodic",
    "zettel_dir": "zettel",
    "projects_dir": "projects",
    "inbox_dir": "0-inbox",
    "idea_dir": "ideas",
}

# Accepted keys for get/set, mapped to (section, field)
CONFIG_KEYS: dict[str, tuple[str, str]] = {
    "editor": ("general", "editor"),
    "data_home": ("dir", "data_home"),
    "template_dir": ("dir", "template_dir"),
    "periodic_dir": ("dir", "periodic_dir"),
    "zettel_dir": ("dir", "zettel_dir"),
    "projects_dir": ("dir", "projects_dir"),
    "inbox_dir": ("dir", "inbox_dir"),
    "idea_dir": ("dir", "idea_dir"),
    "log.level": ("log", "level"),
    "log.format": ("log", "format"),
    "log.output": ("log", "output"),
}
_KEY_ALIASES = {
    "datahome": "data_home",
    "templatedir": "template_dir",
    "periodicdir": "periodic_dir",
    "zetteldir": "zettel_dir",
    "projectsdir": "projects_dir",
    "inboxdir": "inbox_dir",
    "ideadir": "idea_dir",
    "loglevel": "log.level",
    "logformat": "log.format",
    "logoutput": "log.output",
}


def get_env(key: str, default: str | None = None) -> str | None:
    """Get environment variable with optional default."""
    return os.getenv(key, default)


def sanitize_path(path: str, home: Path) -> str:
    """Expand ``~/`` and make relative paths absolute against ``home``."""
    if path == "~":
        return str(home)
    if path.startswith("~/"):
        path = str(home / path[2:])
    p = Path(os.path.normpath(path))
    if not p.is_absolute():
        p = home / p
    return str(p)


def default_data_home(home: Path) -> str:
    """Data home: $EXO_DATA_HOME, else ~/.local/share/exo."""
    data_home = get_env("EXO_DATA_HOME")
    if data_home:
        return sanitize_path(data_home, home)
    return str(home / ".local" / "share" / "exo")


def default_config_path() -> Path:
    """Location of the user config file (~/.config/exo/config.yaml)."""
    config_home = get_env("EXO_CONFIG_HOME")
    if config_home:
        return Path(config_home).expanduser() / CONFIG_FILENAME
    return Path.home() / ".config" / "exo" / CONFIG_FILENAME


def _home_from(info: ValidationInfo) -> Path:
    if info.context and info.context.get("home"):
        return Path(info.context["home"])
    return Path.home()


# --- Typed Configuration Models ---


class GeneralConfig(BaseModel):
    """General settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    editor: str = DEFAULT_EDITOR
    render_timeout: float | None = None

    @field_validator("editor")
    @classmethod
    def _require_editor(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("editor cannot be empty")
        return value

    @field_validator("render_timeout")
    @classmethod
    def _positive_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("render_timeout must be positive")
        return value


class DirConfig(BaseModel):
    """Resolved, absolute directory layout."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    data_home: str
    template_dir: str
    periodic_dir: str
    zettel_dir: str
    projects_dir: str
    inbox_dir: str
    idea_dir: str

    @model_validator(mode="before")
    @classmethod
    def _resolve_dirs(cls, data: Any, info: ValidationInfo) -> Any:
        if data is None:
            data = {}
        if not isinstance(data, dict):
            return data
        home = _home_from(info)
        resolved = dict(data)

        data_home = resolved.get("data_home") or default_data_home(home)
        resolved["data_home"] = sanitize_path(str(data_home), home)

        for key, name in _DEFAULT_SUBDIRS.items():
            value = resolved.get(key)
            if value:
                resolved[key] = sanitize_path(str(value), home)
            else:
                resolved[key] = str(Path(resolved["data_home"]) / name)
        return resolved


class LogConfig(BaseModel):
    """Logging settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    level: str = DEFAULT_LOG_LEVEL
    format: Literal["text", "json"] = DEFAULT_LOG_FORMAT
    output: Literal["stderr", "stdout", "file"] = DEFAULT_LOG_OUTPUT
    file: str | None = None

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.lower()
        if level == "warn":
            level = "warning"
        if level not in ("debug", "info", "warning", "error", "critical"):
            raise ValueError(f"unknown log level: {value}")
        return level

    @model_validator(mode="after")
    def _file_output_needs_path(self) -> "LogConfig":
        if self.output == "file" and not self.file:
            raise ValueError("log.file is required when log.output is 'file'")
        return self


class ExoConfig(BaseModel):
    """Typed configuration for exo.

    Frozen to prevent accidental mutation; extra fields are forbidden to
    catch typos in config.yaml.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    general: GeneralConfig = GeneralConfig()
    dir: DirConfig
    log: LogConfig = LogConfig()

    @model_validator(mode="before")
    @classmethod
    def _default_sections(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        # Empty YAML sections come through as None
        data = {k: v for k, v in data.items() if v is not None}
        data.setdefault("dir", {})
        return data


def build_config(raw: dict[str, Any] | None = None, home: Path | None = None) -> ExoConfig:
    """Validate a raw mapping into an ExoConfig.

    Raises:
        ConfigError: If the mapping does not describe a valid configuration.
    """
    context = {"home": home or Path.home()}
    try:
        return ExoConfig.model_validate(raw or {}, context=context)
    except PydanticValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def load_config(path: Path | str | None = None, home: Path | None = None) -> ExoConfig:
    """Load configuration from YAML, applying defaults and env overrides.

    Args:
        path: Explicit config file. When omitted the default location is used
            and a missing file simply means defaults.
        home: Home directory used for path expansion (defaults to Path.home()).

    Returns:
        Fully resolved ExoConfig.

    Raises:
        ConfigError: If the file is unreadable, not YAML, or invalid.
    """
    if path is not None:
        config_file = Path(path).expanduser()
        if not config_file.exists():
            raise ConfigError("Config file not accessible", path=config_file)
    else:
        config_file = default_config_path()

    raw: Any = None
    if config_file.exists():
        logger.debug(f"Loading config from {config_file}")
        try:
            with open(config_file, encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Invalid YAML in {config_file}: {e}")
            raise ConfigError(f"Invalid YAML: {e}", path=config_file) from e
        except OSError as e:
            raise ConfigError(f"Failed to read config file: {e}", path=config_file) from e
    else:
        logger.debug(f"No config file at {config_file}, using defaults")

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(
            f"config must be a mapping, got {type(raw).__name__}", path=config_file
        )

    editor = get_env("EDITOR")
    if editor:
        general = dict(raw.get("general") or {})
        general["editor"] = editor
        raw = {**raw, "general": general}

    return build_config(raw, home=home)


def save_config(config: ExoConfig, path: Path | str | None = None) -> Path:
    """Write configuration as YAML. Returns the file written."""
    config_file = Path(path).expanduser() if path else default_config_path()
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w", encoding="utf-8") as f:
            yaml.safe_dump(config.model_dump(), f, sort_keys=False)
    except OSError as e:
        raise ConfigError(f"Failed to write config file: {e}", path=config_file) from e
    logger.info(f"Configuration saved to {config_file}")
    return config_file


def _normalize_key(key: str) -> tuple[str, str]:
    normalized = key.strip().lower()
    normalized = _KEY_ALIASES.get(normalized, normalized)
    if normalized not in CONFIG_KEYS:
        raise ConfigError(f"Invalid configuration key: {key}")
    return CONFIG_KEYS[normalized]


def get_config_value(config: ExoConfig, key: str) -> str:
    """Read a single setting by its dotted or flat key."""
    section, field = _normalize_key(key)
    return str(getattr(getattr(config, section), field))


def set_config_value(
    config: ExoConfig, key: str, value: str, home: Path | None = None
) -> ExoConfig:
    """Return a copy of ``config`` with one setting changed."""
    section, field = _normalize_key(key)
    raw = config.model_dump()
    raw[section][field] = value
    return build_config(raw, home=home)


class JsonFormatter(logging.Formatter):
    """One JSON object per log record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["error"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(log_config: LogConfig | None = None) -> logging.Logger:
    """Configure and return logger."""
    log_config = log_config or LogConfig()

    if log_config.output == "file" and log_config.file:
        log_path = Path(log_config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
    elif log_config.output == "stdout":
        handler = logging.StreamHandler(sys.stdout)
    else:
        handler = logging.StreamHandler(sys.stderr)

    if log_config.format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

    logging.basicConfig(
        level=getattr(logging, log_config.level.upper(), logging.INFO),
        handlers=[handler],
        force=True,
    )
    return logging.getLogger("exo")
