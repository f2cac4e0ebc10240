"""Configuration management for todotxt."""

import logging
import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import List, Mapping, Optional, TextIO

import yaml


logger = logging.getLogger(__name__)

TRACK_ENV_VAR = "TODOTXT_TRACK"
CONFIG_ENV_VAR = "TODOTXT_CONFIG"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


@dataclass
class ConfigModel:
    """Global configuration model for todotxt."""

    # File locations
    data_dir: str = "~/.todo"
    todo_file: str = "~/.todo/todo.txt"

    # Export settings
    markdown_heading: str = "Todos"

    # Annotation tracking: None means decide from the session type
    track_annotations: Optional[bool] = None

    # Source scanning
    scan_extensions: List[str] = field(default_factory=lambda: [".py"])
    scan_markers: List[str] = field(default_factory=lambda: ["TODO", "FIXME"])
    ignored_dirs: List[str] = field(
        default_factory=lambda: [".git", "__pycache__", ".venv", "venv", "build", "dist", ".tox"]
    )

    def __post_init__(self):
        """Expand user paths."""
        self.data_dir = os.path.expanduser(self.data_dir)
        self.todo_file = os.path.expanduser(self.todo_file)

    def to_yaml(self) -> str:
        """Serialize config to YAML."""
        data = {
            "data_dir": self.data_dir,
            "todo_file": self.todo_file,
            "markdown_heading": self.markdown_heading,
            "track_annotations": self.track_annotations,
            "scan_extensions": self.scan_extensions,
            "scan_markers": self.scan_markers,
            "ignored_dirs": self.ignored_dirs,
        }
        return yaml.dump(data, default_flow_style=False)

    @classmethod
    def from_yaml(cls, yaml_str: str) -> "ConfigModel":
        """Deserialize config from YAML, ignoring unknown keys."""
        data = yaml.safe_load(yaml_str) or {}
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a YAML mapping")

        known = {f.name for f in fields(cls)}
        for key in sorted(set(data) - known):
            logger.warning("Ignoring unknown configuration key %r", key)

        return cls(**{k: v for k, v in data.items() if k in known})

    def get_todo_path(self) -> Path:
        """Get the default todo.txt path."""
        return Path(self.todo_file)

    def get_config_path(self) -> Path:
        """Get the config file path."""
        return Path(self.data_dir) / "config.yaml"


class Config:
    """Configuration manager for todotxt."""

    _instance: Optional[ConfigModel] = None

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> ConfigModel:
        """Load configuration from file, falling back to defaults."""
        if cls._instance is not None:
            return cls._instance

        config = ConfigModel()

        if config_path is None:
            env_path = os.environ.get(CONFIG_ENV_VAR)
            config_path = Path(env_path) if env_path else config.get_config_path()
        config_path = Path(config_path)

        if config_path.exists():
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    config = ConfigModel.from_yaml(f.read())
                logger.debug("Loaded configuration from %s", config_path)
            except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
                logger.warning("Failed to load config from %s: %s; using defaults", config_path, e)
                config = ConfigModel()
        else:
            logger.debug("No configuration at %s; using defaults", config_path)

        cls._instance = config
        return config

    @classmethod
    def save(cls, config: ConfigModel, config_path: Optional[Path] = None) -> None:
        """Save configuration to file."""
        if config_path is None:
            config_path = config.get_config_path()
        config_path = Path(config_path)

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(config.to_yaml())
        logger.debug("Configuration saved to %s", config_path)

    @classmethod
    def get(cls) -> ConfigModel:
        """Get the current configuration instance."""
        if cls._instance is None:
            cls._instance = cls.load()
        return cls._instance

    @classmethod
    def reload(cls, config_path: Optional[Path] = None) -> ConfigModel:
        """Reload configuration from file."""
        cls._instance = None
        return cls.load(config_path)


def get_config() -> ConfigModel:
    """Get the current configuration."""
    return Config.get()


def load_config(config_path: Optional[Path] = None) -> ConfigModel:
    """Load configuration from file."""
    return Config.load(config_path)


def save_config(config: ConfigModel, config_path: Optional[Path] = None) -> None:
    """Save configuration to file."""
    Config.save(config, config_path)


def is_interactive_session(stream: Optional[TextIO] = None) -> bool:
    """Best-effort check for an interactive (foreground) Python session."""
    if hasattr(sys, "ps1") or sys.flags.interactive:
        return True
    stream = sys.stdin if stream is None else stream
    try:
        return bool(stream is not None and stream.isatty())
    except (AttributeError, ValueError):
        # Closed or replaced streams
        return False


def resolve_tracking_enabled(
    override: Optional[bool] = None,
    environ: Optional[Mapping[str, str]] = None,
    config: Optional[ConfigModel] = None,
    stream: Optional[TextIO] = None,
) -> bool:
    """Decide once whether annotation hits should be counted.

    Precedence: explicit ``override``, then the ``TODOTXT_TRACK``
    environment variable, then ``config.track_annotations``, then whether
    the session is interactive.

    Args:
        override: Explicit decision from the caller
        environ: Environment mapping (defaults to ``os.environ``)
        config: Configuration to consult (not loaded implicitly)
        stream: Stream used for TTY detection (defaults to stdin)

    Returns:
        True if registrations should increment hit counts
    """
    if override is not None:
        return bool(override)

    environ = os.environ if environ is None else environ
    raw = environ.get(TRACK_ENV_VAR)
    if raw is not None:
        value = raw.strip().lower()
        if value in _TRUTHY:
            return True
        if value in _FALSY:
            return False
        logger.warning("Ignoring unrecognised %s value %r", TRACK_ENV_VAR, raw)

    if config is not None and config.track_annotations is not None:
        return bool(config.track_annotations)

    return is_interactive_session(stream)
