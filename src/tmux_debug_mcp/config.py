"""Configuration for tmux-debug-mcp.

Settings come from, in increasing priority: built-in defaults, a TOML file,
and TMUX_DEBUG_<SECTION>_<FIELD> environment variables.
"""
import logging
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import tomli_w
from pydantic import BaseModel, Field, field_validator

from .utils import get_config_dir

logger = logging.getLogger(__name__)

ENV_PREFIX = "TMUX_DEBUG"
CONFIG_FILE_ENV = f"{ENV_PREFIX}_CONFIG_FILE"

# Older variable names that still work; generated names take precedence
ENV_ALIASES: Dict[str, Tuple[str, str]] = {
    f"{ENV_PREFIX}_AUDIT": ("audit", "log_path"),
    f"{ENV_PREFIX}_AUDIT_FULL": ("audit", "full_capture_dir"),
    f"{ENV_PREFIX}_LOG_LEVEL": ("logging", "level"),
}

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


class TmuxConfig(BaseModel):
    """tmux session settings."""

    width: int = Field(200, gt=0, description="Session width in columns")
    height: int = Field(50, gt=0, description="Session height in rows")
    session_prefix: str = Field("debug", min_length=1, description="Session name prefix, PID is appended")
    binary: str = Field("tmux", min_length=1, description="tmux executable")


class AuditConfig(BaseModel):
    """Audit log settings. Empty paths disable the feature."""

    log_path: str = Field("", description="JSON Lines audit log file")
    full_capture_dir: str = Field("", description="Directory for full capture files")


class LoggingConfig(BaseModel):
    """Diagnostic logging settings (always written to stderr)."""

    level: str = Field("WARNING", description="DEBUG, INFO, WARNING or ERROR")

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR"):
            raise ValueError(f"unknown log level: {value}")
        return level


class Config(BaseModel):
    """Main configuration."""

    tmux: TmuxConfig = Field(default_factory=TmuxConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def default_config_path() -> Path:
    """Config file location: $TMUX_DEBUG_CONFIG_FILE, else the XDG default."""
    override = os.environ.get(CONFIG_FILE_ENV)
    if override:
        return Path(override).expanduser()
    return get_config_dir() / "config.toml"


def generate_env_var_name(section: str, field: str) -> str:
    """Environment variable for a config field, e.g. TMUX_DEBUG_TMUX_WIDTH."""
    return f"{ENV_PREFIX}_{section.upper()}_{field.upper()}"


def get_all_env_mappings() -> Dict[str, Tuple[str, str]]:
    """Map every generated environment variable to its (section, field)."""
    mappings = {}
    for section, section_field in Config.model_fields.items():
        for field in section_field.annotation.model_fields:
            mappings[generate_env_var_name(section, field)] = (section, field)
    return mappings


def _field_type(section: str, field: str) -> Optional[type]:
    section_model = Config.model_fields[section].annotation
    return section_model.model_fields[field].annotation


def _convert_env_value(value: str, target: Optional[type] = None) -> Union[bool, int, str]:
    """Convert an environment string to bool, int or str.

    With no target type booleans win over integers, so "0" is False.
    """
    lowered = value.strip().lower()

    if target is str:
        return value
    if target is None or target is bool:
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    if target is None or target is int:
        try:
            return int(value)
        except ValueError:
            pass
    return value


def load_all_env_overrides() -> Dict[str, Dict[str, Any]]:
    """Collect config overrides from the environment, grouped by section."""
    overrides: Dict[str, Dict[str, Any]] = {}

    # Aliases first so generated names overwrite them
    for env_var, (section, field) in ENV_ALIASES.items():
        if env_var in os.environ:
            value = _convert_env_value(os.environ[env_var], _field_type(section, field))
            overrides.setdefault(section, {})[field] = value

    for env_var, (section, field) in get_all_env_mappings().items():
        if env_var in os.environ:
            value = _convert_env_value(os.environ[env_var], _field_type(section, field))
            overrides.setdefault(section, {})[field] = value

    return overrides


def load_config(config_path: Optional[Union[str, Path]] = None) -> Config:
    """Load configuration.

    Args:
        config_path: TOML file to read. Defaults to $TMUX_DEBUG_CONFIG_FILE,
            then the XDG config location. A missing file means defaults.
    """
    if config_path is None:
        config_path = default_config_path()
    path = Path(config_path).expanduser()

    data: Dict[str, Any] = {}
    if path.is_file():
        logger.debug(f"Loading config from {path}")
        with open(path, "rb") as f:
            data = tomllib.load(f)

    for section, values in load_all_env_overrides().items():
        existing = data.get(section)
        data[section] = {**existing, **values} if isinstance(existing, dict) else values

    return Config(**data)


_config: Optional[Config] = None


def get_config() -> Config:
    """Process-wide config, loaded on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Optional[Config]) -> None:
    """Replace the process-wide config. None forces a reload on next use."""
    global _config
    _config = config


def dump_config_toml(config: Config) -> str:
    return tomli_w.dumps(config.model_dump())


def _format_env_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def dump_config_env(config: Config) -> str:
    """Render a config as KEY=value lines."""
    lines = []
    data = config.model_dump()
    for env_var, (section, field) in get_all_env_mappings().items():
        lines.append(f"{env_var}={_format_env_value(data[section][field])}")
    return "\n".join(lines)
