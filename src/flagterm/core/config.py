"""
Configuration module for flagterm.

Supports loading from YAML/JSON files with environment variable overrides.
Default values are loaded from defaults.yaml for maintainability.
"""

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

# Path to the default configuration file
_DEFAULTS_CONFIG_PATH = Path(__file__).parent / "defaults.yaml"

# Cache for default values
_defaults_cache: dict[str, Any] | None = None


def _load_defaults() -> dict[str, Any]:
    """Load default configuration values from defaults.yaml."""
    global _defaults_cache

    if _defaults_cache is not None:
        return _defaults_cache

    if not _DEFAULTS_CONFIG_PATH.exists():
        logger.warning(f"Defaults config not found: {_DEFAULTS_CONFIG_PATH}")
        _defaults_cache = {}
        return _defaults_cache

    try:
        content = _DEFAULTS_CONFIG_PATH.read_text(encoding="utf-8")
        _defaults_cache = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse defaults config: {e}")
        _defaults_cache = {}

    return _defaults_cache


def _get_default(section: str, key: str, fallback: Any = None) -> Any:
    """Get a default value from the defaults config."""
    defaults = _load_defaults()
    section_defaults = defaults.get(section, {})
    return section_defaults.get(key, fallback)


@dataclass
class PromptConfig:
    """Configuration for the prompt and welcome banner."""

    symbol: str = field(default_factory=lambda: _get_default("prompt", "symbol", "$"))
    color: bool = field(default_factory=lambda: _get_default("prompt", "color", True))
    welcome: bool = field(default_factory=lambda: _get_default("prompt", "welcome", True))


@dataclass
class CompletionConfig:
    """Configuration for tab completion output."""

    indent: int = field(default_factory=lambda: _get_default("completion", "indent", 4))


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = field(default_factory=lambda: _get_default("logging", "level", "WARNING"))
    format: str = field(
        default_factory=lambda: _get_default(
            "logging", "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    )
    file: str = field(default_factory=lambda: _get_default("logging", "file", ""))


@dataclass
class FlagtermConfig:
    """Main configuration class for flagterm."""

    prompt: PromptConfig = field(default_factory=PromptConfig)
    completion: CompletionConfig = field(default_factory=CompletionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: Path | str) -> "FlagtermConfig":
        """
        Load configuration from a YAML or JSON file.

        Args:
            path: Path to the configuration file (.yaml, .yml, or .json)

        Returns:
            FlagtermConfig instance with loaded values

        Raises:
            FileNotFoundError: If the config file doesn't exist
            ValueError: If the file format is unsupported, the file cannot be
                        parsed, or it names unknown settings
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        content = path.read_text(encoding="utf-8")

        if path.suffix in (".yaml", ".yml"):
            try:
                data = yaml.safe_load(content) or {}
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in config file {path}: {e}") from e
        elif path.suffix == ".json":
            data = json.loads(content) if content.strip() else {}
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")

        try:
            return cls._from_dict(data)
        except TypeError as e:
            raise ValueError(f"Invalid setting in config file {path}: {e}") from e

    @classmethod
    def _from_dict(cls, data: dict) -> "FlagtermConfig":
        """Create FlagtermConfig from a dictionary."""
        config = cls()

        if "prompt" in data:
            config.prompt = PromptConfig(**data["prompt"])
        if "completion" in data:
            config.completion = CompletionConfig(**data["completion"])
        if "logging" in data:
            config.logging = LoggingConfig(**data["logging"])

        return config

    def apply_env_overrides(self) -> "FlagtermConfig":
        """
        Apply environment variable overrides to the configuration.

        Environment variables follow the pattern: FLAGTERM_<SECTION>_<KEY>
        Examples:
            - FLAGTERM_PROMPT_SYMBOL
            - FLAGTERM_PROMPT_COLOR
            - FLAGTERM_LOGGING_LEVEL

        Returns:
            Self with environment overrides applied
        """
        env_mappings = {
            # Prompt config
            "FLAGTERM_PROMPT_SYMBOL": ("prompt", "symbol", str),
            "FLAGTERM_PROMPT_COLOR": ("prompt", "color", _parse_bool),
            "FLAGTERM_PROMPT_WELCOME": ("prompt", "welcome", _parse_bool),
            # Completion config
            "FLAGTERM_COMPLETION_INDENT": ("completion", "indent", int),
            # Logging config
            "FLAGTERM_LOGGING_LEVEL": ("logging", "level", str),
            "FLAGTERM_LOGGING_FILE": ("logging", "file", str),
        }

        for env_var, (section, key, converter) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                section_obj = getattr(self, section)
                setattr(section_obj, key, converter(value))

        return self

    def to_dict(self) -> dict:
        """Convert configuration to a dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Serialize configuration to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)


def _parse_bool(value: str) -> bool:
    """Parse a string to boolean."""
    return value.lower() in ("true", "1", "yes", "on")


def load_config(config_path: Optional[Path | str] = None, apply_env: bool = True) -> FlagtermConfig:
    """
    Load configuration with optional environment variable overrides.

    Args:
        config_path: Optional path to config file. If None, uses defaults.
        apply_env: Whether to apply environment variable overrides.

    Returns:
        FlagtermConfig instance
    """
    if config_path:
        config = FlagtermConfig.from_file(config_path)
    else:
        config = FlagtermConfig()

    if apply_env:
        config.apply_env_overrides()

    return config
