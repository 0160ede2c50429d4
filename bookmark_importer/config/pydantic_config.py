"""
Pydantic-based configuration system for Bookmark Importer.

Holds the process-wide settings the import pipeline reads (tag limits,
history batching, logging) and exposes them through the settings provider
interface used by the importer.
"""

import json
import os
import sys
from pathlib import Path
from typing import Dict, Literal, Optional, Protocol, runtime_checkable

import toml
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..utils.error_handler import ConfigurationError

# Setting names understood by ConfigurationManager.get_int()
MAX_BOOKMARK_TAGS = "MAX_BOOKMARK_TAGS"
MAX_TAG_LENGTH = "MAX_TAG_LENGTH"
IMPORT_HISTORY_BATCH_SIZE = "IMPORT_HISTORY_BATCH_SIZE"

ENV_PREFIX = "BOOKMARK_IMPORTER_"


@runtime_checkable
class SettingsProvider(Protocol):
    """Read-only access to integer settings by name."""

    def get_int(self, name: str) -> int: ...


class TagsConfig(BaseModel):
    """Tag limits applied to imported bookmarks."""

    max_bookmark_tags: int = Field(
        default=15,
        ge=1,
        le=100,
        description="Maximum tags per bookmark",
    )
    max_tag_length: int = Field(
        default=22,
        ge=1,
        le=255,
        description="Maximum characters per tag",
    )


class HistoryConfig(BaseModel):
    """Import history settings."""

    batch_size: int = Field(
        default=200,
        ge=1,
        le=10000,
        description="History rows buffered before they are written",
    )

    @field_validator("batch_size")
    @classmethod
    def validate_batch_size(cls, v):
        """Provide performance warnings for extreme batch sizes."""
        if v > 2000:
            import warnings

            warnings.warn(
                f"Large history batch size ({v}) keeps many rows in memory "
                "during an import. Consider using 100-500.",
                UserWarning,
            )
        return v


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    log_file: Optional[str] = Field(
        default="bookmark_importer.log",
        description="Log file name (timestamped under logs/); empty disables",
    )
    console_output: bool = Field(default=True, description="Log to stdout")

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v


class ImporterConfig(BaseModel):
    """Main configuration model."""

    tags: TagsConfig = Field(default_factory=TagsConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class ConfigurationManager:
    """
    Manages loading and validation of configuration from multiple sources.

    Implements SettingsProvider so it can be handed to the importer directly.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to configuration file (TOML or JSON)

        Raises:
            ConfigurationError: If the configuration cannot be loaded
        """
        self._config: Optional[ImporterConfig] = None
        self._load_configuration(Path(config_path) if config_path else None)

    def _get_default_config_paths(self) -> list[Path]:
        """Get list of default configuration file paths to try."""
        if getattr(sys, "frozen", False):
            app_dir = Path(sys.executable).parent
            return [
                app_dir / "config" / "importer_config.toml",
                app_dir / "config" / "importer_config.json",
            ]

        config_dir = Path(__file__).parent
        project_root = config_dir.parent.parent
        return [
            config_dir / "importer_config.toml",
            config_dir / "importer_config.json",
            project_root / "importer_config.toml",
            project_root / "importer_config.json",
        ]

    def _load_configuration(self, config_path: Optional[Path] = None) -> None:
        """Load configuration from file or use defaults."""
        config_data: Dict = {}

        if config_path:
            config_data = self._load_config_file(config_path)
        else:
            for path in self._get_default_config_paths():
                if path.exists():
                    config_data = self._load_config_file(path)
                    break

        self._apply_env_overrides(config_data)

        try:
            self._config = ImporterConfig(**config_data)
        except ValidationError as e:
            raise ConfigurationError(format_config_error(e)) from e

    def _load_config_file(self, config_path: Path) -> Dict:
        """Load configuration from TOML or JSON file."""
        if not config_path.exists():
            raise ConfigurationError(
                format_config_error(FileNotFoundError(2, "Not found", str(config_path)))
            )

        try:
            if config_path.suffix.lower() == ".toml":
                return toml.load(config_path)
            elif config_path.suffix.lower() == ".json":
                with open(config_path, "r", encoding="utf-8") as f:
                    return json.load(f)
        except (toml.TomlDecodeError, json.JSONDecodeError, OSError) as e:
            raise ConfigurationError(
                f"Failed to load configuration from {config_path}: {e}"
            ) from e

        raise ConfigurationError(
            f"Unsupported configuration file format: {config_path.suffix}"
        )

    def _apply_env_overrides(self, config_data: Dict) -> None:
        """Apply BOOKMARK_IMPORTER_* environment variables."""
        overrides = {
            f"{ENV_PREFIX}{MAX_BOOKMARK_TAGS}": ("tags", "max_bookmark_tags"),
            f"{ENV_PREFIX}{MAX_TAG_LENGTH}": ("tags", "max_tag_length"),
            f"{ENV_PREFIX}{IMPORT_HISTORY_BATCH_SIZE}": ("history", "batch_size"),
            f"{ENV_PREFIX}LOG_LEVEL": ("logging", "level"),
        }

        for env_var, (section, key) in overrides.items():
            value = os.getenv(env_var)
            if value:
                config_data.setdefault(section, {})[key] = value

    @property
    def config(self) -> ImporterConfig:
        """Get the current configuration."""
        if not self._config:
            raise RuntimeError("Configuration not loaded")
        return self._config

    def get_int(self, name: str) -> int:
        """
        Read an integer setting by name.

        Args:
            name: One of MAX_BOOKMARK_TAGS, MAX_TAG_LENGTH,
                IMPORT_HISTORY_BATCH_SIZE

        Raises:
            ConfigurationError: If the setting is unknown
        """
        settings = {
            MAX_BOOKMARK_TAGS: self.config.tags.max_bookmark_tags,
            MAX_TAG_LENGTH: self.config.tags.max_tag_length,
            IMPORT_HISTORY_BATCH_SIZE: self.config.history.batch_size,
        }

        try:
            return settings[name]
        except KeyError:
            raise ConfigurationError(f"Unknown integer setting: {name}") from None

    def create_sample_config(self, output_path: Path, format: str = "toml") -> None:
        """Create a sample configuration file."""
        sample_config = {
            "tags": {"max_bookmark_tags": 15, "max_tag_length": 22},
            "history": {"batch_size": 200},
            "logging": {
                "level": "INFO",
                "log_file": "bookmark_importer.log",
                "console_output": True,
            },
        }

        if format.lower() == "toml":
            with open(output_path, "w", encoding="utf-8") as f:
                toml.dump(sample_config, f)
        elif format.lower() == "json":
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(sample_config, f, indent=2)
        else:
            raise ValueError(f"Unsupported format: {format}")


class ConfigurationErrorFormatter:
    """Formats Pydantic validation errors into user-friendly messages."""

    @staticmethod
    def format_validation_error(error: ValidationError) -> str:
        """
        Convert Pydantic ValidationError into a user-friendly error message.

        Args:
            error: Pydantic ValidationError instance

        Returns:
            Formatted error message
        """
        error_messages = []

        for error_detail in error.errors():
            location = ConfigurationErrorFormatter._format_error_location(
                error_detail["loc"]
            )
            error_messages.append(
                ConfigurationErrorFormatter._format_by_error_type(
                    location,
                    error_detail["type"],
                    error_detail,
                    error_detail.get("input", "N/A"),
                )
            )

        header = "Configuration Validation Failed:\n"
        separator = "-" * 60 + "\n"
        footer = (
            "\n\nTips:\n"
            "- Check the configuration file format (TOML or JSON)\n"
            "- Ensure numeric values are within the allowed ranges"
        )

        return header + separator + "\n".join(error_messages) + footer

    @staticmethod
    def _format_error_location(location: tuple) -> str:
        """Format the error location path."""
        if not location:
            return "Configuration"

        path_parts = []
        for part in location:
            if isinstance(part, str):
                path_parts.append(part)
            else:
                path_parts.append(f"[{part}]")

        return " -> ".join(path_parts)

    @staticmethod
    def _format_by_error_type(
        location: str, error_type: str, error_detail: dict, input_value
    ) -> str:
        """Format error message based on Pydantic error type."""
        if error_type == "missing":
            return f"x {location}: Required field is missing"

        elif error_type in [
            "greater_than_equal",
            "less_than_equal",
            "greater_than",
            "less_than",
        ]:
            ctx = error_detail.get("ctx", {})
            limit = next(iter(ctx.values()), "limit")
            operator = {
                "greater_than_equal": ">=",
                "less_than_equal": "<=",
                "greater_than": ">",
                "less_than": "<",
            }[error_type]
            return f"x {location}: Value must be {operator} {limit} (got: {input_value})"

        elif error_type == "literal_error":
            expected = error_detail.get("ctx", {}).get("expected", "valid option")
            return f"x {location}: Must be one of {expected} (got: {input_value})"

        else:
            msg = error_detail.get("msg", "Invalid configuration value")
            return f"x {location}: {msg} (got: {input_value})"


def format_config_error(error: Exception) -> str:
    """
    Format any configuration-related error into a user-friendly message.

    Args:
        error: Exception that occurred during configuration

    Returns:
        Formatted error message
    """
    if isinstance(error, ValidationError):
        return ConfigurationErrorFormatter.format_validation_error(error)

    elif isinstance(error, FileNotFoundError):
        return (
            "Configuration File Not Found:\n"
            f"x Could not find configuration file: {error.filename}\n\n"
            "Solutions:\n"
            "- Create a configuration file with create_sample_config()\n"
            "- Omit the path to use the default configuration"
        )

    else:
        return f"Unexpected Configuration Error:\nx {error}"
