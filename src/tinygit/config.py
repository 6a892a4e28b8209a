"""User configuration for tinygit.

Settings live in an optional YAML file. Every field has a default, so a
missing file is equivalent to an empty one.

Resolution order for the file location:
1. TINYGIT_CONFIG environment variable (if set)
2. Default: ~/.config/tinygit/config.yaml
"""

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from tinygit.errors import format_validation_errors

# Default config file location
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "tinygit" / "config.yaml"

# Environment variable for a custom config file location
CONFIG_ENV_VAR = "TINYGIT_CONFIG"

DEFAULT_BRANCH = "main"
FALLBACK_BRANCH = "master"
USER_AGENT = "tinygit/1.0"
TIMEOUT_SECONDS = 30


class ConfigError(Exception):
    """Raised when the config file cannot be parsed or fails validation."""


class Settings(BaseModel):
    """Tunable knobs for reference resolution and downloads."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    default_branch: str = Field(
        default=DEFAULT_BRANCH,
        description="Branch used when the provider reports neither a release nor a default branch",
    )
    fallback_branch: str = Field(
        default=FALLBACK_BRANCH,
        description="Branch retried once when downloading default_branch fails",
    )
    user_agent: str = Field(default=USER_AGENT, description="User-Agent header for every request")
    timeout_seconds: int = Field(default=TIMEOUT_SECONDS, gt=0, description="Per-request timeout")
    codeberg_prefer_tar_gz: bool = Field(
        default=False,
        description="Download Codeberg archives as tar.gz instead of zip",
    )

    @field_validator("default_branch", "fallback_branch")
    @classmethod
    def validate_branch(cls, v: str) -> str:
        """Branch names must be non-empty and free of whitespace."""
        if not v or any(ch.isspace() for ch in v):
            msg = "branch name must be non-empty and contain no whitespace"
            raise ValueError(msg)
        return v


def get_config_path() -> Path:
    """Get the config file path, honoring TINYGIT_CONFIG."""
    env_value = os.environ.get(CONFIG_ENV_VAR)
    if env_value:
        return Path(env_value).expanduser()
    return DEFAULT_CONFIG_PATH


def load_settings(path: Path | None = None) -> Settings:
    """Load and validate settings from a YAML file.

    Args:
        path: Config file to read. Defaults to get_config_path().

    Returns:
        Validated Settings. Defaults when the file does not exist.

    Raises:
        ConfigError: If the file is not valid YAML or fails validation.
    """
    config_path = path or get_config_path()
    if not config_path.exists():
        return Settings()

    try:
        data = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in config '{config_path}': {e}"
        raise ConfigError(msg) from e

    if data is None:
        return Settings()

    if not isinstance(data, dict):
        msg = f"Invalid config '{config_path}': expected a mapping at top level"
        raise ConfigError(msg)

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        clean_errors = format_validation_errors(e)
        msg = f"Invalid config '{config_path}': {clean_errors}"
        raise ConfigError(msg) from e
