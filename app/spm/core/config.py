"""User configuration for spm.

The configuration lives in ``~/.config/spm/config.toml``. Every key is
optional; a missing file means all defaults.

Example:
    destination = "/"
    output = "package.spk"
    prefix = "/usr/local"
    confirm = true

    [colors]
    directory = "#fe28a2"
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from spm.core.paths import get_config_path
from spm.core.theme import ThemeColors


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigParseError(ConfigError):
    """Raised when the configuration file is not valid TOML."""


class ConfigValidationError(ConfigError):
    """Raised when the configuration content is invalid."""


class SpmConfig(BaseModel):
    """spm configuration.

    Attributes:
        destination: Default root directory packages are installed into.
        output: Default archive file written by ``spm build``.
        prefix: Default absolute prefix archives are built under.
        ledger_dir: Override for the install ledger directory.
        confirm: Ask before installing or removing a package.
        colors: Theme color overrides.
    """

    model_config = ConfigDict(extra="forbid")

    destination: Annotated[str, Field(description="Default install root")] = "/"
    output: Annotated[str, Field(description="Default archive path")] = "package.spk"
    prefix: Annotated[str, Field(description="Default build prefix")] = "/"
    ledger_dir: Annotated[Path | None, Field(description="Ledger directory override")] = None
    confirm: Annotated[bool, Field(description="Prompt before install/remove")] = True
    colors: Annotated[ThemeColors, Field(default_factory=ThemeColors)]

    @field_validator("prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Validate that the default prefix is absolute."""
        if not os.path.isabs(v):
            msg = f"prefix must be absolute, got {v!r}"
            raise ValueError(msg)
        return v

    @field_validator("destination", "output")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        """Validate that paths are not empty."""
        if not v.strip():
            msg = "path cannot be empty"
            raise ValueError(msg)
        return v


def load_config(path: Path | None = None) -> SpmConfig:
    """Load and validate the configuration file.

    Args:
        path: Path to the configuration file. If None, uses the default path.

    Returns:
        Validated SpmConfig. Defaults if the file does not exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigValidationError: If the content doesn't match the schema.
        ConfigError: If the file cannot be read.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        return SpmConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return SpmConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid config content in {config_path}: {e}") from e


def _config_to_dict(config: SpmConfig) -> dict[str, Any]:
    """Convert a config to a TOML-serializable dictionary (None values dropped)."""
    return config.model_dump(mode="json", exclude_none=True)


def save_config(config: SpmConfig, path: Path | None = None) -> Path:
    """Save the configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    in the same directory and then using os.replace() for atomic rename.

    Args:
        config: The configuration to save.
        path: Path to save to. If None, uses the default path.

    Returns:
        Path where the configuration was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def dump_config(config: SpmConfig) -> str:
    """Render a configuration as TOML text."""
    return tomli_w.dumps(_config_to_dict(config))
