"""Configuration models for Sophy."""

from __future__ import annotations

from pathlib import Path
from typing import Self

from pydantic import BaseModel, ConfigDict, Field


class ConfigBase(BaseModel):
    """Base class for Sophy configurations.

    Provides common functionality for loading from files with defaults.
    Subclasses must implement default_path() to specify their default location.
    """

    model_config = ConfigDict(extra="ignore")  # Forward compatibility

    @classmethod
    def default_path(cls) -> Path:
        """Return the default config file path for this config type.

        Subclasses must override this to provide their default location.

        Returns:
            Path to the default config file
        """
        raise NotImplementedError(f"{cls.__name__} must implement default_path()")

    @classmethod
    def load_or_default(cls, path: Path | str | None = None) -> Self:
        """Load config from path or use default path.

        A missing file at the default path yields an all-defaults config.

        Args:
            path: Path to config file, or None to use default

        Returns:
            Loaded config instance

        Raises:
            FileNotFoundError: If an explicit path does not exist
            ValueError: If file content is invalid
        """
        from sophy.core.config.loader import load_config

        if path is None:
            path = cls.default_path()
            if not Path(path).exists():
                return cls()
        return cls.model_validate(load_config(path))


class LocalAdapterConfig(BaseModel):
    """Local adapter configuration."""

    model_config = ConfigDict(extra="forbid")

    root: Path = Field(description="Directory all virtual paths are resolved under")

    encoding: str = Field(default="utf-8", description="Text encoding for str contents and reads")

    chunk_size: int = Field(
        default=64 * 1024, gt=0, description="Bytes moved per step by streaming operations"
    )

    atomic_prepend: bool = Field(
        default=True,
        description="Commit prepends with an atomic rename (all-or-nothing) "
        "instead of streaming over the target",
    )

    temp_dir: Path | None = Field(
        default=None, description="Staging directory for non-atomic prepends (system temp if unset)"
    )

    create_root: bool = Field(default=True, description="Create root if it does not exist")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    structured: bool = Field(default=False, description="Emit JSON lines instead of text")
    filename: str | None = Field(default=None, description="Log file (stdout when unset)")


class SophyConfig(ConfigBase):
    """Application-level configuration."""

    adapter: LocalAdapterConfig | None = None
    logging: LoggingConfig = LoggingConfig()

    @classmethod
    def default_path(cls) -> Path:
        """Default path for Sophy config."""
        return Path("sophy.yaml")
