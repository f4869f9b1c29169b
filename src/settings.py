"""Codec configuration."""

from __future__ import annotations

from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version
from typing import Annotated, Literal

from loguru import logger
from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


class CodecSettings(BaseSettings):
    """
    Codec configuration settings.

    Settings can be configured via:

    1. Environment variables (e.g., FITS_CODEC_LOG_LEVEL=DEBUG)
    2. .env file in the project root
    3. Default values defined below

    All settings use the FITS_CODEC_ prefix for environment variables.

    .. rubric:: Examples

    Keep partially written files around for inspection::

        export FITS_CODEC_REMOVE_PARTIAL_OUTPUT=false
    """

    log_level: Annotated[
        LogLevel,
        Field(
            default="INFO",
            description="Minimum level emitted by the stderr log sink",
        ),
    ]

    remove_partial_output: Annotated[
        bool,
        Field(
            default=True,
            description="If True, a file created by a failed write is deleted. "
            "If False, the partial file is left on disk.",
        ),
    ]

    verbose: Annotated[
        bool,
        Field(
            default=False,
            description="Log the call signature of every railway function at DEBUG level",
        ),
    ]

    model_config = SettingsConfigDict(
        env_prefix="FITS_CODEC_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        validate_assignment=True,
        extra="forbid",
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def codec_version(self) -> str:
        """
        Get the package version from package metadata.

        :return: The version from pyproject.toml, or "0.0.0" when the package
                 is not installed.
        """
        try:
            return version("fits-codec")
        except PackageNotFoundError:
            logger.warning("Could not determine package version, using fallback '0.0.0'")
            return "0.0.0"

    def log_startup_config(self) -> None:
        """Log the effective configuration."""
        logger.info("=" * 60)
        logger.info("FITS codec configuration:")
        logger.info(f"  Version: {self.codec_version}")
        logger.info(f"  Log level: {self.log_level}")
        logger.info(f"  Remove partial output: {self.remove_partial_output}")
        logger.info(f"  Verbose: {self.verbose}")
        logger.info("=" * 60)


@lru_cache
def get_settings() -> CodecSettings:
    """
    Get cached settings instance.

    :return: The codec settings instance.
    """
    return CodecSettings()  # type: ignore
