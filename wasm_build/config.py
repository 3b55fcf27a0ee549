"""Configuration settings for wasm_build.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the WASM_BUILD_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="WASM_BUILD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Toolchain
    toolchain: str = Field(
        default="cargo",
        min_length=1,
        description="Toolchain executable used to build modules",
    )
    toolchain_channel: str | None = Field(
        default="+nightly",
        description="Toolchain channel selector (omitted when empty)",
    )
    target_triple: str = Field(
        default="wasm32-unknown-unknown",
        min_length=1,
        description="Target triple passed to --target",
    )
    build_std: str = Field(
        default="panic_abort,std",
        min_length=1,
        description="Crates rebuilt from source via -Z build-std",
    )

    # Outputs
    artifact_extension: str = Field(
        default="wasm",
        min_length=1,
        description="File extension of the produced artifact",
    )
    output_base: str = Field(
        default="target",
        min_length=1,
        description="Base output directory, relative to the module root",
    )
    write_build_log: bool = Field(
        default=True,
        description="Write a build log next to the build outputs",
    )

    # Operational
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    build_timeout: int | None = Field(
        default=None,
        ge=1,
        description="Timeout for a single toolchain run in seconds (unset = none)",
    )


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["Settings", "get_settings", "print_settings_json"]
