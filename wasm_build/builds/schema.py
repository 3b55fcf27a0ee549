"""Pydantic models for build configuration.

This module defines the validated configuration record a build is run
from. Front ends (config files, CLI flags, MCP tool arguments) all funnel
into BuildConfig before anything touches the toolchain.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Recognized feature names, in canonical encoding order
FEATURE_NAMES = ("atomics", "bulk_memory", "mutable_globals")


class TargetFeatures(BaseModel):
    """Closed set of WebAssembly target features.

    Attributes:
        atomics: Enable the atomics proposal.
        bulk_memory: Enable the bulk-memory proposal.
        mutable_globals: Enable the mutable-globals proposal.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    atomics: bool = False
    bulk_memory: bool = False
    mutable_globals: bool = False

    @classmethod
    def from_names(cls, names: list[str] | tuple[str, ...]) -> "TargetFeatures":
        """Build a feature set from a list of feature names.

        Args:
            names: Feature names, e.g. ["bulk_memory"].

        Returns:
            TargetFeatures with the named features enabled.

        Raises:
            ValueError: If a name is not a recognized feature.
        """
        enabled: dict[str, bool] = {}
        for name in names:
            if name not in FEATURE_NAMES:
                raise ValueError(
                    f"unknown feature '{name}' (expected one of: "
                    f"{', '.join(FEATURE_NAMES)})"
                )
            enabled[name] = True
        return cls(**enabled)

    def enabled(self) -> list[str]:
        """Return enabled feature names in canonical order."""
        return [name for name in FEATURE_NAMES if getattr(self, name)]


def _env_value_to_str(value: Any) -> str:
    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ValueError(
        f"expected a string, int, float or bool, found {type(value).__name__}"
    )


class BuildConfig(BaseModel):
    """Validated description of one build request.

    Attributes:
        module_root: Directory of the Cargo module to build. Relative paths
            are resolved against the invoking context at build time.
        features: Target features to enable.
        env_overrides: Ordered (name, value) environment overrides.
        release: Build in release mode instead of debug.
    """

    model_config = ConfigDict(extra="forbid")

    module_root: Path = Field(description="Path to the module directory")
    features: TargetFeatures = Field(default_factory=TargetFeatures)
    env_overrides: list[tuple[str, str]] = Field(
        default_factory=list,
        description="Ordered environment variable overrides",
    )
    release: bool = Field(default=False, description="Build in release mode")

    @field_validator("features", mode="before")
    @classmethod
    def coerce_feature_list(cls, v: Any) -> Any:
        """Accept a list of feature names as well as a mapping."""
        if isinstance(v, (list, tuple)):
            return TargetFeatures.from_names(list(v))
        return v

    @field_validator("env_overrides", mode="before")
    @classmethod
    def coerce_env_overrides(cls, v: Any) -> list[tuple[str, str]]:
        """Normalize mappings and pairs into ordered string pairs."""
        if v is None:
            return []
        items = v.items() if isinstance(v, dict) else v
        pairs: list[tuple[str, str]] = []
        for item in items:
            if isinstance(item, dict):
                if set(item) != {"name", "value"}:
                    raise ValueError(
                        "expected an env entry with 'name' and 'value' keys"
                    )
                name, value = item["name"], item["value"]
            elif isinstance(item, (list, tuple)) and len(item) == 2:
                name, value = item
            else:
                raise ValueError("expected key value pairs")
            if not isinstance(name, str):
                raise ValueError("expected env variable name to be a string")
            pairs.append((name, _env_value_to_str(value)))
        return pairs

    @field_validator("env_overrides")
    @classmethod
    def validate_env_names(cls, v: list[tuple[str, str]]) -> list[tuple[str, str]]:
        """Validate env variable names are usable in a process environment."""
        for name, value in v:
            if not name:
                raise ValueError("env variable name must not be empty")
            if "=" in name or "\0" in name:
                raise ValueError(f"invalid env variable name '{name}'")
            if "\0" in value:
                raise ValueError(f"env value for '{name}' must not contain NUL")
        return v

    def resolved(self, base_path: Path) -> "BuildConfig":
        """Return a copy with module_root made absolute.

        Args:
            base_path: Directory relative module roots are resolved against.

        Returns:
            New BuildConfig with an absolute module_root.
        """
        root = self.module_root.expanduser()
        if not root.is_absolute():
            root = base_path / root
        return self.model_copy(update={"module_root": root.resolve()})


__all__ = ["FEATURE_NAMES", "BuildConfig", "TargetFeatures"]
