"""Build configuration file loading.

Build configurations can be stored as YAML or JSON files:

    path: ../wasm_module
    features: [bulk_memory]
    env:
      LEVEL: 12
    release: true

A relative ``path`` is resolved against the directory containing the file.
"""

import json
from pathlib import Path
from typing import Any

import yaml

from wasm_build.builds.schema import BuildConfig

# Keys accepted in config files, mapped to BuildConfig fields
FILE_KEYS = {
    "path": "module_root",
    "features": "features",
    "env": "env_overrides",
    "release": "release",
}


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content as a dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping, got {type(data).__name__}")
    return data


def load_json(path: Path) -> dict[str, Any]:
    """Load a JSON file and return its contents as a dict.

    Args:
        path: Path to the JSON file.

    Returns:
        Parsed JSON content as a dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def parse_config_data(data: dict[str, Any]) -> BuildConfig:
    """Parse and validate config file data.

    Args:
        data: Dictionary using the file keys (path, features, env, release).

    Returns:
        Validated BuildConfig instance.

    Raises:
        ValueError: If the data uses unknown keys or lacks a path.
        pydantic.ValidationError: If values do not match the schema.
    """
    unknown = sorted(set(data) - set(FILE_KEYS))
    if unknown:
        raise ValueError(f"unknown option(s): {', '.join(unknown)}")
    if "path" not in data:
        raise ValueError("missing required option: path")

    return BuildConfig.model_validate(
        {FILE_KEYS[key]: value for key, value in data.items()}
    )


def load_build_config(path: Path) -> BuildConfig:
    """Load a build configuration from a YAML or JSON file.

    The format is chosen by extension (.json for JSON, anything else
    is read as YAML). The module path is made absolute relative to the
    file's directory.

    Args:
        path: Path to the config file.

    Returns:
        BuildConfig with an absolute module_root.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the content is not a mapping or is invalid.
        pydantic.ValidationError: If values do not match the schema.
    """
    data = load_json(path) if path.suffix.lower() == ".json" else load_yaml(path)
    config = parse_config_data(data)
    return config.resolved(path.resolve().parent)


__all__ = [
    "FILE_KEYS",
    "load_build_config",
    "load_json",
    "load_yaml",
    "parse_config_data",
]
