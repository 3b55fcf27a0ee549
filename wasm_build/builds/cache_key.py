"""Output directory derivation for builds.

The toolchain only disambiguates cached outputs by output directory, not
by environment content. Each distinct sequence of environment overrides
therefore gets its own directory under the output base, named by
concatenating ``_<name>_<value>`` for every override in declaration order.

Underscores inside names and values are escaped (``RUST_LOG`` becomes
``RUST%5FLOG``), so each directory name maps back to one override
sequence. Reordered overrides map to different directories; they are not
deduplicated.
"""

from __future__ import annotations

from collections.abc import Iterable

DEFAULT_OUTPUT_BASE = "target"

# Escaped so a derived name stays one path segment and "_" only
# delimits names from values
_ESCAPES = str.maketrans({"%": "%25", "/": "%2F", "\\": "%5C", "_": "%5F"})


def escape_segment(text: str) -> str:
    """Escape separators in a directory name component.

    Args:
        text: Override name or value.

    Returns:
        Text with '%', '/', '\\' and '_' percent-escaped.
    """
    return text.translate(_ESCAPES)


def env_suffix(env_overrides: Iterable[tuple[str, str]]) -> str:
    """Compose the directory suffix for a sequence of overrides.

    Args:
        env_overrides: Ordered (name, value) pairs.

    Returns:
        Concatenation of ``_<name>_<value>`` for every pair, in order.
    """
    return "".join(
        f"_{escape_segment(name)}_{escape_segment(value)}"
        for name, value in env_overrides
    )


def derive_target_dir(
    env_overrides: Iterable[tuple[str, str]],
    output_base: str = DEFAULT_OUTPUT_BASE,
) -> str:
    """Derive the output directory for a configuration.

    Args:
        env_overrides: Ordered (name, value) pairs from the configuration.
        output_base: Base directory, relative to the module root.

    Returns:
        Relative directory such as ``target/_LEVEL_12``.
    """
    return f"{output_base.rstrip('/')}/{env_suffix(env_overrides)}"


__all__ = [
    "DEFAULT_OUTPUT_BASE",
    "derive_target_dir",
    "env_suffix",
    "escape_segment",
]
