"""Artifact resolution for builds.

This module handles:
- Computing where the toolchain leaves its artifact for a configuration
- Matching the expected artifact with an explicit exactly-one contract
- Computing artifact checksums

A successful toolchain run must leave exactly one artifact in the
expected directory. Several matches are reported, never disambiguated.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from wasm_build.builds.errors import ArtifactResolutionError
from wasm_build.types import ArtifactInfo

logger = logging.getLogger(__name__)

# Default chunk size for hashing
HASH_CHUNK_SIZE = 64 * 1024  # 64KB


def artifact_search_dir(
    module_root: Path,
    target_dir: str,
    target_triple: str,
    release: bool,
) -> Path:
    """Return the directory the toolchain places the artifact in.

    Args:
        module_root: Absolute module directory.
        target_dir: Output directory relative to the module root.
        target_triple: Target triple the module was built for.
        release: Whether the build was a release build.

    Returns:
        ``<module_root>/<target_dir>/<triple>/{release,debug}``.
    """
    profile = "release" if release else "debug"
    return module_root / target_dir / target_triple / profile


def find_artifacts(search_dir: Path, extension: str) -> list[Path]:
    """List regular files with the artifact extension directly in a directory.

    Args:
        search_dir: Directory to match in.
        extension: Artifact extension without the dot.

    Returns:
        Sorted list of matching files.
    """
    return sorted(p for p in search_dir.glob(f"*.{extension}") if p.is_file())


def resolve_artifact(
    search_dir: Path,
    extension: str,
    module_root: Path | None = None,
) -> Path:
    """Resolve the single artifact a build produced.

    Args:
        search_dir: Directory from artifact_search_dir.
        extension: Artifact extension without the dot.
        module_root: Module root, for error context.

    Returns:
        Path to the only matching artifact.

    Raises:
        ArtifactResolutionError: If zero or several artifacts match.
    """
    pattern = str(search_dir / f"*.{extension}")
    matches = find_artifacts(search_dir, extension)

    if not matches:
        raise ArtifactResolutionError(
            f"no output artifact found matching `{pattern}` - this is probably a bug",
            module_root=module_root,
            pattern=pattern,
            code="artifact_missing",
        )

    if len(matches) > 1:
        raise ArtifactResolutionError(
            f"multiple output artifacts found matching `{pattern}` - this may be "
            "because you recently changed the name of your module; try deleting "
            f"the folder `{search_dir.parent}` and rebuilding",
            module_root=module_root,
            pattern=pattern,
            matches=matches,
            code="artifact_ambiguous",
        )

    logger.debug("Resolved artifact: %s", matches[0])
    return matches[0]


def compute_file_hash(
    file_path: Path,
    chunk_size: int = HASH_CHUNK_SIZE,
) -> str:
    """Compute SHA-256 hash of a file.

    Args:
        file_path: Path to the file.
        chunk_size: Size of chunks for streaming hash.

    Returns:
        SHA-256 hex digest.
    """
    sha256 = hashlib.sha256()
    with file_path.open("rb") as f:
        while chunk := f.read(chunk_size):
            sha256.update(chunk)
    return sha256.hexdigest()


def describe_artifact(path: Path) -> ArtifactInfo:
    """Collect size and checksum for a resolved artifact."""
    return ArtifactInfo(
        filename=path.name,
        path=str(path),
        size_bytes=path.stat().st_size,
        sha256=compute_file_hash(path),
    )


__all__ = [
    "HASH_CHUNK_SIZE",
    "artifact_search_dir",
    "compute_file_hash",
    "describe_artifact",
    "find_artifacts",
    "resolve_artifact",
]
