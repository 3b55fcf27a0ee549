"""Shared type definitions for wasm_build.

This module contains dataclasses shared across subpackages to avoid
circular imports.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class ArtifactInfo:
    """Information about a build artifact."""

    filename: str
    path: str
    size_bytes: int
    sha256: str


@dataclass
class BuildOutcome:
    """Result of a successful orchestrated build.

    Attributes:
        artifact_path: The single verified output artifact.
        watched_files: Module files a caller may watch as rebuild triggers.
        target_dir: Output directory derived from the configuration,
            relative to the module root.
        artifact: Size and checksum of the artifact.
        log_path: Build log written for this invocation, if any.
    """

    artifact_path: Path
    watched_files: list[Path] = field(default_factory=list)
    target_dir: str = ""
    artifact: ArtifactInfo | None = None
    log_path: Path | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data: dict[str, Any] = {
            "artifact_path": str(self.artifact_path),
            "target_dir": self.target_dir,
            "watched_files": [str(p) for p in self.watched_files],
        }
        if self.artifact is not None:
            data["size_bytes"] = self.artifact.size_bytes
            data["sha256"] = self.artifact.sha256
        if self.log_path is not None:
            data["log_path"] = str(self.log_path)
        return data


__all__ = ["ArtifactInfo", "BuildOutcome"]
