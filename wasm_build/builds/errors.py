"""Error taxonomy for build orchestration.

Every failure of a single build invocation is raised as a BuildError
subclass carrying a stable code and the module root it concerns.
``str(error)`` is the rendered, human-actionable message.
"""

from __future__ import annotations

from pathlib import Path


class BuildError(Exception):
    """Base error for build orchestration."""

    def __init__(
        self,
        message: str,
        module_root: Path | None = None,
        code: str = "build_error",
    ) -> None:
        super().__init__(message)
        self.module_root = module_root
        self.code = code


class ConfigurationError(BuildError):
    """Raised when the module root is not a buildable module."""

    def __init__(
        self,
        message: str,
        module_root: Path | None = None,
        code: str = "configuration_error",
    ) -> None:
        super().__init__(message, module_root=module_root, code=code)


class ToolchainSpawnError(BuildError):
    """Raised when the toolchain process could not be started."""

    def __init__(
        self,
        message: str,
        module_root: Path | None = None,
        code: str = "toolchain_spawn_error",
    ) -> None:
        super().__init__(message, module_root=module_root, code=code)


class ToolchainExecutionError(BuildError):
    """Raised when the toolchain ran but did not succeed."""

    def __init__(
        self,
        message: str,
        module_root: Path | None = None,
        exit_code: int | None = None,
        stderr: str = "",
        log_path: Path | None = None,
        code: str = "toolchain_failed",
    ) -> None:
        super().__init__(message, module_root=module_root, code=code)
        self.exit_code = exit_code
        self.stderr = stderr
        self.log_path = log_path


class ToolchainTimeoutError(ToolchainExecutionError):
    """Raised when the toolchain exceeded the configured build timeout."""

    def __init__(
        self,
        message: str,
        module_root: Path | None = None,
        stderr: str = "",
        log_path: Path | None = None,
    ) -> None:
        super().__init__(
            message,
            module_root=module_root,
            exit_code=-1,
            stderr=stderr,
            log_path=log_path,
            code="toolchain_timeout",
        )


class ArtifactResolutionError(BuildError):
    """Raised when a build did not leave exactly one artifact behind."""

    def __init__(
        self,
        message: str,
        module_root: Path | None = None,
        pattern: str = "",
        matches: list[Path] | None = None,
        code: str = "artifact_missing",
    ) -> None:
        super().__init__(message, module_root=module_root, code=code)
        self.pattern = pattern
        self.matches = matches or []


__all__ = [
    "ArtifactResolutionError",
    "BuildError",
    "ConfigurationError",
    "ToolchainExecutionError",
    "ToolchainSpawnError",
    "ToolchainTimeoutError",
]
