"""Error definitions for MCP tools.

This module defines structured error types with stable codes
that can be surfaced to MCP clients. Build failures keep the code
carried by the raised BuildError.
"""

from dataclasses import dataclass
from typing import Any

from wasm_build.builds.errors import (
    ArtifactResolutionError,
    BuildError,
    ToolchainExecutionError,
)

# Error code constants
VALIDATION_ERROR = "validation"
CONFIGURATION_ERROR = "configuration_error"
WORKSPACE_NOT_SUPPORTED = "workspace_not_supported"
TOOLCHAIN_SPAWN_ERROR = "toolchain_spawn_error"
TOOLCHAIN_FAILED = "toolchain_failed"
TOOLCHAIN_TIMEOUT = "toolchain_timeout"
ARTIFACT_MISSING = "artifact_missing"
ARTIFACT_AMBIGUOUS = "artifact_ambiguous"
INTERNAL_ERROR = "internal_error"


@dataclass
class MCPError:
    """Structured error response for MCP tools.

    Attributes:
        code: Stable error code for programmatic handling.
        message: Human-readable error message.
        details: Optional additional error details.
        log_path: Optional path to log file with more information.
    """

    code: str
    message: str
    details: dict[str, Any] | None = None
    log_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        if self.log_path is not None:
            result["log_path"] = self.log_path
        return result


def make_error(
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
    log_path: str | None = None,
) -> MCPError:
    """Create an MCPError instance.

    Args:
        code: Stable error code.
        message: Human-readable message.
        details: Optional additional details.
        log_path: Optional log file path.

    Returns:
        MCPError instance.
    """
    return MCPError(code=code, message=message, details=details, log_path=log_path)


def validation_error(message: str, details: dict[str, Any] | None = None) -> MCPError:
    """Create a validation error."""
    return make_error(VALIDATION_ERROR, message, details)


def from_build_error(error: BuildError) -> MCPError:
    """Translate a BuildError into a structured MCP error.

    Args:
        error: Raised build error.

    Returns:
        MCPError carrying the error's code and context.
    """
    details: dict[str, Any] = {}
    log_path = None
    if error.module_root is not None:
        details["module_root"] = str(error.module_root)
    if isinstance(error, ToolchainExecutionError):
        if error.exit_code is not None:
            details["exit_code"] = error.exit_code
        if error.log_path is not None:
            log_path = str(error.log_path)
    if isinstance(error, ArtifactResolutionError):
        details["pattern"] = error.pattern
        if error.matches:
            details["matches"] = [str(p) for p in error.matches]
    return make_error(error.code, str(error), details or None, log_path)


__all__ = [
    "ARTIFACT_AMBIGUOUS",
    "ARTIFACT_MISSING",
    "CONFIGURATION_ERROR",
    "INTERNAL_ERROR",
    "MCPError",
    "TOOLCHAIN_FAILED",
    "TOOLCHAIN_SPAWN_ERROR",
    "TOOLCHAIN_TIMEOUT",
    "VALIDATION_ERROR",
    "WORKSPACE_NOT_SUPPORTED",
    "from_build_error",
    "make_error",
    "validation_error",
]
