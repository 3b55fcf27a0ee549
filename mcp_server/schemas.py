"""Pydantic schemas for MCP tool responses.

These schemas define the structured output formats for MCP tools,
ensuring consistent JSON responses across all tools.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class BuildModuleResponse(BaseModel):
    """Response for build_module tool."""

    model_config = ConfigDict(extra="forbid")

    success: bool
    artifact_path: str | None = None
    target_dir: str | None = None
    size_bytes: int | None = None
    sha256: str | None = None
    watched_files: list[str] = []
    log_path: str | None = None
    error: dict[str, Any] | None = None


class PlanResponse(BaseModel):
    """Response for plan_module_build tool."""

    model_config = ConfigDict(extra="forbid")

    success: bool
    module_root: str | None = None
    command: list[str] | None = None
    env: dict[str, str] | None = None
    target_dir: str | None = None
    pattern: str | None = None
    error: dict[str, Any] | None = None


__all__ = ["BuildModuleResponse", "PlanResponse"]
