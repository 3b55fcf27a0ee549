"""MCP server implementation.

This module creates the FastMCP server and registers all tools.
Tools are thin wrappers around core wasm_build services:
- Return structured errors with codes
- Share the process-wide build lock, so concurrent tool calls queue
"""

from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field, ValidationError

from mcp_server.errors import (
    INTERNAL_ERROR,
    from_build_error,
    make_error,
    validation_error,
)
from mcp_server.schemas import BuildModuleResponse, PlanResponse

# Create the FastMCP server instance
mcp = FastMCP(
    name="wasm-build",
)


def _get_orchestrator() -> Any:
    """Get an orchestrator bound to the process-wide build lock.

    Returns:
        Orchestrator instance.
    """
    from wasm_build.builds.service import Orchestrator

    return Orchestrator()


def _make_config(
    path: str,
    features: list[str] | None,
    env: dict[str, Any] | None,
    release: bool,
) -> Any:
    from wasm_build.builds.schema import BuildConfig

    return BuildConfig.model_validate(
        {
            "module_root": path,
            "features": features or [],
            "env_overrides": env or {},
            "release": release,
        }
    )


@mcp.tool()
def build_module(
    path: Annotated[str, Field(description="Path to the Cargo module directory")],
    features: Annotated[
        list[str] | None,
        Field(description="Target features: atomics, bulk_memory, mutable_globals"),
    ] = None,
    env: Annotated[
        dict[str, str | int | float | bool] | None,
        Field(description="Environment overrides, applied in the given order"),
    ] = None,
    release: Annotated[bool, Field(description="Build in release mode")] = False,
) -> BuildModuleResponse:
    """Build a Cargo module into a single WebAssembly artifact.

    Builds are cached per distinct set of env overrides; rebuilding an
    unchanged module is cheap. Only one build runs at a time.

    Returns:
        BuildModuleResponse with the artifact path, or error.
    """
    from wasm_build.builds.errors import BuildError

    try:
        config = _make_config(path, features, env, release)
    except ValidationError as e:
        return BuildModuleResponse(
            success=False,
            error=validation_error(
                "Invalid build configuration",
                details={"errors": [err["msg"] for err in e.errors()]},
            ).to_dict(),
        )

    try:
        outcome = _get_orchestrator().build(config)
    except BuildError as e:
        error = from_build_error(e)
        return BuildModuleResponse(
            success=False, log_path=error.log_path, error=error.to_dict()
        )
    except Exception as e:
        error = make_error(INTERNAL_ERROR, str(e))
        return BuildModuleResponse(success=False, error=error.to_dict())

    return BuildModuleResponse(
        success=True,
        artifact_path=str(outcome.artifact_path),
        target_dir=outcome.target_dir,
        size_bytes=outcome.artifact.size_bytes if outcome.artifact else None,
        sha256=outcome.artifact.sha256 if outcome.artifact else None,
        watched_files=[str(p) for p in outcome.watched_files],
        log_path=str(outcome.log_path) if outcome.log_path else None,
    )


@mcp.tool()
def plan_module_build(
    path: Annotated[str, Field(description="Path to the Cargo module directory")],
    features: Annotated[
        list[str] | None,
        Field(description="Target features: atomics, bulk_memory, mutable_globals"),
    ] = None,
    env: Annotated[
        dict[str, str | int | float | bool] | None,
        Field(description="Environment overrides, applied in the given order"),
    ] = None,
    release: Annotated[bool, Field(description="Build in release mode")] = False,
) -> PlanResponse:
    """Show the toolchain command, environment and output location for a build.

    Nothing is executed.

    Returns:
        PlanResponse with the composed build plan, or error.
    """
    from wasm_build.builds.errors import BuildError

    try:
        config = _make_config(path, features, env, release)
    except ValidationError as e:
        return PlanResponse(
            success=False,
            error=validation_error(
                "Invalid build configuration",
                details={"errors": [err["msg"] for err in e.errors()]},
            ).to_dict(),
        )

    try:
        plan = _get_orchestrator().plan(config)
    except BuildError as e:
        return PlanResponse(success=False, error=from_build_error(e).to_dict())
    except Exception as e:
        error = make_error(INTERNAL_ERROR, str(e))
        return PlanResponse(success=False, error=error.to_dict())

    return PlanResponse(
        success=True,
        module_root=str(plan.module_root),
        command=plan.command,
        env=plan.env,
        target_dir=plan.target_dir,
        pattern=plan.pattern,
    )


__all__ = [
    "build_module",
    "mcp",
    "plan_module_build",
]
