"""Build service module.

This module provides the high-level build API:
- Orchestrator.build(): validate, run the toolchain, resolve the artifact
- Orchestrator.plan(): compose a build without running it
- build_module(): convenience entry point using the process-wide lock

See wasm_build.builds.runner for command composition and execution.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from wasm_build.builds.artifacts import describe_artifact, resolve_artifact
from wasm_build.builds.errors import ConfigurationError
from wasm_build.builds.lock import BuildLock, default_build_lock
from wasm_build.builds.runner import BuildPlan, prepare_build, run_build
from wasm_build.config import get_settings
from wasm_build.types import BuildOutcome

if TYPE_CHECKING:
    from wasm_build.builds.schema import BuildConfig
    from wasm_build.config import Settings

logger = logging.getLogger(__name__)

BUILD_DESCRIPTOR = "Cargo.toml"
WORKSPACE_MARKER = "[workspace]"


def is_workspace_descriptor(text: str) -> bool:
    """Check whether descriptor text declares a workspace table.

    Args:
        text: Contents of a Cargo.toml file.

    Returns:
        True if a line consists of the ``[workspace]`` table header.
    """
    return any(line.strip() == WORKSPACE_MARKER for line in text.splitlines())


def validate_module_root(module_root: Path) -> Path:
    """Validate that a directory is a buildable, non-workspace module.

    Args:
        module_root: Absolute module directory.

    Returns:
        Path to the module's build descriptor.

    Raises:
        ConfigurationError: If the descriptor is missing, unreadable, or
            declares a workspace.
    """
    descriptor = module_root / BUILD_DESCRIPTOR
    if not descriptor.is_file():
        raise ConfigurationError(
            f"target directory `{module_root}` does not contain a "
            f"`{BUILD_DESCRIPTOR}` file",
            module_root=module_root,
        )

    try:
        text = descriptor.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(
            f"failed to read target `{BUILD_DESCRIPTOR}`: {e}",
            module_root=module_root,
        ) from e

    if is_workspace_descriptor(text):
        raise ConfigurationError(
            f"provided directory `{module_root}` points to a workspace, not a module",
            module_root=module_root,
            code="workspace_not_supported",
        )

    return descriptor


def _raise_walk_error(error: OSError) -> None:
    raise error


def collect_watch_files(module_root: Path, output_base: str = "target") -> list[Path]:
    """List module files a caller may register as rebuild triggers.

    The top-level output base is pruned from the walk; build outputs are
    not inputs. Failures are logged and yield an empty list.

    Args:
        module_root: Absolute module directory.
        output_base: Output directory name relative to the module root.

    Returns:
        Sorted list of regular files under the module root.
    """
    excluded = Path(output_base).parts[0]
    files: list[Path] = []
    try:
        for dirpath, dirnames, filenames in os.walk(
            module_root, onerror=_raise_walk_error
        ):
            current = Path(dirpath)
            if current == module_root:
                dirnames[:] = [name for name in dirnames if name != excluded]
            files.extend(
                current / name for name in filenames if (current / name).is_file()
            )
    except OSError as e:
        logger.warning("Could not list module files under %s: %s", module_root, e)
        return []
    return sorted(files)


class Orchestrator:
    """Composes validation, build, and artifact resolution.

    Orchestrators sharing a BuildLock never run the toolchain concurrently.
    Without an explicit lock the process-wide default lock is used.

    Attributes:
        settings: Application settings.
        lock: Lock serializing toolchain invocations.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        lock: BuildLock | None = None,
    ) -> None:
        self.settings = settings if settings is not None else get_settings()
        self.lock = lock if lock is not None else default_build_lock()

    def plan(self, config: BuildConfig, base_path: Path | None = None) -> BuildPlan:
        """Validate a configuration and compose its build plan.

        Args:
            config: Build configuration.
            base_path: Directory relative module roots resolve against
                (defaults to the current working directory).

        Returns:
            BuildPlan ready for execution.

        Raises:
            ConfigurationError: If the module root is not a valid module.
        """
        if base_path is None:
            base_path = Path.cwd()

        config = config.resolved(base_path)
        validate_module_root(config.module_root)
        return prepare_build(config, self.settings)

    def build(self, config: BuildConfig, base_path: Path | None = None) -> BuildOutcome:
        """Build a module and return its single artifact.

        Args:
            config: Build configuration.
            base_path: Directory relative module roots resolve against
                (defaults to the current working directory).

        Returns:
            BuildOutcome with the artifact path and watched files.

        Raises:
            ConfigurationError: If the module root is not a valid module.
            ToolchainSpawnError: If the toolchain could not be started.
            ToolchainExecutionError: If the toolchain failed.
            ArtifactResolutionError: If zero or several artifacts were found.
        """
        plan = self.plan(config, base_path)
        logger.info("Building module %s into %s", plan.module_root, plan.target_dir)

        # Held through resolution; another build of the same configuration
        # rewrites this output directory
        with self.lock.held():
            result = run_build(
                plan,
                self.lock,
                timeout=self.settings.build_timeout,
                write_log=self.settings.write_build_log,
            )
            artifact_path = resolve_artifact(
                plan.search_dir,
                self.settings.artifact_extension,
                module_root=plan.module_root,
            )
            artifact = describe_artifact(artifact_path)

        watched_files = collect_watch_files(
            plan.module_root, self.settings.output_base
        )

        logger.info(
            "Module %s built: %s (%d watched files)",
            plan.module_root,
            artifact_path,
            len(watched_files),
        )

        return BuildOutcome(
            artifact_path=artifact_path,
            watched_files=watched_files,
            target_dir=plan.target_dir,
            artifact=artifact,
            log_path=result.log_path,
        )


def build_module(
    config: BuildConfig,
    base_path: Path | None = None,
    settings: Settings | None = None,
) -> BuildOutcome:
    """Build a module using the process-wide build lock.

    Args:
        config: Build configuration.
        base_path: Directory relative module roots resolve against.
        settings: Application settings.

    Returns:
        BuildOutcome with the artifact path and watched files.
    """
    return Orchestrator(settings=settings).build(config, base_path=base_path)


__all__ = [
    "BUILD_DESCRIPTOR",
    "Orchestrator",
    "build_module",
    "collect_watch_files",
    "is_workspace_descriptor",
    "validate_module_root",
]
