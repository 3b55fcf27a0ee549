"""Build runner for executing toolchain commands.

This module handles:
- Encoding target features into toolchain flags
- Composing the build environment and `cargo build` command
- Executing builds with subprocess under the build lock
- Classifying failures and writing a build log
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

from wasm_build.builds.artifacts import artifact_search_dir
from wasm_build.builds.cache_key import derive_target_dir
from wasm_build.builds.errors import (
    ToolchainExecutionError,
    ToolchainSpawnError,
    ToolchainTimeoutError,
)
from wasm_build.config import Settings, get_settings

if TYPE_CHECKING:
    from wasm_build.builds.lock import BuildLock
    from wasm_build.builds.schema import BuildConfig, TargetFeatures

logger = logging.getLogger(__name__)

# Environment variable carrying compiler flags; overrides append to it
RUSTFLAGS = "RUSTFLAGS"
PLATFORM_API_FLAG = "--cfg=web_sys_unstable_apis"

FEATURE_TOKENS = {
    "atomics": "+atomics,",
    "bulk_memory": "+bulk-memory,",
    "mutable_globals": "+mutable-globals,",
}

BUILD_LOG_NAME = "wasm-build.log"


@dataclass
class BuildPlan:
    """Everything needed to run one build, composed ahead of execution.

    Attributes:
        module_root: Absolute module directory; the working directory.
        command: Toolchain command as a list of strings.
        env: Environment overrides applied on top of the process environment.
        target_dir: Output directory relative to the module root.
        search_dir: Directory the artifact is expected in.
        pattern: Glob pattern the artifact must match.
    """

    module_root: Path
    command: list[str]
    env: dict[str, str]
    target_dir: str
    search_dir: Path
    pattern: str

    @property
    def command_str(self) -> str:
        """Shell-quoted rendering of the command."""
        return shlex.join(self.command)


@dataclass
class BuildResult:
    """Result of a successful toolchain run.

    Attributes:
        exit_code: Process exit code.
        command: The command that was executed.
        started_at: Build start time.
        finished_at: Build finish time.
        stdout: Captured standard output.
        stderr: Captured standard error.
        log_path: Path to the build log file, if one was written.
    """

    exit_code: int
    command: str
    started_at: datetime
    finished_at: datetime
    stdout: str = ""
    stderr: str = ""
    log_path: Path | None = field(default=None)


def encode_target_features(features: TargetFeatures) -> str:
    """Encode enabled features as a target-feature flag value.

    Args:
        features: Feature set from the configuration.

    Returns:
        Concatenated tokens, e.g. "+atomics,+bulk-memory,".
    """
    return "".join(FEATURE_TOKENS[name] for name in features.enabled())


def compose_rustflags(features: TargetFeatures) -> str:
    """Compose the mandatory RUSTFLAGS seed value."""
    return f"{PLATFORM_API_FLAG} -C target-feature={encode_target_features(features)}"


def compose_build_env(config: BuildConfig) -> dict[str, str]:
    """Compose environment overrides for a build.

    RUSTFLAGS is seeded with the mandatory flags; overrides naming it are
    appended (space separated) rather than replacing the seed. Other
    overrides are set verbatim, later duplicates winning.

    Args:
        config: Build configuration.

    Returns:
        Mapping of environment variable overrides.
    """
    env = {RUSTFLAGS: compose_rustflags(config.features)}
    for name, value in config.env_overrides:
        if name == RUSTFLAGS:
            env[RUSTFLAGS] += f" {value}"
        else:
            env[name] = value
    return env


def compose_cargo_command(
    target_dir: str,
    release: bool,
    settings: Settings,
) -> list[str]:
    """Compose the `cargo build` command.

    Args:
        target_dir: Output directory relative to the module root.
        release: Whether to build in release mode.
        settings: Toolchain settings.

    Returns:
        Command as list of strings suitable for subprocess.
    """
    cmd = [settings.toolchain]

    if settings.toolchain_channel:
        cmd.append(settings.toolchain_channel)

    cmd.extend(
        [
            "build",
            "--target",
            settings.target_triple,
            "-Z",
            f"build-std={settings.build_std}",
            "--target-dir",
            target_dir,
        ]
    )

    if release:
        cmd.append("--release")

    return cmd


def prepare_build(config: BuildConfig, settings: Settings | None = None) -> BuildPlan:
    """Compose a build plan without running anything.

    Args:
        config: Build configuration with an absolute module_root.
        settings: Application settings.

    Returns:
        BuildPlan for run_build.
    """
    if settings is None:
        settings = get_settings()

    target_dir = derive_target_dir(config.env_overrides, settings.output_base)
    search_dir = artifact_search_dir(
        config.module_root,
        target_dir,
        settings.target_triple,
        config.release,
    )

    return BuildPlan(
        module_root=config.module_root,
        command=compose_cargo_command(target_dir, config.release, settings),
        env=compose_build_env(config),
        target_dir=target_dir,
        search_dir=search_dir,
        pattern=str(search_dir / f"*.{settings.artifact_extension}"),
    )


def _as_text(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


def _write_build_log(
    plan: BuildPlan,
    started_at: datetime,
    finished_at: datetime,
    exit_code: int,
    stdout: str,
    stderr: str,
) -> Path | None:
    log_path = plan.module_root / plan.target_dir / BUILD_LOG_NAME
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with log_path.open("w", encoding="utf-8") as log_file:
            log_file.write(f"# Command: {plan.command_str}\n")
            log_file.write(f"# Started: {started_at.isoformat()}\n")
            log_file.write(f"# CWD: {plan.module_root}\n")
            for name, value in plan.env.items():
                log_file.write(f"# Env: {name}={value}\n")
            log_file.write("# " + "=" * 70 + "\n\n")
            log_file.write(stdout)
            log_file.write(stderr)
            log_file.write(f"\n# Finished: {finished_at.isoformat()}\n")
            log_file.write(f"# Exit code: {exit_code}\n")
            duration = (finished_at - started_at).total_seconds()
            log_file.write(f"# Duration: {duration:.1f}s\n")
    except OSError as e:
        logger.warning("Could not write build log %s: %s", log_path, e)
        return None
    return log_path


def run_build(
    plan: BuildPlan,
    lock: BuildLock,
    timeout: int | None = None,
    write_log: bool = True,
) -> BuildResult:
    """Execute a toolchain build under the build lock.

    Args:
        plan: Plan from prepare_build.
        lock: Lock serializing toolchain invocations.
        timeout: Build timeout in seconds (None = no timeout).
        write_log: Write a build log next to the outputs.

    Returns:
        BuildResult for a zero exit status.

    Raises:
        ToolchainSpawnError: If the toolchain could not be started.
        ToolchainExecutionError: If the toolchain exited non-zero.
        ToolchainTimeoutError: If the toolchain exceeded the timeout.
    """
    cmd_str = plan.command_str
    module_root = plan.module_root

    with lock.held():
        logger.info("Executing build: %s", cmd_str)
        logger.info("Working directory: %s", module_root)
        logger.info("Output directory: %s", plan.target_dir)

        env = dict(os.environ)
        env.update(plan.env)

        started_at = datetime.now(timezone.utc)

        try:
            result = subprocess.run(
                plan.command,
                cwd=module_root,
                env=env,
                stdin=subprocess.DEVNULL,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            stderr = _as_text(e.stderr)
            timeout_log = None
            if write_log:
                timeout_log = _write_build_log(
                    plan,
                    started_at,
                    datetime.now(timezone.utc),
                    -1,
                    _as_text(e.stdout),
                    stderr,
                )
            message = (
                f"failed to build module `{module_root}`: "
                f"timed out after {timeout} seconds"
            )
            logger.error(message)
            raise ToolchainTimeoutError(
                message,
                module_root=module_root,
                stderr=stderr,
                log_path=timeout_log,
            ) from e
        except OSError as e:
            message = f"failed to build module `{module_root}`: {e}"
            logger.error(message)
            raise ToolchainSpawnError(message, module_root=module_root) from e

        finished_at = datetime.now(timezone.utc)
        stdout = _as_text(result.stdout)
        stderr = _as_text(result.stderr)

        log_path = None
        if write_log:
            log_path = _write_build_log(
                plan, started_at, finished_at, result.returncode, stdout, stderr
            )

        if result.returncode != 0:
            logger.error(
                "Build failed with exit code %d. See log: %s",
                result.returncode,
                log_path,
            )
            raise ToolchainExecutionError(
                f"failed to build module `{module_root}`: \n"
                + stderr.replace("\n", "\n\t"),
                module_root=module_root,
                exit_code=result.returncode,
                stderr=stderr,
                log_path=log_path,
            )

    logger.info(
        "Build finished in %.1fs",
        (finished_at - started_at).total_seconds(),
    )

    return BuildResult(
        exit_code=result.returncode,
        command=cmd_str,
        started_at=started_at,
        finished_at=finished_at,
        stdout=stdout,
        stderr=stderr,
        log_path=log_path,
    )


__all__ = [
    "BUILD_LOG_NAME",
    "FEATURE_TOKENS",
    "PLATFORM_API_FLAG",
    "RUSTFLAGS",
    "BuildPlan",
    "BuildResult",
    "compose_build_env",
    "compose_cargo_command",
    "compose_rustflags",
    "encode_target_features",
    "prepare_build",
    "run_build",
]
