"""Thin CLI wrapper for wasm_build.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from wasm_build import __version__
from wasm_build.config import get_settings, print_settings_json

app = typer.Typer(
    name="wasmbuild",
    help="wasm-build - build Cargo modules into WebAssembly artifacts",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"wasm-build version {__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Route log records through rich on stderr."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """wasm-build - build Cargo modules into WebAssembly artifacts."""
    configure_logging("DEBUG" if verbose else get_settings().log_level)


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print(print_settings_json(settings))
    else:
        channel_display = settings.toolchain_channel or "(none)"
        timeout_display = (
            str(settings.build_timeout) if settings.build_timeout else "(none)"
        )
        console.print("[bold]Effective Configuration:[/bold]")
        console.print()
        console.print("[bold]Toolchain:[/bold]")
        console.print(f"  Toolchain:           {settings.toolchain}")
        console.print(f"  Channel:             {channel_display}")
        console.print(f"  Target triple:       {settings.target_triple}")
        console.print(f"  Build std:           {settings.build_std}")
        console.print()
        console.print("[bold]Outputs:[/bold]")
        console.print(f"  Output base:         {settings.output_base}")
        console.print(f"  Artifact extension:  {settings.artifact_extension}")
        console.print(f"  Write build log:     {settings.write_build_log}")
        console.print()
        console.print("[bold]Operational:[/bold]")
        console.print(f"  Log level:           {settings.log_level}")
        console.print(f"  Build timeout:       {timeout_display}")


def _print_json(data: object) -> None:
    # Paths and toolchain output may contain brackets; keep rich out of it
    console.print(
        json.dumps(data, indent=2), markup=False, highlight=False, soft_wrap=True
    )


def _print_error(message: str) -> None:
    console.print(message, markup=False, highlight=False, style="red")


def _parse_env_options(env: list[str] | None) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for item in env or []:
        name, sep, value = item.partition("=")
        if not sep:
            raise typer.BadParameter(
                f"expected KEY=VALUE, got '{item}'", param_hint="--env"
            )
        pairs.append((name, value))
    return pairs


@app.command()
def build(
    path: Annotated[
        Path | None,
        typer.Argument(help="Path to the module directory"),
    ] = None,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Load the build from a YAML/JSON file"),
    ] = None,
    features: Annotated[
        list[str] | None,
        typer.Option(
            "--feature",
            "-F",
            help="Target feature: atomics, bulk_memory, mutable_globals "
            "(can be repeated)",
        ),
    ] = None,
    env: Annotated[
        list[str] | None,
        typer.Option("--env", "-e", help="Env override KEY=VALUE (can be repeated)"),
    ] = None,
    release: Annotated[
        bool,
        typer.Option("--release", "-r", help="Build in release mode"),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show the build plan without running it"),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Build a module into a single WebAssembly artifact.

    Options given on the command line extend a --config file: features
    are added, env overrides are appended, and --release switches on
    release mode.
    """
    from wasm_build.builds.errors import BuildError
    from wasm_build.builds.io import load_build_config
    from wasm_build.builds.schema import BuildConfig
    from wasm_build.builds.service import Orchestrator

    if path is None and config_file is None:
        console.print("[red]Error: a module PATH or --config file is required[/red]")
        raise typer.Exit(code=1)

    env_pairs = _parse_env_options(env)

    try:
        if config_file is not None:
            base = load_build_config(config_file)
            feature_names = set(base.features.enabled()) | set(features or [])
            build_config = BuildConfig.model_validate(
                {
                    "module_root": path if path is not None else base.module_root,
                    "features": sorted(feature_names),
                    "env_overrides": [*base.env_overrides, *env_pairs],
                    "release": base.release or release,
                }
            )
        else:
            build_config = BuildConfig.model_validate(
                {
                    "module_root": path,
                    "features": features or [],
                    "env_overrides": env_pairs,
                    "release": release,
                }
            )
    except ValidationError as e:
        _print_error(f"Invalid build configuration: {e.errors()[0]['msg']}")
        raise typer.Exit(code=1) from None
    except (OSError, ValueError) as e:
        _print_error(f"Invalid build configuration: {e}")
        raise typer.Exit(code=1) from None

    orchestrator = Orchestrator()

    try:
        if dry_run:
            plan = orchestrator.plan(build_config)
            if json_output:
                _print_json(
                    {
                        "module_root": str(plan.module_root),
                        "command": plan.command,
                        "env": plan.env,
                        "target_dir": plan.target_dir,
                        "pattern": plan.pattern,
                    }
                )
            else:
                console.print("[bold]Build plan:[/bold]")
                console.print(f"  Module:     {plan.module_root}")
                console.print(f"  Command:    {plan.command_str}")
                for name, value in plan.env.items():
                    console.print(f"  Env:        {name}={value}")
                console.print(f"  Output dir: {plan.target_dir}")
                console.print(f"  Artifact:   {plan.pattern}")
            return

        outcome = orchestrator.build(build_config)
    except BuildError as e:
        log_path = getattr(e, "log_path", None)
        if json_output:
            data = {"success": False, "code": e.code, "message": str(e)}
            if log_path is not None:
                data["log_path"] = str(log_path)
            _print_json(data)
        else:
            _print_error(str(e))
            if log_path is not None:
                console.print(
                    f"  Log: {log_path}", markup=False, highlight=False, soft_wrap=True
                )
        raise typer.Exit(code=1) from None

    if json_output:
        _print_json({"success": True, **outcome.to_dict()})
    else:
        console.print(f"[green]Built {outcome.artifact_path}[/green]")
        if outcome.artifact is not None:
            console.print(f"  Size:    {outcome.artifact.size_bytes} bytes")
            console.print(f"  SHA-256: {outcome.artifact.sha256}")
        console.print(f"  Watched files: {len(outcome.watched_files)}")
        if outcome.log_path is not None:
            console.print(f"  Log: {outcome.log_path}")
