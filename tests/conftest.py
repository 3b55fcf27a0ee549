"""Shared fixtures for wasm_build tests.

The toolchain is replaced by FakeToolchain, patched in for subprocess.run.
It records every invocation and, on success, drops artifact files where
cargo would put them.
"""

import subprocess
import threading
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from wasm_build.builds.lock import BuildLock
from wasm_build.config import Settings

WASM_BYTES = b"\x00asm\x01\x00\x00\x00"


class FakeToolchain:
    """Callable standing in for subprocess.run during builds."""

    def __init__(self) -> None:
        self.artifact_names: list[str] = ["module.wasm"]
        self.returncode = 0
        self.stdout = ""
        self.stderr = ""
        self.delay = 0.0
        self.clean_outputs = False
        self.calls: list[dict] = []
        self._lock = threading.Lock()

    def __call__(self, cmd, cwd=None, env=None, **kwargs):
        started = time.monotonic()
        target_dir = cmd[cmd.index("--target-dir") + 1]
        triple = cmd[cmd.index("--target") + 1]
        profile = "release" if "--release" in cmd else "debug"
        out_dir = Path(cwd) / target_dir / triple / profile

        # Rebuilds replace the artifact rather than leaving it in place
        if self.clean_outputs and out_dir.is_dir():
            for stale in out_dir.glob("*.wasm"):
                stale.unlink()

        if self.delay:
            time.sleep(self.delay)

        if self.returncode == 0:
            out_dir.mkdir(parents=True, exist_ok=True)
            for name in self.artifact_names:
                (out_dir / name).write_bytes(WASM_BYTES)

        finished = time.monotonic()
        with self._lock:
            self.calls.append(
                {
                    "cmd": list(cmd),
                    "cwd": Path(cwd),
                    "env": dict(env or {}),
                    "started": started,
                    "finished": finished,
                }
            )
        return subprocess.CompletedProcess(
            cmd, self.returncode, stdout=self.stdout, stderr=self.stderr
        )


@pytest.fixture
def fake_toolchain():
    """Patch subprocess.run with a FakeToolchain."""
    toolchain = FakeToolchain()
    with patch("subprocess.run", side_effect=toolchain):
        yield toolchain


@pytest.fixture
def module_root(tmp_path) -> Path:
    """Create a minimal Cargo module directory."""
    root = tmp_path / "wasm_module"
    (root / "src").mkdir(parents=True)
    (root / "Cargo.toml").write_text(
        '[package]\nname = "wasm_module"\nversion = "0.1.0"\n\n'
        '[lib]\ncrate-type = ["cdylib"]\n'
    )
    (root / "src" / "lib.rs").write_text("pub fn add(a: i32, b: i32) -> i32 { a + b }\n")
    return root


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults, independent of the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def lock() -> BuildLock:
    """A build lock private to one test."""
    return BuildLock("test")
