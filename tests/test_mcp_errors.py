"""Tests for MCP error translation."""

from pathlib import Path

import pytest

from mcp_server.errors import (
    ARTIFACT_AMBIGUOUS,
    ARTIFACT_MISSING,
    CONFIGURATION_ERROR,
    TOOLCHAIN_FAILED,
    TOOLCHAIN_SPAWN_ERROR,
    TOOLCHAIN_TIMEOUT,
    WORKSPACE_NOT_SUPPORTED,
    from_build_error,
)
from wasm_build.builds.artifacts import resolve_artifact
from wasm_build.builds.errors import (
    ArtifactResolutionError,
    ConfigurationError,
    ToolchainExecutionError,
    ToolchainSpawnError,
    ToolchainTimeoutError,
)
from wasm_build.builds.service import validate_module_root


class TestErrorCodes:
    """Error codes surfaced to clients should match the raised errors."""

    def test_toolchain_codes(self) -> None:
        """Toolchain errors should carry the published codes."""
        assert ToolchainSpawnError("x").code == TOOLCHAIN_SPAWN_ERROR
        assert ToolchainExecutionError("x").code == TOOLCHAIN_FAILED
        assert ToolchainTimeoutError("x").code == TOOLCHAIN_TIMEOUT

    def test_configuration_codes(self, tmp_path) -> None:
        """Module validation errors should carry the published codes."""
        assert ConfigurationError("x").code == CONFIGURATION_ERROR

        (tmp_path / "Cargo.toml").write_text("[workspace]\n")
        with pytest.raises(ConfigurationError) as exc_info:
            validate_module_root(tmp_path)
        assert exc_info.value.code == WORKSPACE_NOT_SUPPORTED

    def test_artifact_codes(self, tmp_path) -> None:
        """Artifact resolution errors should carry the published codes."""
        assert ArtifactResolutionError("x").code == ARTIFACT_MISSING

        (tmp_path / "a.wasm").write_bytes(b"")
        (tmp_path / "b.wasm").write_bytes(b"")
        with pytest.raises(ArtifactResolutionError) as exc_info:
            resolve_artifact(tmp_path, "wasm")
        assert exc_info.value.code == ARTIFACT_AMBIGUOUS


class TestFromBuildError:
    """Tests for from_build_error function."""

    def test_execution_error(self) -> None:
        """Exit code, module root and log path should be carried over."""
        error = ToolchainExecutionError(
            "failed to build module `/m`: \nboom",
            module_root=Path("/m"),
            exit_code=101,
            log_path=Path("/m/target/wasm-build.log"),
        )

        data = from_build_error(error).to_dict()

        assert data["code"] == TOOLCHAIN_FAILED
        assert data["details"] == {"module_root": "/m", "exit_code": 101}
        assert data["log_path"] == "/m/target/wasm-build.log"

    def test_timeout_error(self) -> None:
        """Timeouts should keep their own code and the log path."""
        error = ToolchainTimeoutError(
            "timed out", module_root=Path("/m"), log_path=Path("/m/target/x.log")
        )

        data = from_build_error(error).to_dict()

        assert data["code"] == TOOLCHAIN_TIMEOUT
        assert data["details"]["exit_code"] == -1
        assert data["log_path"] == "/m/target/x.log"

    def test_no_log_path(self) -> None:
        """Errors without a log should omit log_path."""
        data = from_build_error(ConfigurationError("bad", module_root=Path("/m")))

        assert data.log_path is None
        assert "log_path" not in data.to_dict()

    def test_artifact_error(self) -> None:
        """Pattern and matches should be included."""
        error = ArtifactResolutionError(
            "multiple",
            pattern="/m/*.wasm",
            matches=[Path("/m/a.wasm"), Path("/m/b.wasm")],
            code=ARTIFACT_AMBIGUOUS,
        )

        data = from_build_error(error).to_dict()

        assert data["details"] == {
            "pattern": "/m/*.wasm",
            "matches": ["/m/a.wasm", "/m/b.wasm"],
        }
