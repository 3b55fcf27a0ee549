"""Tests for shared type definitions."""

from pathlib import Path

from wasm_build.types import ArtifactInfo, BuildOutcome


class TestBuildOutcome:
    """Test BuildOutcome dataclass."""

    def test_to_dict_minimal(self) -> None:
        """Optional fields should be omitted when unset."""
        outcome = BuildOutcome(artifact_path=Path("/m/target/x/debug/m.wasm"))

        assert outcome.to_dict() == {
            "artifact_path": "/m/target/x/debug/m.wasm",
            "target_dir": "",
            "watched_files": [],
        }

    def test_to_dict_full(self) -> None:
        """Artifact details and log path should be flattened in."""
        outcome = BuildOutcome(
            artifact_path=Path("/m/out.wasm"),
            watched_files=[Path("/m/Cargo.toml")],
            target_dir="target/_A_1",
            artifact=ArtifactInfo(
                filename="out.wasm", path="/m/out.wasm", size_bytes=8, sha256="ab"
            ),
            log_path=Path("/m/target/_A_1/wasm-build.log"),
        )

        data = outcome.to_dict()

        assert data["watched_files"] == ["/m/Cargo.toml"]
        assert data["size_bytes"] == 8
        assert data["sha256"] == "ab"
        assert data["log_path"] == "/m/target/_A_1/wasm-build.log"
