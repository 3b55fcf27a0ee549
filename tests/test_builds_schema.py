"""Tests for builds/schema.py module.

Tests validation of build configuration records.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from wasm_build.builds.schema import FEATURE_NAMES, BuildConfig, TargetFeatures


class TestTargetFeatures:
    """Tests for TargetFeatures model."""

    def test_defaults_disabled(self):
        """All features should default to disabled."""
        features = TargetFeatures()
        assert features.enabled() == []

    def test_from_names(self):
        """Should enable the named features."""
        features = TargetFeatures.from_names(["mutable_globals", "atomics"])
        assert features.atomics is True
        assert features.bulk_memory is False
        assert features.mutable_globals is True

    def test_enabled_canonical_order(self):
        """enabled() should follow canonical order, not input order."""
        features = TargetFeatures.from_names(list(reversed(FEATURE_NAMES)))
        assert features.enabled() == list(FEATURE_NAMES)

    def test_unknown_name_rejected(self):
        """Should reject names outside the closed set."""
        with pytest.raises(ValueError, match="unknown feature 'simd'"):
            TargetFeatures.from_names(["simd"])

    def test_extra_field_rejected(self):
        """Should reject unknown keys in mapping form."""
        with pytest.raises(ValidationError):
            TargetFeatures.model_validate({"atomics": True, "simd": True})


class TestBuildConfig:
    """Tests for BuildConfig model."""

    def test_minimal(self):
        """Should accept just a module root."""
        config = BuildConfig(module_root=Path("m"))
        assert config.module_root == Path("m")
        assert config.features == TargetFeatures()
        assert config.env_overrides == []
        assert config.release is False

    def test_features_as_list(self):
        """Should accept a list of feature names."""
        config = BuildConfig.model_validate(
            {"module_root": "m", "features": ["bulk_memory"]}
        )
        assert config.features.bulk_memory is True
        assert config.features.atomics is False

    def test_features_unknown_in_list(self):
        """Should reject unknown feature names."""
        with pytest.raises(ValidationError, match="unknown feature"):
            BuildConfig.model_validate({"module_root": "m", "features": ["threads"]})

    def test_env_mapping_keeps_order(self):
        """Should keep mapping insertion order."""
        config = BuildConfig.model_validate(
            {"module_root": "m", "env_overrides": {"B": "2", "A": "1"}}
        )
        assert config.env_overrides == [("B", "2"), ("A", "1")]

    def test_env_pairs_allow_duplicates(self):
        """Should keep duplicate names given as pairs."""
        config = BuildConfig.model_validate(
            {
                "module_root": "m",
                "env_overrides": [["RUSTFLAGS", "-Ca"], ["RUSTFLAGS", "-Cb"]],
            }
        )
        assert config.env_overrides == [("RUSTFLAGS", "-Ca"), ("RUSTFLAGS", "-Cb")]

    def test_env_name_value_entries(self):
        """Should accept {name, value} entries."""
        config = BuildConfig.model_validate(
            {"module_root": "m", "env_overrides": [{"name": "X", "value": 1}]}
        )
        assert config.env_overrides == [("X", "1")]

    def test_env_values_stringified(self):
        """Should convert int, float and bool values to strings."""
        config = BuildConfig.model_validate(
            {
                "module_root": "m",
                "env_overrides": {"I": 12, "F": 1.5, "T": True, "N": False},
            }
        )
        assert config.env_overrides == [
            ("I", "12"),
            ("F", "1.5"),
            ("T", "true"),
            ("N", "false"),
        ]

    def test_env_value_wrong_type(self):
        """Should reject values that are not scalars."""
        with pytest.raises(ValidationError, match="expected a string, int, float or bool"):
            BuildConfig.model_validate(
                {"module_root": "m", "env_overrides": {"X": [1, 2]}}
            )

    def test_env_empty_name(self):
        """Should reject an empty variable name."""
        with pytest.raises(ValidationError, match="must not be empty"):
            BuildConfig.model_validate({"module_root": "m", "env_overrides": {"": "1"}})

    def test_env_name_with_equals(self):
        """Should reject names containing '='."""
        with pytest.raises(ValidationError, match="invalid env variable name"):
            BuildConfig.model_validate(
                {"module_root": "m", "env_overrides": {"A=B": "1"}}
            )

    def test_unknown_option_rejected(self):
        """Should reject unknown top-level options."""
        with pytest.raises(ValidationError):
            BuildConfig.model_validate({"module_root": "m", "profile": "dev"})

    def test_resolved_relative(self, tmp_path):
        """Should resolve a relative module root against the base path."""
        config = BuildConfig(module_root=Path("sub/module"))
        resolved = config.resolved(tmp_path)
        assert resolved.module_root == (tmp_path / "sub" / "module").resolve()
        assert resolved.module_root.is_absolute()
        # Input config is untouched
        assert config.module_root == Path("sub/module")

    def test_resolved_absolute(self, tmp_path):
        """Should leave an absolute module root in place."""
        config = BuildConfig(module_root=tmp_path / "m")
        resolved = config.resolved(Path("/elsewhere"))
        assert resolved.module_root == (tmp_path / "m").resolve()
