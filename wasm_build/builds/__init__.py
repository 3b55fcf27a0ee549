"""Build orchestration module.

This module handles:
- Build configuration validation
- Output directory derivation per configuration
- Running the toolchain under the build lock
- Resolving the single produced artifact
"""

from wasm_build.builds.errors import BuildError
from wasm_build.builds.schema import BuildConfig, TargetFeatures

__all__ = ["BuildConfig", "BuildError", "TargetFeatures"]

# Access orchestration via wasm_build.builds.service, etc.
