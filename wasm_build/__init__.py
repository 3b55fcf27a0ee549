"""wasm-build - Build Cargo modules into WebAssembly artifacts.

This package orchestrates `cargo build` for WebAssembly targets, caching
outputs per distinct configuration and resolving the single artifact
each build produces.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
