"""
pdbuild - Build orchestrator for Playdate apps written in Rust.

Compiles an example app with cargo, packages it with the SDK's pdc
compiler, and optionally opens it in the simulator or under rust-gdb.

Usage:
    python -m pdbuild <example> [--release] [--run | --debug] [--sdkPath PATH]
"""

from .build import main

__version__ = "0.1.0"

__all__ = ["__version__", "main"]
