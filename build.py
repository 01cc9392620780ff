#!/usr/bin/env python3
"""Playdate Rust Build Orchestrator - Entry Point."""
import sys

# Add the repository root to path for the pdbuild package
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent))

from pdbuild.build import main

if __name__ == "__main__":
    sys.exit(main())
