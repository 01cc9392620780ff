"""
Entry point for running pdbuild as a module: python -m pdbuild
"""

import sys
from .build import main

if __name__ == "__main__":
    sys.exit(main())
