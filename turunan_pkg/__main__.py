"""Main entry point for running turunan_pkg as a module.

This allows running Turunan with:
    python -m turunan_pkg
    python -m turunan_pkg --health-check
    python -m turunan_pkg -e "x^2 * sin(x)" --tangent-at 1

This is equivalent to running:
    python -m turunan_pkg.cli
    python turunan.py
"""

from __future__ import annotations

import sys

from .cli import main_entry

if __name__ == "__main__":
    sys.exit(main_entry())
