#!/usr/bin/env python3
"""
Turunan - Derivative Plotter

Main entry point for the Turunan derivative plotter. This file is a thin
wrapper that delegates all functionality to the turunan_pkg package.

Usage:
    python turunan.py                          # Interactive REPL
    python turunan.py -e "x^2" --tangent-at 1  # Describe one function
    python turunan.py --preset chain:1 --ascii # Worked example as ASCII plot
    python turunan.py --help                   # Show help
"""

from __future__ import annotations

import sys


def main() -> int:
    """
    Main entry point for Turunan.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    try:
        from turunan_pkg.cli import main_entry

        return main_entry(sys.argv[1:])
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        return 1
    except ImportError as e:
        print(f"Error: Failed to import turunan_pkg: {e}")
        print("Please ensure all dependencies are installed: pip install -e .")
        return 1


if __name__ == "__main__":
    sys.exit(main())
