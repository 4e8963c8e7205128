"""Centralized configuration for Turunan.

This module defines:
- Sampling limits (resolution, derivative step, display ceiling)
- Viewport bounds (zoom range and steps, vertical span, padding)
- Animation timing (cycle period, speed range)
- Input validation limits and cache sizes
- Allowed SymPy functions and parse transformations

Configuration can be overridden via:
- CLI flags (see cli.py)
- Environment variables (prefixed with TURUNAN_)
"""

import os
import re

import sympy as sp
from sympy.parsing.sympy_parser import (
    convert_xor,
    implicit_multiplication_application,
    standard_transformations,
)

try:
    import importlib.metadata

    VERSION = importlib.metadata.version("turunan")
except Exception:
    # Fallback if package not installed
    VERSION = "1.0.0"

# The single free variable every expression is written in
VARIABLE_NAME = "x"

# Sampling configuration
RESOLUTION = int(os.getenv("TURUNAN_RESOLUTION", "500"))  # intervals per pass
DERIVATIVE_STEP = float(
    os.getenv("TURUNAN_DERIVATIVE_STEP", "1e-4")
)  # central difference h
DISPLAY_CEILING = float(
    os.getenv("TURUNAN_DISPLAY_CEILING", "100")
)  # |y| above this is not drawn; <= 0 disables the clamp
DERIVATIVE_MODE = os.getenv(
    "TURUNAN_DERIVATIVE_MODE", "auto"
)  # "auto", "symbolic", "numeric"

# Viewport configuration
ZOOM_MIN = float(os.getenv("TURUNAN_ZOOM_MIN", "0.5"))
ZOOM_MAX = float(os.getenv("TURUNAN_ZOOM_MAX", "5"))
ZOOM_STEP = float(os.getenv("TURUNAN_ZOOM_STEP", "0.25"))  # zoom in/out buttons
WHEEL_STEP = float(os.getenv("TURUNAN_WHEEL_STEP", "0.1"))  # one wheel notch
VERTICAL_SPAN = float(
    os.getenv("TURUNAN_VERTICAL_SPAN", "20")
)  # math units shown vertically at zoom 1 (±10)
PADDING = float(os.getenv("TURUNAN_PADDING", "40"))  # pixels
VIEWPORT_WIDTH = int(os.getenv("TURUNAN_VIEWPORT_WIDTH", "800"))
VIEWPORT_HEIGHT = int(os.getenv("TURUNAN_VIEWPORT_HEIGHT", "500"))

# Domain configuration
DEFAULT_DOMAIN = (
    float(os.getenv("TURUNAN_DOMAIN_MIN", "-10")),
    float(os.getenv("TURUNAN_DOMAIN_MAX", "10")),
)
DOMAIN_LIMIT = float(
    os.getenv("TURUNAN_DOMAIN_LIMIT", "20")
)  # range slider bound, |min| and |max|

# Tangent configuration
TANGENT_HALF_WIDTH = float(os.getenv("TURUNAN_TANGENT_HALF_WIDTH", "2"))

# Animation configuration
CYCLE_PERIOD_MS = float(
    os.getenv("TURUNAN_CYCLE_PERIOD_MS", "5000")
)  # one full reveal at speed 1
SPEED_MIN = float(os.getenv("TURUNAN_SPEED_MIN", "0.5"))
SPEED_MAX = float(os.getenv("TURUNAN_SPEED_MAX", "3"))

# Expression sanity probe
PROBE_POINT = float(os.getenv("TURUNAN_PROBE_POINT", "1"))
PROBE_COUNT = int(
    os.getenv("TURUNAN_PROBE_COUNT", "9")
)  # extra grid points across the domain

# Input validation limits
MAX_INPUT_LENGTH = int(os.getenv("TURUNAN_MAX_INPUT_LENGTH", "1000"))  # characters
MAX_EXPRESSION_DEPTH = int(os.getenv("TURUNAN_MAX_EXPRESSION_DEPTH", "100"))
MAX_EXPRESSION_NODES = int(os.getenv("TURUNAN_MAX_EXPRESSION_NODES", "2000"))
# Limits for constant powers such as 9^9^9 (checked before SymPy evaluates them)
MAX_CONSTANT_EXPONENT = float(os.getenv("TURUNAN_MAX_CONSTANT_EXPONENT", "1000"))
MAX_CONSTANT_MAGNITUDE = float(os.getenv("TURUNAN_MAX_CONSTANT_MAGNITUDE", "1e308"))

# Cache configuration
CACHE_SIZE_PARSE = int(os.getenv("TURUNAN_CACHE_SIZE_PARSE", "256"))
CACHE_SIZE_COMPILE = int(os.getenv("TURUNAN_CACHE_SIZE_COMPILE", "256"))

OUTPUT_PRECISION = int(os.getenv("TURUNAN_OUTPUT_PRECISION", "4"))

ALLOWED_SYMPY_NAMES = {
    "x": sp.Symbol(VARIABLE_NAME, real=True),
    "pi": sp.pi,
    "e": sp.E,
    "E": sp.E,
    "sqrt": sp.sqrt,
    "sin": sp.sin,
    "cos": sp.cos,
    "tan": sp.tan,
    "sec": sp.sec,
    "csc": sp.csc,
    "cot": sp.cot,
    "asin": sp.asin,
    "acos": sp.acos,
    "atan": sp.atan,
    "sinh": sp.sinh,
    "cosh": sp.cosh,
    "tanh": sp.tanh,
    "log": sp.log,
    "ln": sp.log,
    "exp": sp.exp,
    "sign": sp.sign,
    "Abs": sp.Abs,
    "abs": sp.Abs,  # lowercase alias for convenience
}

TRANSFORMATIONS = standard_transformations + (
    implicit_multiplication_application,
    convert_xor,
)

SQRT_UNICODE_REGEX = re.compile(r"√\s*\(")
DIGIT_LETTERS_REGEX = re.compile(r"(\d)\s*(?![eE][+-]?\d)([A-Za-z(])")
