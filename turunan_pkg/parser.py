"""Input parsing and preprocessing module.

This module handles:
- Input sanitization and validation
- Expression preprocessing (unicode symbols, exponents, implicit multiplication)
- SymPy expression parsing with a whitelist of allowed functions
- Display formatting of functions and numbers
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Any

import sympy as sp
from sympy import parse_expr

from .config import (
    ALLOWED_SYMPY_NAMES,
    CACHE_SIZE_PARSE,
    DIGIT_LETTERS_REGEX,
    MAX_CONSTANT_EXPONENT,
    MAX_CONSTANT_MAGNITUDE,
    MAX_EXPRESSION_DEPTH,
    MAX_EXPRESSION_NODES,
    MAX_INPUT_LENGTH,
    OUTPUT_PRECISION,
    SQRT_UNICODE_REGEX,
    TRANSFORMATIONS,
    VARIABLE_NAME,
)
from .logging_config import get_logger
from .types import ParseError, ValidationError

logger = get_logger("parser")

# Basic denylist to avoid dangerous tokens before SymPy parsing
FORBIDDEN_TOKENS = (
    "__",
    "import",
    "lambda",
    "eval",
    "exec",
    "open",
    "os.",
    "sys.",
    "subprocess",
    "builtins",
    "getattr",
    "setattr",
    "delattr",
    "compile",
    "globals",
    "locals",
)

# "f(x) = ..." and "y = ..." prefixes are accepted and dropped
ASSIGNMENT_PREFIX_REGEX = re.compile(r"^\s*(?:f\s*\(\s*x\s*\)|y)\s*=\s*")

_FROM_SUPERSCRIPT = {
    "⁰": "0",
    "¹": "1",
    "²": "2",
    "³": "3",
    "⁴": "4",
    "⁵": "5",
    "⁶": "6",
    "⁷": "7",
    "⁸": "8",
    "⁹": "9",
    "⁻": "-",
}
_SUPERSCRIPT_REGEX = re.compile(f"([{''.join(_FROM_SUPERSCRIPT)}]+)")

_ALLOWED_FUNCTION_NAMES = set(ALLOWED_SYMPY_NAMES) | {
    getattr(value, "__name__", "") for value in ALLOWED_SYMPY_NAMES.values()
}


def format_number(val: Any, precision: int = OUTPUT_PRECISION) -> str:
    """Format a numeric value with a fixed number of decimals.

    Args:
        val: Numeric value to format
        precision: Number of digits after the decimal point

    Returns:
        Formatted string representation of the number
    """
    try:
        return f"{float(val):.{int(precision)}f}"
    except (ValueError, TypeError, OverflowError):
        return str(val)


def format_function(func: str) -> str:
    """Make a function string easier to read.

    Replaces '*' with '·', 'sqrt' with '√' and small integer powers with
    superscripts.

    Args:
        func: Function string (e.g., "x^2 * sqrt(x)")

    Returns:
        Display string (e.g., "x² · √(x)")
    """
    result = func.replace("**", "^")
    result = result.replace("*", "·")
    result = result.replace("sqrt", "√")
    result = result.replace("^2", "²").replace("^3", "³")
    result = re.sub(r"\^(\d+)", r"^(\1)", result)
    return result


def is_balanced(input_str: str) -> tuple[bool, int | None]:
    """Check if parentheses/brackets are balanced. Returns (is_balanced, error_position)."""
    pairs = {"(": ")", "[": "]", "{": "}"}
    stack: list[tuple[str, int]] = []  # (char, position)
    for i, char in enumerate(input_str):
        if char in pairs:
            stack.append((char, i))
        elif char in pairs.values():
            if not stack:
                return False, i
            opening, pos = stack.pop()
            if pairs[opening] != char:
                return False, i
    if stack:
        return False, stack[0][1]  # Return position of first unmatched
    return True, None


def _check_constant_power(expr: sp.Pow) -> None:
    """Reject a constant power too large to compute exactly.

    Runs on the unevaluated tree, innermost powers first, so every operand
    is already known to be small enough for a floating-point estimate.
    """
    exponent = abs(expr.exp.evalf())
    value = abs(expr.evalf())
    too_big = exponent.is_comparable and exponent > MAX_CONSTANT_EXPONENT
    if value.is_comparable and not value.is_zero:
        too_big = too_big or not (
            1 / MAX_CONSTANT_MAGNITUDE <= value <= MAX_CONSTANT_MAGNITUDE
        )
    if too_big:
        logger.warning("Blocked oversized constant power: %s", expr)
        raise ValidationError(
            "Constant power too large to evaluate", "EXPONENT_TOO_LARGE"
        )


def _validate_expression_tree(
    expr: Any, depth: int = 0, node_count: list[int] | None = None
) -> None:
    """Validate expression tree structure - reject non-whitelisted nodes."""
    if node_count is None:
        node_count = [0]
    node_count[0] += 1
    if node_count[0] > MAX_EXPRESSION_NODES:
        raise ValidationError(
            f"Expression too complex (>{MAX_EXPRESSION_NODES} nodes)", "TOO_COMPLEX"
        )
    if depth > MAX_EXPRESSION_DEPTH:
        raise ValidationError(
            f"Expression too deeply nested (>{MAX_EXPRESSION_DEPTH} levels)", "TOO_DEEP"
        )

    if isinstance(expr, (sp.Symbol, sp.Number, sp.NumberSymbol)):
        return
    if isinstance(expr, sp.Function):
        func_name = getattr(expr.func, "__name__", str(expr.func))
        if func_name not in _ALLOWED_FUNCTION_NAMES:
            logger.warning("Blocked forbidden function: %s", func_name)
            raise ValidationError(
                f"Function '{func_name}' not allowed", "FORBIDDEN_FUNCTION"
            )
    if isinstance(expr, sp.Basic):
        for arg in expr.args:
            _validate_expression_tree(arg, depth + 1, node_count)
        if isinstance(expr, sp.Pow) and not expr.free_symbols:
            _check_constant_power(expr)
        return

    raise ValidationError(
        f"Expression type '{type(expr).__name__}' not allowed", "FORBIDDEN_TYPE"
    )


def preprocess(input_str: str) -> str:
    """Preprocess input string for parsing.

    Applies transformations:
    - Validates input length, forbidden tokens and balanced delimiters
    - Drops a leading "f(x) =" or "y ="
    - Standardizes unicode symbols (π, −, ×, ·, √, superscripts)
    - Converts exponents (^ to **)
    - Inserts implicit multiplication after digits (2x -> 2*x)

    Args:
        input_str: Raw function text from the user

    Returns:
        Preprocessed string ready for SymPy parsing

    Raises:
        ValidationError: If input is empty, too long, contains forbidden
                        tokens, or has unbalanced parentheses/brackets
    """
    input_str = input_str.strip() if input_str else ""
    if not input_str:
        raise ValidationError("Input cannot be empty", "EMPTY_INPUT")
    if len(input_str) > MAX_INPUT_LENGTH:
        raise ValidationError(
            f"Input too long (>{MAX_INPUT_LENGTH} characters)", "TOO_LONG"
        )

    lowered = input_str.lower()
    for tok in FORBIDDEN_TOKENS:
        if tok in lowered:
            logger.warning(
                "Blocked input containing forbidden token %r (length %d)",
                tok,
                len(input_str),
            )
            raise ValidationError(
                f"Input contains forbidden token: {tok}", "FORBIDDEN_TOKEN"
            )

    balanced, position = is_balanced(input_str)
    if not balanced:
        raise ValidationError(
            f"Unbalanced parentheses or brackets at position {position}",
            "UNBALANCED",
        )

    processed_str = ASSIGNMENT_PREFIX_REGEX.sub("", input_str)
    processed_str = processed_str.replace("−", "-").replace("–", "-")
    processed_str = processed_str.replace("π", "pi")
    processed_str = processed_str.replace("×", "*").replace("·", "*")
    processed_str = processed_str.replace("^", "**")
    processed_str = _SUPERSCRIPT_REGEX.sub(
        lambda m: "**" + "".join(_FROM_SUPERSCRIPT[c] for c in m.group(1)),
        processed_str,
    )
    processed_str = SQRT_UNICODE_REGEX.sub("sqrt(", processed_str)
    processed_str = DIGIT_LETTERS_REGEX.sub(r"\1*\2", processed_str)
    processed_str = re.sub(r"\s+", " ", processed_str).strip()
    if not processed_str:
        raise ValidationError("Input cannot be empty", "EMPTY_INPUT")
    return processed_str


def _parse(expr_str: str, evaluate: bool) -> sp.Expr:
    try:
        expr = parse_expr(
            expr_str,
            local_dict=dict(ALLOWED_SYMPY_NAMES),
            transformations=TRANSFORMATIONS,
            evaluate=evaluate,
        )
    except ValidationError:
        raise
    except Exception as e:
        logger.debug("Failed to parse %r: %s", expr_str, e)
        raise ParseError(f"Could not parse expression: {expr_str}") from e

    if not isinstance(expr, sp.Expr):
        raise ParseError(
            f"Not a scalar expression: {expr_str}", "NOT_AN_EXPRESSION"
        )
    return expr


@lru_cache(maxsize=CACHE_SIZE_PARSE)
def parse_preprocessed(expr_str: str) -> sp.Expr:
    """Parse and validate a preprocessed expression string.

    Raises:
        ParseError: If SymPy cannot parse the text, the result is not a
                    scalar expression, or it uses a variable other than x
        ValidationError: If the parsed tree contains forbidden nodes
    """
    # The tree is validated unevaluated, since evaluation itself can hang
    unevaluated = _parse(expr_str, evaluate=False)
    _validate_expression_tree(unevaluated)
    expr = _parse(expr_str, evaluate=True)

    extra = sorted(
        str(sym) for sym in expr.free_symbols if str(sym) != VARIABLE_NAME
    )
    if extra:
        raise ParseError(
            f"Only the variable '{VARIABLE_NAME}' is allowed (found: {', '.join(extra)})",
            "UNKNOWN_VARIABLE",
        )
    return expr


def parse_function(text: str) -> sp.Expr:
    """Preprocess and parse raw function text in one step."""
    return parse_preprocessed(preprocess(text))
