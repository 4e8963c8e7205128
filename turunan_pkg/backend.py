"""Expression backends: the parse/evaluate/differentiate/simplify capability.

The sampler, differentiator and tangent code only talk to an
``ExpressionBackend``. ``SympyBackend`` is the default implementation; any
object with the same four methods can be injected instead.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Callable, Mapping, Protocol

import sympy as sp

from .config import ALLOWED_SYMPY_NAMES, CACHE_SIZE_COMPILE, VARIABLE_NAME
from .logging_config import get_logger
from .parser import parse_function
from .types import ParseError, ValidationError

logger = get_logger("backend")

X = ALLOWED_SYMPY_NAMES[VARIABLE_NAME]

# math has no reciprocal trig functions; rewrite them before lambdify
_RECIPROCAL_TRIG = (
    (sp.sec, sp.cos),
    (sp.csc, sp.sin),
    (sp.cot, sp.tan),
)


class ExpressionBackend(Protocol):
    """Capability consumed by the core. Every method may raise."""

    def parse(self, expr: str) -> Any:
        ...

    def evaluate(self, expr: Any, bindings: Mapping[str, float]) -> float:
        ...

    def differentiate(self, ast: Any, var: str) -> Any:
        ...

    def simplify(self, ast: Any) -> Any:
        ...


@lru_cache(maxsize=CACHE_SIZE_COMPILE)
def _compile(expr: sp.Expr) -> Callable[[float], Any]:
    """Turn a SymPy expression into a plain-float callable of x."""
    for func, base in _RECIPROCAL_TRIG:
        expr = expr.replace(func, lambda arg, base=base: 1 / base(arg))
    return sp.lambdify(X, expr, modules="math")


class SympyBackend:
    """Default backend built on SymPy parsing and ``lambdify`` over ``math``."""

    name = "sympy"

    def parse(self, expr: str) -> sp.Expr:
        """Parse function text into a SymPy expression.

        Raises:
            ParseError: If the text cannot be parsed or is not a function of x
        """
        try:
            return parse_function(expr)
        except ValidationError as e:
            raise ParseError(e.message, e.code) from e

    def evaluate(self, expr: Any, bindings: Mapping[str, float]) -> float:
        """Evaluate text or a parsed expression at the bound value of x.

        Raises whatever the underlying math raises (ValueError for domain
        errors, ZeroDivisionError, OverflowError, TypeError for complex
        results).
        """
        if isinstance(expr, str):
            expr = self.parse(expr)
        value = _compile(expr)(float(bindings[VARIABLE_NAME]))
        return float(value)

    def differentiate(self, ast: sp.Expr, var: str = VARIABLE_NAME) -> sp.Expr:
        if var != VARIABLE_NAME:
            raise ParseError(
                f"Only the variable '{VARIABLE_NAME}' is supported", "UNKNOWN_VARIABLE"
            )
        return sp.diff(ast, X)

    def simplify(self, ast: sp.Expr) -> sp.Expr:
        return sp.simplify(ast)


_DEFAULT_BACKEND: ExpressionBackend | None = None


def get_default_backend() -> ExpressionBackend:
    """Return the shared SympyBackend instance."""
    global _DEFAULT_BACKEND
    if _DEFAULT_BACKEND is None:
        _DEFAULT_BACKEND = SympyBackend()
        logger.debug("Created default expression backend")
    return _DEFAULT_BACKEND


def clear_caches() -> None:
    """Clear compiled-function and parser caches."""
    from .parser import parse_preprocessed

    _compile.cache_clear()
    parse_preprocessed.cache_clear()
