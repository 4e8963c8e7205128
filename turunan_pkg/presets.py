"""Worked examples for each differentiation rule, with known derivatives."""

from __future__ import annotations

import math
from dataclasses import dataclass

from .config import DEFAULT_DOMAIN
from .types import ValidationError


@dataclass(frozen=True)
class Preset:
    name: str
    function: str
    derivative: str
    explanation: str
    default_domain: tuple[float, float] = DEFAULT_DOMAIN


_TWO_PI = (-2 * math.pi, 2 * math.pi)

PRESETS: dict[str, tuple[Preset, ...]] = {
    "trig": (
        Preset("Sine", "sin(x)", "cos(x)", "The derivative of sin(x) is cos(x)", _TWO_PI),
        Preset("Cosine", "cos(x)", "-sin(x)", "The derivative of cos(x) is -sin(x)", _TWO_PI),
        Preset(
            "Tangent",
            "tan(x)",
            "sec(x)^2",
            "The derivative of tan(x) is sec²(x) or 1/cos²(x)",
            (-1.5, 1.5),
        ),
    ),
    "product": (
        Preset(
            "Product Rule",
            "x * sin(x)",
            "sin(x) + x * cos(x)",
            "If f(x) = g(x) · h(x), then f'(x) = g'(x) · h(x) + g(x) · h'(x)",
        ),
        Preset(
            "Polynomial × Trig",
            "x^2 * cos(x)",
            "2 * x * cos(x) - x^2 * sin(x)",
            "Using the product rule: (x²)' · cos(x) + x² · (cos(x))'",
        ),
        Preset(
            "Exponential × Linear",
            "e^x * x",
            "e^x * (x + 1)",
            "Using the product rule: (eˣ)' · x + eˣ · (x)'",
        ),
    ),
    "quotient": (
        Preset(
            "Quotient Rule",
            "sin(x) / x",
            "(x * cos(x) - sin(x)) / x^2",
            "If f(x) = g(x)/h(x), then f'(x) = [g'(x)·h(x) - g(x)·h'(x)]/[h(x)]²",
        ),
        Preset(
            "Linear over Cosine",
            "x / cos(x)",
            "(cos(x) + x * sin(x)) / cos(x)^2",
            "Using the quotient rule: [cos(x)·1 - x·(-sin(x))]/cos²(x)",
        ),
        Preset(
            "Polynomial over Linear",
            "(x^2 + 1) / x",
            "(x^2 - 1) / x^2",
            "Using the quotient rule: [x·2x - (x²+1)·1]/x²",
        ),
        Preset(
            "Rational Function",
            "x / (x^2 + 1)",
            "(x^2 + 1 - x * 2 * x) / (x^2 + 1)^2",
            "Using the quotient rule: [(x²+1)·1 - x·2x]/[(x²+1)²]",
        ),
    ),
    "chain": (
        Preset(
            "Chain Rule",
            "sin(x^2)",
            "2 * x * cos(x^2)",
            "If f(x) = g(h(x)), then f'(x) = g'(h(x)) · h'(x)",
        ),
        Preset(
            "Exponential of Sine",
            "e^sin(x)",
            "cos(x) * e^sin(x)",
            "Using the chain rule: e^(sin x) · cos(x)",
        ),
        Preset(
            "Log of Cosine",
            "ln(cos(x))",
            "-tan(x)",
            "Using the chain rule: (1/cos(x)) · (-sin(x)) = -tan(x)",
        ),
        Preset(
            "Nested Functions",
            "sqrt(1 + x^2)",
            "x / sqrt(1 + x^2)",
            "Using the chain rule: (1/2)(1+x²)^(-1/2) · 2x",
        ),
    ),
}


def list_rules() -> list[str]:
    return list(PRESETS)


def get_preset(rule: str, index: int = 0) -> Preset:
    """Look up a preset by rule name and position.

    Raises:
        ValidationError: If the rule or index does not exist
    """
    presets = PRESETS.get(rule.strip().lower()) if isinstance(rule, str) else None
    if presets is None:
        raise ValidationError(
            f"Unknown rule '{rule}' (expected one of {', '.join(PRESETS)})",
            "UNKNOWN_PRESET",
        )
    if not 0 <= index < len(presets):
        raise ValidationError(
            f"Rule '{rule}' has no example {index} (0-{len(presets) - 1})",
            "UNKNOWN_PRESET",
        )
    return presets[index]
