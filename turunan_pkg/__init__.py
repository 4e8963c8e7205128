"""Turunan package: function sampling, derivatives, viewport and animation for a derivative plotter."""

__all__ = [
    "config",
    "parser",
    "backend",
    "evaluator",
    "calculus",
    "sampler",
    "viewport",
    "tangent",
    "animation",
    "presets",
    "session",
    "plotting",
    "cli",
    "types",
    "api",
    "logging_config",
]

# Public API exports

__api_exports__ = [
    "evaluate_at",
    "derivative",
    "sample_function",
    "tangent",
    "validate_function",
    "plot",
]
