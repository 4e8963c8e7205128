from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from .calculus import DERIVATIVE_MODES
from .config import DERIVATIVE_MODE, RESOLUTION, VERSION
from .logging_config import get_logger
from .parser import format_function, format_number
from .presets import PRESETS, list_rules
from .session import VisualizerSession

logger = get_logger("cli")

FRAME_MS = 1000 / 60


def _health_check() -> int:
    """Run health check to verify dependencies and basic operations.

    Returns:
        Exit code (0 for success, non-zero for failures)
    """
    checks_passed = 0
    checks_failed = 0

    print("Running Turunan health check...")
    print("-" * 50)

    try:
        import sympy as sp

        print(f"[OK] SymPy {sp.__version__} imported successfully")
        checks_passed += 1
    except ImportError as e:
        print(f"[FAIL] SymPy import failed: {e}")
        checks_failed += 1

    try:
        from .evaluator import evaluate

        value = evaluate("x^2 + 1", 2)
        if value == 5.0:
            print("[OK] Basic evaluation works")
            checks_passed += 1
        else:
            print(f"[FAIL] Basic evaluation failed: expected 5.0, got {value}")
            checks_failed += 1
    except Exception as e:
        print(f"[FAIL] Evaluation check failed: {e}")
        checks_failed += 1

    try:
        from .calculus import symbolic_derivative

        result = symbolic_derivative("sin(x)")
        if result.ok and result.derivative == "cos(x)":
            print("[OK] Symbolic differentiation works")
            checks_passed += 1
        else:
            print(f"[FAIL] Differentiation check failed: {result}")
            checks_failed += 1
    except Exception as e:
        print(f"[FAIL] Differentiation check failed: {e}")
        checks_failed += 1

    try:
        from .sampler import sample
        from .types import Domain

        samples = sample("x^2", "2*x", Domain(-1, 1), resolution=10)
        if len(samples) == 11:
            print("[OK] Sampling works")
            checks_passed += 1
        else:
            print(f"[FAIL] Sampling check failed: {len(samples)} points")
            checks_failed += 1
    except Exception as e:
        print(f"[FAIL] Sampling check failed: {e}")
        checks_failed += 1

    try:
        import numpy

        print(f"[OK] NumPy {numpy.__version__} available")
        checks_passed += 1
    except ImportError:
        print("[WARN] NumPy not available (plotting features limited)")
        print("  To install: pip install numpy")

    try:
        import matplotlib

        print(f"[OK] Matplotlib {matplotlib.__version__} available")
        checks_passed += 1
    except ImportError:
        print("[WARN] Matplotlib not available (use --ascii for plots)")
        print("  To install: pip install matplotlib")

    print("-" * 50)
    print(f"Results: {checks_passed} passed, {checks_failed} failed")

    if checks_failed > 0:
        print("\n[WARN] Some health checks failed. Core functionality may be impaired.")
        return 1

    print("\n[OK] All health checks passed!")
    return 0


def _parse_preset_arg(value: str) -> tuple[str, int]:
    """Split ``RULE[:INDEX]`` into its parts."""
    rule, _, index = value.partition(":")
    try:
        return rule.strip(), int(index) if index.strip() else 0
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Preset index must be an integer: '{index}'"
        ) from None


def summarize(session: VisualizerSession) -> dict[str, Any]:
    """Collect what the session is showing into a JSON-friendly dict."""
    frame = session.frame()
    res: dict[str, Any] = {"ok": session.message is None}
    if session.message is not None:
        res["error"] = session.message
    res.update(
        {
            "expression": session.expression,
            "derivative": session.derivative,
            "method": session.derivative_method,
            "domain": list(session.domain.as_tuple()),
        }
    )
    res.update(frame.to_dict())
    if session.sample_set is not None:
        res["samples"] = len(session.sample_set)
        res["derivative_points"] = len(frame.derivative_points)
    return res


def print_summary(res: dict[str, Any], output_format: str = "human") -> None:
    """Print a session summary in the requested format."""
    if output_format == "json":
        print(json.dumps(res, indent=2, ensure_ascii=False))
        return
    if not res.get("ok"):
        print("Error:", res.get("error"))
        return
    if res.get("expression") is None:
        print("No function. Use 'f <expr>' or 'preset RULE [I]'.")
        return
    print(f"f(x)  = {format_function(res['expression'])}")
    if res.get("derivative") is not None:
        print(f"f'(x) = {format_function(res['derivative'])}  ({res['method']})")
    else:
        print("f'(x) = central differences  (numeric)")
    lo, hi = res["effective_range"]
    print(
        f"view  : x in [{format_number(lo, 2)}, {format_number(hi, 2)}], "
        f"zoom {res['zoom']:.2f}x"
    )
    print(f"points: {res.get('points', 0)} of {res.get('samples', 0)}")
    if res.get("animating") or res.get("progress"):
        print(f"anim  : progress {res['progress']:.3f}")
    highlight = res.get("highlight")
    if highlight is not None:
        print(
            f"at x = {format_number(highlight['x'])}: "
            f"f = {format_number(highlight['y'])}, f' = {format_number(highlight['dy'])}"
        )
    tangent = res.get("tangent")
    if tangent is not None:
        sign = "-" if tangent["intercept"] < 0 else "+"
        line = (
            f"tangent: y = {format_number(tangent['slope'])}·x {sign} "
            f"{format_number(abs(tangent['intercept']))}"
        )
        if tangent["degenerate"]:
            line += "  (slope undefined, drawn flat)"
        print(line)


def run_animation(
    session: VisualizerSession,
    frames: int,
    frame_ms: float = FRAME_MS,
    output_format: str = "human",
) -> None:
    """Advance the animation by ``frames`` ticks of ``frame_ms`` each and report."""
    session.start_animation()
    for index in range(frames):
        progress = session.tick(frame_ms)
        if output_format == "human":
            visible = len(session.frame().function_points)
            print(f"frame {index + 1:>4}: progress {progress:.3f}, {visible} points")
    session.stop_animation()


def _plot(session: VisualizerSession, output: str | None, ascii: bool) -> int:
    from .plotting import plot_session

    result = plot_session(session, output=output, ascii=ascii)
    if result.ok:
        print(result.result)
        return 0
    print("Error:", result.error)
    return 1


def print_help_text() -> None:
    """Print help text for REPL commands."""
    help_text = f"""Turunan version {VERSION}

Plot a function of x next to its derivative.

REPL COMMANDS:
  f <expr>                 Plot f(x), e.g. f x^2 * sin(x)
  df <expr>                Use <expr> as f'(x) instead of deriving it
  domain <min> <max>       Set the base domain (clamped to ±20)
  zoom in | out | <Z>      Change the zoom factor (0.5 to 5)
  pan <dx>                 Shift the view by dx units of x
  reset                    Reset zoom and pan
  at <x> | off             Highlight a point and show its tangent
  animate <frames>         Run the path animation for some frames
  speed <s>                Animation speed (0.5 to 3)
  preset <rule> [i]        Load a worked example ({", ".join(list_rules())})
  presets                  List the worked examples
  show                     Print the current state and an ASCII plot
  plot [file]              Save a PNG plot (requires matplotlib)
  help                     Show this help message
  quit, exit               Exit
"""
    print(help_text)


def print_presets(output_format: str = "human") -> None:
    if output_format == "json":
        print(
            json.dumps(
                {
                    rule: [
                        {"name": p.name, "function": p.function, "derivative": p.derivative}
                        for p in presets
                    ]
                    for rule, presets in PRESETS.items()
                },
                indent=2,
                ensure_ascii=False,
            )
        )
        return
    for rule, presets in PRESETS.items():
        print(f"{rule}:")
        for index, preset in enumerate(presets):
            print(
                f"  {index}  {preset.name}: f(x) = {format_function(preset.function)}, "
                f"f'(x) = {format_function(preset.derivative)}"
            )


def execute_command(
    session: VisualizerSession, raw: str, output_format: str = "human"
) -> bool:
    """Run one REPL line against ``session``.

    Returns:
        False when the user asked to quit
    """
    command, _, rest = raw.strip().partition(" ")
    command = command.lower()
    rest = rest.strip()

    if command in ("quit", "exit"):
        return False
    if command == "help":
        print_help_text()
        return True
    if command == "presets":
        print_presets(output_format)
        return True

    try:
        if command == "f":
            session.set_expression(rest)
        elif command == "df":
            if session.expression is None:
                print("Error: Set a function first with 'f <expr>'")
                return True
            session.set_expression(session.expression, rest or None)
        elif command == "domain":
            lo, hi = (float(v) for v in rest.split())
            session.set_domain(lo, hi)
        elif command == "zoom":
            if rest == "in":
                session.zoom_in()
            elif rest == "out":
                session.zoom_out()
            else:
                session.set_zoom(float(rest))
        elif command == "pan":
            session.pan(float(rest))
        elif command == "reset":
            session.reset_view()
        elif command == "at":
            if rest == "off":
                session.clear_highlight()
            else:
                session.highlight_at(float(rest))
        elif command == "animate":
            run_animation(session, int(rest or "60"), output_format=output_format)
        elif command == "speed":
            session.set_speed(float(rest))
        elif command == "preset":
            parts = rest.split()
            session.select_preset(parts[0], int(parts[1]) if len(parts) > 1 else 0)
        elif command == "show":
            print_summary(summarize(session), output_format)
            if session.sample_set is not None:
                _plot(session, None, ascii=True)
            return True
        elif command == "plot":
            _plot(session, rest or None, ascii=False)
            return True
        else:
            print(f"Unknown command '{command}'. Type 'help' for commands.")
            return True
    except (ValueError, IndexError) as e:
        logger.debug("Bad arguments for %r: %s", command, e)
        print(f"Error: Bad arguments for '{command}'. Type 'help' for usage.")
        return True

    print_summary(summarize(session), output_format)
    return True


def repl_loop(session: VisualizerSession, output_format: str = "human") -> None:
    """Interactive REPL loop with graceful interrupt handling."""
    try:
        import readline  # noqa: F401
    except ImportError:
        # readline not available on Windows - that's fine
        pass

    print("Turunan - type 'help' for commands, 'quit' to exit.")
    while True:
        try:
            raw = input("turunan> ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\nGoodbye.")
            break
        if not raw:
            continue
        if not execute_command(session, raw, output_format):
            break


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for Turunan CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(
        prog="turunan", description="Plot a function of x next to its derivative."
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("-e", "--expr", type=str, help="Function of x to plot")
    source.add_argument(
        "--preset",
        type=_parse_preset_arg,
        metavar="RULE[:INDEX]",
        help=f"Load a worked example ({', '.join(PRESETS)})",
    )
    parser.add_argument(
        "-d", "--derivative", type=str, help="Use this derivative instead of deriving it"
    )
    parser.add_argument(
        "--domain", type=float, nargs=2, metavar=("MIN", "MAX"), help="Base domain"
    )
    parser.add_argument(
        "--resolution",
        type=int,
        default=RESOLUTION,
        help=f"Sampling intervals per pass (default: {RESOLUTION})",
    )
    parser.add_argument(
        "--method",
        type=str,
        choices=list(DERIVATIVE_MODES),
        default=DERIVATIVE_MODE,
        help=f"How to find the derivative (default: {DERIVATIVE_MODE})",
    )
    parser.add_argument("--tangent-at", type=float, metavar="X", help="Show the tangent at X")
    parser.add_argument("--zoom", type=float, help="Zoom factor (0.5 to 5)")
    parser.add_argument(
        "--animate-frames", type=int, metavar="N", help="Run N animation frames"
    )
    parser.add_argument(
        "--frame-ms",
        type=float,
        default=FRAME_MS,
        metavar="MS",
        help="Milliseconds per animation frame (default: 60 fps)",
    )
    parser.add_argument("--speed", type=float, help="Animation speed (0.5 to 3)")
    parser.add_argument("--plot", type=str, metavar="PATH", help="Save a PNG plot to PATH")
    parser.add_argument("--ascii", action="store_true", help="Print an ASCII plot")
    parser.add_argument(
        "--list-presets", action="store_true", help="List the worked examples"
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "human"],
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging level",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check and verify dependencies",
    )
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    args = parser.parse_args(argv)
    output_format = args.format

    from .logging_config import setup_logging

    setup_logging(level=args.log_level, log_file=args.log_file)
    logger.debug("Arguments: %s", vars(args))

    if args.version:
        print(VERSION)
        return 0
    if args.health_check:
        return _health_check()
    if args.list_presets:
        print_presets(output_format)
        return 0
    if args.resolution <= 0:
        print(f"Error: Resolution must be a positive integer, got {args.resolution}")
        return 1

    session = VisualizerSession(resolution=args.resolution, derivative_mode=args.method)
    if args.speed is not None:
        session.set_speed(args.speed)

    if args.preset is not None and not session.select_preset(*args.preset):
        print_summary(summarize(session), output_format)
        return 1
    if args.domain is not None and not session.set_domain(*args.domain):
        print_summary(summarize(session), output_format)
        return 1
    if args.expr is not None:
        if not session.set_expression(args.expr, args.derivative):
            print_summary(summarize(session), output_format)
            return 1
    elif args.derivative is not None and session.expression is not None:
        if not session.set_expression(session.expression, args.derivative):
            print_summary(summarize(session), output_format)
            return 1

    if session.expression is None:
        repl_loop(session, output_format=output_format)
        return 0

    if args.zoom is not None:
        session.set_zoom(args.zoom)
    if args.tangent_at is not None:
        session.highlight_at(args.tangent_at)
    if args.animate_frames:
        run_animation(session, args.animate_frames, args.frame_ms, output_format)

    from .plotting import plot_session

    res = summarize(session)
    plots = []
    if args.ascii:
        plots.append(plot_session(session, ascii=True))
    if args.plot:
        plots.append(plot_session(session, output=args.plot))
    if output_format == "json" and plots:
        res["plots"] = [p.to_dict() for p in plots]
    print_summary(res, output_format)
    if output_format == "human":
        for result in plots:
            print(result.result if result.ok else f"Error: {result.error}")
    return 0 if res["ok"] and all(p.ok for p in plots) else 1


if __name__ == "__main__":
    """Allow running the CLI module directly with python -m turunan_pkg.cli"""
    sys.exit(main_entry())
