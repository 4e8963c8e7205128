"""Optional plotting of a session frame: matplotlib PNG or ASCII text."""

from __future__ import annotations

import numpy as np

try:
    # Set non-GUI backend before importing pyplot to avoid Tkinter issues
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False

from .logging_config import get_logger
from .parser import format_function
from .types import PlotResult

logger = get_logger("plotting")

ASCII_ROWS = 20
ASCII_COLS = 60


def _open_file_in_viewer(file_path: str) -> bool:
    """Open a file in the system's default application (cross-platform).

    Returns:
        True if successful, False otherwise
    """
    import os
    import subprocess
    import sys

    try:
        if sys.platform == "win32":
            os.startfile(file_path)
        elif sys.platform == "darwin":
            subprocess.run(["open", file_path], check=True)
        else:
            subprocess.run(["xdg-open", file_path], check=True)
        return True
    except (OSError, subprocess.CalledProcessError) as e:
        logger.debug("Could not open %s: %s", file_path, e)
        return False


def _with_gaps(points: list[tuple[float, float]], step: float) -> tuple[np.ndarray, np.ndarray]:
    """Split a point list into x/y arrays, inserting NaN where samples were dropped.

    matplotlib breaks a line at NaN, so a pole does not get bridged by a
    vertical stroke.
    """
    if not points:
        return np.array([]), np.array([])
    xs = np.array([p[0] for p in points], dtype=float)
    ys = np.array([p[1] for p in points], dtype=float)
    if len(xs) < 2 or step <= 0:
        return xs, ys
    breaks = np.nonzero(np.diff(xs) > 1.5 * step)[0] + 1
    return np.insert(xs, breaks, np.nan), np.insert(ys, breaks, np.nan)


def render_ascii(
    function_points: list[tuple[float, float]],
    derivative_points: list[tuple[float, float]],
    x_range: tuple[float, float],
    rows: int = ASCII_ROWS,
    cols: int = ASCII_COLS,
) -> str | None:
    """Draw f with ``*`` and f' with ``.`` on a character grid.

    Returns:
        The plot text, or None if there is nothing to draw
    """
    all_y = [y for _, y in function_points] + [y for _, y in derivative_points]
    if not all_y:
        return None
    x_min, x_max = x_range
    y_min, y_max = min(all_y), max(all_y)
    y_range = y_max - y_min if y_max != y_min else 1
    plot_chars = [[" " for _ in range(cols)] for _ in range(rows)]

    def cell(x: float, y: float) -> tuple[int, int]:
        col = int((x - x_min) / (x_max - x_min) * (cols - 1))
        row = int((y - y_min) / y_range * (rows - 1))
        return max(0, min(rows - 1, row)), max(0, min(cols - 1, col))

    for x, y in derivative_points:
        row, col = cell(x, y)
        plot_chars[row][col] = "."
    for x, y in function_points:
        row, col = cell(x, y)
        plot_chars[row][col] = "*"

    x_axis_row = (
        int((0 - y_min) / y_range * (rows - 1)) if y_min <= 0 <= y_max else -1
    )
    y_axis_col = (
        int((0 - x_min) / (x_max - x_min) * (cols - 1)) if x_min <= 0 <= x_max else -1
    )

    lines = []
    for r in range(rows - 1, -1, -1):
        line = []
        for c in range(cols):
            char = plot_chars[r][c]
            if char != " ":
                line.append(char)
            elif r == x_axis_row and c == y_axis_col:
                line.append("+")
            elif r == x_axis_row:
                line.append("-")
            elif c == y_axis_col:
                line.append("|")
            else:
                line.append(" ")
        lines.append("".join(line).rstrip())
    return "\n".join(lines)


def plot_session(
    session, output: str | None = None, ascii: bool = False, open_viewer: bool = False
) -> PlotResult:
    """Render the current frame of a VisualizerSession.

    The PNG shows f(x), f'(x) dashed, and the tangent line at the highlighted
    point when there is one. Without ``output`` the image goes to a temporary
    file.

    Returns:
        PlotResult whose ``result`` is the file path or the ASCII plot text
    """
    if session.sample_set is None:
        return PlotResult(ok=False, error=session.message or "Nothing to plot")
    if not HAS_MATPLOTLIB and not ascii:
        return PlotResult(
            ok=False, error="matplotlib not installed. Use ascii=True for ASCII plot."
        )

    frame = session.frame()
    lo, hi = frame.effective_range

    if ascii:
        text = render_ascii(frame.function_points, frame.derivative_points, (lo, hi))
        if text is None:
            return PlotResult(ok=False, error="Cannot plot: function values out of range")
        return PlotResult(ok=True, result=f"ASCII plot:\n{text}")

    step = (hi - lo) / session.resolution
    fx, fy = _with_gaps(frame.function_points, step)
    dx, dy = _with_gaps(frame.derivative_points, step)
    label = format_function(session.expression)

    fig, ax = plt.subplots(figsize=(10, 6))
    try:
        ax.plot(fx, fy, linewidth=2, color="#2E86AB", label=f"f(x) = {label}")
        if len(dx):
            derivative_label = (
                format_function(session.derivative)
                if session.derivative is not None
                else "numeric"
            )
            ax.plot(
                dx,
                dy,
                linewidth=2,
                linestyle="--",
                color="#E63946",
                label=f"f'(x) = {derivative_label}",
            )
        if frame.tangent_segment is not None and frame.highlight is not None:
            tx = [p[0] for p in frame.tangent_segment]
            ty = [p[1] for p in frame.tangent_segment]
            ax.plot(tx, ty, linewidth=1.5, color="#2A9D8F", label="tangent")
            ax.plot([frame.highlight.x], [frame.highlight.y], "o", color="#2A9D8F")

        _, y_scale = session.viewport.scales(session.width, session.height, session.padding)
        y_center = session.viewport.state.pan_dy / y_scale
        y_half = session.viewport.vertical_span / 2 / session.viewport.zoom
        ax.set_xlim(lo, hi)
        ax.set_ylim(y_center - y_half, y_center + y_half)
        ax.set_xlabel("x", fontsize=12, fontweight="bold")
        ax.set_ylabel("y", fontsize=12, fontweight="bold")
        ax.set_title(f"Derivative of {label}", fontsize=14, fontweight="bold")
        ax.grid(True, alpha=0.3, linestyle="--")
        ax.axhline(y=0, color="k", linewidth=0.8, linestyle="-", alpha=0.3)
        ax.axvline(x=0, color="k", linewidth=0.8, linestyle="-", alpha=0.3)
        ax.legend(loc="best", fontsize=10)
        fig.tight_layout()

        if output is None:
            import tempfile

            temp_file = tempfile.NamedTemporaryFile(suffix=".png", delete=False)
            output = temp_file.name
            temp_file.close()
        fig.savefig(output, dpi=150, bbox_inches="tight")
    except (OSError, ValueError) as e:
        logger.error("Failed to save plot: %s", e, exc_info=True)
        return PlotResult(ok=False, error=f"Failed to save plot: {e}")
    finally:
        plt.close(fig)

    logger.info("Plot saved to %s", output)
    if open_viewer and _open_file_in_viewer(output):
        return PlotResult(ok=True, result=f"Plot saved and opened: {output}")
    return PlotResult(ok=True, result=f"Plot saved to: {output}")
