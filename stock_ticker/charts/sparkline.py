"""Matplotlib rendering of the trend curve.

Draws a ChartGeometry as one compound path of cubic Bezier segments, in
canvas coordinates (y grows downward), with no axes.
"""

from __future__ import annotations

import io
import logging

import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.patches import PathPatch
from matplotlib.path import Path

from stock_ticker.charts.geometry import ChartGeometry

logger = logging.getLogger(__name__)

DIRECTION_COLOURS = {
    "positive": "green",
    "negative": "red",
}
_DEFAULT_COLOUR = "green"
_DPI = 100


def geometry_to_path(geometry: ChartGeometry) -> Path | None:
    """Convert geometry to a matplotlib Path of MOVETO + CURVE4 codes."""
    if not geometry:
        return None

    first = geometry.points[0]
    vertices = [(first.x, first.y)]
    codes = [Path.MOVETO]
    for seg in geometry.segments:
        vertices.extend(
            [
                (seg.control1.x, seg.control1.y),
                (seg.control2.x, seg.control2.y),
                (seg.end.x, seg.end.y),
            ]
        )
        codes.extend([Path.CURVE4, Path.CURVE4, Path.CURVE4])
    return Path(vertices, codes)


def sparkline(
    geometry: ChartGeometry,
    direction: str | None = None,
    line_width: float = 2.0,
) -> Figure:
    """Draw the trend curve.

    Args:
        geometry: Curve geometry. Empty geometry yields a blank canvas.
        direction: 'positive' or 'negative' change styling.
        line_width: Stroke width in points.

    Returns:
        Matplotlib Figure sized to the canvas at 100 dpi.
    """
    colour = DIRECTION_COLOURS.get(direction or "", _DEFAULT_COLOUR)

    fig = plt.figure(figsize=(geometry.width / _DPI, geometry.height / _DPI), dpi=_DPI)
    ax = fig.add_axes((0, 0, 1, 1))
    ax.set_xlim(0, geometry.width)
    # Canvas coordinates: origin top-left
    ax.set_ylim(geometry.height, 0)
    ax.set_axis_off()

    path = geometry_to_path(geometry)
    if path is None:
        logger.debug("Empty geometry, rendering blank sparkline")
    else:
        ax.add_patch(
            PathPatch(path, facecolor="none", edgecolor=colour, linewidth=line_width)
        )
    return fig


def fig_to_png(fig: Figure) -> bytes:
    """Render a figure to PNG bytes and close it."""
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=_DPI, transparent=True)
    plt.close(fig)
    data = buf.getvalue()
    buf.close()
    return data
