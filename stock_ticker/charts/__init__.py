"""Trend-curve geometry and rendering.

- geometry: Pure price metrics and Bezier curve layout.
- sparkline: Matplotlib rendering of a curve (Figure objects).
"""

from stock_ticker.charts.geometry import (
    ChartGeometry,
    CurveSegment,
    Point,
    PriceMetrics,
    build_geometry,
    build_metrics,
)
from stock_ticker.charts.sparkline import fig_to_png, sparkline

__all__ = [
    "ChartGeometry",
    "CurveSegment",
    "Point",
    "PriceMetrics",
    "build_geometry",
    "build_metrics",
    "fig_to_png",
    "sparkline",
]
