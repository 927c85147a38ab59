"""Price metrics and trend-curve geometry.

Pure functions, safe to call from any thread. Both degrade to absent
values or empty geometry on insufficient input instead of raising.

Curve construction: prices are laid out evenly across the canvas width
and scaled into the canvas height with the price axis inverted (higher
price, smaller y). Consecutive points are joined by cubic Bezier
segments whose two control points sit at the horizontal midpoint of the
pair, each at the height of its own endpoint.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from stock_ticker.config import DEFAULT_CANVAS_HEIGHT, DEFAULT_CANVAS_WIDTH


@dataclass(frozen=True)
class PriceMetrics:
    """Latest close and day-over-day change.

    Attributes:
        latest_close: Last close, None for an empty series.
        previous_close: Second-to-last close, None for fewer than 2 points.
        change: latest_close - previous_close, None if either is absent.
    """

    latest_close: float | None
    previous_close: float | None
    change: float | None

    @property
    def direction(self) -> str | None:
        """'positive' for change >= 0, 'negative' below zero, None if absent."""
        if self.change is None:
            return None
        return "positive" if self.change >= 0 else "negative"


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class CurveSegment:
    """Cubic Bezier segment from start to end."""

    start: Point
    control1: Point
    control2: Point
    end: Point


@dataclass(frozen=True)
class ChartGeometry:
    """Trend curve laid out on a width x height canvas.

    Empty (falsy, no points, no segments) when the series has fewer
    than two points.
    """

    width: float
    height: float
    points: tuple[Point, ...] = ()
    segments: tuple[CurveSegment, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.segments)

    def svg_path(self) -> str:
        """SVG path data: a moveto followed by one curveto per segment."""
        if not self.segments:
            return ""
        first = self.points[0]
        parts = [f"M {_fmt(first.x)},{_fmt(first.y)}"]
        for seg in self.segments:
            parts.append(
                f"C {_fmt(seg.control1.x)},{_fmt(seg.control1.y)} "
                f"{_fmt(seg.control2.x)},{_fmt(seg.control2.y)} "
                f"{_fmt(seg.end.x)},{_fmt(seg.end.y)}"
            )
        return " ".join(parts)


def _fmt(value: float) -> str:
    # Integral coordinates print without a trailing ".0"
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _clean(series: Sequence[float]) -> list[float]:
    """Drop non-numeric and non-finite prices, keeping order."""
    out: list[float] = []
    for value in series:
        try:
            num = float(value)
        except (TypeError, ValueError):
            continue
        if math.isfinite(num):
            out.append(num)
    return out


def build_metrics(series: Sequence[float]) -> PriceMetrics:
    """Derive latest close, previous close and change from a close series.

    Args:
        series: Daily closes, oldest first.

    Returns:
        PriceMetrics. Fields are None where the series is too short.
    """
    prices = _clean(series)
    latest = prices[-1] if prices else None
    previous = prices[-2] if len(prices) >= 2 else None
    change = latest - previous if latest is not None and previous is not None else None
    return PriceMetrics(latest_close=latest, previous_close=previous, change=change)


def build_geometry(
    series: Sequence[float],
    width: float = DEFAULT_CANVAS_WIDTH,
    height: float = DEFAULT_CANVAS_HEIGHT,
) -> ChartGeometry:
    """Lay out a close series as a smooth curve on a fixed canvas.

    Args:
        series: Daily closes, oldest first.
        width: Canvas width. Non-positive or non-finite uses the default.
        height: Canvas height. Non-positive or non-finite uses the default.

    Returns:
        ChartGeometry spanning x in [0, width]. Empty for fewer than two
        points. A constant series is drawn as a flat line at mid-height.
    """
    width = _canvas_dim(width, DEFAULT_CANVAS_WIDTH)
    height = _canvas_dim(height, DEFAULT_CANVAS_HEIGHT)

    prices = np.asarray(_clean(series), dtype=float)
    n = len(prices)
    if n < 2:
        return ChartGeometry(width=width, height=height)

    min_price = float(prices.min())
    max_price = float(prices.max())
    if not math.isfinite(max_price - min_price):
        # Span overflows float64; scale down so relative positions survive
        scale = max(abs(min_price), abs(max_price))
        prices = prices / scale
        min_price /= scale
        max_price /= scale
    price_range = max_price - min_price

    step_x = width / (n - 1)
    xs = np.arange(n) * step_x
    # (n - 1) * step_x can miss width by one ulp
    xs[-1] = width
    if price_range == 0:
        ys = np.full(n, height / 2)
    else:
        ys = height - ((prices - min_price) / price_range) * height

    points = tuple(Point(float(x), float(y)) for x, y in zip(xs, ys))
    segments = tuple(
        _segment(points[i], points[i + 1]) for i in range(n - 1)
    )
    return ChartGeometry(width=width, height=height, points=points, segments=segments)


def _segment(p0: Point, p1: Point) -> CurveSegment:
    cx = (p0.x + p1.x) / 2
    return CurveSegment(
        start=p0,
        control1=Point(cx, p0.y),
        control2=Point(cx, p1.y),
        end=p1,
    )


def _canvas_dim(value: float, default: float) -> float:
    try:
        num = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(num) or num <= 0:
        return default
    return num
