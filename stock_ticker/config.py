"""Ticker card configuration dataclasses."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_LOOKBACK_WEEKS: int = 2

# Canvas the trend curve is laid out on when the host gives no size.
DEFAULT_CANVAS_WIDTH: float = 150.0
DEFAULT_CANVAS_HEIGHT: float = 60.0

POLYGON_BASE_URL: str = "https://api.polygon.io"
REQUEST_TIMEOUT: int = 10


def normalize_symbol(raw: str) -> str:
    """Trim a ticker symbol, preserving case.

    Raises:
        ValueError: If the symbol is empty after trimming.
    """
    symbol = (raw or "").strip()
    if not symbol:
        raise ValueError("Ticker symbol must be a non-empty string")
    return symbol


def normalize_lookback(weeks: int | None) -> int:
    """Return the lookback window in weeks, defaulting when unset or non-positive."""
    if weeks is None or weeks <= 0:
        return DEFAULT_LOOKBACK_WEEKS
    return int(weeks)


@dataclass(frozen=True)
class TickerConfig:
    """Inputs for one ticker card.

    Attributes:
        symbol: Ticker symbol, trimmed, case preserved.
        lookback_weeks: Weeks of daily closes to request.
        custom_logo: Image source used verbatim instead of the remote logo.
        canvas_width: Width of the trend curve canvas.
        canvas_height: Height of the trend curve canvas.
    """

    symbol: str
    lookback_weeks: int = DEFAULT_LOOKBACK_WEEKS
    custom_logo: str | None = None
    canvas_width: float = DEFAULT_CANVAS_WIDTH
    canvas_height: float = DEFAULT_CANVAS_HEIGHT

    def __post_init__(self) -> None:
        object.__setattr__(self, "symbol", normalize_symbol(self.symbol))
        object.__setattr__(
            self, "lookback_weeks", normalize_lookback(self.lookback_weeks)
        )
        if self.canvas_width <= 0 or self.canvas_height <= 0:
            raise ValueError(
                f"Invalid canvas size {self.canvas_width!r}x"
                f"{self.canvas_height!r}. Both dimensions must be positive."
            )
        if self.custom_logo is not None and not self.custom_logo.strip():
            object.__setattr__(self, "custom_logo", None)


@dataclass(frozen=True)
class ServiceConfig:
    """Market-data service connection settings."""

    api_key: str | None = None
    base_url: str = POLYGON_BASE_URL
    timeout: int = REQUEST_TIMEOUT

    @classmethod
    def from_env(cls) -> ServiceConfig:
        """Read POLYGON_API_KEY and POLYGON_BASE_URL from the environment."""
        return cls(
            api_key=os.environ.get("POLYGON_API_KEY") or None,
            base_url=os.environ.get("POLYGON_BASE_URL", POLYGON_BASE_URL),
        )
