"""CLI entry point for the stock ticker card."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import matplotlib

from stock_ticker.charts.sparkline import fig_to_png, sparkline
from stock_ticker.config import (
    DEFAULT_CANVAS_HEIGHT,
    DEFAULT_CANVAS_WIDTH,
    DEFAULT_LOOKBACK_WEEKS,
    TickerConfig,
)
from stock_ticker.data import build_resolver
from stock_ticker.reports.card import render_card
from stock_ticker.widget import StockTicker, TickerView

logger = logging.getLogger(__name__)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog="stock-ticker",
        description="Render a share-price trend card for a ticker symbol",
    )
    parser.add_argument(
        "symbol",
        help="Ticker symbol (e.g. AAPL)",
    )
    parser.add_argument(
        "--weeks",
        type=int,
        default=DEFAULT_LOOKBACK_WEEKS,
        help=f"Lookback window in weeks (default: {DEFAULT_LOOKBACK_WEEKS})",
    )
    parser.add_argument(
        "--logo",
        default=None,
        help="Custom logo image source, used instead of the service logo",
    )
    parser.add_argument(
        "--width",
        type=float,
        default=DEFAULT_CANVAS_WIDTH,
        help=f"Chart canvas width (default: {DEFAULT_CANVAS_WIDTH:g})",
    )
    parser.add_argument(
        "--height",
        type=float,
        default=DEFAULT_CANVAS_HEIGHT,
        help=f"Chart canvas height (default: {DEFAULT_CANVAS_HEIGHT:g})",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output HTML path (default: output/<symbol>.html)",
    )
    parser.add_argument(
        "--png",
        type=Path,
        default=None,
        help="Also write the trend curve as a PNG to this path",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def write_outputs(
    view: TickerView,
    output_path: Path,
    png_path: Path | None = None,
) -> None:
    """Write the HTML card and, optionally, the sparkline PNG.

    Args:
        view: Resolved ticker view.
        output_path: HTML destination.
        png_path: PNG destination, or None to skip.
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_card(view), encoding="utf-8")
    logger.info("%s: card written to %s", view.snapshot.symbol, output_path)

    if png_path is not None:
        # Use non-interactive backend for rendering
        matplotlib.use("Agg")
        png_path.parent.mkdir(parents=True, exist_ok=True)
        png_path.write_bytes(
            fig_to_png(sparkline(view.geometry, view.metrics.direction))
        )
        logger.info("%s: sparkline written to %s", view.snapshot.symbol, png_path)


def run(args: argparse.Namespace) -> TickerView:
    """Resolve the card for the parsed arguments and write its outputs.

    Args:
        args: Parsed CLI arguments.

    Returns:
        The rendered view.
    """
    config = TickerConfig(
        symbol=args.symbol,
        lookback_weeks=args.weeks,
        custom_logo=args.logo,
        canvas_width=args.width,
        canvas_height=args.height,
    )

    ticker = StockTicker(resolver=build_resolver())
    try:
        view = ticker.refresh(config)
    finally:
        ticker.close()

    if view.snapshot.is_fallback:
        logger.warning(
            "%s: showing fallback data for %s",
            config.symbol,
            view.snapshot.symbol,
        )

    metrics = view.metrics
    if metrics.latest_close is not None:
        logger.info(
            "%s: latest close $%.2f, change %s",
            view.snapshot.symbol,
            metrics.latest_close,
            "n/a" if metrics.change is None else f"{metrics.change:+.2f}",
        )

    output_path: Path = args.output or Path("output") / f"{config.symbol}.html"
    write_outputs(view, output_path, args.png)
    return view


def main(argv: list[str] | None = None) -> None:
    """Main entry point.

    Args:
        argv: Argument list (defaults to sys.argv[1:]).
    """
    args = _parse_args(argv)

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        run(args)
    except ValueError as e:
        logger.error("Invalid arguments: %s", e)
        sys.exit(2)


if __name__ == "__main__":
    main()
