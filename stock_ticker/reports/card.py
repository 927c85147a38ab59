"""HTML ticker card rendering using Jinja2 templates.

Renders a TickerView into a self-contained HTML fragment: logo, symbol,
company name, latest close, day-over-day change and an inline SVG
trend curve.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import jinja2

if TYPE_CHECKING:
    from stock_ticker.widget import TickerView

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"

CHANGE_COLOURS = {
    "positive": "green",
    "negative": "red",
}


def format_price(value: float | None) -> str:
    """'$185.06' style close, empty when absent."""
    if value is None:
        return ""
    return f"${value:.2f}"


def format_change(value: float | None) -> str:
    """'+$25.04' / '-$18.00' style change, empty when absent. Zero is '+'."""
    if value is None:
        return ""
    sign = "+" if value >= 0 else "-"
    return f"{sign}${abs(value):.2f}"


def build_context(view: TickerView, loading: bool = False) -> dict[str, Any]:
    """Build the template context for one card."""
    snapshot = view.snapshot
    metrics = view.metrics
    geometry = view.geometry
    return {
        "symbol": snapshot.symbol,
        "company_name": snapshot.metadata.name,
        "logo_source": snapshot.metadata.logo_source,
        "is_fallback": snapshot.is_fallback,
        "loading": loading,
        "latest_close": format_price(metrics.latest_close),
        "change": format_change(metrics.change),
        "change_colour": CHANGE_COLOURS.get(metrics.direction or "", ""),
        "chart_width": geometry.width,
        "chart_height": geometry.height,
        "chart_path": geometry.svg_path(),
    }


def render_card(view: TickerView, loading: bool = False) -> str:
    """Render a ticker card to HTML.

    Args:
        view: Snapshot, metrics and geometry for the card.
        loading: Show the loading notice.

    Returns:
        HTML fragment.
    """
    env = jinja2.Environment(
        loader=jinja2.FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=True,
    )
    template = env.get_template("card.html")
    html_content = template.render(**build_context(view, loading))
    logger.debug("%s: card rendered (%d bytes)", view.snapshot.symbol, len(html_content))
    return html_content
