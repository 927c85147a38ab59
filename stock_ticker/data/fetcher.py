"""Live snapshot acquisition from the market-data service."""

from __future__ import annotations

import base64
import logging
from datetime import date, timedelta
from urllib.parse import quote

from stock_ticker.config import normalize_lookback, normalize_symbol
from stock_ticker.data.errors import LogoUnavailable, PriceHistoryUnavailable
from stock_ticker.data.models import CompanyMetadata, LogoImage, PriceSnapshot
from stock_ticker.data.polygon import MarketDataService

logger = logging.getLogger(__name__)

# Characters JavaScript's encodeURIComponent leaves unescaped.
_URI_COMPONENT_SAFE = "-_.!~*'()"


def date_range(weeks: int | None, today: date | None = None) -> tuple[date, date]:
    """Return the inclusive (start, end) calendar range for a lookback window.

    Args:
        weeks: Lookback window in weeks. Unset or non-positive means the
            default window.
        today: End date. Defaults to the local calendar date.

    Returns:
        (today - weeks, today) as dates.
    """
    end = today if today is not None else date.today()
    start = end - timedelta(weeks=normalize_lookback(weeks))
    return start, end


def logo_data_uri(image: LogoImage) -> str:
    """Inline-encode a logo as a displayable ``data:`` URI.

    SVG documents are percent-encoded as text. Anything else is base64
    encoded under its reported content type.
    """
    content_type = image.content_type.split(";")[0].strip().lower()
    if content_type == "image/svg+xml" or (
        not content_type and image.content.lstrip().startswith((b"<svg", b"<?xml"))
    ):
        svg_text = image.content.decode("utf-8", errors="replace")
        return "data:image/svg+xml;charset=utf-8," + quote(
            svg_text, safe=_URI_COMPONENT_SAFE
        )

    encoded = base64.b64encode(image.content).decode("ascii")
    return f"data:{content_type or 'application/octet-stream'};base64,{encoded}"


class SnapshotFetcher:
    """Fetch company metadata and a daily close series for one symbol.

    Args:
        service: Market-data service implementation.
    """

    def __init__(self, service: MarketDataService) -> None:
        self._service = service

    def fetch(
        self,
        symbol: str,
        weeks: int | None = None,
        custom_logo: str | None = None,
        today: date | None = None,
    ) -> PriceSnapshot:
        """Fetch a live snapshot.

        Loading sequence:
            1. Ticker details (name, logo reference).
            2. Logo: custom_logo verbatim, else the remote logo inlined
               as a data URI. Logo failures leave the logo empty.
            3. Daily closes over [today - weeks, today].

        Args:
            symbol: Ticker symbol.
            weeks: Lookback window in weeks (default 2).
            custom_logo: Image source that overrides the remote logo.
            today: End of the date range. Defaults to the local date.

        Returns:
            PriceSnapshot with is_fallback=False.

        Raises:
            ValueError: If the symbol is empty.
            MetadataUnavailable: If ticker details fail.
            PriceHistoryUnavailable: If the close series fails or is empty.
        """
        symbol = normalize_symbol(symbol)
        start, end = date_range(weeks, today)

        details = self._service.get_instrument_metadata(symbol)

        if custom_logo:
            logo_source = custom_logo
        elif details.logo_url:
            logo_source = self._resolve_logo(symbol, details.logo_url)
        else:
            logo_source = ""

        bars = self._service.get_daily_close_series(symbol, start, end)
        series = tuple(bar.close for bar in bars)
        if not series:
            raise PriceHistoryUnavailable(
                f"{symbol}: no closes between {start} and {end}"
            )

        logger.info(
            "%s: fetched %d closes (%s to %s), latest %.2f",
            symbol, len(series), start, end, series[-1],
        )
        return PriceSnapshot(
            symbol=symbol,
            metadata=CompanyMetadata(name=details.name, logo_source=logo_source),
            series=series,
            is_fallback=False,
        )

    def _resolve_logo(self, symbol: str, logo_url: str) -> str:
        """Best-effort logo download; empty string on failure."""
        try:
            image = self._service.fetch_logo_image(logo_url)
        except LogoUnavailable as e:
            logger.warning("%s: logo unavailable: %s", symbol, e)
            return ""
        return logo_data_uri(image)
