"""Market-data service client.

Provides a MarketDataService protocol with one implementation:
- PolygonClient: Polygon.io REST API (ticker details, daily aggregates,
  branding logos), authenticated with a static API key.

No retries are attempted. A failed request raises immediately so the
caller can substitute fallback data.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Protocol

import pandas as pd
import requests

from stock_ticker.config import POLYGON_BASE_URL, REQUEST_TIMEOUT
from stock_ticker.data.errors import (
    LogoUnavailable,
    MetadataUnavailable,
    PriceHistoryUnavailable,
)
from stock_ticker.data.models import InstrumentDetails, LogoImage, PriceBar

logger = logging.getLogger(__name__)


class MarketDataService(Protocol):
    """Outbound contract with the market-data service."""

    def get_instrument_metadata(self, symbol: str) -> InstrumentDetails:
        """Fetch name and logo reference for a symbol.

        Raises:
            MetadataUnavailable: Non-success status or unparsable body.
        """
        ...

    def get_daily_close_series(
        self, symbol: str, start: date, end: date
    ) -> list[PriceBar]:
        """Fetch daily closes between start and end inclusive, oldest first.

        Raises:
            PriceHistoryUnavailable: Non-success status, unparsable body,
                or zero returned points.
        """
        ...

    def fetch_logo_image(self, logo_url: str) -> LogoImage:
        """Fetch raw logo bytes.

        Raises:
            LogoUnavailable: The image could not be retrieved.
        """
        ...


class PolygonClient:
    """Polygon.io REST client.

    Args:
        api_key: Polygon API key, sent as the ``apiKey`` query parameter on
            every request including logo downloads.
        base_url: Polygon API base URL.
        timeout: Per-request timeout in seconds.
        session: Optional requests session to reuse connections.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = POLYGON_BASE_URL,
        timeout: int = REQUEST_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session

    def _get(self, url: str, params: dict[str, Any] | None = None) -> requests.Response:
        query = dict(params or {})
        query["apiKey"] = self._api_key
        getter = self._session.get if self._session is not None else requests.get
        response = getter(url, params=query, timeout=self._timeout)
        response.raise_for_status()
        return response

    def get_instrument_metadata(self, symbol: str) -> InstrumentDetails:
        """Fetch ticker reference details.

        Args:
            symbol: Ticker symbol.

        Returns:
            InstrumentDetails with name and branding logo URL (either may
            be empty).

        Raises:
            MetadataUnavailable: On any HTTP or parse failure.
        """
        url = f"{self._base_url}/v3/reference/tickers/{symbol}"
        try:
            data = self._get(url).json()
        except (requests.RequestException, ValueError) as e:
            raise MetadataUnavailable(f"{symbol}: ticker details failed: {e}") from e

        if not isinstance(data, dict):
            raise MetadataUnavailable(f"{symbol}: unexpected ticker details payload")

        results = data.get("results") or {}
        if not isinstance(results, dict):
            raise MetadataUnavailable(f"{symbol}: unexpected ticker details results")

        branding = results.get("branding") or {}
        logo_url = branding.get("logo_url") if isinstance(branding, dict) else None

        return InstrumentDetails(
            name=str(results.get("name") or ""),
            logo_url=str(logo_url or ""),
        )

    def get_daily_close_series(
        self, symbol: str, start: date, end: date
    ) -> list[PriceBar]:
        """Fetch adjusted daily aggregates and reduce them to closes.

        Args:
            symbol: Ticker symbol.
            start: First calendar date, inclusive.
            end: Last calendar date, inclusive.

        Returns:
            Daily bars sorted oldest first.

        Raises:
            PriceHistoryUnavailable: On HTTP or parse failure, or when the
                service returns no bars.
        """
        url = (
            f"{self._base_url}/v2/aggs/ticker/{symbol}/range/1/day/"
            f"{start.isoformat()}/{end.isoformat()}"
        )
        params = {"adjusted": "true", "sort": "asc"}
        try:
            data = self._get(url, params).json()
        except (requests.RequestException, ValueError) as e:
            raise PriceHistoryUnavailable(
                f"{symbol}: daily aggregates failed: {e}"
            ) from e

        results = data.get("results") if isinstance(data, dict) else None
        if not results or not isinstance(results, list):
            raise PriceHistoryUnavailable(
                f"{symbol}: no daily aggregates between {start} and {end}"
            )

        bars = _results_to_bars(results)
        if not bars:
            raise PriceHistoryUnavailable(f"{symbol}: daily aggregates had no closes")

        logger.debug("%s: %d daily closes from %s to %s", symbol, len(bars), start, end)
        return bars

    def fetch_logo_image(self, logo_url: str) -> LogoImage:
        """Download a branding logo.

        Args:
            logo_url: Logo URL from the ticker details response.

        Returns:
            LogoImage with raw bytes and content type.

        Raises:
            LogoUnavailable: On any HTTP failure or an empty body.
        """
        try:
            response = self._get(logo_url)
        except requests.RequestException as e:
            raise LogoUnavailable(f"logo download failed: {e}") from e

        if not response.content:
            raise LogoUnavailable(f"logo download returned no content: {logo_url}")

        content_type = response.headers.get("Content-Type", "")
        return LogoImage(content=response.content, content_type=content_type)


def _results_to_bars(results: list[dict[str, Any]]) -> list[PriceBar]:
    """Convert Polygon aggregate rows (``t`` epoch ms, ``c`` close) to bars.

    Rows with a missing or non-numeric close or timestamp are dropped.
    """
    df = pd.DataFrame(
        {
            "t": [r.get("t") if isinstance(r, dict) else None for r in results],
            "c": [r.get("c") if isinstance(r, dict) else None for r in results],
        }
    )
    df["t"] = pd.to_numeric(df["t"], errors="coerce")
    df["c"] = pd.to_numeric(df["c"], errors="coerce")
    df = df.dropna().sort_values("t", kind="stable")
    if df.empty:
        return []

    dates = pd.to_datetime(df["t"], unit="ms", utc=True).dt.date
    return [
        PriceBar(date=d, close=float(c))
        for d, c in zip(dates, df["c"])
    ]
