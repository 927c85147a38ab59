"""Snapshot acquisition orchestration."""

from __future__ import annotations

import logging

from stock_ticker.config import ServiceConfig
from stock_ticker.data.errors import (
    LogoUnavailable,
    MarketDataError,
    MetadataUnavailable,
    PriceHistoryUnavailable,
)
from stock_ticker.data.fallback import FALLBACK, FallbackResolver, FallbackTable
from stock_ticker.data.fetcher import SnapshotFetcher
from stock_ticker.data.models import CompanyMetadata, PriceSnapshot
from stock_ticker.data.polygon import MarketDataService, PolygonClient

logger = logging.getLogger(__name__)

__all__ = [
    "FALLBACK",
    "CompanyMetadata",
    "FallbackResolver",
    "FallbackTable",
    "LogoUnavailable",
    "MarketDataError",
    "MarketDataService",
    "MetadataUnavailable",
    "PolygonClient",
    "PriceHistoryUnavailable",
    "PriceSnapshot",
    "SnapshotFetcher",
    "build_resolver",
]


def build_resolver(config: ServiceConfig | None = None) -> FallbackResolver:
    """Select a resolver based on available credentials.

    Returns a live resolver backed by PolygonClient if an API key is
    configured, otherwise a fallback-only resolver.

    Args:
        config: Service settings. Defaults to ServiceConfig.from_env().

    Returns:
        A FallbackResolver instance.
    """
    if config is None:
        config = ServiceConfig.from_env()

    if config.api_key:
        logger.info("Using PolygonClient (POLYGON_API_KEY found)")
        client = PolygonClient(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
        )
        return FallbackResolver(SnapshotFetcher(client))

    logger.warning("POLYGON_API_KEY not found, serving fallback data only")
    return FallbackResolver(None)
