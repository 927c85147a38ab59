"""Market-data acquisition errors."""


class MarketDataError(Exception):
    """Base class for failures talking to the market-data service."""


class MetadataUnavailable(MarketDataError):
    """Company metadata could not be retrieved or parsed."""


class PriceHistoryUnavailable(MarketDataError):
    """The daily close series failed or came back empty."""


class LogoUnavailable(MarketDataError):
    """The logo image could not be retrieved. Never fatal to a fetch."""
