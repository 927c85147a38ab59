"""Data models for ticker snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class CompanyMetadata:
    """Company name and displayable logo.

    Attributes:
        name: Company name, empty if the service had none.
        logo_source: Image URI or inline ``data:`` URI, empty if unavailable.
    """

    name: str = ""
    logo_source: str = ""


@dataclass(frozen=True)
class InstrumentDetails:
    """Raw reference data returned by the market-data service.

    Attributes:
        name: Company name, empty if absent.
        logo_url: Remote logo reference, empty if the instrument has no branding.
    """

    name: str = ""
    logo_url: str = ""


@dataclass(frozen=True)
class LogoImage:
    """Logo bytes with the content type reported by the service."""

    content: bytes
    content_type: str = ""


@dataclass(frozen=True)
class PriceBar:
    """One daily close."""

    date: date
    close: float


@dataclass(frozen=True)
class PriceSnapshot:
    """Unit handed from acquisition to geometry building.

    Attributes:
        symbol: Symbol the snapshot describes. For a fallback snapshot this
            is the fallback table's symbol, not the one requested.
        metadata: Company name and logo.
        series: Daily closes, oldest first. Empty means no data.
        is_fallback: True when metadata and series come from the fallback
            table rather than the network.
    """

    symbol: str
    metadata: CompanyMetadata
    series: tuple[float, ...]
    is_fallback: bool = False
