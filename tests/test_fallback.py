"""Tests for stock_ticker.data.fallback and build_resolver."""

from __future__ import annotations

import dataclasses
import logging
from datetime import date
from unittest.mock import MagicMock, patch

import pytest
import requests

from stock_ticker.charts.geometry import build_metrics
from stock_ticker.config import ServiceConfig
from stock_ticker.data import build_resolver
from stock_ticker.data.errors import MetadataUnavailable, PriceHistoryUnavailable
from stock_ticker.data.fallback import FALLBACK, FallbackResolver, FallbackTable
from stock_ticker.data.fetcher import SnapshotFetcher
from stock_ticker.data.models import InstrumentDetails, PriceBar
from stock_ticker.data.polygon import MarketDataService, PolygonClient

GET = "stock_ticker.data.polygon.requests.get"


def _service(**side_effects: Exception) -> MagicMock:
    service = MagicMock(spec=MarketDataService)
    service.get_instrument_metadata.return_value = InstrumentDetails("Apple Inc.", "")
    service.get_daily_close_series.return_value = [
        PriceBar(date(2026, 10, 15), 173.0),
        PriceBar(date(2026, 10, 16), 178.0),
    ]
    for name, error in side_effects.items():
        getattr(service, name).side_effect = error
    return service


def _assert_fallback(snapshot) -> None:
    assert snapshot.is_fallback is True
    assert snapshot.symbol == FALLBACK.symbol
    assert snapshot.series == FALLBACK.series
    assert snapshot.metadata == FALLBACK.metadata


# ---------------------------------------------------------------------------
# FALLBACK table
# ---------------------------------------------------------------------------


class TestFallbackTable:

    def test_contents(self) -> None:
        assert FALLBACK.symbol == "VNI"
        assert FALLBACK.metadata.name == "Vandelay Industries"
        assert FALLBACK.metadata.logo_source.startswith("https://")
        assert len(FALLBACK.series) == 9

    def test_precomputed_closes_match_series(self) -> None:
        metrics = build_metrics(FALLBACK.series)
        assert metrics.latest_close == FALLBACK.latest_close == 185.06
        assert metrics.previous_close == FALLBACK.previous_close == 182.0
        assert metrics.direction == "positive"

    def test_immutable(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            FALLBACK.symbol = "XYZ"  # type: ignore[misc]

    def test_snapshot_uses_table_metadata(self) -> None:
        snapshot = FALLBACK.snapshot()
        assert snapshot.metadata == FALLBACK.metadata
        assert snapshot.is_fallback is True

    def test_mismatched_closes_rejected(self) -> None:
        with pytest.raises(ValueError, match="do not match"):
            FallbackTable(
                symbol="VNI",
                metadata=FALLBACK.metadata,
                series=(141.0, 132.0, 185.06),
                latest_close=185.06,
                previous_close=132.0,
            )

    def test_too_short_series_rejected(self) -> None:
        with pytest.raises(ValueError):
            FallbackTable(
                symbol="VNI",
                metadata=FALLBACK.metadata,
                series=(185.06,),
                latest_close=185.06,
                previous_close=185.06,
            )


# ---------------------------------------------------------------------------
# FallbackResolver
# ---------------------------------------------------------------------------


class TestFallbackResolver:

    def test_live_snapshot_passes_through(self) -> None:
        resolver = FallbackResolver(SnapshotFetcher(_service()))
        snapshot = resolver.resolve("AAPL", 2)
        assert snapshot.is_fallback is False
        assert snapshot.symbol == "AAPL"
        assert snapshot.series == (173.0, 178.0)

    @pytest.mark.parametrize(
        "side_effects",
        [
            {"get_instrument_metadata": MetadataUnavailable("AAPL: 500")},
            {"get_instrument_metadata": requests.ConnectionError("unreachable")},
            {"get_daily_close_series": PriceHistoryUnavailable("AAPL: empty")},
            {"get_daily_close_series": requests.Timeout("timed out")},
            {"get_daily_close_series": RuntimeError("unexpected")},
        ],
    )
    def test_failures_become_fallback(self, side_effects: dict[str, Exception]) -> None:
        resolver = FallbackResolver(SnapshotFetcher(_service(**side_effects)))
        _assert_fallback(resolver.resolve("AAPL", 2))

    def test_empty_result_set_becomes_fallback(self) -> None:
        service = _service()
        service.get_daily_close_series.return_value = []
        resolver = FallbackResolver(SnapshotFetcher(service))
        _assert_fallback(resolver.resolve("AAPL"))

    def test_empty_symbol_becomes_fallback(self) -> None:
        service = _service()
        resolver = FallbackResolver(SnapshotFetcher(service))
        _assert_fallback(resolver.resolve("  "))
        service.get_instrument_metadata.assert_not_called()

    def test_failure_logged_not_raised(self, caplog: pytest.LogCaptureFixture) -> None:
        resolver = FallbackResolver(
            SnapshotFetcher(_service(get_instrument_metadata=MetadataUnavailable("boom")))
        )
        with caplog.at_level(logging.WARNING, logger="stock_ticker.data.fallback"):
            snapshot = resolver.resolve("AAPL")

        assert snapshot.is_fallback
        assert "AAPL: acquisition failed (MetadataUnavailable: boom)" in caplog.text

    def test_fallback_symbol_bypasses_network(self) -> None:
        service = _service()
        resolver = FallbackResolver(SnapshotFetcher(service))

        snapshot = resolver.resolve("VNI")

        _assert_fallback(snapshot)
        assert service.method_calls == []

    def test_fallback_symbol_trimmed(self) -> None:
        service = _service()
        resolver = FallbackResolver(SnapshotFetcher(service))
        _assert_fallback(resolver.resolve(" VNI "))
        assert service.method_calls == []

    def test_fallback_ignores_custom_logo(self) -> None:
        resolver = FallbackResolver(
            SnapshotFetcher(_service(get_instrument_metadata=MetadataUnavailable("x")))
        )
        snapshot = resolver.resolve("AAPL", custom_logo="https://cdn.example.com/a.png")
        assert snapshot.is_fallback
        assert snapshot.metadata == FALLBACK.metadata

    @pytest.mark.parametrize("symbol", ["VNI", "AAPL"])
    def test_fallback_only_resolver_ignores_custom_logo(self, symbol: str) -> None:
        snapshot = FallbackResolver(None).resolve(symbol, 2, "https://cdn.example.com/a.png")
        assert snapshot.metadata == FALLBACK.metadata

    def test_no_fetcher_always_fallback(self) -> None:
        _assert_fallback(FallbackResolver(None).resolve("AAPL"))

    def test_malformed_metadata_from_service(self) -> None:
        response = MagicMock()
        response.status_code = 200
        response.json.side_effect = ValueError("Expecting value")
        resolver = FallbackResolver(SnapshotFetcher(PolygonClient(api_key="k")))

        with patch(GET, return_value=response):
            snapshot = resolver.resolve("AAPL")

        _assert_fallback(snapshot)


# ---------------------------------------------------------------------------
# build_resolver
# ---------------------------------------------------------------------------


class TestBuildResolver:

    def test_without_key_never_touches_network(self) -> None:
        with patch(GET) as mock_get:
            snapshot = build_resolver(ServiceConfig(api_key=None)).resolve("AAPL")
        _assert_fallback(snapshot)
        mock_get.assert_not_called()

    def test_with_key_fetches_live(self) -> None:
        details = MagicMock()
        details.status_code = 200
        details.json.return_value = {"results": {"name": "Apple Inc."}}
        aggs = MagicMock()
        aggs.status_code = 200
        aggs.json.return_value = {
            "results": [
                {"t": 1704171600000, "c": 173.0},
                {"t": 1704258000000, "c": 178.0},
            ]
        }

        with patch(GET, side_effect=[details, aggs]) as mock_get:
            snapshot = build_resolver(ServiceConfig(api_key="test-key")).resolve("AAPL")

        assert snapshot.is_fallback is False
        assert snapshot.metadata.name == "Apple Inc."
        assert snapshot.series == (173.0, 178.0)
        assert mock_get.call_count == 2
        for call in mock_get.call_args_list:
            assert call.kwargs["params"]["apiKey"] == "test-key"

    def test_reads_environment(self) -> None:
        with patch.dict("os.environ", {}, clear=True), patch(GET) as mock_get:
            snapshot = build_resolver().resolve("AAPL")
        assert snapshot.is_fallback
        mock_get.assert_not_called()
