"""Ticker card state for a host UI.

StockTicker is the pull-based entry point: inputs in, snapshot + metrics
+ geometry out. Each refresh takes a sequence number; a result that
arrives after a newer refresh has started is discarded, so a slow stale
response never overwrites a fresher one.
"""

from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass

from stock_ticker.charts.geometry import (
    ChartGeometry,
    PriceMetrics,
    build_geometry,
    build_metrics,
)
from stock_ticker.config import TickerConfig
from stock_ticker.data import FallbackResolver, build_resolver
from stock_ticker.data.models import PriceSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickerView:
    """Everything the presentation layer needs to draw one card."""

    snapshot: PriceSnapshot
    metrics: PriceMetrics
    geometry: ChartGeometry


def build_view(snapshot: PriceSnapshot, config: TickerConfig) -> TickerView:
    """Derive metrics and geometry from a snapshot."""
    return TickerView(
        snapshot=snapshot,
        metrics=build_metrics(snapshot.series),
        geometry=build_geometry(
            snapshot.series, config.canvas_width, config.canvas_height
        ),
    )


class StockTicker:
    """One card instance.

    Args:
        resolver: Snapshot resolver. Defaults to build_resolver().
        executor: Executor for background refreshes. Created lazily with
            a single worker if not given.
    """

    def __init__(
        self,
        resolver: FallbackResolver | None = None,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        self._resolver = resolver if resolver is not None else build_resolver()
        self._executor = executor
        self._owns_executor = executor is None
        self._lock = threading.Lock()
        self._sequence = itertools.count(1)
        self._latest_started = 0
        self._latest_applied = 0
        self._view: TickerView | None = None

    @property
    def view(self) -> TickerView | None:
        """Most recent accepted view, None before the first refresh completes."""
        with self._lock:
            return self._view

    @property
    def is_loading(self) -> bool:
        """True while the newest refresh is still in flight."""
        with self._lock:
            return self._latest_applied < self._latest_started

    def refresh(self, config: TickerConfig) -> TickerView:
        """Resolve and lay out a card for config.

        Returns:
            The view computed for this call. It is also stored as the
            current view unless a newer refresh was started meanwhile.
        """
        return self._refresh(self._begin(), config)

    def refresh_in_background(self, config: TickerConfig) -> Future[TickerView]:
        """Submit a refresh of config to the executor.

        The refresh counts as started on submission, so is_loading turns
        True immediately and a later call always supersedes this one, even
        while it is still queued behind other work.
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="stock-ticker"
            )
        seq = self._begin()
        return self._executor.submit(self._refresh, seq, config)

    def close(self) -> None:
        """Shut down an executor created by this instance."""
        if self._executor is not None and self._owns_executor:
            self._executor.shutdown(wait=True)
            self._executor = None

    def _begin(self) -> int:
        with self._lock:
            seq = next(self._sequence)
            self._latest_started = seq
            return seq

    def _complete(self, seq: int, view: TickerView) -> bool:
        with self._lock:
            if seq < self._latest_started:
                logger.debug(
                    "Discarding stale result #%d (latest #%d)",
                    seq, self._latest_started,
                )
                return False
            self._latest_applied = seq
            self._view = view
            return True

    def _refresh(self, seq: int, config: TickerConfig) -> TickerView:
        snapshot = self._resolver.resolve(
            config.symbol, config.lookback_weeks, config.custom_logo
        )
        view = build_view(snapshot, config)
        self._complete(seq, view)
        return view
