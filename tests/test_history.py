"""Tests for windowed pagination, dedupe and the batch fetch contract.

The activity API is simulated by a fake client that serves a fixed
dataset newest-first, honours ``end`` and refuses offsets above a ceiling.
"""

from __future__ import annotations

import itertools

import pytest

from errors import FetchError, OffsetCeilingError
from ingest.history import (
    Window,
    build_history,
    dedupe_transactions,
    fetch_trade_history,
    iter_activity_pages,
    next_window_end,
)
from models import FetchProgress

WALLET = "0x" + "ab" * 20


def _record(ts: int, outcome: str = "Yes") -> dict:
    return {
        "type": "TRADE",
        "timestamp": ts,
        "conditionId": "0xc1",
        "title": "Market",
        "outcome": outcome,
        "side": "BUY",
        "size": 1.0,
        "price": 0.5,
        "usdcSize": 0.5,
        "transactionHash": f"0x{ts:064x}",
    }


class FakeActivityClient:
    """Serves ``records`` like the real endpoint.

    ``overlap`` makes ``end`` inclusive of one extra second so consecutive
    windows return the boundary record twice. ``ignore_end`` serves every
    window from the newest record.
    """

    def __init__(self, records: list[dict], ceiling: int = 3000, overlap: int = 0,
                 fail_on_call: int | None = None, ignore_end: bool = False):
        self.records = sorted(records, key=lambda r: r["timestamp"], reverse=True)
        self.ceiling = ceiling
        self.overlap = overlap
        self.fail_on_call = fail_on_call
        self.ignore_end = ignore_end
        self.calls: list[tuple[int, int | None]] = []

    def get_activity(self, user, limit, offset, end=None):
        self.calls.append((offset, end))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise FetchError("HTTP 502")
        if offset > self.ceiling:
            raise OffsetCeilingError(f"offset {offset}")
        rows = self.records
        if end is not None and not self.ignore_end:
            rows = [r for r in rows if r["timestamp"] <= end + self.overlap]
        return rows[offset:offset + limit]

    def close(self):
        pass


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch):
    monkeypatch.setattr("ingest.history.time.sleep", lambda _s: None)


# ---------------------------------------------------------------------------
# Window rotation
# ---------------------------------------------------------------------------

class TestNextWindowEnd:
    def test_empty_window_stops(self):
        assert next_window_end(Window(index=1)) is None

    def test_bound_is_one_below_oldest(self):
        window = Window(index=1)
        window.observe([{"timestamp": 500}, {"timestamp": 300}, {"timestamp": 400}])
        assert window.min_timestamp == 300
        assert window.record_count == 3
        assert next_window_end(window) == 299

    def test_records_without_timestamp_are_counted_only(self):
        window = Window(index=1)
        window.observe([{"timestamp": None}])
        assert window.record_count == 1
        assert next_window_end(window) is None


# ---------------------------------------------------------------------------
# Paging
# ---------------------------------------------------------------------------

class TestIterActivityPages:
    def test_single_short_page(self):
        client = FakeActivityClient([_record(ts) for ts in range(1, 101)])
        pages = list(iter_activity_pages(WALLET, client))

        assert len(pages) == 1
        assert len(pages[0].records) == 100
        # second window keyed below the oldest record comes back empty
        assert client.calls == [(0, None), (0, 0)]

    def test_ceiling_rotates_window(self):
        client = FakeActivityClient([_record(ts) for ts in range(1, 4001)])
        pages = list(iter_activity_pages(WALLET, client))

        first_window = [p for p in pages if p.window == 1]
        assert [p.offset for p in first_window] == [0, 500, 1000, 1500, 2000, 2500, 3000]
        second_window = [p for p in pages if p.window == 2]
        assert second_window[0].end == 500
        assert sum(len(p.records) for p in pages) == 4000

    def test_http_400_treated_as_ceiling(self):
        client = FakeActivityClient([_record(ts) for ts in range(1, 2001)], ceiling=1000)
        pages = list(iter_activity_pages(WALLET, client))

        assert [(p.window, p.offset) for p in pages] == [
            (1, 0), (1, 500), (1, 1000), (2, 0),
        ]
        assert sum(len(p.records) for p in pages) == 2000

    def test_max_windows_reports_truncation(self):
        client = FakeActivityClient([_record(ts) for ts in range(1, 10001)], ceiling=0)
        pages = []
        with pytest.raises(FetchError, match="Stopped after 3 windows"):
            for page in iter_activity_pages(WALLET, client, max_windows=3):
                pages.append(page)
        assert len(pages) == 3

    def test_max_windows_not_hit_when_history_ends(self):
        client = FakeActivityClient([_record(ts) for ts in range(1, 1001)], ceiling=0)
        pages = list(iter_activity_pages(WALLET, client, max_windows=3))
        assert sum(len(p.records) for p in pages) == 1000

    def test_pages_are_lazy(self):
        client = FakeActivityClient([_record(ts) for ts in range(1, 4001)])
        pages = iter_activity_pages(WALLET, client)
        next(pages)
        assert len(client.calls) == 1


# ---------------------------------------------------------------------------
# Batch fetch
# ---------------------------------------------------------------------------

class TestFetchTradeHistory:
    def test_window_boundary_no_duplicates_no_gaps(self):
        client = FakeActivityClient([_record(ts) for ts in range(1, 4001)])
        history = fetch_trade_history(WALLET, client=client)

        stamps = [t.timestamp for t in history.transactions]
        assert len(history.transactions) == 4000
        assert stamps == sorted(stamps)
        assert len({t.identity for t in history.transactions}) == 4000
        # oldest record of the first window (ts=501) kept exactly once
        assert sum(1 for t in history.transactions if t.tx_hash == f"0x{501:064x}") == 1
        assert history.complete is True
        assert history.windows == 2

    def test_overlapping_windows_deduplicated(self):
        client = FakeActivityClient([_record(ts) for ts in range(1, 4001)], overlap=1)
        history = fetch_trade_history(WALLET, client=client)

        assert history.raw_count > 4000
        assert len(history.transactions) == 4000

    def test_progress_reported_per_page(self):
        client = FakeActivityClient([_record(ts) for ts in range(1, 1201)])
        events: list[FetchProgress] = []
        fetch_trade_history(WALLET, client=client, on_progress=events.append)

        assert [e.offset for e in events] == [0, 500, 1000]
        assert events[-1].total_records == 1200

    def test_failure_aborts_with_partial_count(self):
        client = FakeActivityClient([_record(ts) for ts in range(1, 2001)], fail_on_call=2)
        with pytest.raises(FetchError) as exc:
            fetch_trade_history(WALLET, client=client)
        assert exc.value.partial_count == 500

    def test_allow_partial_returns_incomplete_history(self):
        client = FakeActivityClient([_record(ts) for ts in range(1, 2001)], fail_on_call=2)
        history = fetch_trade_history(WALLET, client=client, allow_partial=True)

        assert history.complete is False
        assert "502" in history.error
        assert len(history.transactions) == 500

    def test_timeout(self, monkeypatch):
        ticks = itertools.count(0, 100)
        monkeypatch.setattr("ingest.history.time.monotonic", lambda: next(ticks))
        client = FakeActivityClient([_record(ts) for ts in range(1, 2001)])

        with pytest.raises(FetchError, match="Timed out"):
            fetch_trade_history(WALLET, client=client, timeout=50)

    def test_empty_history_is_not_an_error(self):
        history = fetch_trade_history(WALLET, client=FakeActivityClient([]))
        assert history.transactions == []
        assert history.complete is True


class TestBuildHistory:
    def test_non_trade_records_dropped_and_sorted(self):
        records = [
            _record(30),
            {"type": "DEPOSIT", "timestamp": 20, "usdcSize": 5},
            _record(10),
        ]
        history = build_history(WALLET, records)
        assert history.raw_count == 3
        assert [t.timestamp.second for t in history.transactions] == [10, 30]

    def test_same_second_fills_keep_execution_order(self):
        buy = _record(50)
        sell = dict(_record(50), side="SELL", transactionHash="0xsell")
        # newest first, as the API returns them
        history = build_history(WALLET, [sell, buy])
        assert [t.side for t in history.transactions] == ["BUY", "SELL"]

    def test_dedupe_keeps_first(self):
        history = build_history(WALLET, [_record(10), _record(10)])
        assert len(dedupe_transactions(history.transactions)) == 1
        assert len(history.transactions) == 1


class TestStalledCursor:
    def test_short_window_at_same_bound_is_the_end(self):
        window = Window(index=2, end=100)
        window.observe([{"timestamp": 101}])
        assert next_window_end(window) is None

    def test_full_window_at_same_bound_is_truncation(self):
        window = Window(index=2, end=100, ceiling_reached=True)
        window.observe([{"timestamp": 101}])
        with pytest.raises(FetchError, match="ignored end"):
            next_window_end(window)

    def test_server_ignoring_end_fails_fetch(self):
        client = FakeActivityClient([_record(ts) for ts in range(1, 4001)], ignore_end=True)
        with pytest.raises(FetchError) as exc:
            fetch_trade_history(WALLET, client=client)
        assert exc.value.partial_count == 7000

    def test_server_ignoring_end_partial_is_incomplete(self):
        client = FakeActivityClient([_record(ts) for ts in range(1, 4001)], ignore_end=True)
        history = fetch_trade_history(WALLET, client=client, allow_partial=True)

        assert history.complete is False
        assert "truncated" in history.error
        assert len(history.transactions) == 3500

    def test_server_ignoring_end_on_small_history_completes(self):
        client = FakeActivityClient([_record(ts) for ts in range(1, 301)], ignore_end=True)
        history = fetch_trade_history(WALLET, client=client)

        assert history.complete is True
        assert len(history.transactions) == 300
