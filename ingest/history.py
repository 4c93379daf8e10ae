"""Complete trade history retrieval with cursor-windowed pagination.

The activity API pages by ``offset`` but refuses offsets above MAX_OFFSET.
To read past that ceiling the pager works in windows: inside a window it
pages from offset 0 while tracking the oldest timestamp seen, and when the
window closes it opens the next one with ``end = oldest - 1``. Windows move
backward in time, so the collected history is sorted once at the end.

Windows are fetched sequentially: each window's bound depends on the oldest
record of the previous one.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from config import MAX_OFFSET, MAX_WINDOWS, PAGE_DELAY_SECONDS, PAGE_SIZE
from errors import FetchError, OffsetCeilingError
from ingest.activity_client import ActivityClient
from models import ActivityPage, FetchProgress, TradeHistory, Transaction
from parsers.parser_activity import assign_redemption_outcomes, normalize_activity

logger = logging.getLogger(__name__)


@dataclass
class Window:
    """State of one cursor window."""
    index: int
    end: Optional[int] = None  # exclusive upper bound passed as ``end``; None = newest
    min_timestamp: Optional[int] = None
    record_count: int = 0
    ceiling_reached: bool = False

    def observe(self, records: list[dict]) -> None:
        self.record_count += len(records)
        for record in records:
            ts = record.get("timestamp")
            if not isinstance(ts, (int, float)):
                continue
            ts = int(ts)
            if self.min_timestamp is None or ts < self.min_timestamp:
                self.min_timestamp = ts


def next_window_end(window: Window) -> Optional[int]:
    """Bound for the window after ``window``, or None when paging is done.

    A window that saw no records means the history is exhausted. A bound
    that would not move backward is also the end when the window ran short,
    since it only re-read records at the boundary. If such a window hit the
    offset ceiling the server ignored ``end``, the older history cannot be
    reached and FetchError is raised.
    """
    if window.record_count == 0 or window.min_timestamp is None:
        return None
    end = window.min_timestamp - 1
    if window.end is not None and end >= window.end:
        if not window.ceiling_reached:
            return None
        raise FetchError(
            f"Activity API ignored end={window.end} in window {window.index}; history truncated"
        )
    return end


def _iter_window(client: ActivityClient, wallet: str, window: Window,
                 page_size: int, max_offset: int, delay: float) -> Iterator[ActivityPage]:
    offset = 0
    while offset <= max_offset:
        try:
            records = client.get_activity(wallet, limit=page_size, offset=offset, end=window.end)
        except OffsetCeilingError:
            logger.info("Window %d: offset %d refused, rotating", window.index, offset)
            window.ceiling_reached = True
            return

        if not records:
            return

        window.observe(records)
        logger.debug("Window %d offset %d: %d records", window.index, offset, len(records))
        yield ActivityPage(window=window.index, offset=offset, end=window.end, records=records)

        if len(records) < page_size:
            return

        offset += page_size
        if offset > max_offset:
            window.ceiling_reached = True
            return
        time.sleep(delay)


def iter_activity_pages(wallet: str, client: ActivityClient,
                        max_windows: int = MAX_WINDOWS,
                        page_size: int = PAGE_SIZE,
                        max_offset: int = MAX_OFFSET,
                        delay: float = PAGE_DELAY_SECONDS) -> Iterator[ActivityPage]:
    """Yield raw activity pages lazily, newest first, across all windows.

    Stopping iteration early is safe; everything yielded so far stays valid.
    Raises FetchError after the last page when the history cannot be read
    to its start (stalled cursor or ``max_windows`` reached).
    """
    end: Optional[int] = None
    for index in range(1, max_windows + 1):
        window = Window(index=index, end=end)
        yield from _iter_window(client, wallet, window, page_size, max_offset, delay)

        end = next_window_end(window)
        if end is None:
            logger.info("History exhausted after %d window(s)", index)
            return
        logger.info(
            "Window %d closed: %d records, ceiling %s, next end=%d",
            index, window.record_count, "hit" if window.ceiling_reached else "not hit", end,
        )
        time.sleep(delay)

    raise FetchError(f"Stopped after {max_windows} windows; history truncated")


def dedupe_transactions(transactions: list[Transaction]) -> list[Transaction]:
    """Drop transactions whose identity was already seen, keeping first occurrence."""
    seen: set[tuple] = set()
    result = []
    for txn in transactions:
        key = txn.identity
        if key in seen:
            continue
        seen.add(key)
        result.append(txn)
    return result


def build_history(wallet: str, records: list[dict], windows: int = 0,
                  complete: bool = True, error: Optional[str] = None) -> TradeHistory:
    """Normalize raw records into a deduplicated, time-ordered TradeHistory."""
    # Records arrive newest first; reverse so same-second fills keep their order
    transactions = dedupe_transactions(normalize_activity(records[::-1]))
    transactions.sort(key=lambda t: t.timestamp)
    transactions = assign_redemption_outcomes(transactions)
    return TradeHistory(
        wallet=wallet,
        transactions=transactions,
        raw_count=len(records),
        windows=windows,
        complete=complete,
        error=error,
    )


def fetch_trade_history(wallet: str, client: Optional[ActivityClient] = None,
                        on_progress: Optional[Callable[[FetchProgress], None]] = None,
                        timeout: Optional[float] = None,
                        allow_partial: bool = False) -> TradeHistory:
    """Fetch and normalize the full trade history of ``wallet``.

    Any failure aborts the retrieval with FetchError carrying the number of
    records fetched so far. With ``allow_partial`` the records collected
    before the failure are returned instead, marked ``complete=False``.
    ``timeout`` bounds the whole retrieval in seconds.
    """
    owns_client = client is None
    if client is None:
        client = ActivityClient()
    deadline = time.monotonic() + timeout if timeout else None

    records: list[dict] = []
    windows = 0
    try:
        for page in iter_activity_pages(wallet, client):
            records.extend(page.records)
            windows = page.window
            if on_progress is not None:
                on_progress(FetchProgress(
                    window=page.window,
                    offset=page.offset,
                    page_size=len(page.records),
                    total_records=len(records),
                ))
            if deadline is not None and time.monotonic() > deadline:
                raise FetchError(f"Timed out after {timeout:g}s", partial_count=len(records))
    except FetchError as e:
        if not allow_partial:
            logger.error("Trade fetch failed after %d records: %s", len(records), e)
            raise FetchError(str(e), partial_count=len(records)) from e
        logger.warning("Returning partial history (%d records): %s", len(records), e)
        return build_history(wallet, records, windows=windows, complete=False, error=str(e))
    finally:
        if owns_client:
            client.close()

    history = build_history(wallet, records, windows=windows)
    logger.info("Fetched %d activity records -> %d transactions in %d window(s)",
                history.raw_count, len(history.transactions), history.windows)
    return history
