"""Data models for trade ingestion and tax lot matching."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

BUY = "BUY"
SELL = "SELL"

TRADE = "TRADE"
REDEEM = "REDEEM"


@dataclass(frozen=True)
class Transaction:
    """A single buy or sell of one outcome, from the API or a CSV upload."""
    timestamp: datetime  # naive UTC, config.EPOCH when unknown
    market: str  # conditionId from the API, market column from CSV
    outcome: str
    side: str  # "BUY" or "SELL"
    price: float
    quantity: float
    total: float  # notional (usdcSize / price x quantity)
    fees: float = 0.0
    title: str = ""  # human-readable market name
    kind: str = TRADE  # "TRADE" or "REDEEM"
    tx_hash: str = ""

    @property
    def position_key(self) -> tuple[str, str]:
        return (self.market, self.outcome)

    @property
    def display_name(self) -> str:
        return self.title or self.market

    @property
    def identity(self) -> tuple:
        """Stable identity used to drop records seen in two windows."""
        return (
            self.tx_hash, self.market, self.outcome, self.side, self.kind,
            self.timestamp, self.quantity, self.price,
        )


@dataclass
class BuyLot:
    """An open acquisition waiting to be matched. Mutated by the matcher."""
    acquired_at: datetime
    unit_cost: float  # price + per-unit fee
    remaining: float


@dataclass(frozen=True)
class TaxLot:
    """One disposal matched against one acquisition batch."""
    description: str
    date_acquired: Optional[datetime]  # None when the sell had no matching buy
    date_sold: datetime
    proceeds: float
    cost_basis: float
    gain_loss: float
    term: str  # "Short-term" or "Long-term"
    quantity: float
    market: str = ""


@dataclass(frozen=True)
class TaxSummary:
    """Gains and losses by holding term. Losses are negative."""
    total_lots: int = 0
    short_term_count: int = 0
    long_term_count: int = 0
    short_term_gain: float = 0.0
    short_term_loss: float = 0.0
    long_term_gain: float = 0.0
    long_term_loss: float = 0.0
    net_short_term: float = 0.0
    net_long_term: float = 0.0
    net_total: float = 0.0


@dataclass
class ActivityPage:
    """One page of raw activity records from the API."""
    window: int
    offset: int
    end: Optional[int]
    records: list[dict]


@dataclass
class FetchProgress:
    """Progress report emitted after each page is fetched."""
    window: int
    offset: int
    page_size: int
    total_records: int


@dataclass
class TradeHistory:
    """Result of a trade history fetch."""
    wallet: str
    transactions: list[Transaction] = field(default_factory=list)
    raw_count: int = 0
    windows: int = 0
    complete: bool = True
    error: Optional[str] = None
