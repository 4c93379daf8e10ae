"""FIFO matching of acquisitions and disposals into tax lots."""

from __future__ import annotations

import logging
from collections import deque
from datetime import datetime
from typing import Optional

from config import EPSILON, SHORT_TERM, classify_term, round_money
from models import BUY, BuyLot, TaxLot, Transaction

logger = logging.getLogger(__name__)

_SECONDS_PER_DAY = 86400.0


def group_positions(transactions: list[Transaction]) -> dict[tuple[str, str], list[Transaction]]:
    """Partition transactions by (market, outcome), keeping input order."""
    groups: dict[tuple[str, str], list[Transaction]] = {}
    for txn in transactions:
        groups.setdefault(txn.position_key, []).append(txn)
    return groups


def _per_unit(amount: float, quantity: float) -> float:
    return amount / quantity if quantity > 0 else 0.0


def _describe(quantity: float, txn: Transaction) -> str:
    shares = f"{quantity:.4f}".rstrip("0").rstrip(".")
    return f"{shares} {txn.outcome} shares - {txn.display_name}"


def _make_lot(txn: Transaction, quantity: float, unit_proceeds: float,
              acquired_at: Optional[datetime], unit_cost: float) -> TaxLot:
    # Round only here so partial matches don't compound rounding error
    proceeds = round_money(quantity * unit_proceeds)
    cost_basis = round_money(quantity * unit_cost)

    if acquired_at is None:
        term = SHORT_TERM
    else:
        days = (txn.timestamp - acquired_at).total_seconds() / _SECONDS_PER_DAY
        term = classify_term(days)

    return TaxLot(
        description=_describe(quantity, txn),
        date_acquired=acquired_at,
        date_sold=txn.timestamp,
        proceeds=proceeds,
        cost_basis=cost_basis,
        gain_loss=round_money(proceeds - cost_basis),
        term=term,
        quantity=quantity,
        market=txn.display_name,
    )


def match_position(transactions: list[Transaction]) -> tuple[list[TaxLot], list[BuyLot]]:
    """Match one position's transactions FIFO.

    Returns the emitted tax lots and the buy lots still open afterwards.
    Sells with no buy left to match are booked at zero cost basis with an
    unknown acquisition date rather than dropped.
    """
    queue: deque[BuyLot] = deque()
    lots: list[TaxLot] = []

    for txn in transactions:
        if txn.side == BUY:
            if txn.quantity <= EPSILON:
                continue
            queue.append(BuyLot(
                acquired_at=txn.timestamp,
                unit_cost=txn.price + _per_unit(txn.fees, txn.quantity),
                remaining=txn.quantity,
            ))
            continue

        remaining_qty = txn.quantity
        unit_proceeds = txn.price - _per_unit(txn.fees, txn.quantity)

        while remaining_qty > EPSILON and queue:
            oldest = queue[0]
            match_qty = min(remaining_qty, oldest.remaining)

            lots.append(_make_lot(txn, match_qty, unit_proceeds, oldest.acquired_at, oldest.unit_cost))

            oldest.remaining -= match_qty
            remaining_qty -= match_qty
            if oldest.remaining <= EPSILON:
                queue.popleft()

        if remaining_qty > EPSILON:
            logger.warning(
                "Unmatched sell of %.4f %s in %s on %s; booking zero cost basis",
                remaining_qty, txn.outcome, txn.display_name, txn.timestamp.date(),
            )
            lots.append(_make_lot(txn, remaining_qty, unit_proceeds, None, 0.0))

    return lots, list(queue)


def match_trades_fifo(transactions: list[Transaction]) -> list[TaxLot]:
    """Match all positions FIFO and return lots ordered by date sold.

    ``transactions`` must already be in chronological order.
    """
    groups = group_positions(transactions)
    logger.debug("Matching %d transactions across %d positions", len(transactions), len(groups))

    matched: list[TaxLot] = []
    for position in groups.values():
        lots, _ = match_position(position)
        matched.extend(lots)

    matched.sort(key=lambda lot: lot.date_sold)
    return matched


def open_lots(transactions: list[Transaction]) -> dict[tuple[str, str], list[BuyLot]]:
    """Buy lots still held per position after all disposals are matched."""
    result = {}
    for key, position in group_positions(transactions).items():
        _, remaining = match_position(position)
        if remaining:
            result[key] = remaining
    return result
