"""Tests for the CSV normalizer."""

from __future__ import annotations

from datetime import datetime

import pytest

from config import DEFAULT_OUTCOME, EPOCH
from errors import FormatError
from models import BUY, REDEEM, SELL, TRADE
from parsers.base import parse_number, parse_timestamp, split_delimited_line
from parsers.parser_csv import normalize_column, parse_csv


# ---------------------------------------------------------------------------
# Header mapping
# ---------------------------------------------------------------------------

class TestNormalizeColumn:
    @pytest.mark.parametrize("raw,expected", [
        ("Qty", "quantity"),
        ("AMOUNT", "quantity"),
        (" Shares ", "quantity"),
        ("Market ID", "market"),
        ("Question", "market"),
        ("Order Type", "type"),
        ("Unit Price ($)", "price"),
        ("Created_At", "timestamp"),
        ("Commission", "fees"),
        ("Side", "outcome"),
    ])
    def test_synonyms(self, raw, expected):
        assert normalize_column(raw) == expected

    def test_unknown_header_passes_through(self):
        assert normalize_column("Notes") == "notes"


# ---------------------------------------------------------------------------
# parse_csv
# ---------------------------------------------------------------------------

class TestParseCsv:
    def test_minimal_header_defaults_outcome_and_total(self):
        text = (
            "Date,Market,Type,Price,Qty\n"
            "2024-01-15,Will it rain?,Buy,0.40,100\n"
            "2024-02-01,Will it rain?,Sell,0.70,100\n"
        )
        txns = parse_csv(text)

        assert len(txns) == 2
        buy, sell = txns
        assert buy.timestamp == datetime(2024, 1, 15)
        assert buy.market == "Will it rain?"
        assert buy.outcome == DEFAULT_OUTCOME
        assert buy.side == BUY
        assert buy.price == pytest.approx(0.40)
        assert buy.quantity == pytest.approx(100)
        assert buy.total == pytest.approx(40.0)
        assert buy.fees == 0
        assert sell.side == SELL
        assert sell.kind == TRADE

    def test_tab_delimited(self):
        text = "Market\tType\tOutcome\tShares\tPrice\nRain\tbuy\tNo\t5\t0.2\n"
        txns = parse_csv(text)

        assert len(txns) == 1
        assert txns[0].outcome == "No"
        assert txns[0].quantity == pytest.approx(5)

    def test_quoted_field_with_comma(self):
        text = (
            'Market,Type,Price,Quantity,Total\n'
            '"Fed cuts rates, March?",Buy,0.25,40,10.00\n'
        )
        txns = parse_csv(text)
        assert txns[0].market == "Fed cuts rates, March?"
        assert txns[0].total == pytest.approx(10.0)

    def test_settle_synonyms_become_sells(self):
        text = (
            "Market,Type,Price,Qty\n"
            "A,Redeem,1,10\n"
            "A,claim,1,5\n"
            "A,Settlement,1,2\n"
        )
        txns = parse_csv(text)
        assert [t.side for t in txns] == [SELL, SELL, SELL]
        assert all(t.kind == REDEEM for t in txns)

    def test_unrecognized_type_rows_skipped(self):
        text = (
            "Market,Type,Price,Qty\n"
            "A,Deposit,0,100\n"
            "A,Buy,0.5,10\n"
            "A,Transfer,0,10\n"
        )
        txns = parse_csv(text)
        assert len(txns) == 1
        assert txns[0].side == BUY

    def test_short_rows_skipped(self):
        txns = parse_csv("Market,Type,Price,Qty\nA,Buy\nA,Buy,0.5,10\n")
        assert len(txns) == 1

    def test_currency_formatting_stripped(self):
        txns = parse_csv('Market,Type,Price,Qty,Fees\nA,Buy,$0.50,"1,000",$1.25\n')
        assert txns[0].quantity == pytest.approx(1000)
        assert txns[0].price == pytest.approx(0.5)
        assert txns[0].fees == pytest.approx(1.25)

    def test_unparsable_timestamp_defaults_to_epoch(self):
        txns = parse_csv("Date,Market,Type,Price,Qty\nsometime,A,Buy,0.5,10\n")
        assert txns[0].timestamp == EPOCH

    def test_sorted_by_timestamp(self):
        text = (
            "Date,Market,Type,Price,Qty\n"
            "2024-03-01,A,Sell,0.6,10\n"
            "2024-01-01,A,Buy,0.5,10\n"
            "garbage,A,Buy,0.4,10\n"
        )
        txns = parse_csv(text)
        assert [t.timestamp for t in txns] == [EPOCH, datetime(2024, 1, 1), datetime(2024, 3, 1)]

    def test_crlf_and_blank_lines(self):
        txns = parse_csv("Market,Type,Price,Qty\r\n\r\nA,Buy,0.5,10\r\n\r\n")
        assert len(txns) == 1

    def test_missing_market_column(self):
        with pytest.raises(FormatError) as exc:
            parse_csv("Date,Type,Price,Qty\n2024-01-01,Buy,0.5,10\n")
        assert exc.value.column == "market"

    def test_missing_type_column(self):
        with pytest.raises(FormatError) as exc:
            parse_csv("Date,Market,Price,Qty\n2024-01-01,A,0.5,10\n")
        assert exc.value.column == "type"

    def test_header_only_is_error(self):
        with pytest.raises(FormatError) as exc:
            parse_csv("Date,Market,Type,Price,Qty\n")
        assert exc.value.column is None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestBaseHelpers:
    def test_parse_number_garbage_is_zero(self):
        assert parse_number("n/a") == 0.0
        assert parse_number("") == 0.0
        assert parse_number(None) == 0.0

    def test_parse_number_negative(self):
        assert parse_number("-12.5") == pytest.approx(-12.5)

    def test_parse_timestamp_formats(self):
        assert parse_timestamp("01/15/2024") == datetime(2024, 1, 15)
        assert parse_timestamp("2024-01-15 09:30:00") == datetime(2024, 1, 15, 9, 30)
        assert parse_timestamp("2024-01-15T09:30:00Z") == datetime(2024, 1, 15, 9, 30)

    def test_parse_timestamp_epoch_seconds_and_millis(self):
        assert parse_timestamp("1700000000") == datetime(2023, 11, 14, 22, 13, 20)
        assert parse_timestamp("1700000000000") == datetime(2023, 11, 14, 22, 13, 20)

    def test_split_line_drops_quotes(self):
        assert split_delimited_line('a,"b,c",d', ",") == ["a", "b,c", "d"]
