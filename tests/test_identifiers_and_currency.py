import re
from decimal import Decimal

import pytest

from shared.errors import ValidationError
from shared.utils.currency import (
    INR_TO_USD_RATE,
    USD_TO_INR_RATE,
    allocate,
    convert,
    format_money,
    rate_for,
    to_money,
)
from shared.utils.identifiers import _base36, generate_order_number, generate_txn_id


class TestIdentifiers:
    def test_order_number_shape(self):
        assert re.fullmatch(r"ORD-[0-9A-Z]+-[0-9A-F]{6}", generate_order_number())

    def test_txn_id_shape(self):
        txn_id = generate_txn_id()
        assert re.fullmatch(r"AW[0-9A-Z]+[0-9A-F]{8}", txn_id)
        assert txn_id == txn_id.upper()

    def test_no_collisions_in_a_burst(self):
        assert len({generate_txn_id() for _ in range(2000)}) == 2000
        assert len({generate_order_number() for _ in range(2000)}) == 2000

    def test_base36(self):
        assert _base36(0) == "0"
        assert _base36(35) == "z"
        assert _base36(36) == "10"
        assert _base36(1700000000000) == "loyw3v28"


class TestCurrency:
    def test_rates(self):
        assert rate_for("INR") == Decimal(1)
        assert rate_for("USD") == USD_TO_INR_RATE == Decimal("83")
        assert to_money(INR_TO_USD_RATE * 83) == Decimal("1.00")

    def test_unsupported_currency(self):
        with pytest.raises(ValidationError):
            rate_for("EUR")

    def test_inr_is_identity(self):
        assert convert(Decimal("1000.00"), "INR") == Decimal("1000.00")

    def test_usd_scenario(self):
        # 2 x 500.00 INR at 83 INR/USD
        assert to_money(convert(Decimal("1000.00"), "USD")) == Decimal("12.05")

    def test_conversion_is_unrounded(self):
        assert convert(Decimal("1000.00"), "USD") != Decimal("12.05")

    def test_half_up_rounding(self):
        assert to_money(Decimal("0.005")) == Decimal("0.01")
        assert to_money(Decimal("2.675")) == Decimal("2.68")

    def test_format_money(self):
        assert format_money(Decimal("1000")) == "1000.00"
        assert format_money(12.5) == "12.50"


class TestAllocate:
    def test_leftover_cents_go_to_largest_loss(self):
        parts = [Decimal("1.004"), Decimal("2.009"), Decimal("3.001")]
        total = to_money(sum(parts))  # 6.01
        assert allocate(total, parts) == [Decimal("1.00"), Decimal("2.01"), Decimal("3.00")]

    def test_sum_matches_total_for_many_usd_lines(self):
        parts = [convert(Decimal("83.40"), "USD")] * 7
        total = to_money(convert(Decimal("83.40") * 7, "USD"))
        allocated = allocate(total, parts)
        assert sum(allocated) == total
        assert all(abs(a - p) < Decimal("0.01") for a, p in zip(allocated, parts))

    def test_exact_amounts_are_untouched(self):
        parts = [Decimal("500.00"), Decimal("250.00")]
        assert allocate(Decimal("750.00"), parts) == parts
