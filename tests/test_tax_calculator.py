"""Unit tests for the flat tax helpers."""

from decimal import Decimal

import pytest

from paylevel.calculators.tax_calculator import InvalidTaxRateError, net_of_tax, tax_amount


class TestFlatTax:
    """Flat percentage tax on gross pay."""

    def test_zero_rate_keeps_gross(self):
        assert net_of_tax(Decimal("650"), Decimal("0")) == Decimal("650")

    def test_net_of_ten_percent(self):
        assert net_of_tax(Decimal("650"), Decimal("10")) == Decimal("585")
        assert tax_amount(Decimal("650"), Decimal("10")) == Decimal("65")

    def test_full_rate(self):
        assert net_of_tax(Decimal("100"), Decimal("100")) == Decimal("0")

    @pytest.mark.parametrize("rate", [Decimal("-1"), Decimal("100.01")])
    def test_out_of_range_rate(self, rate):
        with pytest.raises(InvalidTaxRateError) as exc_info:
            net_of_tax(Decimal("100"), rate)
        assert exc_info.value.tax_rate == rate
