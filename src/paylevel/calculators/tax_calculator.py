"""Flat percentage tax.

Only a single flat rate is applied to gross pay; there are no brackets,
allowances or jurisdictions.
"""

from __future__ import annotations

from decimal import Decimal

HUNDRED = Decimal("100")


class InvalidTaxRateError(ValueError):
    """Raised when a tax percentage is outside 0..100."""

    def __init__(self, tax_rate: Decimal):
        self.tax_rate = tax_rate
        super().__init__(f"Tax rate must be between 0 and 100, got {tax_rate}")


def _checked(tax_rate: Decimal) -> Decimal:
    if not Decimal("0") <= tax_rate <= HUNDRED:
        raise InvalidTaxRateError(tax_rate)
    return tax_rate


def tax_amount(gross: Decimal, tax_rate: Decimal) -> Decimal:
    """Tax withheld from gross at a flat percentage."""
    return gross * (_checked(tax_rate) / HUNDRED)


def net_of_tax(gross: Decimal, tax_rate: Decimal) -> Decimal:
    """Gross pay after a flat percentage tax."""
    return gross * (1 - _checked(tax_rate) / HUNDRED)
