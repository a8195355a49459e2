"""Statutory deduction rates by tax year.

This module centralizes the percentages, PAYE brackets and relief amounts used
by the pay calculator so they are not hardcoded throughout the codebase.

Example:
    >>> from budget_planner.tax.rates import get_statutory_rates
    >>> rates = get_statutory_rates(2024)
    >>> print(f"Personal relief: {rates.personal_relief}")
    Personal relief: 2400
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

# (upper_bound, rate) pairs; None for upper_bound means no limit.
# Upper bounds are inclusive: 24000 is taxed entirely at 10%.
PayeBracket = tuple[Decimal | None, Decimal]


@dataclass(frozen=True)
class StatutoryRates:
    """Statutory deduction rates for a tax year.

    All values are Decimal for exact cent arithmetic. The dataclass is frozen
    to prevent accidental modification of a shared table.

    Attributes:
        tax_year: The tax year these values apply to.
        sha_rate: Social Health Authority contribution rate on gross pay.
        housing_levy_rate: Housing levy rate on gross pay.
        payee_brackets: Progressive PAYE brackets, ascending.
        personal_relief: Monthly personal relief subtracted from raw PAYE.
    """

    tax_year: int
    sha_rate: Decimal = Decimal("0.0275")
    housing_levy_rate: Decimal = Decimal("0.015")
    payee_brackets: tuple[PayeBracket, ...] = (
        (Decimal("24000"), Decimal("0.10")),
        (Decimal("32333"), Decimal("0.25")),
        (None, Decimal("0.30")),
    )
    personal_relief: Decimal = Decimal("2400")


# 2024 Configuration - SHA replaced NHIF; housing levy at 1.5%
RATES_2024 = StatutoryRates(tax_year=2024)

# Registry of available rate tables
STATUTORY_RATES: dict[int, StatutoryRates] = {
    2024: RATES_2024,
}

DEFAULT_RATES = RATES_2024


def get_statutory_rates(year: int) -> StatutoryRates:
    """Get the statutory rate table for a specific tax year.

    Args:
        year: The tax year (e.g., 2024).

    Returns:
        StatutoryRates for the specified year.

    Raises:
        ValueError: If no rate table exists for the requested year.
    """
    if year not in STATUTORY_RATES:
        available = sorted(STATUTORY_RATES.keys())
        raise ValueError(
            f"No statutory rates for year {year}. Available years: {available}"
        )
    return STATUTORY_RATES[year]
