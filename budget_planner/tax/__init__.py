"""Statutory deduction calculations and year-specific rate tables."""

from budget_planner.tax.calculator import (
    BracketTaxResult,
    PayBreakdown,
    calculate_bracket_tax,
    compute_housing_levy,
    compute_net_pay,
    compute_payee_tax,
    compute_sha_deduction,
    round_currency,
)
from budget_planner.tax.rates import (
    DEFAULT_RATES,
    RATES_2024,
    STATUTORY_RATES,
    StatutoryRates,
    get_statutory_rates,
)

__all__ = [
    "BracketTaxResult",
    "PayBreakdown",
    "calculate_bracket_tax",
    "compute_housing_levy",
    "compute_net_pay",
    "compute_payee_tax",
    "compute_sha_deduction",
    "round_currency",
    "DEFAULT_RATES",
    "RATES_2024",
    "STATUTORY_RATES",
    "StatutoryRates",
    "get_statutory_rates",
]
