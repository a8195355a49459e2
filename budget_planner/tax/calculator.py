"""Pay calculation functions for statutory deductions.

This module provides pure functions for turning a gross salary into a
deduction breakdown:
- SHA contribution (flat percentage)
- Housing levy (flat percentage)
- PAYE using progressive brackets net of personal relief
- Net pay after all deductions

All monetary values use Decimal and are rounded half-up to the cent at each
stage, so every intermediate figure matches what a payslip would print.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Union

from budget_planner.core.errors import InvalidInputError
from budget_planner.tax.rates import DEFAULT_RATES, PayeBracket, StatutoryRates

Amount = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0")


# =============================================================================
# Data Structures
# =============================================================================


@dataclass(frozen=True)
class PayBreakdown:
    """Statutory deduction breakdown for one gross pay figure.

    Produced fresh by compute_net_pay and never mutated.

    Attributes:
        gross_pay: Salary before deductions.
        sha: SHA contribution.
        payee: PAYE after personal relief.
        housing_levy: Housing levy.
        total_deductions: sha + payee + housing_levy, rounded.
        net_pay: gross_pay - total_deductions, rounded.
    """

    gross_pay: Decimal
    sha: Decimal
    payee: Decimal
    housing_levy: Decimal
    total_deductions: Decimal
    net_pay: Decimal

    def to_dict(self) -> dict[str, str]:
        """Serialize with camelCase keys; amounts as strings to keep exact cents."""
        return {
            "grossPay": str(self.gross_pay),
            "sha": str(self.sha),
            "payee": str(self.payee),
            "housingLevy": str(self.housing_levy),
            "totalDeductions": str(self.total_deductions),
            "netPay": str(self.net_pay),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PayBreakdown:
        """Rebuild a breakdown from its serialized form."""
        return cls(
            gross_pay=Decimal(str(data["grossPay"])),
            sha=Decimal(str(data["sha"])),
            payee=Decimal(str(data["payee"])),
            housing_levy=Decimal(str(data["housingLevy"])),
            total_deductions=Decimal(str(data["totalDeductions"])),
            net_pay=Decimal(str(data["netPay"])),
        )


@dataclass(frozen=True)
class BracketTaxResult:
    """Result of a progressive bracket calculation.

    Attributes:
        gross_tax: Raw tax before relief (not rounded).
        bracket_breakdown: List of dicts with bracket, rate, taxable and tax_in_bracket.
    """

    gross_tax: Decimal
    bracket_breakdown: list[dict]


# =============================================================================
# Helpers
# =============================================================================


def round_currency(value: Decimal) -> Decimal:
    """Round half-up to two decimal places."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_amount(value: Amount) -> Decimal:
    """Coerce a gross pay input to a finite, non-negative Decimal.

    Floats go through str() so 0.1 means ten cents rather than its binary
    approximation.

    Raises:
        InvalidInputError: If the value is not numeric, not finite, or negative.
    """
    if isinstance(value, bool) or value is None:
        raise InvalidInputError(f"Gross pay must be a number, got {value!r}")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise InvalidInputError("Gross pay must be a finite number")
        amount = Decimal(str(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation as exc:
            raise InvalidInputError(
                f"Gross pay must be a valid number, got {value!r}"
            ) from exc
    else:
        raise InvalidInputError(
            f"Gross pay must be a number, got {type(value).__name__}"
        )

    if not amount.is_finite():
        raise InvalidInputError("Gross pay must be a finite number")
    if amount < ZERO:
        raise InvalidInputError("Gross pay must not be negative")
    return amount


# =============================================================================
# Deductions
# =============================================================================


def compute_sha_deduction(
    gross_pay: Amount, rates: StatutoryRates = DEFAULT_RATES
) -> Decimal:
    """Calculate the SHA contribution (2.75% of gross pay in 2024).

    Example:
        >>> compute_sha_deduction(Decimal("40000"))
        Decimal('1100.00')
    """
    return round_currency(to_amount(gross_pay) * rates.sha_rate)


def compute_housing_levy(
    gross_pay: Amount, rates: StatutoryRates = DEFAULT_RATES
) -> Decimal:
    """Calculate the housing levy (1.5% of gross pay in 2024)."""
    return round_currency(to_amount(gross_pay) * rates.housing_levy_rate)


def calculate_bracket_tax(
    gross_pay: Decimal, brackets: tuple[PayeBracket, ...]
) -> BracketTaxResult:
    """Calculate raw tax using marginal brackets.

    Each bracket's upper bound is inclusive to that bracket, so income exactly
    at a boundary is taxed entirely at the lower rate.

    Args:
        gross_pay: Income to tax.
        brackets: Ascending (upper_bound, rate) pairs; the last upper bound is None.

    Returns:
        BracketTaxResult with unrounded gross tax and per-bracket breakdown.
    """
    remaining_income = gross_pay
    gross_tax = ZERO
    bracket_breakdown: list[dict] = []
    prev_bracket = ZERO

    for upper_bound, rate in brackets:
        if remaining_income <= ZERO:
            break

        if upper_bound is None:
            bracket_size = remaining_income
        else:
            bracket_size = min(remaining_income, upper_bound - prev_bracket)

        tax_in_bracket = bracket_size * rate
        gross_tax += tax_in_bracket

        if bracket_size > ZERO:
            bracket_breakdown.append(
                {
                    "bracket": upper_bound,
                    "rate": rate,
                    "taxable": bracket_size,
                    "tax_in_bracket": tax_in_bracket,
                }
            )

        remaining_income -= bracket_size
        if upper_bound is not None:
            prev_bracket = upper_bound

    return BracketTaxResult(gross_tax=gross_tax, bracket_breakdown=bracket_breakdown)


def compute_payee_tax(
    gross_pay: Amount, rates: StatutoryRates = DEFAULT_RATES
) -> Decimal:
    """Calculate PAYE: progressive brackets minus personal relief, floored at zero.

    Example:
        >>> compute_payee_tax(Decimal("40000"))
        Decimal('4383.35')
    """
    result = calculate_bracket_tax(to_amount(gross_pay), rates.payee_brackets)
    after_relief = round_currency(result.gross_tax - rates.personal_relief)
    return max(round_currency(ZERO), after_relief)


def compute_net_pay(
    gross_pay: Amount, rates: StatutoryRates = DEFAULT_RATES
) -> PayBreakdown:
    """Calculate net pay after all statutory deductions.

    Totals are rounded independently before the subtraction, matching the
    figures shown on a payslip.

    Raises:
        InvalidInputError: If gross pay is negative, non-finite or non-numeric.
    """
    amount = to_amount(gross_pay)
    sha = compute_sha_deduction(amount, rates)
    payee = compute_payee_tax(amount, rates)
    housing_levy = compute_housing_levy(amount, rates)

    total_deductions = round_currency(sha + payee + housing_levy)
    net_pay = round_currency(amount - total_deductions)

    return PayBreakdown(
        gross_pay=amount,
        sha=sha,
        payee=payee,
        housing_levy=housing_levy,
        total_deductions=total_deductions,
        net_pay=net_pay,
    )
