# src/smithy/analysis/rental.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from smithy.domain.models import PropertyFinancials
from smithy.domain.mortgage import monthly_rate, to_decimal


@dataclass(frozen=True)
class RentalMetrics:
    monthly_cash_flow: Decimal         # all rent, swept to the primary mortgage
    annual_tax_deductions: Decimal
    net_rental_income: Decimal
    effective_monthly_rent: Decimal
    monthly_expenses: Decimal          # carried on the HELOC, not paid from rent
    monthly_mortgage_interest: Decimal

    # Financing breakdown, annualized where it is interest
    downpayment_amount: Decimal
    heloc_downpayment_interest: Decimal
    mortgage_amount: Decimal
    mortgage_interest: Decimal


def _mortgage_balance(prop: PropertyFinancials) -> Decimal:
    """
    Balance the rental mortgage interest is charged on.
    Dedicated amount first, then what is owing, then original principal.
    """
    return to_decimal(
        prop.property2_mortgage_amount
        or prop.current_amount_owing
        or prop.mortgage_amount
        or 0
    )


def _operating_expenses_monthly(prop: PropertyFinancials) -> Decimal:
    return (
        to_decimal(prop.monthly_maintenance_fees)
        + to_decimal(prop.monthly_property_tax)
        + to_decimal(prop.monthly_insurance)
        + to_decimal(prop.monthly_utilities)
        + to_decimal(prop.property_management_fees)
    )


def evaluate_rental_property(prop: PropertyFinancials, tax_rate: float | Decimal) -> RentalMetrics:
    """
    Cash flow and deductible expenses of a rental bought with HELOC money.

    Rent is not netted against expenses here: under the Smith Manoeuvre
    the whole rent goes to the primary mortgage while the expenses are
    capitalized on the HELOC and claimed as deductions.

    ``tax_rate`` is supplied by the caller so the same evaluation can be
    priced at each owner's marginal rate.
    """
    rent = to_decimal(prop.monthly_rent)

    mortgage_balance = _mortgage_balance(prop)
    mortgage_interest_monthly = mortgage_balance * monthly_rate(prop.property2_mortgage_interest)

    downpayment = to_decimal(prop.downpayment_amount)
    downpayment_interest_monthly = downpayment * monthly_rate(prop.heloc_downpayment_interest)

    monthly_expenses = (
        _operating_expenses_monthly(prop)
        + mortgage_interest_monthly
        + downpayment_interest_monthly
    )
    annual_deductions = monthly_expenses * 12

    net_rental_income = rent * 12 + annual_deductions * to_decimal(tax_rate)

    return RentalMetrics(
        monthly_cash_flow=rent,
        annual_tax_deductions=annual_deductions,
        net_rental_income=net_rental_income,
        effective_monthly_rent=rent,
        monthly_expenses=monthly_expenses,
        monthly_mortgage_interest=mortgage_interest_monthly,
        downpayment_amount=downpayment,
        heloc_downpayment_interest=downpayment_interest_monthly * 12,
        mortgage_amount=mortgage_balance,
        mortgage_interest=mortgage_interest_monthly * 12,
    )
