# src/smithy/analysis/household.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from smithy.domain.models import CalculatorInput
from smithy.domain.mortgage import ZERO, to_decimal


@dataclass(frozen=True)
class TaxpayerShare:
    ownership_percentage: Decimal
    marginal_rate: Decimal
    rental_income: Decimal            # increased taxable income
    tax_on_rental_income: Decimal
    tax_credits: Decimal              # allocated deductible expenses
    tax_savings_from_credits: Decimal
    net_tax_savings: Decimal


@dataclass(frozen=True)
class HouseholdTaxBreakdown:
    primary: TaxpayerShare
    spouse: TaxpayerShare
    household_tax_benefit: Decimal


def resolve_ownership_split(inputs: CalculatorInput) -> tuple[Decimal, Decimal]:
    """Without a spouse the primary owns 100%, whatever percentages were stored."""
    if inputs.spouse is None:
        return Decimal(100), ZERO
    return to_decimal(inputs.primary_owner_percentage), to_decimal(inputs.spouse_percentage)


def allocate(total: Decimal, primary_pct: Decimal, spouse_pct: Decimal) -> tuple[Decimal, Decimal]:
    """
    Split ``total`` by ownership. The spouse share is the remainder when
    the percentages cover the whole property, so the two always add back up.
    """
    primary = total * primary_pct / 100
    if primary_pct + spouse_pct == 100:
        return primary, total - primary
    return primary, total * spouse_pct / 100


def _share(pct: Decimal, rate: Decimal, income: Decimal, credits: Decimal, extra_deduction: Decimal) -> TaxpayerShare:
    tax_on_income = income * rate
    savings_from_credits = credits * rate
    return TaxpayerShare(
        ownership_percentage=pct,
        marginal_rate=rate,
        rental_income=income,
        tax_on_rental_income=tax_on_income,
        tax_credits=credits,
        tax_savings_from_credits=savings_from_credits,
        net_tax_savings=savings_from_credits - tax_on_income + extra_deduction,
    )


def aggregate_household(
    *,
    annual_rental_income: Decimal,
    annual_deductions: Decimal,
    primary_rate: Decimal,
    spouse_rate: Decimal,
    primary_pct: Decimal,
    spouse_pct: Decimal,
    heloc_tax_deduction: Decimal,
) -> HouseholdTaxBreakdown:
    """
    Net tax effect of the rental for each owner, plus the HELOC interest
    deduction which always belongs to the primary taxpayer.
    """
    primary_income, spouse_income = allocate(annual_rental_income, primary_pct, spouse_pct)
    primary_credits, spouse_credits = allocate(annual_deductions, primary_pct, spouse_pct)

    primary = _share(primary_pct, primary_rate, primary_income, primary_credits, heloc_tax_deduction)
    spouse = _share(spouse_pct, spouse_rate, spouse_income, spouse_credits, ZERO)

    return HouseholdTaxBreakdown(
        primary=primary,
        spouse=spouse,
        household_tax_benefit=primary.net_tax_savings + spouse.net_tax_savings,
    )


def heloc_only_household(*, primary_rate: Decimal, heloc_tax_deduction: Decimal) -> HouseholdTaxBreakdown:
    """No rental property: the benefit is the HELOC deduction alone."""
    return aggregate_household(
        annual_rental_income=ZERO,
        annual_deductions=ZERO,
        primary_rate=primary_rate,
        spouse_rate=ZERO,
        primary_pct=Decimal(100),
        spouse_pct=ZERO,
        heloc_tax_deduction=heloc_tax_deduction,
    )
