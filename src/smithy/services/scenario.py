# src/smithy/services/scenario.py
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Mapping

from pydantic import ValidationError

from smithy.adapters.config import config
from smithy.adapters.diagnostics import build_diagnostics_sink
from smithy.adapters.logging_utils import get_logger, log_context
from smithy.analysis.household import (
    HouseholdTaxBreakdown,
    aggregate_household,
    heloc_only_household,
    resolve_ownership_split,
)
from smithy.analysis.rental import RentalMetrics, evaluate_rental_property
from smithy.domain.errors import CalculationError
from smithy.domain.models import CalculationResult, CalculatorInput
from smithy.domain.mortgage import ZERO, monthly_interest, monthly_payment, to_decimal
from smithy.domain.ports import DiagnosticsSink
from smithy.domain.tax import TaxBracketResolver, default_resolver
from smithy.services.payoff import estimate_payoff

logger = get_logger(__name__)

_default_sink: DiagnosticsSink = build_diagnostics_sink(config)


def _coerce_inputs(inputs: CalculatorInput | Mapping[str, Any]) -> CalculatorInput:
    if isinstance(inputs, CalculatorInput):
        return inputs
    if not isinstance(inputs, Mapping):
        raise CalculationError(f"expected calculator input, got {type(inputs).__name__}")
    try:
        return CalculatorInput.model_validate(inputs)
    except ValidationError as e:
        raise CalculationError(f"invalid calculator input: {e}") from e


def _jsonable(values: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for k, v in values.items():
        if isinstance(v, Decimal):
            out[k] = float(v)
        elif isinstance(v, Mapping):
            out[k] = _jsonable(v)
        else:
            out[k] = v
    return out


def _emit_snapshot(sink: DiagnosticsSink, snapshot: dict[str, Any]) -> None:
    # best-effort; never allowed to affect the result
    try:
        sink.record(snapshot)
    except Exception as e:
        logger.warning("diagnostics_sink_failed", extra={"error": e})


def calculate_smith_manoeuvre(
    inputs: CalculatorInput | Mapping[str, Any],
    *,
    resolver: TaxBracketResolver | None = None,
    sink: DiagnosticsSink | None = None,
) -> CalculationResult:
    """
    One year of the Smith Manoeuvre for a household.

    Flow:
      1. primary mortgage payment, interest and principal on today's balance
      2. equity freed this year (+ all rent, swept into the primary mortgage)
      3. that equity re-borrowed on the HELOC; its interest is deductible
      4. rental deductions and income split between owners, if a rental exists
      5. extra monthly cash flow available to accelerate the primary mortgage

    Primary-residence mortgage interest is never deductible here; only the
    investment borrowing is.
    """
    inputs = _coerce_inputs(inputs)
    resolver = resolver or default_resolver
    sink = sink or _default_sink

    primary = inputs.primary_property
    income = inputs.income
    property2 = inputs.property2

    calc: dict[str, Any] = {}

    # --- primary mortgage ---
    if primary.monthly_payment:
        payment = to_decimal(primary.monthly_payment)
    else:
        payment = monthly_payment(primary.mortgage_amount, primary.interest_rate, primary.amortization_years)

    balance = to_decimal(primary.current_amount_owing or primary.mortgage_amount)
    interest_monthly = monthly_interest(balance, primary.interest_rate)
    interest_annual = interest_monthly * 12
    principal_monthly = payment - interest_monthly

    calc["monthlyPayment"] = {
        "calculatedPayment": payment,
        "providedPayment": primary.monthly_payment,
    }
    calc["interest"] = {
        "remainingBalance": balance,
        "monthlyInterest": interest_monthly,
        "annualInterest": interest_annual,
    }

    # --- rental property ---
    primary_rate = resolver.marginal_rate(income.province, income.net_taxable_income)
    spouse_rate = ZERO
    if inputs.spouse is not None:
        spouse_rate = resolver.marginal_rate(
            inputs.spouse.province or income.province,
            inputs.spouse.net_taxable_income,
        )

    rental: RentalMetrics | None = None
    if property2 is not None:
        rental = evaluate_rental_property(property2, 0)

    # --- equity & HELOC ---
    equity_gained = principal_monthly * 12
    if rental is not None:
        equity_gained += rental.monthly_cash_flow * 12

    heloc_rate = to_decimal(inputs.heloc_interest_rate or config.DEFAULT_HELOC_RATE)
    heloc_interest = equity_gained * heloc_rate / 100
    heloc_tax_deduction = heloc_interest * primary_rate

    calc["equity"] = {
        "monthlyPrincipal": principal_monthly,
        "annualEquityGained": equity_gained,
    }
    calc["heloc"] = {"helocRate": heloc_rate, "helocInterest": heloc_interest}
    calc["tax"] = {
        "primaryTaxRate": primary_rate,
        "spouseTaxRate": spouse_rate,
        "helocTaxDeduction": heloc_tax_deduction,
    }

    # --- household ---
    household: HouseholdTaxBreakdown
    if rental is not None:
        primary_pct, spouse_pct = resolve_ownership_split(inputs)
        household = aggregate_household(
            annual_rental_income=rental.effective_monthly_rent * 12,
            annual_deductions=rental.annual_tax_deductions,
            primary_rate=primary_rate,
            spouse_rate=spouse_rate,
            primary_pct=primary_pct,
            spouse_pct=spouse_pct,
            heloc_tax_deduction=heloc_tax_deduction,
        )
        calc["percentageAllocation"] = {
            "primaryPercentage": primary_pct,
            "spousePercentage": spouse_pct,
            "hasSpouse": inputs.spouse is not None,
            "primaryRentalIncome": household.primary.rental_income,
            "spouseRentalIncome": household.spouse.rental_income,
            "primaryTaxOnRentalIncome": household.primary.tax_on_rental_income,
            "spouseTaxOnRentalIncome": household.spouse.tax_on_rental_income,
            "primaryTaxCredits": household.primary.tax_credits,
            "spouseTaxCredits": household.spouse.tax_credits,
        }
    else:
        household = heloc_only_household(primary_rate=primary_rate, heloc_tax_deduction=heloc_tax_deduction)

    # --- cash flow toward the primary mortgage ---
    monthly_cash_flow = heloc_tax_deduction / 12
    if rental is not None:
        monthly_cash_flow += rental.monthly_cash_flow

    payoff = estimate_payoff(primary.current_amount_owing, payment, monthly_cash_flow, primary.interest_rate)

    # household total is the sum of the reported per-person figures
    primary_tax_savings = float(household.primary.net_tax_savings)
    spouse_tax_savings = float(household.spouse.net_tax_savings)
    household_tax_benefit = primary_tax_savings + spouse_tax_savings

    calc["finalResults"] = {
        "monthlyCashFlow": monthly_cash_flow,
        "householdTaxBenefit": household_tax_benefit,
        "equityGained": equity_gained,
    }

    result = CalculationResult(
        equity_gained=float(equity_gained),
        tax_savings=household_tax_benefit,
        investment_loan_interest=float(heloc_interest),
        total_savings=household_tax_benefit,
        monthly_cash_flow=float(monthly_cash_flow),
        monthly_mortgage_payment=float(payment),
        monthly_interest_portion=float(interest_monthly),
        monthly_principal_portion=float(principal_monthly),
        annual_interest_portion=float(interest_annual),
        heloc_interest_cost=float(heloc_interest),
        net_tax_benefit=household_tax_benefit,
        heloc_interest_rate=float(heloc_rate),
        marginal_tax_rate=float(primary_rate),
        spouse_marginal_tax_rate=float(spouse_rate),
        primary_owner_percentage=float(household.primary.ownership_percentage),
        spouse_percentage=float(household.spouse.ownership_percentage),
        primary_tax_credits=float(household.primary.tax_credits),
        primary_tax_savings=primary_tax_savings,
        primary_increased_taxable_income=float(household.primary.rental_income),
        spouse_tax_credits=float(household.spouse.tax_credits),
        spouse_tax_savings=spouse_tax_savings,
        spouse_increased_taxable_income=float(household.spouse.rental_income),
        household_tax_benefit=household_tax_benefit,
        regular_payoff_months=payoff.regular_months,
        accelerated_payoff_months=payoff.accelerated_months,
        payoff_months_saved=payoff.months_saved,
    )

    if rental is not None:
        result = result.model_copy(update={
            "rental_property_cash_flow": float(rental.monthly_cash_flow),
            "rental_property_tax_deductions": float(rental.annual_tax_deductions),
            "net_rental_income": float(rental.net_rental_income),
            "downpayment_amount": float(rental.downpayment_amount),
            "heloc_downpayment_interest": float(rental.heloc_downpayment_interest),
            "property2_mortgage_amount": float(rental.mortgage_amount),
            "property2_mortgage_interest": float(rental.mortgage_interest),
        })

    _emit_snapshot(sink, {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "inputs": inputs.model_dump(by_alias=True),
        "calculations": _jsonable(calc),
    })

    logger.debug(
        "smith_manoeuvre_calculated",
        extra=log_context(
            province=income.province,
            has_rental=rental is not None,
            has_spouse=inputs.spouse is not None,
        ),
    )

    return result
