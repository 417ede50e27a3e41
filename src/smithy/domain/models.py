# src/smithy/domain/models.py
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# Wire format is camelCase (what the form layer posts); attributes stay snake_case.
_wire = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PropertyFinancials(BaseModel):
    model_config = _wire

    mortgage_amount: float = Field(0.0, ge=0, description="Original principal")
    interest_rate: float = Field(0.0, ge=0, description="Annual %, e.g. 5.5")
    amortization_years: int = Field(0, ge=0)
    current_amount_owing: float = Field(0.0, ge=0)
    property_value: float = Field(0.0, ge=0)
    monthly_payment: float | None = Field(None, description="Override; derived when empty")

    # Rental-only fields
    monthly_rent: float = 0.0
    monthly_maintenance_fees: float = 0.0
    monthly_property_tax: float = 0.0
    monthly_insurance: float = 0.0
    monthly_utilities: float = 0.0
    property_management_fees: float = 0.0

    # Rental financing
    downpayment_amount: float = 0.0
    heloc_downpayment_interest: float = Field(0.0, description="Annual % on the HELOC-funded downpayment")
    property2_mortgage_amount: float = Field(0.0, alias="property2MortgageAmount")
    property2_mortgage_interest: float = Field(0.0, alias="property2MortgageInterest", description="Annual %")


class TaxpayerIncome(BaseModel):
    model_config = _wire

    province: str = Field(..., description="Two-letter province/territory code")
    net_taxable_income: float = Field(0.0, ge=0, description="Gross income minus RRSPs, pensions, etc.")
    other_taxable_income: float = Field(0.0, ge=0)
    # informational only; the engine always re-resolves
    marginal_tax_rate: float | None = None


class SpouseIncome(BaseModel):
    model_config = _wire

    net_taxable_income: float = Field(0.0, ge=0)
    other_taxable_income: float = Field(0.0, ge=0)
    marginal_tax_rate: float | None = None
    # same province as the primary taxpayer when empty
    province: str | None = None


class CalculatorInput(BaseModel):
    model_config = _wire

    primary_property: PropertyFinancials
    income: TaxpayerIncome
    property2: PropertyFinancials | None = None
    spouse: SpouseIncome | None = None

    heloc_interest_rate: float = Field(0.0, ge=0, description="Annual %; 0 uses the configured default")

    primary_owner_percentage: float = Field(100.0, ge=0, le=100)
    spouse_percentage: float = Field(0.0, ge=0, le=100)
    # accepted but not consumed; the percentages drive allocation
    rental_income_to_spouse: bool = False

    @model_validator(mode="after")
    def _ownership_adds_up(self) -> "CalculatorInput":
        if self.property2 is not None:
            total = self.primary_owner_percentage + self.spouse_percentage
            if abs(total - 100.0) > 1e-9:
                raise ValueError("primaryOwnerPercentage + spousePercentage must equal 100")
        return self

    @model_validator(mode="after")
    def _owing_within_principal(self) -> "CalculatorInput":
        if self.primary_property.current_amount_owing > self.primary_property.mortgage_amount:
            raise ValueError("primaryProperty: currentAmountOwing cannot exceed mortgageAmount")
        # rental owing is bounded by property2MortgageAmount, when given
        rental = self.property2
        if rental is not None and rental.property2_mortgage_amount:
            if rental.current_amount_owing > rental.property2_mortgage_amount:
                raise ValueError("property2: currentAmountOwing cannot exceed property2MortgageAmount")
        return self


class CalculationResult(BaseModel):
    model_config = _wire

    equity_gained: float
    tax_savings: float
    investment_loan_interest: float
    total_savings: float
    monthly_cash_flow: float

    # Detailed breakdown
    monthly_mortgage_payment: float
    monthly_interest_portion: float
    monthly_principal_portion: float
    annual_interest_portion: float
    heloc_interest_cost: float
    net_tax_benefit: float
    heloc_interest_rate: float
    marginal_tax_rate: float
    spouse_marginal_tax_rate: float = 0.0

    primary_owner_percentage: float = 100.0
    spouse_percentage: float = 0.0

    # Rental property (None when no second property)
    rental_property_cash_flow: float | None = None
    rental_property_tax_deductions: float | None = None
    net_rental_income: float | None = None
    downpayment_amount: float | None = None
    heloc_downpayment_interest: float | None = None
    property2_mortgage_amount: float | None = Field(None, alias="property2MortgageAmount")
    property2_mortgage_interest: float | None = Field(None, alias="property2MortgageInterest")

    # Individual tax breakdown
    primary_tax_credits: float
    primary_tax_savings: float
    primary_increased_taxable_income: float
    spouse_tax_credits: float
    spouse_tax_savings: float
    spouse_increased_taxable_income: float
    household_tax_benefit: float

    # Closed-form payoff estimate; None means not applicable
    regular_payoff_months: float | None = None
    accelerated_payoff_months: float | None = None
    payoff_months_saved: float | None = None
