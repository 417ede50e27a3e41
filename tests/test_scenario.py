import json
import math

import pytest

from fixtures.scenarios import primary_only, with_rental, with_rental_and_spouse
from smithy.domain.errors import CalculationError
from smithy.domain.models import CalculatorInput
from smithy.services.scenario import calculate_smith_manoeuvre


def test_primary_only_scenario(null_sink):
    r = calculate_smith_manoeuvre(primary_only(), sink=null_sink)

    assert r.investment_loan_interest > 0
    assert r.household_tax_benefit > 0
    assert r.rental_property_cash_flow is None
    assert r.net_rental_income is None
    assert r.property2_mortgage_amount is None

    # household benefit is just the HELOC deduction
    assert r.household_tax_benefit == pytest.approx(r.investment_loan_interest * 0.2965, rel=1e-9)
    assert r.primary_tax_credits == 0
    assert r.spouse_tax_savings == 0
    assert r.tax_savings == r.total_savings == r.net_tax_benefit == r.household_tax_benefit


def test_primary_only_breakdown(null_sink):
    r = calculate_smith_manoeuvre(primary_only(), sink=null_sink)

    assert r.marginal_tax_rate == pytest.approx(0.2965)
    assert r.heloc_interest_rate == pytest.approx(7.2)
    assert r.monthly_interest_portion == pytest.approx(2062.5, abs=1e-6)
    assert r.annual_interest_portion == pytest.approx(2062.5 * 12, abs=1e-6)
    assert r.monthly_principal_portion == pytest.approx(
        r.monthly_mortgage_payment - r.monthly_interest_portion, abs=1e-6
    )
    assert r.equity_gained == pytest.approx(r.monthly_principal_portion * 12, abs=1e-6)
    assert r.heloc_interest_cost == pytest.approx(r.equity_gained * 0.072, abs=1e-6)
    assert r.monthly_cash_flow == pytest.approx(r.household_tax_benefit / 12, abs=1e-6)


def test_rental_without_spouse(null_sink):
    r = calculate_smith_manoeuvre(with_rental(), sink=null_sink)

    assert r.rental_property_cash_flow == pytest.approx(2500)
    assert r.primary_owner_percentage == 100
    assert r.spouse_percentage == 0
    assert r.spouse_tax_savings == 0
    assert r.spouse_increased_taxable_income == 0
    assert r.primary_increased_taxable_income == pytest.approx(30_000)

    assert r.rental_property_tax_deductions == pytest.approx(30_400, abs=1e-6)
    # rental is evaluated tax-rate-free; per-person rates apply in the household split
    assert r.net_rental_income == pytest.approx(30_000)
    assert r.property2_mortgage_amount == pytest.approx(280_000)
    assert r.property2_mortgage_interest == pytest.approx(15_400, abs=1e-6)
    assert r.downpayment_amount == pytest.approx(100_000)
    assert r.heloc_downpayment_interest == pytest.approx(7_200, abs=1e-6)


def test_rental_is_swept_into_equity_and_cash_flow(null_sink):
    base = calculate_smith_manoeuvre(primary_only(), sink=null_sink)
    r = calculate_smith_manoeuvre(with_rental(), sink=null_sink)

    assert r.equity_gained == pytest.approx(base.equity_gained + 30_000, abs=1e-6)
    assert r.investment_loan_interest == pytest.approx(r.equity_gained * 0.072, abs=1e-6)

    heloc_deduction = r.investment_loan_interest * r.marginal_tax_rate
    assert r.monthly_cash_flow == pytest.approx(heloc_deduction / 12 + 2500, abs=1e-6)


def test_rental_with_spouse_splits_income(null_sink):
    r = calculate_smith_manoeuvre(with_rental_and_spouse(), sink=null_sink)

    assert r.primary_owner_percentage == 60
    assert r.spouse_percentage == 40
    assert r.primary_increased_taxable_income == pytest.approx(2500 * 12 * 0.6, abs=1e-6)
    assert r.spouse_increased_taxable_income == pytest.approx(2500 * 12 * 0.4, abs=1e-6)
    assert r.primary_tax_credits + r.spouse_tax_credits == pytest.approx(r.rental_property_tax_deductions, abs=1e-6)

    assert r.household_tax_benefit == r.primary_tax_savings + r.spouse_tax_savings


def test_spouse_taxed_at_own_marginal_rate(null_sink):
    r = calculate_smith_manoeuvre(with_rental_and_spouse(), sink=null_sink)

    # 60k - 15k = 45k in ON -> 15% + 5.05%
    assert r.spouse_marginal_tax_rate == pytest.approx(0.2005)
    expected_spouse = (r.spouse_tax_credits - r.spouse_increased_taxable_income) * 0.2005
    assert r.spouse_tax_savings == pytest.approx(expected_spouse, abs=1e-6)


def test_spouse_province_defaults_to_primary_but_can_differ(null_sink):
    payload = with_rental_and_spouse()
    payload["spouse"]["province"] = "AB"

    r = calculate_smith_manoeuvre(payload, sink=null_sink)

    # 45k adjusted in AB -> 15% + 10%
    assert r.spouse_marginal_tax_rate == pytest.approx(0.25)


def test_rental_income_to_spouse_flag_does_not_change_split(null_sink):
    payload = with_rental_and_spouse()
    flipped = with_rental_and_spouse()
    flipped["rentalIncomeToSpouse"] = True

    assert (
        calculate_smith_manoeuvre(payload, sink=null_sink).model_dump()
        == calculate_smith_manoeuvre(flipped, sink=null_sink).model_dump()
    )


def test_same_input_same_output(null_sink):
    payload = with_rental_and_spouse()

    first = calculate_smith_manoeuvre(payload, sink=null_sink)
    second = calculate_smith_manoeuvre(payload, sink=null_sink)

    assert first.model_dump() == second.model_dump()


def test_accepts_model_or_mapping(null_sink):
    payload = with_rental()
    from_dict = calculate_smith_manoeuvre(payload, sink=null_sink)
    from_model = calculate_smith_manoeuvre(CalculatorInput.model_validate(payload), sink=null_sink)

    assert from_dict.model_dump() == from_model.model_dump()


def test_provided_payment_overrides_derived_payment(null_sink):
    payload = primary_only()
    payload["primaryProperty"]["monthlyPayment"] = 4000

    r = calculate_smith_manoeuvre(payload, sink=null_sink)

    assert r.monthly_mortgage_payment == pytest.approx(4000)
    assert r.monthly_principal_portion == pytest.approx(4000 - 2062.5, abs=1e-6)


def test_missing_heloc_rate_uses_default(null_sink):
    payload = primary_only()
    payload["helocInterestRate"] = 0

    r = calculate_smith_manoeuvre(payload, sink=null_sink)

    assert r.heloc_interest_rate == pytest.approx(7.2)


def test_payoff_estimate_is_accelerated(null_sink):
    r = calculate_smith_manoeuvre(with_rental(), sink=null_sink)

    assert r.regular_payoff_months is not None
    assert r.accelerated_payoff_months is not None
    assert r.accelerated_payoff_months < r.regular_payoff_months
    assert r.payoff_months_saved == pytest.approx(
        r.regular_payoff_months - r.accelerated_payoff_months, abs=1e-6
    )


def test_degenerate_numbers_resolve_to_sentinels(null_sink):
    payload = primary_only()
    payload["primaryProperty"] = {"mortgageAmount": 0, "interestRate": 0, "amortizationYears": 0}
    payload["income"]["netTaxableIncome"] = 0

    r = calculate_smith_manoeuvre(payload, sink=null_sink)

    assert r.monthly_mortgage_payment == 0
    assert r.household_tax_benefit == 0
    assert r.regular_payoff_months is None
    assert r.payoff_months_saved is None
    for value in r.model_dump().values():
        if isinstance(value, float):
            assert math.isfinite(value)


def test_unknown_province_uses_flat_rate(null_sink):
    payload = primary_only()
    payload["income"]["province"] = "ZZ"

    r = calculate_smith_manoeuvre(payload, sink=null_sink)

    assert r.marginal_tax_rate == pytest.approx(0.25)


@pytest.mark.parametrize("missing", ["primaryProperty", "income"])
def test_missing_required_section_is_a_calculation_error(missing, null_sink):
    payload = primary_only()
    del payload[missing]

    with pytest.raises(CalculationError):
        calculate_smith_manoeuvre(payload, sink=null_sink)


def test_non_mapping_input_is_a_calculation_error(null_sink):
    with pytest.raises(CalculationError):
        calculate_smith_manoeuvre(["not", "an", "input"], sink=null_sink)


def test_owing_above_principal_is_rejected(null_sink):
    payload = primary_only()
    payload["primaryProperty"]["currentAmountOwing"] = 600_000

    with pytest.raises(CalculationError):
        calculate_smith_manoeuvre(payload, sink=null_sink)


def test_rental_without_its_own_mortgage_amount(null_sink):
    payload = primary_only()
    payload["property2"] = {
        "monthlyRent": 2500,
        "currentAmountOwing": 280_000,
        "property2MortgageAmount": 280_000,
        "property2MortgageInterest": 5.5,
    }

    r = calculate_smith_manoeuvre(payload, sink=null_sink)

    assert r.rental_property_cash_flow == pytest.approx(2500)
    assert r.property2_mortgage_amount == pytest.approx(280_000)
    assert r.property2_mortgage_interest == pytest.approx(15_400, abs=1e-6)


def test_rental_owing_ignores_zero_mortgage_amount(null_sink):
    payload = with_rental()
    payload["property2"]["mortgageAmount"] = 0
    payload["property2"]["currentAmountOwing"] = 250_000

    r = calculate_smith_manoeuvre(payload, sink=null_sink)

    assert r.rental_property_cash_flow == pytest.approx(2500)


def test_rental_owing_above_its_mortgage_is_rejected(null_sink):
    payload = with_rental()
    payload["property2"]["currentAmountOwing"] = 300_000

    with pytest.raises(CalculationError):
        calculate_smith_manoeuvre(payload, sink=null_sink)


def test_ownership_must_add_up_with_rental(null_sink):
    payload = with_rental_and_spouse()
    payload["spousePercentage"] = 50

    with pytest.raises(CalculationError):
        calculate_smith_manoeuvre(payload, sink=null_sink)


def test_one_json_snapshot_per_calculation(recording_sink):
    calculate_smith_manoeuvre(with_rental_and_spouse(), sink=recording_sink)

    assert len(recording_sink.snapshots) == 1
    snap = recording_sink.snapshots[0]
    json.dumps(snap)  # must be serializable as-is
    assert "timestamp" in snap
    assert snap["inputs"]["primaryProperty"]["mortgageAmount"] == 500_000
    assert snap["calculations"]["percentageAllocation"]["primaryPercentage"] == 60


def test_failing_sink_does_not_affect_result(null_sink):
    class ExplodingSink:
        def record(self, snapshot):
            raise RuntimeError("disk full")

    expected = calculate_smith_manoeuvre(with_rental(), sink=null_sink)
    actual = calculate_smith_manoeuvre(with_rental(), sink=ExplodingSink())

    assert actual.model_dump() == expected.model_dump()
