# src/smithy/services/payoff.py
from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal

from smithy.domain.mortgage import monthly_rate, months_to_payoff, to_decimal

DAYS_PER_MONTH = 30.44


@dataclass(frozen=True)
class PayoffEstimate:
    regular_months: float | None
    accelerated_months: float | None
    months_saved: float | None


def _applicable(months: Decimal) -> float | None:
    if not months.is_finite() or months <= 0:
        return None
    return float(months)


def estimate_payoff(
    balance: float | Decimal,
    payment: float | Decimal,
    extra_monthly: float | Decimal,
    annual_rate_percent: float | Decimal,
) -> PayoffEstimate:
    """
    Time left on the primary mortgage with the regular payment, and with
    the Smith Manoeuvre cash flow added on top of it.
    """
    b = to_decimal(balance)
    p = to_decimal(payment)
    r = monthly_rate(annual_rate_percent)

    if b <= 0 or p <= 0 or r <= 0:
        return PayoffEstimate(None, None, None)

    regular = months_to_payoff(b, p, r)
    accelerated = months_to_payoff(b, p + to_decimal(extra_monthly), r)

    saved = None
    if regular.is_finite() and accelerated.is_finite():
        saved = _applicable(regular - accelerated)

    return PayoffEstimate(
        regular_months=_applicable(regular),
        accelerated_months=_applicable(accelerated),
        months_saved=saved,
    )


def format_time_granular(months: float | None) -> str:
    if months is None or not math.isfinite(months) or months <= 0:
        return "N/A"

    years = int(months // 12)
    remaining_months = int(months % 12)
    days = int((months % 1) * DAYS_PER_MONTH)

    parts = []
    if years > 0:
        parts.append(f"{years} year{'s' if years > 1 else ''}")
    if remaining_months > 0:
        parts.append(f"{remaining_months} month{'s' if remaining_months > 1 else ''}")
    if days > 0:
        parts.append(f"{days} day{'s' if days > 1 else ''}")

    return ", ".join(parts) if parts else "N/A"
