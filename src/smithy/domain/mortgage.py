# src/smithy/domain/mortgage.py
from __future__ import annotations

from decimal import Decimal

D = Decimal

ZERO = D("0")
ONE = D("1")
INFINITY = D("Infinity")  # "never amortizes"; callers render as not applicable

Number = float | int | Decimal


def to_decimal(value: Number | None) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return D(str(value))


def monthly_rate(annual_rate_percent: Number | None) -> Decimal:
    return to_decimal(annual_rate_percent) / 100 / 12


def monthly_payment(principal: Number, annual_rate_percent: Number, years: Number) -> Decimal:
    """
    Standard fixed-rate amortization formula:
    M = P * [ r(1+r)^n / ((1+r)^n - 1) ]
    P = loan principal
    r = monthly interest rate
    n = number of payments (months)
    """
    p = to_decimal(principal)
    r = monthly_rate(annual_rate_percent)
    n = to_decimal(years) * 12

    if n <= 0:
        return ZERO

    if r == 0:
        return p / n

    growth = (ONE + r) ** n
    return p * r * growth / (growth - ONE)


def monthly_interest(balance: Number, annual_rate_percent: Number) -> Decimal:
    # single-period estimate on today's balance, not a schedule walk
    return to_decimal(balance) * monthly_rate(annual_rate_percent)


def months_to_payoff(balance: Number, payment: Number, rate_monthly: Number) -> Decimal:
    """
    n = ln(P / (P - r*B)) / ln(1 + r)

    Returns INFINITY when the payment does not cover the interest.
    """
    b = to_decimal(balance)
    p = to_decimal(payment)
    r = to_decimal(rate_monthly)

    if b <= 0:
        return ZERO
    if p <= 0 or p <= b * r:
        return INFINITY
    if r == 0:
        return b / p

    return (p / (p - r * b)).ln() / (ONE + r).ln()
