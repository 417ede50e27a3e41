# src/smithy/domain/tax.py
"""
Canadian marginal tax rate resolution.

Rate tables are held in an immutable ``TaxTables`` object built once at
startup (see ``build_tax_tables``) and handed to ``TaxBracketResolver``.
The resolver returns the *marginal* combined federal + provincial rate:
HELOC-interest deductions and rental income both land on top of an
existing income base, so the next-dollar rate is what matters.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

from smithy.adapters.config import config

D = Decimal

ZERO = D("0")


@dataclass(frozen=True)
class Bracket:
    threshold: Decimal  # bracket applies to income strictly above this
    rate: Decimal


@dataclass(frozen=True)
class Province:
    name: str
    code: str
    federal_tax_rate: Decimal
    provincial_tax_rate: Decimal  # flat summary rate, used when no bracket table exists


def _brackets(*pairs: tuple[str, str]) -> tuple[Bracket, ...]:
    return tuple(Bracket(threshold=D(t), rate=D(r)) for t, r in pairs)


PROVINCES: tuple[Province, ...] = (
    Province("Alberta", "AB", D("0.15"), D("0.10")),
    Province("British Columbia", "BC", D("0.15"), D("0.0506")),
    Province("Manitoba", "MB", D("0.15"), D("0.108")),
    Province("New Brunswick", "NB", D("0.15"), D("0.0968")),
    Province("Newfoundland and Labrador", "NL", D("0.15"), D("0.087")),
    Province("Nova Scotia", "NS", D("0.15"), D("0.0875")),
    Province("Ontario", "ON", D("0.15"), D("0.0505")),
    Province("Prince Edward Island", "PE", D("0.15"), D("0.098")),
    Province("Quebec", "QC", D("0.15"), D("0.1475")),
    Province("Saskatchewan", "SK", D("0.15"), D("0.105")),
    Province("Northwest Territories", "NT", D("0.15"), D("0.059")),
    Province("Nunavut", "NU", D("0.15"), D("0.04")),
    Province("Yukon", "YT", D("0.15"), D("0.064")),
)

SUPPORTED_PROVINCE_CODES: frozenset[str] = frozenset(p.code for p in PROVINCES)

FEDERAL_BRACKETS: tuple[Bracket, ...] = _brackets(
    ("0", "0.15"),
    ("55867", "0.205"),
    ("111733", "0.26"),
    ("173205", "0.29"),
    ("246752", "0.33"),
)

PROVINCIAL_BRACKETS: Mapping[str, tuple[Bracket, ...]] = MappingProxyType({
    "AB": _brackets(
        ("0", "0.10"),
        ("148600", "0.12"),
        ("177922", "0.13"),
        ("237230", "0.14"),
        ("355845", "0.15"),
    ),
    "BC": _brackets(
        ("0", "0.0506"),
        ("47937", "0.077"),
        ("95875", "0.105"),
        ("110076", "0.1229"),
        ("133664", "0.147"),
        ("181232", "0.168"),
        ("252752", "0.205"),
    ),
    "ON": _brackets(
        ("0", "0.0505"),
        ("49231", "0.0915"),
        ("98463", "0.1116"),
        ("150000", "0.1216"),
        ("220000", "0.1316"),
    ),
    "MB": _brackets(
        ("0", "0.108"),
        ("36832", "0.1275"),
        ("79625", "0.174"),
    ),
    "NB": _brackets(
        ("0", "0.0968"),
        ("47715", "0.1482"),
        ("95431", "0.1652"),
        ("176756", "0.1784"),
    ),
    "NL": _brackets(
        ("0", "0.087"),
        ("41447", "0.145"),
        ("82894", "0.158"),
        ("148027", "0.173"),
        ("207239", "0.183"),
        ("264750", "0.208"),
    ),
    "NS": _brackets(
        ("0", "0.0875"),
        ("29590", "0.1495"),
        ("59180", "0.1667"),
        ("93000", "0.175"),
        ("150000", "0.21"),
    ),
    "PE": _brackets(
        ("0", "0.098"),
        ("31984", "0.138"),
        ("63968", "0.167"),
    ),
    "QC": _brackets(
        ("0", "0.14"),
        ("49275", "0.19"),
        ("98540", "0.24"),
        ("119910", "0.2575"),
    ),
    "SK": _brackets(
        ("0", "0.105"),
        ("52057", "0.125"),
        ("148734", "0.145"),
    ),
    "NT": _brackets(
        ("0", "0.059"),
        ("48326", "0.086"),
        ("96655", "0.122"),
        ("157139", "0.1405"),
    ),
    "NU": _brackets(
        ("0", "0.04"),
        ("53359", "0.07"),
        ("106717", "0.09"),
        ("165430", "0.115"),
    ),
    "YT": _brackets(
        ("0", "0.064"),
        ("53359", "0.09"),
        ("106717", "0.109"),
        ("165430", "0.128"),
        ("500000", "0.15"),
    ),
})


@dataclass(frozen=True)
class TaxTables:
    provinces: Mapping[str, Province]
    federal_brackets: tuple[Bracket, ...]
    provincial_brackets: Mapping[str, tuple[Bracket, ...]]
    federal_basic_personal_amount: Decimal
    bc_basic_personal_amount: Decimal
    unknown_province_rate: Decimal


def build_tax_tables(
    *,
    federal_basic_personal_amount: float | Decimal = 15000,
    bc_basic_personal_amount: float | Decimal = 15000,
    unknown_province_rate: float | Decimal = D("0.25"),
    provincial_brackets: Mapping[str, tuple[Bracket, ...]] = PROVINCIAL_BRACKETS,
) -> TaxTables:
    return TaxTables(
        provinces=MappingProxyType({p.code: p for p in PROVINCES}),
        federal_brackets=FEDERAL_BRACKETS,
        provincial_brackets=MappingProxyType(dict(provincial_brackets)),
        federal_basic_personal_amount=D(str(federal_basic_personal_amount)),
        bc_basic_personal_amount=D(str(bc_basic_personal_amount)),
        unknown_province_rate=D(str(unknown_province_rate)),
    )


def _bracket_rate(brackets: tuple[Bracket, ...], income: Decimal) -> Decimal | None:
    """Rate of the highest threshold strictly below ``income``."""
    for bracket in reversed(brackets):
        if income > bracket.threshold:
            return bracket.rate
    return None


class TaxBracketResolver:
    def __init__(self, tables: TaxTables) -> None:
        self.tables = tables

    def province(self, code: str) -> Province | None:
        return self.tables.provinces.get(code)

    def federal_rate(self, adjusted_income: Decimal) -> Decimal:
        rate = _bracket_rate(self.tables.federal_brackets, adjusted_income)
        return rate if rate is not None else self.tables.federal_brackets[0].rate

    def provincial_rate(self, province: Province, net_taxable_income: Decimal, adjusted_income: Decimal) -> Decimal:
        brackets = self.tables.provincial_brackets.get(province.code)
        if not brackets:
            return province.provincial_tax_rate

        basis = adjusted_income
        if province.code == "BC":
            # BC applies its own basic personal amount to raw income
            basis = max(ZERO, net_taxable_income - self.tables.bc_basic_personal_amount)
            if basis <= 0:
                return ZERO

        rate = _bracket_rate(brackets, basis)
        return rate if rate is not None else province.provincial_tax_rate

    def marginal_rate(self, province_code: str, net_taxable_income: float | Decimal) -> Decimal:
        province = self.province(province_code)
        if province is None:
            return self.tables.unknown_province_rate

        income = D(str(net_taxable_income or 0))
        adjusted = max(ZERO, income - self.tables.federal_basic_personal_amount)
        if adjusted <= 0:
            return ZERO

        federal = self.federal_rate(adjusted)
        provincial = self.provincial_rate(province, income, adjusted)
        return federal + provincial


DEFAULT_TAX_TABLES = build_tax_tables(
    federal_basic_personal_amount=config.FEDERAL_BASIC_PERSONAL_AMOUNT,
    bc_basic_personal_amount=config.BC_BASIC_PERSONAL_AMOUNT,
    unknown_province_rate=config.UNKNOWN_PROVINCE_RATE,
)

default_resolver = TaxBracketResolver(DEFAULT_TAX_TABLES)


def get_province(code: str) -> Province | None:
    return DEFAULT_TAX_TABLES.provinces.get(code)


def resolve_marginal_rate(province: str, net_taxable_income: float | Decimal) -> Decimal:
    return default_resolver.marginal_rate(province, net_taxable_income)
