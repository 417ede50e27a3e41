# src/smithy/analysis/batch.py

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

import numpy as np
import pandas as pd

from smithy.adapters.diagnostics import NullDiagnosticsSink
from smithy.domain.models import CalculatorInput
from smithy.domain.tax import PROVINCES, TaxBracketResolver, default_resolver


def marginal_rate_table(
    incomes: Sequence[float] | np.ndarray,
    provinces: Sequence[str] | None = None,
    *,
    resolver: TaxBracketResolver | None = None,
) -> pd.DataFrame:
    """
    Combined marginal rate for every (province, income) pair.

    Columns:
      - province
      - net_taxable_income
      - marginal_rate
    """
    resolver = resolver or default_resolver
    codes = list(provinces) if provinces is not None else [p.code for p in PROVINCES]
    income_arr = np.asarray(incomes, dtype=float)

    rows = [
        {
            "province": code,
            "net_taxable_income": float(income),
            "marginal_rate": float(resolver.marginal_rate(code, float(income))),
        }
        for code in codes
        for income in income_arr
    ]
    return pd.DataFrame(rows, columns=["province", "net_taxable_income", "marginal_rate"])


def run_scenarios(
    inputs: Iterable[CalculatorInput | Mapping[str, Any]],
    *,
    resolver: TaxBracketResolver | None = None,
) -> pd.DataFrame:
    """
    Evaluate many scenarios, one result row each (snake_case columns).
    Diagnostics are not emitted for batch runs.
    """
    # local import; smithy.services.scenario imports from smithy.analysis
    from smithy.services.scenario import calculate_smith_manoeuvre

    sink = NullDiagnosticsSink()
    records = [
        calculate_smith_manoeuvre(item, resolver=resolver, sink=sink).model_dump()
        for item in inputs
    ]
    return pd.DataFrame.from_records(records)
