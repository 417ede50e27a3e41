# src/smithy/api/http.py
from __future__ import annotations

from fastapi import FastAPI, HTTPException, Query

from smithy.adapters.config import config
from smithy.adapters.logging_utils import get_logger, log_context
from smithy.domain.errors import CalculationError
from smithy.domain.models import CalculationResult, CalculatorInput
from smithy.domain.tax import PROVINCES, SUPPORTED_PROVINCE_CODES, resolve_marginal_rate
from smithy.services.scenario import calculate_smith_manoeuvre
from .schemas import MarginalRateResponse, ProvinceItem

logger = get_logger(__name__)

app = FastAPI(title="smithy")


@app.get("/health")
def health() -> dict:
    return {"status": "ok", "env": config.ENV}


@app.get("/provinces", response_model=list[ProvinceItem])
def list_provinces() -> list[ProvinceItem]:
    return [
        ProvinceItem(
            name=p.name,
            code=p.code,
            federal_tax_rate=float(p.federal_tax_rate),
            provincial_tax_rate=float(p.provincial_tax_rate),
        )
        for p in PROVINCES
    ]


@app.get("/marginal-rate", response_model=MarginalRateResponse)
def marginal_rate(
    province: str = Query(..., min_length=1),
    net_taxable_income: float = Query(0.0, ge=0),
) -> MarginalRateResponse:
    """
    What the form shows next to the income fields; recomputed whenever
    income or province changes.
    """
    code = province.strip().upper()
    supported = code in SUPPORTED_PROVINCE_CODES
    if not supported:
        logger.info("unknown_province_fallback", extra=log_context(province=code))
    return MarginalRateResponse(
        province=code,
        net_taxable_income=net_taxable_income,
        marginal_tax_rate=float(resolve_marginal_rate(code, net_taxable_income)),
        supported_province=supported,
    )


@app.post("/calculate", response_model=CalculationResult)
def calculate(payload: CalculatorInput) -> CalculationResult:
    try:
        return calculate_smith_manoeuvre(payload)
    except CalculationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
