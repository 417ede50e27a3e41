# src/smithy/api/schemas.py
from __future__ import annotations

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic.alias_generators import to_camel


# --------------------------------------------
# Provinces / marginal rate lookup
# --------------------------------------------

class ProvinceItem(BaseModel):
    """
    Response item for /provinces.
    Mirrors the province dropdown on the calculator form.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    code: str
    federal_tax_rate: float
    provincial_tax_rate: float


class MarginalRateResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    province: str
    net_taxable_income: float
    marginal_tax_rate: float
    supported_province: bool
