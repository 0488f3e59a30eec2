from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from typing_extensions import Self

from ledger_api.models.currency import normalize_currency_code


# ===== EXCHANGE RATE PYDANTIC MODELS =====

class ExchangeRateCreate(BaseModel):
    base_currency_code: str = Field(..., description="Currency being converted from")
    target_currency_code: str = Field(..., description="Currency being converted to")
    rate: Decimal = Field(..., gt=0, description="Units of target per one unit of base")
    rate_date: date = Field(..., description="Day the rate applies to")
    source: Optional[str] = Field(None, max_length=100, description="Where the rate came from, e.g. API or Manual")
    system_wide: bool = Field(False, description="Store the rate for every tenant instead of the caller's tenant")

    @field_validator('base_currency_code', 'target_currency_code')
    @classmethod
    def validate_currency_code(cls, v: str) -> str:
        return normalize_currency_code(v)

    @field_validator('rate')
    @classmethod
    def validate_rate(cls, v: Decimal) -> Decimal:
        return round(v, 6)

    @model_validator(mode="after")
    def check_distinct_currencies(self) -> Self:
        if self.base_currency_code == self.target_currency_code:
            raise ValueError("base_currency_code and target_currency_code must differ")
        return self


class ExchangeRateUpdate(BaseModel):
    rate: Optional[Decimal] = Field(None, gt=0)
    rate_date: Optional[date] = None
    source: Optional[str] = Field(None, max_length=100)

    @field_validator('rate')
    @classmethod
    def validate_rate(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return round(v, 6) if v is not None else v


class ExchangeRateResponse(BaseModel):
    id: UUID
    tenant_id: Optional[UUID]
    base_currency_code: str
    target_currency_code: str
    rate: Decimal
    rate_date: date
    source: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
