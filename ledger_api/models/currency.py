from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID
import re

from ledger_api.models.common import strip_required


CURRENCY_CODE_PATTERN = r'^[A-Za-z]{3}$'


def normalize_currency_code(v: Optional[str]) -> Optional[str]:
    """ISO 4217 style code: exactly three letters, stored upper-case."""
    if v is None:
        return v
    v = v.strip()
    if not re.match(CURRENCY_CODE_PATTERN, v):
        raise ValueError('Currency code must be exactly 3 letters')
    return v.upper()


# ===== CURRENCY PYDANTIC MODELS =====

class CurrencyCreate(BaseModel):
    code: str = Field(..., description="ISO 4217 currency code, e.g. USD")
    name: str = Field(..., min_length=1, max_length=100, description="Currency name")
    symbol: Optional[str] = Field(None, max_length=10, description="Display symbol, e.g. $")

    @field_validator('code')
    @classmethod
    def validate_code(cls, v: str) -> str:
        return normalize_currency_code(v)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return strip_required(v)


class CurrencyUpdate(BaseModel):
    """Update currency - all fields optional. The code itself is immutable."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    symbol: Optional[str] = Field(None, max_length=10)
    is_active: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return strip_required(v)


class CurrencyResponse(BaseModel):
    code: str
    name: str
    symbol: Optional[str]
    is_active: bool
    created_at: datetime
    created_by: UUID
    updated_at: datetime
    updated_by: UUID

    class Config:
        from_attributes = True
