from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID

from ledger_api.models.common import strip_required
from ledger_api.models.currency import normalize_currency_code


# ===== TENANT PYDANTIC MODELS =====

class TenantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Tenant (organisation) name")
    industry: Optional[str] = Field(None, max_length=100, description="Industry the tenant operates in")
    base_currency_code: str = Field(..., description="Reporting currency of the tenant")
    fiscal_year_end_month: int = Field(..., ge=1, le=12, description="Month (1-12) the fiscal year ends in")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return strip_required(v)

    @field_validator('base_currency_code')
    @classmethod
    def validate_base_currency_code(cls, v: str) -> str:
        return normalize_currency_code(v)


class TenantUpdate(BaseModel):
    """Update tenant - all fields optional"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    industry: Optional[str] = Field(None, max_length=100)
    base_currency_code: Optional[str] = None
    fiscal_year_end_month: Optional[int] = Field(None, ge=1, le=12)
    is_active: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return strip_required(v)

    @field_validator('base_currency_code')
    @classmethod
    def validate_base_currency_code(cls, v: Optional[str]) -> Optional[str]:
        return normalize_currency_code(v)


class TenantResponse(BaseModel):
    id: UUID
    name: str
    industry: Optional[str]
    base_currency_code: str
    fiscal_year_end_month: int
    is_active: bool
    created_at: datetime
    created_by: UUID
    updated_at: datetime
    updated_by: UUID

    class Config:
        from_attributes = True
