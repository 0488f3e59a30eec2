from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID

from ledger_api.models.common import strip_required
from ledger_api.models.currency import normalize_currency_code


# ===== ACCOUNT PYDANTIC MODELS =====

class AccountCreate(BaseModel):
    account_type_id: UUID = Field(..., description="Account type (Asset, Liability, ...)")
    name: str = Field(..., min_length=1, max_length=255, description="Account name, unique per tenant")
    account_code: Optional[str] = Field(None, min_length=1, max_length=50, description="Chart-of-accounts code, e.g. 1010")
    description: Optional[str] = Field(None, description="Free-form description")
    currency_code: str = Field(..., description="Currency the account is kept in")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return strip_required(v)

    @field_validator('account_code')
    @classmethod
    def validate_account_code(cls, v: Optional[str]) -> Optional[str]:
        return strip_required(v, 'Account code')

    @field_validator('currency_code')
    @classmethod
    def validate_currency_code(cls, v: str) -> str:
        return normalize_currency_code(v)


class AccountUpdate(BaseModel):
    """Update account - all fields optional"""
    account_type_id: Optional[UUID] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    account_code: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = None
    currency_code: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return strip_required(v)

    @field_validator('currency_code')
    @classmethod
    def validate_currency_code(cls, v: Optional[str]) -> Optional[str]:
        return normalize_currency_code(v)


class AccountResponse(BaseModel):
    """Account data returned to client"""
    id: UUID
    tenant_id: UUID
    account_type_id: UUID
    name: str
    account_code: Optional[str]
    description: Optional[str]
    currency_code: str
    is_active: bool
    created_at: datetime
    created_by: UUID
    updated_at: datetime
    updated_by: UUID

    class Config:
        from_attributes = True
