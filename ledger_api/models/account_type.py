from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID

from ledger_api.db.core import AccountNormalBalance
from ledger_api.models.common import strip_required


# ===== ACCOUNT TYPE PYDANTIC MODELS =====

class AccountTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="e.g. Asset, Liability, Revenue")
    normal_balance: AccountNormalBalance = Field(..., description="Side that increases accounts of this type")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return strip_required(v)


class AccountTypeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    normal_balance: Optional[AccountNormalBalance] = None
    is_active: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return strip_required(v)


class AccountTypeResponse(BaseModel):
    id: UUID
    name: str
    normal_balance: AccountNormalBalance
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
