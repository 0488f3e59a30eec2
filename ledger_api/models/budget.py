from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal
from uuid import UUID
from typing_extensions import Self

from ledger_api.db.core import BudgetType, FrequencyType
from ledger_api.models.common import strip_required
from ledger_api.models.currency import normalize_currency_code

# ===== BUDGET LINE ITEM PYDANTIC MODELS =====

class BudgetLineItemCreate(BaseModel):
    category_id: Optional[UUID] = Field(None, description="Category the allocation is for")
    account_id: Optional[UUID] = Field(None, description="Account the allocation is for")
    amount: Decimal = Field(..., ge=0, description="Allocated amount")
    frequency_type: FrequencyType = Field(FrequencyType.MONTHLY, description="How often the amount recurs")
    notes: Optional[str] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        return round(v, 2)

class BudgetLineItemUpdate(BaseModel):
    category_id: Optional[UUID] = None
    account_id: Optional[UUID] = None
    amount: Optional[Decimal] = Field(None, ge=0)
    frequency_type: Optional[FrequencyType] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return round(v, 2) if v is not None else v

class BudgetLineItemResponse(BaseModel):
    id: UUID
    budget_id: UUID
    category_id: Optional[UUID]
    account_id: Optional[UUID]
    amount: Decimal
    frequency_type: FrequencyType
    notes: Optional[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

# ===== BUDGET PYDANTIC MODELS =====

class BudgetCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Budget name")
    start_date: date = Field(..., description="Budget start date")
    end_date: date = Field(..., description="Budget end date")
    budget_type: BudgetType = Field(..., description="MONTHLY, ANNUAL or CUSTOM")
    currency_code: str = Field(..., description="Currency the budget is planned in")
    description: Optional[str] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return strip_required(v)

    @field_validator('currency_code')
    @classmethod
    def validate_currency_code(cls, v: str) -> str:
        return normalize_currency_code(v)

    @model_validator(mode="after")
    def check_date_range(self) -> Self:
        if self.end_date < self.start_date:
            raise ValueError('end_date must not be before start_date')
        return self

class BudgetUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget_type: Optional[BudgetType] = None
    currency_code: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return strip_required(v)

    @field_validator('currency_code')
    @classmethod
    def validate_currency_code(cls, v: Optional[str]) -> Optional[str]:
        return normalize_currency_code(v)

class BudgetResponse(BaseModel):
    id: UUID
    tenant_id: UUID
    name: str
    start_date: date
    end_date: date
    budget_type: BudgetType
    currency_code: str
    description: Optional[str]
    is_active: bool
    created_at: datetime
    created_by: UUID
    updated_at: datetime
    updated_by: UUID

    class Config:
        from_attributes = True
