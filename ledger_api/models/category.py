from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID

from ledger_api.db.core import CategoryType
from ledger_api.models.common import strip_required

# ===== CATEGORY PYDANTIC MODELS =====

class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Category name")
    description: Optional[str] = Field(None, description="Category description")
    category_type: CategoryType = Field(..., description="Kind of money movement the category groups")
    parent_category_id: Optional[UUID] = Field(None, description="The ID of the parent category, for sub-categories")

class CategoryCreate(CategoryBase):

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return strip_required(v)

class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Category name")
    description: Optional[str] = None
    category_type: Optional[CategoryType] = None
    parent_category_id: Optional[UUID] = Field(None, description="The ID of the parent category, for sub-categories")
    is_active: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return strip_required(v)

class CategoryResponse(CategoryBase):
    id: UUID
    tenant_id: UUID
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
