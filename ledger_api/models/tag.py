from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID

from ledger_api.models.common import strip_required


# ===== TAG PYDANTIC MODELS =====

class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Tag name")
    description: Optional[str] = Field(None, description="What the tag is used for")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return strip_required(v)


class TagUpdate(BaseModel):
    """Update tag - all fields optional"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return strip_required(v)


class TagResponse(BaseModel):
    """Tag data returned to client"""
    id: UUID
    tenant_id: UUID
    name: str
    description: Optional[str]
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
