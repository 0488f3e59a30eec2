from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from uuid import UUID
import re

from ledger_api.models.common import strip_required


EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


def _normalize_email(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not re.match(EMAIL_PATTERN, v):
        raise ValueError('Invalid email format')
    return v.lower()


# ===== USER PYDANTIC MODELS =====

class UserCreate(BaseModel):
    auth_provider_id: str = Field(..., min_length=1, max_length=255, description="Subject id at the identity provider")
    auth_provider_type: str = Field(..., min_length=1, max_length=50, description="e.g. EMAIL_PASSWORD, GOOGLE")
    email: str = Field(..., description="User's email address")
    password: Optional[str] = Field(None, min_length=8, description="Plaintext password; omitted for SSO users")
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_names(cls, v: str) -> str:
        return strip_required(v)


class UserUpdate(BaseModel):
    """Update user profile - all fields optional"""
    auth_provider_id: Optional[str] = Field(None, min_length=1, max_length=255)
    auth_provider_type: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[str] = None
    password: Optional[str] = Field(None, min_length=8)
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    is_active: Optional[bool] = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return _normalize_email(v)

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_names(cls, v: Optional[str]) -> Optional[str]:
        return strip_required(v)


class UserResponse(BaseModel):
    """User data returned to client - no sensitive info"""
    id: UUID
    auth_provider_id: str
    auth_provider_type: str
    email: str
    first_name: str
    last_name: str
    is_active: bool
    last_login_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserLogin(BaseModel):
    email: str = Field(..., description="User's email address")
    password: str = Field(..., description="User's password")

    @field_validator('email')
    @classmethod
    def validate_login_identifier(cls, v: str) -> str:
        return v.lower().strip()
