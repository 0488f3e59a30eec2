from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime, date
from decimal import Decimal
from uuid import UUID

from ledger_api.db.core import TransactionType, JournalEntryType
from ledger_api.models.common import strip_required
from ledger_api.models.currency import normalize_currency_code

# ===== JOURNAL ENTRY PYDANTIC MODELS =====

class JournalEntryCreate(BaseModel):
    """One leg of a transaction, submitted together with its header"""
    account_id: UUID = Field(..., description="Account debited or credited")
    entry_type: JournalEntryType = Field(..., description="DEBIT or CREDIT")
    amount: Decimal = Field(..., ge=0, description="Leg amount in the leg's own currency")
    currency_code: str = Field(..., description="Currency of this leg")
    exchange_rate: Optional[Decimal] = Field(None, gt=0, description="Rate applied to reach the transaction currency")
    converted_amount: Optional[Decimal] = Field(None, ge=0, description="Leg amount in the transaction currency")
    memo: Optional[str] = Field(None, description="Line memo")

    @field_validator('amount', 'converted_amount')
    @classmethod
    def validate_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return round(v, 2) if v is not None else v

    @field_validator('exchange_rate')
    @classmethod
    def validate_exchange_rate(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return round(v, 6) if v is not None else v

    @field_validator('currency_code')
    @classmethod
    def validate_currency_code(cls, v: str) -> str:
        return normalize_currency_code(v)


class JournalEntryResponse(BaseModel):
    id: UUID
    transaction_id: UUID
    account_id: UUID
    entry_type: JournalEntryType
    amount: Decimal
    currency_code: str
    exchange_rate: Optional[Decimal]
    converted_amount: Optional[Decimal]
    memo: Optional[str]
    created_at: datetime
    created_by: UUID

    class Config:
        from_attributes = True


# ===== TRANSACTION PYDANTIC MODELS =====

class TransactionCreate(BaseModel):
    transaction_date: date = Field(..., description="Date of the transaction")
    description: str = Field(..., min_length=1, description="Transaction description")
    transaction_type: TransactionType = Field(..., description="Type of transaction")
    category_id: Optional[UUID] = Field(None, description="The ID of the transaction's category")
    tag_ids: Optional[List[UUID]] = Field(None, description="IDs of tags attached to the transaction")
    amount: Decimal = Field(..., gt=0, description="Headline amount of the transaction")
    currency_code: str = Field(..., description="Currency the transaction is denominated in")
    is_reconciled: Optional[bool] = Field(None, description="Defaults to false")
    reconciliation_date: Optional[date] = None
    notes: Optional[str] = None
    source_document_url: Optional[str] = Field(None, description="Link to a receipt or statement")
    journal_entries: List[JournalEntryCreate] = Field(..., description="Debit and credit legs")

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        return round(v, 2)

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: str) -> str:
        return strip_required(v, 'Description')

    @field_validator('currency_code')
    @classmethod
    def validate_currency_code(cls, v: str) -> str:
        return normalize_currency_code(v)

    @field_validator('tag_ids')
    @classmethod
    def validate_tag_ids(cls, v: Optional[List[UUID]]) -> Optional[List[UUID]]:
        if v and len(v) != len(set(v)):
            raise ValueError('Duplicate tag IDs are not allowed')
        return v


class TransactionUpdate(BaseModel):
    """Update transaction header - all fields optional. Journal entries are immutable."""
    transaction_date: Optional[date] = None
    description: Optional[str] = Field(None, min_length=1)
    transaction_type: Optional[TransactionType] = None
    category_id: Optional[UUID] = Field(None, description="The ID of the transaction's category")
    tag_ids: Optional[List[UUID]] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    currency_code: Optional[str] = None
    is_reconciled: Optional[bool] = None
    reconciliation_date: Optional[date] = None
    notes: Optional[str] = None
    source_document_url: Optional[str] = None

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        return round(v, 2) if v is not None else v

    @field_validator('description')
    @classmethod
    def validate_description(cls, v: Optional[str]) -> Optional[str]:
        return strip_required(v, 'Description')

    @field_validator('currency_code')
    @classmethod
    def validate_currency_code(cls, v: Optional[str]) -> Optional[str]:
        return normalize_currency_code(v)

    @field_validator('tag_ids')
    @classmethod
    def validate_tag_ids(cls, v: Optional[List[UUID]]) -> Optional[List[UUID]]:
        if v and len(v) != len(set(v)):
            raise ValueError('Duplicate tag IDs are not allowed')
        return v


class TransactionFilter(BaseModel):
    """Optional filters for listing transactions"""
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    transaction_type: Optional[TransactionType] = None
    category_id: Optional[UUID] = None
    is_reconciled: Optional[bool] = None


class TransactionResponse(BaseModel):
    """Transaction data returned to client"""
    id: UUID
    tenant_id: UUID
    transaction_date: date
    description: str
    transaction_type: TransactionType
    category_id: Optional[UUID]
    tag_ids: List[UUID] = []
    amount: Decimal
    currency_code: str
    is_reconciled: bool
    reconciliation_date: Optional[date]
    notes: Optional[str]
    source_document_url: Optional[str]
    created_at: datetime
    created_by: UUID
    updated_at: datetime
    updated_by: UUID
    journal_entries: List[JournalEntryResponse] = []

    class Config:
        from_attributes = True
