from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
from uuid import UUID

from ledger_api import config
from ledger_api.auth import get_current_tenant_id, get_current_user_id
from ledger_api.crud import crud_transaction
from ledger_api.models import transaction as transaction_models
from ledger_api.db.core import get_db, TransactionType

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
)


@router.post("/", response_model=transaction_models.TransactionResponse, status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction: transaction_models.TransactionCreate,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    """
    Record a transaction together with its balanced journal entries.
    """
    return crud_transaction.create_db_transaction(db=db, tenant_id=tenant_id, actor_id=user_id, transaction_data=transaction)


@router.get("/", response_model=List[transaction_models.TransactionResponse])
def read_transactions(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    transaction_type: Optional[TransactionType] = None,
    category_id: Optional[UUID] = None,
    is_reconciled: Optional[bool] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(config.DEFAULT_PAGE_LIMIT, ge=1, le=config.MAX_PAGE_LIMIT),
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    """
    Retrieve the tenant's transactions, newest first, with optional filtering.
    """
    filters = transaction_models.TransactionFilter(
        date_from=date_from,
        date_to=date_to,
        transaction_type=transaction_type,
        category_id=category_id,
        is_reconciled=is_reconciled,
    )
    return crud_transaction.read_db_transactions(db=db, tenant_id=tenant_id, filters=filters, skip=skip, limit=limit)


@router.get("/journal-entries/{entry_id}", response_model=transaction_models.JournalEntryResponse)
def read_journal_entry(
    entry_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    return crud_transaction.read_db_journal_entry(db=db, tenant_id=tenant_id, entry_id=entry_id)


@router.get("/{transaction_id}", response_model=transaction_models.TransactionResponse)
def read_transaction(
    transaction_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    return crud_transaction.read_db_transaction(db=db, tenant_id=tenant_id, transaction_id=transaction_id)


@router.get("/{transaction_id}/journal-entries", response_model=List[transaction_models.JournalEntryResponse])
def read_transaction_journal_entries(
    transaction_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    """
    List the debit and credit legs of a transaction.
    """
    return crud_transaction.read_db_journal_entries(db=db, tenant_id=tenant_id, transaction_id=transaction_id)


@router.put("/{transaction_id}", response_model=transaction_models.TransactionResponse)
def update_transaction(
    transaction_id: UUID,
    transaction: transaction_models.TransactionUpdate,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    """
    Update a transaction header. Only the fields sent are changed.
    """
    return crud_transaction.update_db_transaction(
        db=db, tenant_id=tenant_id, actor_id=user_id, transaction_id=transaction_id, transaction_updates=transaction
    )


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(
    transaction_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    """
    Delete a transaction and all of its journal entries.
    """
    crud_transaction.delete_db_transaction(db=db, tenant_id=tenant_id, transaction_id=transaction_id)
