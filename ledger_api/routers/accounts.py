from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from ledger_api import config
from ledger_api.auth import get_current_tenant_id, get_current_user_id
from ledger_api.crud import crud_account
from ledger_api.models import account as account_models
from ledger_api.db.core import get_db

router = APIRouter(
    prefix="/accounts",
    tags=["accounts"],
)


@router.post("/", response_model=account_models.AccountResponse, status_code=status.HTTP_201_CREATED)
def create_account(
    account: account_models.AccountCreate,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    """
    Add an account to the tenant's chart of accounts.
    """
    return crud_account.create_db_account(db=db, tenant_id=tenant_id, actor_id=user_id, account_data=account)


@router.get("/", response_model=List[account_models.AccountResponse])
def read_accounts(
    skip: int = Query(0, ge=0),
    limit: int = Query(config.DEFAULT_PAGE_LIMIT, ge=1, le=config.MAX_PAGE_LIMIT),
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    return crud_account.read_db_accounts(db=db, tenant_id=tenant_id, skip=skip, limit=limit)


@router.get("/{account_id}", response_model=account_models.AccountResponse)
def read_account(
    account_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    return crud_account.read_db_account(db=db, tenant_id=tenant_id, account_id=account_id)


@router.put("/{account_id}", response_model=account_models.AccountResponse)
def update_account(
    account_id: UUID,
    account: account_models.AccountUpdate,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    return crud_account.update_db_account(
        db=db, tenant_id=tenant_id, actor_id=user_id, account_id=account_id, account_updates=account
    )


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(
    account_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    """
    Deactivate an account. Historical journal entries keep referencing it.
    """
    crud_account.deactivate_db_account(db=db, tenant_id=tenant_id, actor_id=user_id, account_id=account_id)
