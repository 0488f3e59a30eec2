from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from ledger_api import config
from ledger_api.auth import get_current_user_id
from ledger_api.crud import crud_account_type
from ledger_api.models import account_type as account_type_models
from ledger_api.db.core import get_db

router = APIRouter(
    prefix="/account-types",
    tags=["account-types"],
)


@router.post("/", response_model=account_type_models.AccountTypeResponse, status_code=status.HTTP_201_CREATED)
def create_account_type(
    account_type: account_type_models.AccountTypeCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    return crud_account_type.create_db_account_type(db=db, actor_id=user_id, account_type_data=account_type)


@router.get("/", response_model=List[account_type_models.AccountTypeResponse])
def read_account_types(
    skip: int = Query(0, ge=0),
    limit: int = Query(config.DEFAULT_PAGE_LIMIT, ge=1, le=config.MAX_PAGE_LIMIT),
    db: Session = Depends(get_db)
):
    return crud_account_type.read_db_account_types(db=db, skip=skip, limit=limit)


@router.get("/{account_type_id}", response_model=account_type_models.AccountTypeResponse)
def read_account_type(account_type_id: UUID, db: Session = Depends(get_db)):
    return crud_account_type.read_db_account_type(db=db, account_type_id=account_type_id)


@router.put("/{account_type_id}", response_model=account_type_models.AccountTypeResponse)
def update_account_type(
    account_type_id: UUID,
    account_type: account_type_models.AccountTypeUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    return crud_account_type.update_db_account_type(
        db=db, actor_id=user_id, account_type_id=account_type_id, account_type_updates=account_type
    )


@router.delete("/{account_type_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account_type(
    account_type_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    crud_account_type.deactivate_db_account_type(db=db, actor_id=user_id, account_type_id=account_type_id)
