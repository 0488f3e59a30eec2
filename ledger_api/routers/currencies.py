from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from ledger_api import config
from ledger_api.auth import get_current_user_id
from ledger_api.crud import crud_currency
from ledger_api.models import currency as currency_models
from ledger_api.db.core import get_db

router = APIRouter(
    prefix="/currencies",
    tags=["currencies"],
)


@router.post("/", response_model=currency_models.CurrencyResponse, status_code=status.HTTP_201_CREATED)
def create_currency(
    currency: currency_models.CurrencyCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    return crud_currency.create_db_currency(db=db, actor_id=user_id, currency_data=currency)


@router.get("/", response_model=List[currency_models.CurrencyResponse])
def read_currencies(
    skip: int = Query(0, ge=0),
    limit: int = Query(config.DEFAULT_PAGE_LIMIT, ge=1, le=config.MAX_PAGE_LIMIT),
    db: Session = Depends(get_db)
):
    return crud_currency.read_db_currencies(db=db, skip=skip, limit=limit)


@router.get("/{code}", response_model=currency_models.CurrencyResponse)
def read_currency(code: str, db: Session = Depends(get_db)):
    """
    Retrieve a currency by its ISO code (case-insensitive).
    """
    return crud_currency.read_db_currency(db=db, code=code)


@router.put("/{code}", response_model=currency_models.CurrencyResponse)
def update_currency(
    code: str,
    currency: currency_models.CurrencyUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    return crud_currency.update_db_currency(db=db, actor_id=user_id, code=code, currency_updates=currency)


@router.delete("/{code}", status_code=status.HTTP_204_NO_CONTENT)
def delete_currency(
    code: str,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    crud_currency.deactivate_db_currency(db=db, actor_id=user_id, code=code)
