from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from ledger_api import config
from ledger_api.auth import get_current_tenant_id, get_current_user_id
from ledger_api.crud import crud_exchange_rate
from ledger_api.models import exchange_rate as exchange_rate_models
from ledger_api.db.core import get_db

router = APIRouter(
    prefix="/exchange-rates",
    tags=["exchange-rates"],
)


@router.post("/", response_model=exchange_rate_models.ExchangeRateResponse, status_code=status.HTTP_201_CREATED)
def create_exchange_rate(
    rate: exchange_rate_models.ExchangeRateCreate,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    return crud_exchange_rate.create_db_exchange_rate(db=db, tenant_id=tenant_id, actor_id=user_id, rate_data=rate)


@router.get("/", response_model=List[exchange_rate_models.ExchangeRateResponse])
def read_exchange_rates(
    system_wide: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(config.DEFAULT_PAGE_LIMIT, ge=1, le=config.MAX_PAGE_LIMIT),
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    """
    List the tenant's own rates, or the system-wide rates when `system_wide` is set.
    """
    scope = None if system_wide else tenant_id
    return crud_exchange_rate.read_db_exchange_rates(db=db, tenant_id=scope, skip=skip, limit=limit)


@router.get("/latest", response_model=exchange_rate_models.ExchangeRateResponse)
def read_latest_exchange_rate(
    base: str = Query(..., min_length=3, max_length=3, description="Base currency code"),
    target: str = Query(..., min_length=3, max_length=3, description="Target currency code"),
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    """
    Most recent rate for a pair, falling back to the system-wide rate.
    """
    return crud_exchange_rate.read_latest_exchange_rate(
        db=db, tenant_id=tenant_id, base_currency_code=base, target_currency_code=target
    )


@router.get("/{rate_id}", response_model=exchange_rate_models.ExchangeRateResponse)
def read_exchange_rate(
    rate_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    return crud_exchange_rate.read_db_exchange_rate(db=db, tenant_id=tenant_id, rate_id=rate_id)


@router.put("/{rate_id}", response_model=exchange_rate_models.ExchangeRateResponse)
def update_exchange_rate(
    rate_id: UUID,
    rate: exchange_rate_models.ExchangeRateUpdate,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    return crud_exchange_rate.update_db_exchange_rate(
        db=db, tenant_id=tenant_id, actor_id=user_id, rate_id=rate_id, rate_updates=rate
    )


@router.delete("/{rate_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_exchange_rate(
    rate_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    """
    Remove a rate permanently.
    """
    crud_exchange_rate.delete_db_exchange_rate(db=db, tenant_id=tenant_id, rate_id=rate_id)
