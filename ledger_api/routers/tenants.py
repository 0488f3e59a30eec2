from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from ledger_api import config
from ledger_api.auth import get_current_user_id
from ledger_api.crud import crud_tenant
from ledger_api.models import tenant as tenant_models
from ledger_api.db.core import get_db

router = APIRouter(
    prefix="/tenants",
    tags=["tenants"],
)


@router.post("/", response_model=tenant_models.TenantResponse, status_code=status.HTTP_201_CREATED)
def create_tenant(
    tenant: tenant_models.TenantCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    return crud_tenant.create_db_tenant(db=db, actor_id=user_id, tenant_data=tenant)


@router.get("/", response_model=List[tenant_models.TenantResponse])
def read_tenants(
    skip: int = Query(0, ge=0),
    limit: int = Query(config.DEFAULT_PAGE_LIMIT, ge=1, le=config.MAX_PAGE_LIMIT),
    db: Session = Depends(get_db)
):
    return crud_tenant.read_db_tenants(db=db, skip=skip, limit=limit)


@router.get("/{tenant_id}", response_model=tenant_models.TenantResponse)
def read_tenant(tenant_id: UUID, db: Session = Depends(get_db)):
    return crud_tenant.read_db_tenant(db=db, tenant_id=tenant_id)


@router.put("/{tenant_id}", response_model=tenant_models.TenantResponse)
def update_tenant(
    tenant_id: UUID,
    tenant: tenant_models.TenantUpdate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    return crud_tenant.update_db_tenant(db=db, actor_id=user_id, tenant_id=tenant_id, tenant_updates=tenant)


@router.delete("/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tenant(
    tenant_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id)
):
    crud_tenant.deactivate_db_tenant(db=db, actor_id=user_id, tenant_id=tenant_id)
