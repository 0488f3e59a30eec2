from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from ledger_api import config
from ledger_api.auth import get_current_tenant_id, get_current_user_id
from ledger_api.crud import crud_category
from ledger_api.models import category as category_models
from ledger_api.db.core import get_db

router = APIRouter(
    prefix="/categories",
    tags=["categories"],
)


@router.post("/", response_model=category_models.CategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    category: category_models.CategoryCreate,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    """
    Create a new category, optionally nested under a parent.
    """
    return crud_category.create_db_category(db=db, tenant_id=tenant_id, actor_id=user_id, category_data=category)


@router.get("/", response_model=List[category_models.CategoryResponse])
def read_categories(
    skip: int = Query(0, ge=0),
    limit: int = Query(config.DEFAULT_PAGE_LIMIT, ge=1, le=config.MAX_PAGE_LIMIT),
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    """
    Retrieve the tenant's categories.
    """
    return crud_category.read_db_categories(db=db, tenant_id=tenant_id, skip=skip, limit=limit)


@router.get("/{category_id}", response_model=category_models.CategoryResponse)
def read_category(
    category_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    return crud_category.read_db_category(db=db, tenant_id=tenant_id, category_id=category_id)


@router.put("/{category_id}", response_model=category_models.CategoryResponse)
def update_category(
    category_id: UUID,
    category: category_models.CategoryUpdate,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    return crud_category.update_db_category(
        db=db, tenant_id=tenant_id, actor_id=user_id, category_id=category_id, category_updates=category
    )


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    crud_category.deactivate_db_category(db=db, tenant_id=tenant_id, actor_id=user_id, category_id=category_id)
