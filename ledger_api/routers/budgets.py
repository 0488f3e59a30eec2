from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from ledger_api import config
from ledger_api.auth import get_current_tenant_id, get_current_user_id
from ledger_api.crud import crud_budget
from ledger_api.models import budget as budget_models
from ledger_api.db.core import get_db

router = APIRouter(
    prefix="/budgets",
    tags=["budgets"],
)


# ===== Budget line items =====

@router.get("/line-items/{item_id}", response_model=budget_models.BudgetLineItemResponse)
def read_budget_line_item(
    item_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    return crud_budget.read_db_budget_line_item(db=db, tenant_id=tenant_id, item_id=item_id)


@router.put("/line-items/{item_id}", response_model=budget_models.BudgetLineItemResponse)
def update_budget_line_item(
    item_id: UUID,
    line_item: budget_models.BudgetLineItemUpdate,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    return crud_budget.update_db_budget_line_item(
        db=db, tenant_id=tenant_id, actor_id=user_id, item_id=item_id, line_item_updates=line_item
    )


@router.delete("/line-items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget_line_item(
    item_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    crud_budget.deactivate_db_budget_line_item(db=db, tenant_id=tenant_id, actor_id=user_id, item_id=item_id)


# ===== Budgets =====

@router.post("/", response_model=budget_models.BudgetResponse, status_code=status.HTTP_201_CREATED)
def create_budget(
    budget: budget_models.BudgetCreate,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    """
    Create a new budget.
    """
    return crud_budget.create_db_budget(db=db, tenant_id=tenant_id, actor_id=user_id, budget_data=budget)


@router.get("/", response_model=List[budget_models.BudgetResponse])
def read_budgets(
    skip: int = Query(0, ge=0),
    limit: int = Query(config.DEFAULT_PAGE_LIMIT, ge=1, le=config.MAX_PAGE_LIMIT),
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    """
    Retrieve the tenant's active budgets, most recent period first.
    """
    return crud_budget.read_db_budgets(db=db, tenant_id=tenant_id, skip=skip, limit=limit)


@router.get("/{budget_id}", response_model=budget_models.BudgetResponse)
def read_budget(
    budget_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    return crud_budget.read_db_budget(db=db, tenant_id=tenant_id, budget_id=budget_id)


@router.put("/{budget_id}", response_model=budget_models.BudgetResponse)
def update_budget(
    budget_id: UUID,
    budget: budget_models.BudgetUpdate,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    return crud_budget.update_db_budget(
        db=db, tenant_id=tenant_id, actor_id=user_id, budget_id=budget_id, budget_updates=budget
    )


@router.delete("/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget(
    budget_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    crud_budget.deactivate_db_budget(db=db, tenant_id=tenant_id, actor_id=user_id, budget_id=budget_id)


@router.get("/{budget_id}/line-items", response_model=List[budget_models.BudgetLineItemResponse])
def read_budget_line_items(
    budget_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    return crud_budget.read_db_budget_line_items(db=db, tenant_id=tenant_id, budget_id=budget_id)


@router.post("/{budget_id}/line-items", response_model=budget_models.BudgetLineItemResponse, status_code=status.HTTP_201_CREATED)
def create_budget_line_item(
    budget_id: UUID,
    line_item: budget_models.BudgetLineItemCreate,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    """
    Allocate an amount to a category or account within a budget.
    """
    return crud_budget.create_db_budget_line_item(
        db=db, tenant_id=tenant_id, actor_id=user_id, budget_id=budget_id, line_item_data=line_item
    )
