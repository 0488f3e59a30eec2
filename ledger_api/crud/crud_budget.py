from sqlalchemy.orm import Session
from sqlalchemy import select
from typing import List
from uuid import UUID

from ledger_api.db.core import BudgetDB, BudgetLineItemDB, NotFoundError, ValidationError, unit_of_work
from ledger_api.models.budget import BudgetCreate, BudgetUpdate, BudgetLineItemCreate, BudgetLineItemUpdate
from ledger_api.crud.ownership import EntityKind, get_owned, resolve_reference
from ledger_api.crud.partial_update import build_patch, apply_update, deactivate, tenant_scope
from ledger_api.logging_config import get_logger

logger = get_logger(__name__)


def line_item_scope(tenant_id: UUID):
    """Line items carry no tenant column; they are owned through their budget"""
    return BudgetLineItemDB.budget_id.in_(
        select(BudgetDB.id).where(BudgetDB.tenant_id == tenant_id)
    )


# ===== BUDGETS =====

def create_db_budget(db: Session, tenant_id: UUID, actor_id: UUID, budget_data: BudgetCreate) -> BudgetDB:
    """Create a new budget for a tenant"""
    existing_budget = db.query(BudgetDB).filter(
        BudgetDB.tenant_id == tenant_id,
        BudgetDB.name == budget_data.name
    ).first()
    if existing_budget:
        raise ValidationError(f"Budget with name '{budget_data.name}' already exists")

    if budget_data.end_date < budget_data.start_date:
        raise ValidationError("End date cannot be before start date")

    resolve_reference(db, EntityKind.CURRENCY, budget_data.currency_code)

    db_budget = BudgetDB(
        tenant_id=tenant_id,
        name=budget_data.name,
        start_date=budget_data.start_date,
        end_date=budget_data.end_date,
        budget_type=budget_data.budget_type,
        currency_code=budget_data.currency_code,
        description=budget_data.description,
        created_by=actor_id,
        updated_by=actor_id,
    )
    with unit_of_work(db):
        db.add(db_budget)

    logger.info(f"Created budget {db_budget.id} for tenant {tenant_id}")
    return db_budget


def read_db_budgets(db: Session, tenant_id: UUID, skip: int = 0, limit: int = 100) -> List[BudgetDB]:
    return db.query(BudgetDB).filter(
        BudgetDB.tenant_id == tenant_id,
        BudgetDB.is_active.is_(True)
    ).order_by(BudgetDB.start_date.desc(), BudgetDB.name).offset(skip).limit(limit).all()


def read_db_budget(db: Session, tenant_id: UUID, budget_id: UUID) -> BudgetDB:
    return get_owned(db, EntityKind.BUDGET, budget_id, tenant_id)


def update_db_budget(db: Session, tenant_id: UUID, actor_id: UUID, budget_id: UUID, budget_updates: BudgetUpdate) -> BudgetDB:
    """Sparse budget update. The date range is checked on the values that will be stored."""
    patch = build_patch(BudgetDB, budget_updates)

    if "name" in patch:
        existing_budget = db.query(BudgetDB).filter(
            BudgetDB.tenant_id == tenant_id,
            BudgetDB.name == patch["name"],
            BudgetDB.id != budget_id
        ).first()
        if existing_budget:
            raise ValidationError(f"Budget with name '{patch['name']}' already exists")

    if "start_date" in patch or "end_date" in patch:
        current = db.query(BudgetDB).filter(BudgetDB.id == budget_id, BudgetDB.tenant_id == tenant_id).first()
        if not current:
            raise NotFoundError(f"Budget with ID {budget_id} not found for tenant {tenant_id}")
        start_date = patch.get("start_date", current.start_date)
        end_date = patch.get("end_date", current.end_date)
        if end_date < start_date:
            raise ValidationError("Resulting end date cannot be before resulting start date")

    if "currency_code" in patch:
        resolve_reference(db, EntityKind.CURRENCY, patch["currency_code"])

    return apply_update(db, BudgetDB, budget_id, patch, actor_id, tenant_scope(BudgetDB, tenant_id))


def deactivate_db_budget(db: Session, tenant_id: UUID, actor_id: UUID, budget_id: UUID) -> None:
    deactivate(db, BudgetDB, budget_id, actor_id, tenant_scope(BudgetDB, tenant_id))


# ===== BUDGET LINE ITEMS =====

def _resolve_line_item_references(db: Session, tenant_id: UUID, category_id, account_id) -> None:
    if category_id:
        resolve_reference(db, EntityKind.CATEGORY, category_id, tenant_id)
    if account_id:
        resolve_reference(db, EntityKind.ACCOUNT, account_id, tenant_id)


def create_db_budget_line_item(
    db: Session,
    tenant_id: UUID,
    actor_id: UUID,
    budget_id: UUID,
    line_item_data: BudgetLineItemCreate
) -> BudgetLineItemDB:
    """Add an allocation to one of the tenant's active budgets"""
    get_owned(db, EntityKind.BUDGET, budget_id, tenant_id)
    _resolve_line_item_references(db, tenant_id, line_item_data.category_id, line_item_data.account_id)

    if line_item_data.category_id:
        existing_item = db.query(BudgetLineItemDB).filter(
            BudgetLineItemDB.budget_id == budget_id,
            BudgetLineItemDB.category_id == line_item_data.category_id
        ).first()
        if existing_item:
            raise ValidationError(f"Category {line_item_data.category_id} already has a line item in this budget")

    db_item = BudgetLineItemDB(
        budget_id=budget_id,
        category_id=line_item_data.category_id,
        account_id=line_item_data.account_id,
        amount=line_item_data.amount,
        frequency_type=line_item_data.frequency_type,
        notes=line_item_data.notes,
        created_by=actor_id,
        updated_by=actor_id,
    )
    with unit_of_work(db):
        db.add(db_item)

    logger.info(f"Created line item {db_item.id} in budget {budget_id}")
    return db_item


def read_db_budget_line_items(db: Session, tenant_id: UUID, budget_id: UUID) -> List[BudgetLineItemDB]:
    get_owned(db, EntityKind.BUDGET, budget_id, tenant_id)
    return db.query(BudgetLineItemDB).filter(
        BudgetLineItemDB.budget_id == budget_id,
        BudgetLineItemDB.is_active.is_(True)
    ).order_by(BudgetLineItemDB.created_at).all()


def read_db_budget_line_item(db: Session, tenant_id: UUID, item_id: UUID) -> BudgetLineItemDB:
    item = db.query(BudgetLineItemDB).filter(
        BudgetLineItemDB.id == item_id,
        BudgetLineItemDB.is_active.is_(True),
        line_item_scope(tenant_id)
    ).first()
    if not item:
        raise NotFoundError(f"Budget line item with ID {item_id} not found for tenant {tenant_id}")
    return item


def update_db_budget_line_item(
    db: Session,
    tenant_id: UUID,
    actor_id: UUID,
    item_id: UUID,
    line_item_updates: BudgetLineItemUpdate
) -> BudgetLineItemDB:
    patch = build_patch(BudgetLineItemDB, line_item_updates)
    _resolve_line_item_references(db, tenant_id, patch.get("category_id"), patch.get("account_id"))

    if "category_id" in patch:
        item = db.query(BudgetLineItemDB).filter(BudgetLineItemDB.id == item_id, line_item_scope(tenant_id)).first()
        if not item:
            raise NotFoundError(f"Budget line item with ID {item_id} not found for tenant {tenant_id}")
        clash = db.query(BudgetLineItemDB).filter(
            BudgetLineItemDB.budget_id == item.budget_id,
            BudgetLineItemDB.category_id == patch["category_id"],
            BudgetLineItemDB.id != item_id
        ).first()
        if clash:
            raise ValidationError(f"Category {patch['category_id']} already has a line item in this budget")

    return apply_update(db, BudgetLineItemDB, item_id, patch, actor_id, line_item_scope(tenant_id))


def deactivate_db_budget_line_item(db: Session, tenant_id: UUID, actor_id: UUID, item_id: UUID) -> None:
    deactivate(db, BudgetLineItemDB, item_id, actor_id, line_item_scope(tenant_id))
