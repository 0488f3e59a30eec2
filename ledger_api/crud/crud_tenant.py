from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from ledger_api.db.core import TenantDB, NotFoundError, ValidationError, unit_of_work
from ledger_api.models.tenant import TenantCreate, TenantUpdate
from ledger_api.crud.ownership import EntityKind, resolve_reference
from ledger_api.crud.partial_update import build_patch, apply_update, deactivate
from ledger_api.logging_config import get_logger

logger = get_logger(__name__)


def create_db_tenant(db: Session, actor_id: UUID, tenant_data: TenantCreate) -> TenantDB:
    """Create a new tenant (organisation)"""
    existing = db.query(TenantDB).filter(TenantDB.name == tenant_data.name).first()
    if existing:
        raise ValidationError(f"Tenant with name '{tenant_data.name}' already exists")

    resolve_reference(db, EntityKind.CURRENCY, tenant_data.base_currency_code)

    db_tenant = TenantDB(
        name=tenant_data.name,
        industry=tenant_data.industry,
        base_currency_code=tenant_data.base_currency_code,
        fiscal_year_end_month=tenant_data.fiscal_year_end_month,
        created_by=actor_id,
        updated_by=actor_id,
    )
    with unit_of_work(db):
        db.add(db_tenant)

    logger.info(f"Created tenant {db_tenant.id} ({db_tenant.name})")
    return db_tenant


def read_db_tenants(db: Session, skip: int = 0, limit: int = 100) -> List[TenantDB]:
    return db.query(TenantDB).filter(
        TenantDB.is_active.is_(True)
    ).order_by(TenantDB.name).offset(skip).limit(limit).all()


def read_db_tenant(db: Session, tenant_id: UUID) -> TenantDB:
    tenant = db.query(TenantDB).filter(TenantDB.id == tenant_id, TenantDB.is_active.is_(True)).first()
    if not tenant:
        raise NotFoundError(f"Tenant with ID {tenant_id} not found")
    return tenant


def update_db_tenant(db: Session, actor_id: UUID, tenant_id: UUID, tenant_updates: TenantUpdate) -> TenantDB:
    patch = build_patch(TenantDB, tenant_updates)

    if "name" in patch:
        existing = db.query(TenantDB).filter(TenantDB.name == patch["name"], TenantDB.id != tenant_id).first()
        if existing:
            raise ValidationError(f"Tenant with name '{patch['name']}' already exists")
    if "base_currency_code" in patch:
        resolve_reference(db, EntityKind.CURRENCY, patch["base_currency_code"])

    return apply_update(db, TenantDB, tenant_id, patch, actor_id)


def deactivate_db_tenant(db: Session, actor_id: UUID, tenant_id: UUID) -> None:
    deactivate(db, TenantDB, tenant_id, actor_id)
