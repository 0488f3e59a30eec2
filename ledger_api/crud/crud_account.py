from sqlalchemy.orm import Session
from typing import Optional, List
from uuid import UUID

from ledger_api.db.core import AccountDB, ValidationError, unit_of_work
from ledger_api.models.account import AccountCreate, AccountUpdate
from ledger_api.crud.ownership import EntityKind, get_owned, resolve_reference
from ledger_api.crud.partial_update import build_patch, apply_update, deactivate, tenant_scope
from ledger_api.logging_config import get_logger

logger = get_logger(__name__)


def _check_unique(db: Session, tenant_id: UUID, name: Optional[str], account_code: Optional[str], account_id: Optional[UUID] = None) -> None:
    """Account names and codes are unique within a tenant"""
    query = db.query(AccountDB).filter(AccountDB.tenant_id == tenant_id)
    if account_id:
        query = query.filter(AccountDB.id != account_id)

    if name and query.filter(AccountDB.name == name).first():
        raise ValidationError(f"Account name '{name}' already exists")
    if account_code and query.filter(AccountDB.account_code == account_code).first():
        raise ValidationError(f"Account code '{account_code}' already exists")


# ===== DATABASE OPERATIONS =====

def create_db_account(db: Session, tenant_id: UUID, actor_id: UUID, account_data: AccountCreate) -> AccountDB:
    """Create a new account in a tenant's chart of accounts"""
    _check_unique(db, tenant_id, account_data.name, account_data.account_code)
    resolve_reference(db, EntityKind.ACCOUNT_TYPE, account_data.account_type_id)
    resolve_reference(db, EntityKind.CURRENCY, account_data.currency_code)

    db_account = AccountDB(
        tenant_id=tenant_id,
        account_type_id=account_data.account_type_id,
        name=account_data.name,
        account_code=account_data.account_code,
        description=account_data.description,
        currency_code=account_data.currency_code,
        created_by=actor_id,
        updated_by=actor_id,
    )
    with unit_of_work(db):
        db.add(db_account)

    logger.info(f"Created account {db_account.id} for tenant {tenant_id}")
    return db_account


def read_db_accounts(db: Session, tenant_id: UUID, skip: int = 0, limit: int = 100) -> List[AccountDB]:
    """Active accounts of a tenant ordered by name"""
    return db.query(AccountDB).filter(
        AccountDB.tenant_id == tenant_id,
        AccountDB.is_active.is_(True)
    ).order_by(AccountDB.name).offset(skip).limit(limit).all()


def read_db_account(db: Session, tenant_id: UUID, account_id: UUID) -> AccountDB:
    return get_owned(db, EntityKind.ACCOUNT, account_id, tenant_id)


def update_db_account(db: Session, tenant_id: UUID, actor_id: UUID, account_id: UUID, account_updates: AccountUpdate) -> AccountDB:
    patch = build_patch(AccountDB, account_updates)

    _check_unique(db, tenant_id, patch.get("name"), patch.get("account_code"), account_id)
    if "account_type_id" in patch:
        resolve_reference(db, EntityKind.ACCOUNT_TYPE, patch["account_type_id"])
    if "currency_code" in patch:
        resolve_reference(db, EntityKind.CURRENCY, patch["currency_code"])

    return apply_update(db, AccountDB, account_id, patch, actor_id, tenant_scope(AccountDB, tenant_id))


def deactivate_db_account(db: Session, tenant_id: UUID, actor_id: UUID, account_id: UUID) -> None:
    """Soft delete. Journal entries keep pointing at the account."""
    deactivate(db, AccountDB, account_id, actor_id, tenant_scope(AccountDB, tenant_id))
