from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from ledger_api.db.core import AccountTypeDB, ValidationError, unit_of_work
from ledger_api.models.account_type import AccountTypeCreate, AccountTypeUpdate
from ledger_api.crud.ownership import EntityKind, get_owned
from ledger_api.crud.partial_update import build_patch, apply_update, deactivate
from ledger_api.logging_config import get_logger

logger = get_logger(__name__)


def create_db_account_type(db: Session, actor_id: UUID, account_type_data: AccountTypeCreate) -> AccountTypeDB:
    existing = db.query(AccountTypeDB).filter(AccountTypeDB.name == account_type_data.name).first()
    if existing:
        raise ValidationError(f"Account type '{account_type_data.name}' already exists")

    db_account_type = AccountTypeDB(
        name=account_type_data.name,
        normal_balance=account_type_data.normal_balance,
        created_by=actor_id,
        updated_by=actor_id,
    )
    with unit_of_work(db):
        db.add(db_account_type)

    logger.info(f"Created account type {db_account_type.name}")
    return db_account_type


def read_db_account_types(db: Session, skip: int = 0, limit: int = 100) -> List[AccountTypeDB]:
    return db.query(AccountTypeDB).filter(
        AccountTypeDB.is_active.is_(True)
    ).order_by(AccountTypeDB.name).offset(skip).limit(limit).all()


def read_db_account_type(db: Session, account_type_id: UUID) -> AccountTypeDB:
    return get_owned(db, EntityKind.ACCOUNT_TYPE, account_type_id)


def update_db_account_type(db: Session, actor_id: UUID, account_type_id: UUID, account_type_updates: AccountTypeUpdate) -> AccountTypeDB:
    patch = build_patch(AccountTypeDB, account_type_updates)
    if "name" in patch:
        existing = db.query(AccountTypeDB).filter(
            AccountTypeDB.name == patch["name"],
            AccountTypeDB.id != account_type_id
        ).first()
        if existing:
            raise ValidationError(f"Account type '{patch['name']}' already exists")
    return apply_update(db, AccountTypeDB, account_type_id, patch, actor_id)


def deactivate_db_account_type(db: Session, actor_id: UUID, account_type_id: UUID) -> None:
    deactivate(db, AccountTypeDB, account_type_id, actor_id)
