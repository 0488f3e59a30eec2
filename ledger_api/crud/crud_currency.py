from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from ledger_api.db.core import CurrencyDB, ValidationError, unit_of_work
from ledger_api.models.currency import CurrencyCreate, CurrencyUpdate
from ledger_api.crud.ownership import EntityKind, get_owned
from ledger_api.crud.partial_update import build_patch, apply_update, deactivate
from ledger_api.logging_config import get_logger

logger = get_logger(__name__)


def create_db_currency(db: Session, actor_id: UUID, currency_data: CurrencyCreate) -> CurrencyDB:
    """Register a currency. Codes are global, not per tenant."""
    existing = db.query(CurrencyDB).filter(CurrencyDB.code == currency_data.code).first()
    if existing:
        raise ValidationError(f"Currency with code '{currency_data.code}' already exists")

    existing_name = db.query(CurrencyDB).filter(CurrencyDB.name == currency_data.name).first()
    if existing_name:
        raise ValidationError(f"Currency with name '{currency_data.name}' already exists")

    db_currency = CurrencyDB(
        code=currency_data.code,
        name=currency_data.name,
        symbol=currency_data.symbol,
        created_by=actor_id,
        updated_by=actor_id,
    )
    with unit_of_work(db):
        db.add(db_currency)

    logger.info(f"Created currency {db_currency.code}")
    return db_currency


def read_db_currencies(db: Session, skip: int = 0, limit: int = 100) -> List[CurrencyDB]:
    return db.query(CurrencyDB).filter(
        CurrencyDB.is_active.is_(True)
    ).order_by(CurrencyDB.code).offset(skip).limit(limit).all()


def read_db_currency(db: Session, code: str) -> CurrencyDB:
    return get_owned(db, EntityKind.CURRENCY, code.upper())


def update_db_currency(db: Session, actor_id: UUID, code: str, currency_updates: CurrencyUpdate) -> CurrencyDB:
    patch = build_patch(CurrencyDB, currency_updates)
    if "name" in patch:
        existing = db.query(CurrencyDB).filter(CurrencyDB.name == patch["name"], CurrencyDB.code != code.upper()).first()
        if existing:
            raise ValidationError(f"Currency with name '{patch['name']}' already exists")
    return apply_update(db, CurrencyDB, code.upper(), patch, actor_id)


def deactivate_db_currency(db: Session, actor_id: UUID, code: str) -> None:
    deactivate(db, CurrencyDB, code.upper(), actor_id)
