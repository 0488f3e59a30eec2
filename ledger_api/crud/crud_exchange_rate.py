from sqlalchemy.orm import Session
from sqlalchemy import desc, or_
from typing import List, Optional
from datetime import date
from uuid import UUID

from ledger_api.db.core import ExchangeRateDB, NotFoundError, ValidationError, unit_of_work
from ledger_api.models.exchange_rate import ExchangeRateCreate, ExchangeRateUpdate
from ledger_api.crud.ownership import EntityKind, resolve_references
from ledger_api.crud.partial_update import build_patch, apply_update
from ledger_api.logging_config import get_logger

logger = get_logger(__name__)


def _visible_to(tenant_id: UUID):
    """A tenant sees its own rates plus the system-wide ones"""
    return or_(ExchangeRateDB.tenant_id == tenant_id, ExchangeRateDB.tenant_id.is_(None))


def _check_unique_per_day(
    db: Session,
    owner_id: Optional[UUID],
    base_currency_code: str,
    target_currency_code: str,
    rate_date: date,
    rate_id: Optional[UUID] = None
) -> None:
    """One rate per owner, pair and day. System-wide rows (NULL owner) are matched explicitly."""
    owner_filter = ExchangeRateDB.tenant_id.is_(None) if owner_id is None else ExchangeRateDB.tenant_id == owner_id
    query = db.query(ExchangeRateDB).filter(
        owner_filter,
        ExchangeRateDB.base_currency_code == base_currency_code,
        ExchangeRateDB.target_currency_code == target_currency_code,
        ExchangeRateDB.rate_date == rate_date
    )
    if rate_id:
        query = query.filter(ExchangeRateDB.id != rate_id)
    if query.first():
        raise ValidationError(f"A {base_currency_code}/{target_currency_code} rate for {rate_date} already exists")


def create_db_exchange_rate(db: Session, tenant_id: UUID, actor_id: UUID, rate_data: ExchangeRateCreate) -> ExchangeRateDB:
    """Record a rate for the tenant, or a system-wide rate when requested"""
    resolve_references(db, EntityKind.CURRENCY, [rate_data.base_currency_code, rate_data.target_currency_code])

    owner_id = None if rate_data.system_wide else tenant_id
    _check_unique_per_day(db, owner_id, rate_data.base_currency_code, rate_data.target_currency_code, rate_data.rate_date)

    db_rate = ExchangeRateDB(
        tenant_id=owner_id,
        base_currency_code=rate_data.base_currency_code,
        target_currency_code=rate_data.target_currency_code,
        rate=rate_data.rate,
        rate_date=rate_data.rate_date,
        source=rate_data.source,
        created_by=actor_id,
        updated_by=actor_id,
    )
    with unit_of_work(db):
        db.add(db_rate)

    logger.info(f"Created exchange rate {db_rate.id} ({db_rate.base_currency_code}/{db_rate.target_currency_code})")
    return db_rate


def read_db_exchange_rates(
    db: Session,
    tenant_id: Optional[UUID],
    skip: int = 0,
    limit: int = 100
) -> List[ExchangeRateDB]:
    """Tenant-specific rates when a tenant is given, otherwise the system-wide ones"""
    query = db.query(ExchangeRateDB)
    if tenant_id is None:
        query = query.filter(ExchangeRateDB.tenant_id.is_(None))
    else:
        query = query.filter(ExchangeRateDB.tenant_id == tenant_id)

    return query.order_by(
        desc(ExchangeRateDB.rate_date),
        ExchangeRateDB.base_currency_code,
        ExchangeRateDB.target_currency_code
    ).offset(skip).limit(limit).all()


def read_db_exchange_rate(db: Session, tenant_id: UUID, rate_id: UUID) -> ExchangeRateDB:
    rate = db.query(ExchangeRateDB).filter(ExchangeRateDB.id == rate_id, _visible_to(tenant_id)).first()
    if not rate:
        raise NotFoundError(f"Exchange rate with ID {rate_id} not found")
    return rate


def read_latest_exchange_rate(db: Session, tenant_id: Optional[UUID], base_currency_code: str, target_currency_code: str) -> ExchangeRateDB:
    """
    Most recent rate for a currency pair.

    The tenant's own rates win; the system-wide rate is the fallback when the tenant
    has none for the pair.
    """
    base_currency_code = base_currency_code.strip().upper()
    target_currency_code = target_currency_code.strip().upper()

    pair = db.query(ExchangeRateDB).filter(
        ExchangeRateDB.base_currency_code == base_currency_code,
        ExchangeRateDB.target_currency_code == target_currency_code
    )
    newest_first = (desc(ExchangeRateDB.rate_date), desc(ExchangeRateDB.created_at))

    rate = None
    if tenant_id is not None:
        rate = pair.filter(ExchangeRateDB.tenant_id == tenant_id).order_by(*newest_first).first()
    if rate is None:
        rate = pair.filter(ExchangeRateDB.tenant_id.is_(None)).order_by(*newest_first).first()

    if rate is None:
        raise NotFoundError(f"No exchange rate found for {base_currency_code} to {target_currency_code}")
    return rate


def update_db_exchange_rate(db: Session, tenant_id: UUID, actor_id: UUID, rate_id: UUID, rate_updates: ExchangeRateUpdate) -> ExchangeRateDB:
    patch = build_patch(ExchangeRateDB, rate_updates)

    if "rate_date" in patch:
        current = read_db_exchange_rate(db, tenant_id, rate_id)
        _check_unique_per_day(
            db, current.tenant_id, current.base_currency_code, current.target_currency_code, patch["rate_date"], rate_id
        )

    return apply_update(db, ExchangeRateDB, rate_id, patch, actor_id, _visible_to(tenant_id))


def delete_db_exchange_rate(db: Session, tenant_id: UUID, rate_id: UUID) -> None:
    """Exchange rates are removed outright, there is no soft delete"""
    with unit_of_work(db):
        deleted = db.query(ExchangeRateDB).filter(
            ExchangeRateDB.id == rate_id,
            _visible_to(tenant_id)
        ).delete(synchronize_session=False)
        if deleted == 0:
            raise NotFoundError(f"Exchange rate with ID {rate_id} not found")

    logger.info(f"Deleted exchange rate {rate_id}")
