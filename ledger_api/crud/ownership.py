"""
Ownership checks for entities referenced by a request.

Two flavours of lookup exist because they fail differently:

* ``get_owned`` serves direct path lookups (``GET /accounts/{id}``). A miss is a
  ``NotFoundError``.
* ``resolve_reference`` serves ids embedded in a request body (the account of a
  journal entry, the parent of a category). A miss is a ``ValidationError`` so a
  caller cannot tell "belongs to another tenant" apart from "malformed input".

Both require the row to be active and, for tenant-scoped kinds, to belong to the
acting tenant.
"""
import enum
import re
from typing import Any, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import inspect
from sqlalchemy.orm import Query, Session

from ledger_api.db.core import (
    AccountDB,
    AccountTypeDB,
    BudgetDB,
    CategoryDB,
    CurrencyDB,
    NotFoundError,
    TagDB,
    TransactionDB,
    ValidationError,
)
from ledger_api.logging_config import get_logger

logger = get_logger(__name__)


class EntityKind(enum.Enum):
    ACCOUNT = "account"
    CATEGORY = "category"
    TAG = "tag"
    TRANSACTION = "transaction"
    BUDGET = "budget"
    CURRENCY = "currency"
    ACCOUNT_TYPE = "account_type"


ENTITY_MODELS = {
    EntityKind.ACCOUNT: AccountDB,
    EntityKind.CATEGORY: CategoryDB,
    EntityKind.TAG: TagDB,
    EntityKind.TRANSACTION: TransactionDB,
    EntityKind.BUDGET: BudgetDB,
    EntityKind.CURRENCY: CurrencyDB,
    EntityKind.ACCOUNT_TYPE: AccountTypeDB,
}


def primary_key(model_cls: type):
    """The mapped attribute holding a model's primary key (``id`` or ``code``)."""
    return getattr(model_cls, inspect(model_cls).primary_key[0].key)


def is_tenant_scoped(model_cls: type) -> bool:
    return "tenant_id" in model_cls.__table__.columns


def entity_label(model_cls: type) -> str:
    """``BudgetLineItemDB`` -> ``Budget line item``"""
    name = model_cls.__name__.removesuffix("DB")
    return re.sub(r"(?<!^)(?=[A-Z])", " ", name).capitalize()


def _owned_query(db: Session, model_cls: type, tenant_id: Optional[UUID]) -> Query:
    query = db.query(model_cls)
    if is_tenant_scoped(model_cls):
        query = query.filter(model_cls.tenant_id == tenant_id)
    if "is_active" in model_cls.__table__.columns:
        query = query.filter(model_cls.is_active.is_(True))
    return query


def get_owned(db: Session, kind: EntityKind, entity_id: Any, tenant_id: Optional[UUID] = None):
    """Fetch an active entity addressed directly by the caller, or raise NotFoundError."""
    model_cls = ENTITY_MODELS[kind]
    entity = _owned_query(db, model_cls, tenant_id).filter(primary_key(model_cls) == entity_id).first()
    if entity is None:
        label = entity_label(model_cls)
        if is_tenant_scoped(model_cls):
            raise NotFoundError(f"{label} with ID {entity_id} not found for tenant {tenant_id}")
        raise NotFoundError(f"{label} with ID {entity_id} not found")
    return entity


def resolve_reference(db: Session, kind: EntityKind, entity_id: Any, tenant_id: Optional[UUID] = None):
    """Fetch an active entity referenced from a request body, or raise ValidationError."""
    model_cls = ENTITY_MODELS[kind]
    entity = _owned_query(db, model_cls, tenant_id).filter(primary_key(model_cls) == entity_id).first()
    if entity is None:
        label = entity_label(model_cls)
        logger.warning(f"Rejected reference to {label.lower()} {entity_id} for tenant {tenant_id}")
        if is_tenant_scoped(model_cls):
            raise ValidationError(f"{label} ID {entity_id} is invalid or inactive for tenant {tenant_id}")
        raise ValidationError(f"{label} {entity_id} is invalid or inactive")
    return entity


def resolve_references(db: Session, kind: EntityKind, entity_ids: Iterable[Any], tenant_id: Optional[UUID] = None) -> List[Any]:
    """Resolve a list of references with one query; the first unknown id is reported."""
    entity_ids = list(entity_ids)
    if not entity_ids:
        return []

    model_cls = ENTITY_MODELS[kind]
    pk = primary_key(model_cls)
    found = {getattr(row, pk.key): row for row in _owned_query(db, model_cls, tenant_id).filter(pk.in_(entity_ids)).all()}

    for entity_id in entity_ids:
        if entity_id not in found:
            # Reuse the single-row path so the error message stays identical
            resolve_reference(db, kind, entity_id, tenant_id)
    return [found[entity_id] for entity_id in entity_ids]
