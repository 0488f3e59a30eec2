"""
Sparse updates and soft deletes shared by every crud module.

A patch is a plain ``{column: value}`` dict built from an update model. Only the
fields the client actually sent with a non-null value end up in it, so omitted
and null fields both keep their stored value. The patch is applied through one
parameterized ``UPDATE`` whose WHERE clause always carries the caller's scope.
"""
from typing import Any, Dict, Mapping, Optional
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import update
from sqlalchemy.orm import Session

from ledger_api.crud.ownership import entity_label, primary_key
from ledger_api.db.core import NotFoundError, ValidationError, unit_of_work, utc_now
from ledger_api.logging_config import get_logger

logger = get_logger(__name__)

# Managed by the server, never writable through a patch
PROTECTED_COLUMNS = {"id", "tenant_id", "created_at", "created_by", "updated_at", "updated_by"}


def tenant_scope(model_cls: type, tenant_id: UUID):
    """WHERE criterion restricting a tenant-owned table to one tenant."""
    return model_cls.tenant_id == tenant_id


def build_patch(model_cls: type, updates: BaseModel, field_map: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Turn an update model into a column patch for ``model_cls``.

    Args:
        model_cls: ORM class the patch targets
        updates: Pydantic update model as received from the client
        field_map: Renames request fields to column names (``tag_ids`` -> ``tags_json``)

    Raises:
        ValidationError: when nothing was provided or a field is not a writable column
    """
    field_map = field_map or {}
    patch = {
        field_map.get(field, field): value
        for field, value in updates.model_dump(exclude_unset=True, exclude_none=True).items()
    }
    if not patch:
        raise ValidationError("No fields provided for update")

    columns = set(model_cls.__table__.columns.keys())
    rejected = sorted(field for field in patch if field not in columns or field in PROTECTED_COLUMNS)
    if rejected:
        raise ValidationError(f"Fields cannot be updated: {', '.join(rejected)}")

    return patch


def _audit_values(model_cls: type, actor_id: Optional[UUID]) -> Dict[str, Any]:
    values = {"updated_at": utc_now()}
    if "updated_by" in model_cls.__table__.columns:
        values["updated_by"] = actor_id
    return values


def apply_update(db: Session, model_cls: type, entity_id: Any, patch: Dict[str, Any], actor_id: Optional[UUID], *scope):
    """
    Write ``patch`` to one row and return the refreshed row.

    ``scope`` holds extra WHERE criteria, normally ``tenant_scope(...)``. Foreign keys
    inside the patch must already be resolved by the caller.
    """
    values = dict(patch)
    values.update(_audit_values(model_cls, actor_id))

    stmt = (
        update(model_cls)
        .where(primary_key(model_cls) == entity_id, *scope)
        .values(**values)
        .execution_options(synchronize_session=False)
    )

    label = entity_label(model_cls)
    with unit_of_work(db):
        result = db.execute(stmt)
        if result.rowcount == 0:
            logger.warning(f"Update matched no {label.lower()} with ID {entity_id}")
            raise NotFoundError(f"{label} with ID {entity_id} not found")

    logger.info(f"Updated {label.lower()} {entity_id}: {', '.join(sorted(patch))}")
    entity = db.get(model_cls, entity_id)
    db.refresh(entity)
    return entity


def deactivate(db: Session, model_cls: type, entity_id: Any, actor_id: Optional[UUID], *scope) -> None:
    """Soft delete: flip ``is_active`` off. Deactivating an inactive row is a NotFoundError."""
    values = {"is_active": False}
    values.update(_audit_values(model_cls, actor_id))

    stmt = (
        update(model_cls)
        .where(primary_key(model_cls) == entity_id, model_cls.is_active.is_(True), *scope)
        .values(**values)
        .execution_options(synchronize_session=False)
    )

    label = entity_label(model_cls)
    with unit_of_work(db):
        result = db.execute(stmt)
        if result.rowcount == 0:
            raise NotFoundError(f"{label} with ID {entity_id} not found")

    logger.info(f"Deactivated {label.lower()} {entity_id}")
