from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from ledger_api.db.core import TagDB, ValidationError, unit_of_work
from ledger_api.models.tag import TagCreate, TagUpdate
from ledger_api.crud.ownership import EntityKind, get_owned
from ledger_api.crud.partial_update import build_patch, apply_update, deactivate, tenant_scope
from ledger_api.logging_config import get_logger

logger = get_logger(__name__)


def create_db_tag(db: Session, tenant_id: UUID, actor_id: UUID, tag_data: TagCreate) -> TagDB:
    """Create a new tag for a tenant"""
    existing_tag = db.query(TagDB).filter(
        TagDB.tenant_id == tenant_id,
        TagDB.name == tag_data.name
    ).first()
    if existing_tag:
        raise ValidationError(f"Tag '{tag_data.name}' already exists")

    db_tag = TagDB(
        tenant_id=tenant_id,
        name=tag_data.name,
        description=tag_data.description,
        created_by=actor_id,
        updated_by=actor_id,
    )
    with unit_of_work(db):
        db.add(db_tag)

    logger.info(f"Created tag {db_tag.id} for tenant {tenant_id}")
    return db_tag


def read_db_tags(db: Session, tenant_id: UUID, skip: int = 0, limit: int = 100) -> List[TagDB]:
    return db.query(TagDB).filter(
        TagDB.tenant_id == tenant_id,
        TagDB.is_active.is_(True)
    ).order_by(TagDB.name).offset(skip).limit(limit).all()


def read_db_tag(db: Session, tenant_id: UUID, tag_id: UUID) -> TagDB:
    return get_owned(db, EntityKind.TAG, tag_id, tenant_id)


def update_db_tag(db: Session, tenant_id: UUID, actor_id: UUID, tag_id: UUID, tag_updates: TagUpdate) -> TagDB:
    patch = build_patch(TagDB, tag_updates)
    if "name" in patch:
        existing_tag = db.query(TagDB).filter(
            TagDB.tenant_id == tenant_id,
            TagDB.name == patch["name"],
            TagDB.id != tag_id
        ).first()
        if existing_tag:
            raise ValidationError(f"Tag '{patch['name']}' already exists")
    return apply_update(db, TagDB, tag_id, patch, actor_id, tenant_scope(TagDB, tenant_id))


def deactivate_db_tag(db: Session, tenant_id: UUID, actor_id: UUID, tag_id: UUID) -> None:
    deactivate(db, TagDB, tag_id, actor_id, tenant_scope(TagDB, tenant_id))
