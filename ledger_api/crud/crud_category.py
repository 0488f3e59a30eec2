from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from ledger_api import config
from ledger_api.db.core import CategoryDB, ValidationError, unit_of_work
from ledger_api.models.category import CategoryCreate, CategoryUpdate
from ledger_api.crud.ownership import EntityKind, get_owned, resolve_reference
from ledger_api.crud.partial_update import build_patch, apply_update, deactivate, tenant_scope
from ledger_api.logging_config import get_logger

logger = get_logger(__name__)


def check_parent_link(db: Session, tenant_id: UUID, parent_category_id: UUID, category_id: Optional[UUID] = None) -> None:
    """
    Validate that ``parent_category_id`` may become the parent of ``category_id``.

    Walks the ancestor chain of the proposed parent. Reaching the category itself
    would close a cycle; a chain longer than MAX_CATEGORY_DEPTH is rejected too.
    ``category_id`` is None for a category that does not exist yet.
    """
    current = resolve_reference(db, EntityKind.CATEGORY, parent_category_id, tenant_id)
    depth = 0
    while current is not None:
        if category_id is not None and current.id == category_id:
            raise ValidationError(f"Category {category_id} cannot be its own ancestor")

        depth += 1
        if depth >= config.MAX_CATEGORY_DEPTH:
            raise ValidationError(f"Category hierarchy cannot be deeper than {config.MAX_CATEGORY_DEPTH} levels")

        if current.parent_category_id is None:
            break
        current = db.query(CategoryDB).filter(
            CategoryDB.id == current.parent_category_id,
            CategoryDB.tenant_id == tenant_id
        ).first()


def create_db_category(db: Session, tenant_id: UUID, actor_id: UUID, category_data: CategoryCreate) -> CategoryDB:
    """Create a new category for a tenant"""
    name = category_data.name.strip()
    existing_category = db.query(CategoryDB).filter(
        CategoryDB.tenant_id == tenant_id,
        CategoryDB.name == name
    ).first()
    if existing_category:
        raise ValidationError(f"Category with name '{name}' already exists")

    if category_data.parent_category_id:
        check_parent_link(db, tenant_id, category_data.parent_category_id)

    db_category = CategoryDB(
        tenant_id=tenant_id,
        name=name,
        description=category_data.description,
        category_type=category_data.category_type,
        parent_category_id=category_data.parent_category_id,
        created_by=actor_id,
        updated_by=actor_id,
    )
    with unit_of_work(db):
        db.add(db_category)

    logger.info(f"Created category {db_category.id} for tenant {tenant_id}")
    return db_category


def read_db_categories(db: Session, tenant_id: UUID, skip: int = 0, limit: int = 100) -> List[CategoryDB]:
    """Read a tenant's active categories"""
    return db.query(CategoryDB).filter(
        CategoryDB.tenant_id == tenant_id,
        CategoryDB.is_active.is_(True)
    ).order_by(CategoryDB.name).offset(skip).limit(limit).all()


def read_db_category(db: Session, tenant_id: UUID, category_id: UUID) -> CategoryDB:
    """Read a single category by its ID"""
    return get_owned(db, EntityKind.CATEGORY, category_id, tenant_id)


def update_db_category(db: Session, tenant_id: UUID, actor_id: UUID, category_id: UUID, category_updates: CategoryUpdate) -> CategoryDB:
    """Update a category's details"""
    patch = build_patch(CategoryDB, category_updates)

    # Check for duplicate name if name is being updated
    if 'name' in patch:
        patch['name'] = patch['name'].strip()
        existing = db.query(CategoryDB).filter(
            CategoryDB.tenant_id == tenant_id,
            CategoryDB.name == patch['name'],
            CategoryDB.id != category_id
        ).first()
        if existing:
            raise ValidationError(f"Category with name '{patch['name']}' already exists")

    if 'parent_category_id' in patch:
        check_parent_link(db, tenant_id, patch['parent_category_id'], category_id)

    return apply_update(db, CategoryDB, category_id, patch, actor_id, tenant_scope(CategoryDB, tenant_id))


def deactivate_db_category(db: Session, tenant_id: UUID, actor_id: UUID, category_id: UUID) -> None:
    deactivate(db, CategoryDB, category_id, actor_id, tenant_scope(CategoryDB, tenant_id))
