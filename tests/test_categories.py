"""Tests for category hierarchies."""

import pytest

from ledger_api import config
from ledger_api.crud import crud_category
from ledger_api.db.core import CategoryType, NotFoundError, ValidationError
from ledger_api.models.category import CategoryCreate, CategoryUpdate


@pytest.fixture
def create_category(db, tenant_id, actor_id):
    def _create(name, parent_category_id=None, tenant=None):
        return crud_category.create_db_category(
            db, tenant or tenant_id, actor_id,
            CategoryCreate(name=name, category_type=CategoryType.EXPENSE, parent_category_id=parent_category_id),
        )
    return _create


def test_create_nested_category(create_category):
    parent = create_category("Housing")
    child = create_category("Rent", parent.id)

    assert child.parent_category_id == parent.id
    assert child.parent.name == "Housing"


def test_duplicate_name_in_same_tenant_is_rejected(create_category):
    create_category("Travel")
    with pytest.raises(ValidationError, match="already exists"):
        create_category("Travel")


def test_same_name_in_another_tenant_is_allowed(create_category, other_tenant_id):
    create_category("Travel")
    other = create_category("Travel", tenant=other_tenant_id)
    assert other.tenant_id == other_tenant_id


def test_parent_from_another_tenant_is_rejected(create_category, other_tenant_id):
    foreign_parent = create_category("Globex Expenses", tenant=other_tenant_id)
    with pytest.raises(ValidationError, match="invalid or inactive"):
        create_category("Rent", foreign_parent.id)


def test_category_cannot_be_its_own_parent(db, tenant_id, actor_id, create_category):
    category = create_category("Utilities")
    with pytest.raises(ValidationError, match="own ancestor"):
        crud_category.update_db_category(
            db, tenant_id, actor_id, category.id, CategoryUpdate(parent_category_id=category.id)
        )


def test_reparenting_under_a_descendant_is_rejected(db, tenant_id, actor_id, create_category):
    grandparent = create_category("Operations")
    parent = create_category("Facilities", grandparent.id)
    child = create_category("Cleaning", parent.id)

    with pytest.raises(ValidationError, match="own ancestor"):
        crud_category.update_db_category(
            db, tenant_id, actor_id, grandparent.id, CategoryUpdate(parent_category_id=child.id)
        )


def test_hierarchy_depth_is_limited(create_category, monkeypatch):
    monkeypatch.setattr(config, "MAX_CATEGORY_DEPTH", 3)
    level1 = create_category("Level 1")
    level2 = create_category("Level 2", level1.id)
    level3 = create_category("Level 3", level2.id)

    with pytest.raises(ValidationError, match="deeper than 3"):
        create_category("Level 4", level3.id)


def test_valid_reparent(db, tenant_id, actor_id, create_category):
    food = create_category("Food")
    dining = create_category("Dining Out")

    updated = crud_category.update_db_category(
        db, tenant_id, actor_id, dining.id, CategoryUpdate(parent_category_id=food.id)
    )
    assert updated.parent_category_id == food.id


def test_deactivated_category_disappears(db, tenant_id, actor_id, create_category):
    category = create_category("Misc")
    crud_category.deactivate_db_category(db, tenant_id, actor_id, category.id)

    assert crud_category.read_db_categories(db, tenant_id) == []
    with pytest.raises(NotFoundError):
        crud_category.read_db_category(db, tenant_id, category.id)
    with pytest.raises(NotFoundError):
        crud_category.deactivate_db_category(db, tenant_id, actor_id, category.id)
