"""Tests for budgets and their line items."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError as PydanticValidationError

from ledger_api.crud import crud_budget, crud_category
from ledger_api.db.core import BudgetType, CategoryType, FrequencyType, NotFoundError, ValidationError
from ledger_api.models.budget import BudgetCreate, BudgetUpdate, BudgetLineItemCreate, BudgetLineItemUpdate
from ledger_api.models.category import CategoryCreate


def budget_request(name="FY2026", start=date(2026, 1, 1), end=date(2026, 12, 31)):
    return BudgetCreate(name=name, start_date=start, end_date=end, budget_type=BudgetType.ANNUAL, currency_code="usd")


@pytest.fixture
def budget(db, tenant_id, actor_id):
    return crud_budget.create_db_budget(db, tenant_id, actor_id, budget_request())


@pytest.fixture
def foreign_budget(db, other_tenant_id, actor_id):
    return crud_budget.create_db_budget(db, other_tenant_id, actor_id, budget_request(name="Globex FY2026"))


@pytest.fixture
def rent_category(db, tenant_id, actor_id):
    return crud_category.create_db_category(
        db, tenant_id, actor_id, CategoryCreate(name="Rent", category_type=CategoryType.EXPENSE)
    )


class TestBudgets:

    def test_end_before_start_is_rejected_by_the_model(self):
        with pytest.raises(PydanticValidationError):
            budget_request(start=date(2026, 6, 1), end=date(2026, 5, 31))

    def test_duplicate_name(self, db, tenant_id, actor_id, budget):
        with pytest.raises(ValidationError, match="already exists"):
            crud_budget.create_db_budget(db, tenant_id, actor_id, budget_request())

    def test_update_checks_dates_against_stored_values(self, db, tenant_id, actor_id, budget):
        with pytest.raises(ValidationError, match="end date"):
            crud_budget.update_db_budget(db, tenant_id, actor_id, budget.id, BudgetUpdate(start_date=date(2027, 1, 1)))

        unchanged = crud_budget.read_db_budget(db, tenant_id, budget.id)
        assert unchanged.start_date == date(2026, 1, 1)

    def test_update_moves_both_dates(self, db, tenant_id, actor_id, budget):
        updated = crud_budget.update_db_budget(
            db, tenant_id, actor_id, budget.id,
            BudgetUpdate(start_date=date(2027, 1, 1), end_date=date(2027, 12, 31)),
        )
        assert updated.end_date == date(2027, 12, 31)

    def test_other_tenant_cannot_update(self, db, other_tenant_id, actor_id, budget):
        with pytest.raises(NotFoundError):
            crud_budget.update_db_budget(db, other_tenant_id, actor_id, budget.id, BudgetUpdate(end_date=date(2026, 6, 30)))

    def test_list_and_deactivate(self, db, tenant_id, actor_id, budget, foreign_budget):
        assert [b.id for b in crud_budget.read_db_budgets(db, tenant_id)] == [budget.id]

        crud_budget.deactivate_db_budget(db, tenant_id, actor_id, budget.id)
        assert crud_budget.read_db_budgets(db, tenant_id) == []


class TestBudgetLineItems:

    def test_create_line_item(self, db, tenant_id, actor_id, budget, rent_category):
        item = crud_budget.create_db_budget_line_item(
            db, tenant_id, actor_id, budget.id,
            BudgetLineItemCreate(category_id=rent_category.id, amount=Decimal("2500.005")),
        )
        assert item.frequency_type == FrequencyType.MONTHLY
        assert item.amount == Decimal("2500.00")
        assert [i.id for i in crud_budget.read_db_budget_line_items(db, tenant_id, budget.id)] == [item.id]

    def test_line_item_on_foreign_budget_is_not_found(self, db, tenant_id, actor_id, foreign_budget, rent_category):
        with pytest.raises(NotFoundError):
            crud_budget.create_db_budget_line_item(
                db, tenant_id, actor_id, foreign_budget.id,
                BudgetLineItemCreate(category_id=rent_category.id, amount=Decimal("10")),
            )

    def test_foreign_category_is_rejected(self, db, other_tenant_id, actor_id, foreign_budget, rent_category):
        with pytest.raises(ValidationError, match="invalid or inactive"):
            crud_budget.create_db_budget_line_item(
                db, other_tenant_id, actor_id, foreign_budget.id,
                BudgetLineItemCreate(category_id=rent_category.id, amount=Decimal("10")),
            )

    def test_foreign_account_is_rejected(self, db, tenant_id, actor_id, budget, accounts):
        with pytest.raises(ValidationError):
            crud_budget.create_db_budget_line_item(
                db, tenant_id, actor_id, budget.id,
                BudgetLineItemCreate(account_id=accounts.foreign, amount=Decimal("10")),
            )

    def test_one_line_item_per_category(self, db, tenant_id, actor_id, budget, rent_category):
        request = BudgetLineItemCreate(category_id=rent_category.id, amount=Decimal("100"))
        crud_budget.create_db_budget_line_item(db, tenant_id, actor_id, budget.id, request)
        with pytest.raises(ValidationError, match="already has a line item"):
            crud_budget.create_db_budget_line_item(db, tenant_id, actor_id, budget.id, request)

    def test_update_and_deactivate(self, db, tenant_id, actor_id, budget, rent_category):
        item = crud_budget.create_db_budget_line_item(
            db, tenant_id, actor_id, budget.id,
            BudgetLineItemCreate(category_id=rent_category.id, amount=Decimal("100")),
        )
        updated = crud_budget.update_db_budget_line_item(
            db, tenant_id, actor_id, item.id,
            BudgetLineItemUpdate(amount=Decimal("120"), frequency_type=FrequencyType.QUARTERLY),
        )
        assert updated.amount == Decimal("120")
        assert updated.frequency_type == FrequencyType.QUARTERLY

        crud_budget.deactivate_db_budget_line_item(db, tenant_id, actor_id, item.id)
        with pytest.raises(NotFoundError):
            crud_budget.read_db_budget_line_item(db, tenant_id, item.id)

    def test_other_tenant_cannot_touch_line_item(self, db, tenant_id, other_tenant_id, actor_id, budget, rent_category):
        item = crud_budget.create_db_budget_line_item(
            db, tenant_id, actor_id, budget.id,
            BudgetLineItemCreate(category_id=rent_category.id, amount=Decimal("100")),
        )
        with pytest.raises(NotFoundError):
            crud_budget.read_db_budget_line_item(db, other_tenant_id, item.id)
        with pytest.raises(NotFoundError):
            crud_budget.update_db_budget_line_item(db, other_tenant_id, actor_id, item.id, BudgetLineItemUpdate(notes="x"))
        with pytest.raises(NotFoundError):
            crud_budget.deactivate_db_budget_line_item(db, other_tenant_id, actor_id, uuid4())
