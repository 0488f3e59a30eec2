"""Tests for the ledger write engine: atomic create, balance rules and delete."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError as PydanticValidationError

from ledger_api.crud import crud_transaction
from ledger_api.crud.crud_transaction import check_balanced
from ledger_api.db.core import (
    TagDB,
    TransactionDB,
    JournalEntryDB,
    TransactionType,
    JournalEntryType,
    NotFoundError,
    ValidationError,
)
from ledger_api.models.transaction import TransactionFilter, TransactionUpdate


def row_counts(db):
    return db.query(TransactionDB).count(), db.query(JournalEntryDB).count()


class TestCreateTransaction:
    def test_balanced_transaction_writes_header_and_entries(self, db, tenant_id, actor_id, accounts, build_sale):
        transaction = crud_transaction.create_db_transaction(
            db, tenant_id, actor_id, build_sale(accounts.cash, accounts.revenue, "250.00")
        )

        assert transaction.tenant_id == tenant_id
        assert transaction.is_reconciled is False
        assert transaction.created_by == actor_id
        assert transaction.updated_by == actor_id
        assert len(transaction.journal_entries) == 2
        assert {e.entry_type for e in transaction.journal_entries} == {JournalEntryType.DEBIT, JournalEntryType.CREDIT}
        assert all(e.transaction_id == transaction.id for e in transaction.journal_entries)
        assert all(e.amount == Decimal("250.00") for e in transaction.journal_entries)
        assert row_counts(db) == (1, 2)

    def test_unbalanced_entries_are_rejected_without_writing(self, db, tenant_id, actor_id, accounts, build_sale, build_entry):
        request = build_sale(accounts.cash, accounts.revenue, journal_entries=[
            build_entry(accounts.cash, JournalEntryType.DEBIT, "100.00"),
            build_entry(accounts.revenue, JournalEntryType.CREDIT, "90.00"),
        ])

        with pytest.raises(ValidationError, match="not balanced"):
            crud_transaction.create_db_transaction(db, tenant_id, actor_id, request)
        assert row_counts(db) == (0, 0)

    def test_single_sided_entries_are_rejected(self, db, tenant_id, actor_id, accounts, build_sale, build_entry):
        request = build_sale(accounts.cash, accounts.revenue, journal_entries=[
            build_entry(accounts.cash, JournalEntryType.DEBIT, "100.00"),
        ])

        with pytest.raises(ValidationError, match="at least one debit and one credit"):
            crud_transaction.create_db_transaction(db, tenant_id, actor_id, request)

    def test_adjustment_may_be_single_sided(self, db, tenant_id, actor_id, accounts, build_sale, build_entry):
        request = build_sale(
            accounts.cash, accounts.revenue,
            transaction_type=TransactionType.ADJUSTMENT,
            journal_entries=[build_entry(accounts.cash, JournalEntryType.DEBIT, "12.34")],
        )

        transaction = crud_transaction.create_db_transaction(db, tenant_id, actor_id, request)
        assert len(transaction.journal_entries) == 1

    def test_empty_entries_are_rejected(self, db, tenant_id, actor_id, accounts, build_sale):
        request = build_sale(accounts.cash, accounts.revenue, journal_entries=[])

        with pytest.raises(ValidationError, match="at least one journal entry"):
            crud_transaction.create_db_transaction(db, tenant_id, actor_id, request)

    def test_foreign_account_rolls_back_the_whole_transaction(self, db, tenant_id, actor_id, accounts, build_sale):
        request = build_sale(accounts.cash, accounts.foreign)

        with pytest.raises(ValidationError) as excinfo:
            crud_transaction.create_db_transaction(db, tenant_id, actor_id, request)

        assert str(accounts.foreign) in str(excinfo.value)
        assert row_counts(db) == (0, 0)

    def test_inactive_account_is_rejected(self, db, tenant_id, actor_id, accounts, build_sale):
        with pytest.raises(ValidationError, match="invalid or inactive"):
            crud_transaction.create_db_transaction(db, tenant_id, actor_id, build_sale(accounts.closed, accounts.revenue))
        assert row_counts(db) == (0, 0)

    def test_unknown_account_is_rejected(self, db, tenant_id, actor_id, accounts, build_sale):
        with pytest.raises(ValidationError):
            crud_transaction.create_db_transaction(db, tenant_id, actor_id, build_sale(uuid4(), accounts.revenue))
        assert row_counts(db) == (0, 0)

    def test_same_account_and_side_twice_is_rejected(self, db, tenant_id, actor_id, accounts, build_sale, build_entry):
        request = build_sale(accounts.cash, accounts.revenue, amount="100.00", journal_entries=[
            build_entry(accounts.cash, JournalEntryType.DEBIT, "50.00"),
            build_entry(accounts.cash, JournalEntryType.DEBIT, "50.00"),
            build_entry(accounts.revenue, JournalEntryType.CREDIT, "100.00"),
        ])

        with pytest.raises(ValidationError, match="more than once"):
            crud_transaction.create_db_transaction(db, tenant_id, actor_id, request)

    def test_cross_currency_leg_needs_converted_amount(self, db, tenant_id, actor_id, accounts, build_sale, build_entry):
        request = build_sale(accounts.euro_cash, accounts.revenue, journal_entries=[
            build_entry(accounts.euro_cash, JournalEntryType.DEBIT, "92.00", currency_code="EUR"),
            build_entry(accounts.revenue, JournalEntryType.CREDIT, "100.00"),
        ])

        with pytest.raises(ValidationError, match="converted_amount"):
            crud_transaction.create_db_transaction(db, tenant_id, actor_id, request)

    def test_cross_currency_leg_balances_on_converted_amount(self, db, tenant_id, actor_id, accounts, build_sale, build_entry):
        request = build_sale(accounts.euro_cash, accounts.revenue, journal_entries=[
            build_entry(
                accounts.euro_cash, JournalEntryType.DEBIT, "92.00", currency_code="EUR",
                exchange_rate=Decimal("1.086957"), converted_amount=Decimal("100.00"),
            ),
            build_entry(accounts.revenue, JournalEntryType.CREDIT, "100.00"),
        ])

        transaction = crud_transaction.create_db_transaction(db, tenant_id, actor_id, request)
        euro_leg = next(e for e in transaction.journal_entries if e.currency_code == "EUR")
        assert euro_leg.converted_amount == Decimal("100.00")

    def test_unknown_currency_is_rejected(self, db, tenant_id, actor_id, accounts, build_sale):
        with pytest.raises(ValidationError, match="GBP"):
            crud_transaction.create_db_transaction(
                db, tenant_id, actor_id, build_sale(accounts.cash, accounts.revenue, currency_code="GBP")
            )

    def test_tags_are_resolved_and_stored(self, db, tenant_id, actor_id, accounts, build_sale):
        tag = TagDB(tenant_id=tenant_id, name="recurring", created_by=actor_id, updated_by=actor_id)
        db.add(tag)
        db.commit()

        transaction = crud_transaction.create_db_transaction(
            db, tenant_id, actor_id, build_sale(accounts.cash, accounts.revenue, tag_ids=[tag.id])
        )
        assert transaction.tag_ids == [tag.id]

    def test_unknown_tag_is_rejected(self, db, tenant_id, actor_id, accounts, build_sale):
        missing = uuid4()
        with pytest.raises(ValidationError, match=str(missing)):
            crud_transaction.create_db_transaction(
                db, tenant_id, actor_id, build_sale(accounts.cash, accounts.revenue, tag_ids=[missing])
            )
        assert row_counts(db) == (0, 0)


class TestCheckBalanced:
    def test_accepts_equal_totals_across_many_legs(self, accounts, build_entry):
        check_balanced(TransactionType.JOURNAL_ENTRY, "USD", [
            build_entry(accounts.cash, JournalEntryType.DEBIT, "60.00"),
            build_entry(accounts.expense, JournalEntryType.DEBIT, "40.00"),
            build_entry(accounts.revenue, JournalEntryType.CREDIT, "100.00"),
        ])

    def test_rejects_off_by_a_cent(self, accounts, build_entry):
        with pytest.raises(ValidationError):
            check_balanced(TransactionType.EXPENSE, "USD", [
                build_entry(accounts.expense, JournalEntryType.DEBIT, "10.01"),
                build_entry(accounts.cash, JournalEntryType.CREDIT, "10.00"),
            ])


class TestReadTransactions:
    def test_other_tenant_cannot_read(self, db, tenant_id, other_tenant_id, actor_id, accounts, build_sale):
        transaction = crud_transaction.create_db_transaction(
            db, tenant_id, actor_id, build_sale(accounts.cash, accounts.revenue)
        )

        with pytest.raises(NotFoundError):
            crud_transaction.read_db_transaction(db, other_tenant_id, transaction.id)
        assert crud_transaction.read_db_transactions(db, other_tenant_id) == []

    def test_list_is_newest_first_and_filterable(self, db, tenant_id, actor_id, accounts, build_sale):
        older = crud_transaction.create_db_transaction(
            db, tenant_id, actor_id, build_sale(accounts.cash, accounts.revenue, transaction_date=date(2026, 1, 5))
        )
        newer = crud_transaction.create_db_transaction(
            db, tenant_id, actor_id, build_sale(
                accounts.expense, accounts.cash,
                transaction_date=date(2026, 2, 5),
                transaction_type=TransactionType.EXPENSE,
                is_reconciled=True,
            )
        )

        listed = crud_transaction.read_db_transactions(db, tenant_id)
        assert [t.id for t in listed] == [newer.id, older.id]

        expenses = crud_transaction.read_db_transactions(
            db, tenant_id, TransactionFilter(transaction_type=TransactionType.EXPENSE)
        )
        assert [t.id for t in expenses] == [newer.id]

        january = crud_transaction.read_db_transactions(
            db, tenant_id, TransactionFilter(date_from=date(2026, 1, 1), date_to=date(2026, 1, 31))
        )
        assert [t.id for t in january] == [older.id]

        unreconciled = crud_transaction.read_db_transactions(db, tenant_id, TransactionFilter(is_reconciled=False))
        assert [t.id for t in unreconciled] == [older.id]

    def test_skip_and_limit(self, db, tenant_id, actor_id, accounts, build_sale):
        for day in range(1, 4):
            crud_transaction.create_db_transaction(
                db, tenant_id, actor_id, build_sale(accounts.cash, accounts.revenue, transaction_date=date(2026, 1, day))
            )

        page = crud_transaction.read_db_transactions(db, tenant_id, skip=1, limit=1)
        assert [t.transaction_date for t in page] == [date(2026, 1, 2)]


class TestUpdateTransaction:
    def test_sparse_update_keeps_other_fields(self, db, tenant_id, actor_id, other_actor_id, accounts, build_sale):
        transaction = crud_transaction.create_db_transaction(
            db, tenant_id, actor_id, build_sale(accounts.cash, accounts.revenue, notes="first draft")
        )

        updated = crud_transaction.update_db_transaction(
            db, tenant_id, other_actor_id, transaction.id, TransactionUpdate(is_reconciled=True, notes=None)
        )

        assert updated.is_reconciled is True
        assert updated.notes == "first draft"
        assert updated.description == "Invoice 1001"
        assert updated.updated_by == other_actor_id
        assert updated.created_by == actor_id
        assert len(updated.journal_entries) == 2

    def test_currency_change_must_keep_entries_balanced(self, db, tenant_id, actor_id, accounts, build_sale):
        transaction = crud_transaction.create_db_transaction(
            db, tenant_id, actor_id, build_sale(accounts.cash, accounts.revenue)
        )

        with pytest.raises(ValidationError, match="converted_amount"):
            crud_transaction.update_db_transaction(
                db, tenant_id, actor_id, transaction.id, TransactionUpdate(currency_code="EUR")
            )

    def test_other_tenant_cannot_update(self, db, tenant_id, other_tenant_id, actor_id, accounts, build_sale):
        transaction = crud_transaction.create_db_transaction(
            db, tenant_id, actor_id, build_sale(accounts.cash, accounts.revenue)
        )

        with pytest.raises(NotFoundError):
            crud_transaction.update_db_transaction(
                db, other_tenant_id, actor_id, transaction.id, TransactionUpdate(description="hijacked")
            )
        db.expire_all()
        assert crud_transaction.read_db_transaction(db, tenant_id, transaction.id).description == "Invoice 1001"

    def test_blank_description_is_rejected(self):
        with pytest.raises(PydanticValidationError, match="Description cannot be blank"):
            TransactionUpdate(description="   ")

    def test_description_is_trimmed_on_update(self, db, tenant_id, actor_id, accounts, build_sale):
        transaction = crud_transaction.create_db_transaction(
            db, tenant_id, actor_id, build_sale(accounts.cash, accounts.revenue)
        )

        updated = crud_transaction.update_db_transaction(
            db, tenant_id, actor_id, transaction.id, TransactionUpdate(description="  Invoice 1001 (revised) ")
        )
        assert updated.description == "Invoice 1001 (revised)"

    def test_empty_update_is_rejected(self, db, tenant_id, actor_id, accounts, build_sale):
        transaction = crud_transaction.create_db_transaction(
            db, tenant_id, actor_id, build_sale(accounts.cash, accounts.revenue)
        )

        with pytest.raises(ValidationError, match="No fields provided for update"):
            crud_transaction.update_db_transaction(db, tenant_id, actor_id, transaction.id, TransactionUpdate())


class TestDeleteTransaction:
    def test_delete_removes_entries(self, db, tenant_id, actor_id, accounts, build_sale):
        transaction = crud_transaction.create_db_transaction(
            db, tenant_id, actor_id, build_sale(accounts.cash, accounts.revenue)
        )
        transaction_id = transaction.id

        crud_transaction.delete_db_transaction(db, tenant_id, transaction_id)

        assert row_counts(db) == (0, 0)
        with pytest.raises(NotFoundError):
            crud_transaction.delete_db_transaction(db, tenant_id, transaction_id)

    def test_other_tenant_cannot_delete(self, db, tenant_id, other_tenant_id, actor_id, accounts, build_sale):
        transaction = crud_transaction.create_db_transaction(
            db, tenant_id, actor_id, build_sale(accounts.cash, accounts.revenue)
        )

        with pytest.raises(NotFoundError):
            crud_transaction.delete_db_transaction(db, other_tenant_id, transaction.id)
        assert row_counts(db) == (1, 2)
