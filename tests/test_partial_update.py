"""Tests for sparse patches, scoped updates and soft deletes."""

from uuid import uuid4

import pytest

from ledger_api.crud.partial_update import apply_update, build_patch, deactivate, tenant_scope
from ledger_api.db.core import AccountDB, CurrencyDB, TransactionDB, NotFoundError, ValidationError
from ledger_api.models.account import AccountUpdate
from ledger_api.models.transaction import TransactionUpdate


class TestBuildPatch:
    def test_only_sent_non_null_fields_are_kept(self):
        patch = build_patch(AccountDB, AccountUpdate(name="Petty Cash", description=None))
        assert patch == {"name": "Petty Cash"}

    def test_nothing_sent_is_rejected(self):
        with pytest.raises(ValidationError, match="No fields provided for update"):
            build_patch(AccountDB, AccountUpdate())

    def test_only_nulls_sent_is_rejected(self):
        with pytest.raises(ValidationError, match="No fields provided for update"):
            build_patch(AccountDB, AccountUpdate(name=None, description=None))

    def test_fields_without_a_column_are_rejected(self):
        with pytest.raises(ValidationError, match="tag_ids"):
            build_patch(TransactionDB, TransactionUpdate(tag_ids=[]))

    def test_field_map_renames_to_columns(self):
        patch = build_patch(TransactionDB, TransactionUpdate(tag_ids=[]), field_map={"tag_ids": "tags_json"})
        assert patch == {"tags_json": []}


class TestApplyUpdate:
    def test_update_stamps_audit_fields(self, db, tenant_id, actor_id, other_actor_id, accounts):
        before = db.get(AccountDB, accounts.cash).updated_at

        account = apply_update(
            db, AccountDB, accounts.cash, {"description": "Till float"}, other_actor_id,
            tenant_scope(AccountDB, tenant_id),
        )

        assert account.description == "Till float"
        assert account.name == "Cash"
        assert account.updated_by == other_actor_id
        assert account.created_by == actor_id
        assert account.updated_at >= before

    def test_out_of_scope_row_is_not_found_and_unchanged(self, db, tenant_id, actor_id, accounts):
        with pytest.raises(NotFoundError):
            apply_update(
                db, AccountDB, accounts.foreign, {"name": "Mine now"}, actor_id,
                tenant_scope(AccountDB, tenant_id),
            )

        db.expire_all()
        assert db.get(AccountDB, accounts.foreign).name == "Globex Cash"

    def test_global_table_needs_no_scope(self, db, actor_id, currencies):
        currency = apply_update(db, CurrencyDB, "EUR", {"symbol": "EUR"}, actor_id)
        assert currency.symbol == "EUR"


class TestDeactivate:
    def test_deactivate_stamps_audit_fields_only(self, db, tenant_id, actor_id, other_actor_id, accounts):
        before = db.get(AccountDB, accounts.expense)
        snapshot = (before.name, before.account_code, before.currency_code, before.account_type_id, before.updated_at)

        deactivate(db, AccountDB, accounts.expense, other_actor_id, tenant_scope(AccountDB, tenant_id))

        db.expire_all()
        account = db.get(AccountDB, accounts.expense)
        assert account.is_active is False
        assert account.updated_by == other_actor_id
        assert account.updated_at > snapshot[4]
        assert account.created_by == actor_id
        assert (account.name, account.account_code, account.currency_code, account.account_type_id) == snapshot[:4]

    def test_unknown_id_is_not_found(self, db, tenant_id, actor_id, accounts):
        with pytest.raises(NotFoundError, match="Account with ID"):
            deactivate(db, AccountDB, uuid4(), actor_id, tenant_scope(AccountDB, tenant_id))

    def test_deactivate_then_again_is_not_found(self, db, tenant_id, actor_id, accounts):
        deactivate(db, AccountDB, accounts.expense, actor_id, tenant_scope(AccountDB, tenant_id))

        db.expire_all()
        assert db.get(AccountDB, accounts.expense).is_active is False

        with pytest.raises(NotFoundError):
            deactivate(db, AccountDB, accounts.expense, actor_id, tenant_scope(AccountDB, tenant_id))

    def test_other_tenant_cannot_deactivate(self, db, tenant_id, actor_id, accounts):
        with pytest.raises(NotFoundError):
            deactivate(db, AccountDB, accounts.foreign, actor_id, tenant_scope(AccountDB, tenant_id))
