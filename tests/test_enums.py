"""Stored enum codes that no longer decode must fail loudly."""

import pytest
from sqlalchemy import text

from ledger_api.crud import crud_transaction
from ledger_api.db.core import TransactionDB, TransactionType


@pytest.fixture
def corrupted_transaction_id(db, tenant_id, actor_id, accounts, build_sale):
    transaction = crud_transaction.create_db_transaction(db, tenant_id, actor_id, build_sale(accounts.cash, accounts.revenue))
    transaction_id = transaction.id

    db.execute(text("UPDATE transactions SET transaction_type = 'BOGUS'"))
    db.commit()
    db.expire_all()
    return transaction_id


def test_enum_values_round_trip_as_codes(db, tenant_id, actor_id, accounts, build_sale):
    transaction = crud_transaction.create_db_transaction(db, tenant_id, actor_id, build_sale(accounts.cash, accounts.revenue))

    stored = db.execute(text("SELECT transaction_type FROM transactions")).scalar_one()
    assert stored == "INCOME"
    assert transaction.transaction_type is TransactionType.INCOME


def test_unknown_stored_code_raises_lookup_error(db, corrupted_transaction_id):
    with pytest.raises(LookupError):
        db.query(TransactionDB).filter(TransactionDB.id == corrupted_transaction_id).one()


def test_unknown_stored_code_is_an_internal_error_over_http(client, corrupted_transaction_id):
    response = client.get(f"/transactions/{corrupted_transaction_id}")

    assert response.status_code == 500
    assert response.json()["kind"] == "InternalServerError"
