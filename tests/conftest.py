"""Shared pytest fixtures for ledger_api tests."""

from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ledger_api.auth import get_current_tenant_id, get_current_user_id
from ledger_api.db.core import (
    Base,
    get_db,
    UserDB,
    CurrencyDB,
    TenantDB,
    AccountTypeDB,
    AccountDB,
    AccountNormalBalance,
    JournalEntryType,
    TransactionType,
)
from ledger_api.main import app
from ledger_api.models.transaction import TransactionCreate, JournalEntryCreate


@pytest.fixture
def engine():
    """In-memory SQLite shared by every connection of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


def make_user(db, email):
    user = UserDB(
        auth_provider_id=f"test|{email}",
        auth_provider_type="EMAIL_PASSWORD",
        email=email,
        first_name="Test",
        last_name="User",
    )
    db.add(user)
    db.commit()
    return user.id


@pytest.fixture
def actor_id(db):
    """The authenticated user every write is attributed to."""
    return make_user(db, "actor@example.com")


@pytest.fixture
def other_actor_id(db):
    return make_user(db, "other.actor@example.com")


@pytest.fixture
def currencies(db, actor_id):
    for code, name, symbol in [("USD", "US Dollar", "$"), ("EUR", "Euro", "€"), ("JPY", "Japanese Yen", "¥")]:
        db.add(CurrencyDB(code=code, name=name, symbol=symbol, created_by=actor_id, updated_by=actor_id))
    db.commit()
    return ["USD", "EUR", "JPY"]


def make_tenant(db, actor_id, name):
    tenant = TenantDB(
        name=name,
        base_currency_code="USD",
        fiscal_year_end_month=12,
        created_by=actor_id,
        updated_by=actor_id,
    )
    db.add(tenant)
    db.commit()
    return tenant.id


@pytest.fixture
def tenant_id(db, actor_id, currencies):
    return make_tenant(db, actor_id, "Acme Ltd")


@pytest.fixture
def other_tenant_id(db, actor_id, currencies):
    return make_tenant(db, actor_id, "Globex Corp")


@pytest.fixture
def account_types(db, actor_id):
    types = {}
    for name, normal_balance in [
        ("Asset", AccountNormalBalance.DEBIT),
        ("Revenue", AccountNormalBalance.CREDIT),
        ("Expense", AccountNormalBalance.DEBIT),
    ]:
        account_type = AccountTypeDB(name=name, normal_balance=normal_balance, created_by=actor_id, updated_by=actor_id)
        db.add(account_type)
        db.flush()
        types[name] = account_type.id
    db.commit()
    return types


def make_account(db, actor_id, tenant_id, account_type_id, name, currency_code="USD", is_active=True):
    account = AccountDB(
        tenant_id=tenant_id,
        account_type_id=account_type_id,
        name=name,
        currency_code=currency_code,
        is_active=is_active,
        created_by=actor_id,
        updated_by=actor_id,
    )
    db.add(account)
    db.commit()
    return account.id


@pytest.fixture
def accounts(db, actor_id, tenant_id, other_tenant_id, account_types):
    """A small chart of accounts for the acting tenant plus one foreign account."""
    return SimpleNamespace(
        cash=make_account(db, actor_id, tenant_id, account_types["Asset"], "Cash"),
        euro_cash=make_account(db, actor_id, tenant_id, account_types["Asset"], "Euro Cash", currency_code="EUR"),
        revenue=make_account(db, actor_id, tenant_id, account_types["Revenue"], "Sales"),
        expense=make_account(db, actor_id, tenant_id, account_types["Expense"], "Office Supplies"),
        closed=make_account(db, actor_id, tenant_id, account_types["Asset"], "Old Savings", is_active=False),
        foreign=make_account(db, actor_id, other_tenant_id, account_types["Asset"], "Globex Cash"),
    )


def entry(account_id, entry_type, amount, currency_code="USD", **kwargs):
    return JournalEntryCreate(
        account_id=account_id,
        entry_type=entry_type,
        amount=Decimal(amount),
        currency_code=currency_code,
        **kwargs,
    )


def sale(debit_account, credit_account, amount="100.00", **kwargs):
    """A two-legged INCOME transaction request."""
    fields = dict(
        transaction_date="2026-03-15",
        description="Invoice 1001",
        transaction_type=TransactionType.INCOME,
        amount=Decimal(amount),
        currency_code="USD",
        journal_entries=[
            entry(debit_account, JournalEntryType.DEBIT, amount),
            entry(credit_account, JournalEntryType.CREDIT, amount),
        ],
    )
    fields.update(kwargs)
    return TransactionCreate(**fields)


@pytest.fixture
def client(db, actor_id, tenant_id):
    """TestClient bound to the test session and authenticated as actor/tenant."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user_id] = lambda: actor_id
    app.dependency_overrides[get_current_tenant_id] = lambda: tenant_id

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def build_entry():
    return entry


@pytest.fixture
def build_sale():
    return sale
