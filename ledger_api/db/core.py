import enum
import sqlite3
from contextlib import contextmanager
from datetime import datetime, date, timezone
from decimal import Decimal
from typing import Optional, List
from uuid import UUID, uuid4

from sqlalchemy import create_engine, event, ForeignKey, Index, UniqueConstraint, CheckConstraint, Boolean, Integer, String, Text, JSON, DECIMAL, DateTime, Date
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.types import Enum
from sqlalchemy.orm import sessionmaker, DeclarativeBase, Mapped, Session, relationship, mapped_column

from ledger_api import config


DATABASE_URL = config.DATABASE_URL


# ===== ERRORS =====

class LedgerError(Exception):
    """Base class for errors surfaced to API clients."""
    kind = "InternalServerError"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(LedgerError):
    kind = "NotFound"
    status_code = 404


class ValidationError(LedgerError, ValueError):
    kind = "Validation"
    status_code = 400


class DatabaseError(LedgerError):
    kind = "DatabaseError"
    status_code = 500


class InternalServerError(LedgerError):
    kind = "InternalServerError"
    status_code = 500


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


# ===== ENUMS =====

class AccountNormalBalance(str, enum.Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class CategoryType(str, enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"
    INVESTMENT = "INVESTMENT"
    OTHER = "OTHER"


class TransactionType(str, enum.Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"
    JOURNAL_ENTRY = "JOURNAL_ENTRY"
    OPENING_BALANCE = "OPENING_BALANCE"
    ADJUSTMENT = "ADJUSTMENT"


class JournalEntryType(str, enum.Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class BudgetType(str, enum.Enum):
    MONTHLY = "MONTHLY"
    ANNUAL = "ANNUAL"
    CUSTOM = "CUSTOM"


class FrequencyType(str, enum.Enum):
    MONTHLY = "MONTHLY"
    ANNUALLY = "ANNUALLY"
    ONCE = "ONCE"
    QUARTERLY = "QUARTERLY"


def string_enum(enum_cls: type, length: int = 50) -> Enum:
    """Persist an enum as its string code; unknown stored codes raise LookupError on load."""
    return Enum(enum_cls, native_enum=False, validate_strings=True, length=length)


class AuditMixin:
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    created_by: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_by: Mapped[UUID] = mapped_column(ForeignKey("users.id"), nullable=False)


# ===== ENTITIES =====

class UserDB(Base):
    __tablename__ = "users"

    __table_args__ = (
        UniqueConstraint("email", name="uq_user_email"),
        UniqueConstraint("auth_provider_id", name="uq_user_auth_provider_id"),
        Index("idx_users_email", "email"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)

    # Authentication
    auth_provider_id: Mapped[str] = mapped_column(String(255), nullable=False)
    auth_provider_type: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255))  # null for SSO users

    # Personal Information
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False)


class CurrencyDB(AuditMixin, Base):
    __tablename__ = "currencies"

    __table_args__ = (
        UniqueConstraint("name", name="uq_currency_name"),
    )

    code: Mapped[str] = mapped_column(String(3), primary_key=True)  # ISO 4217, e.g. "USD"
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    symbol: Mapped[Optional[str]] = mapped_column(String(10))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class TenantDB(AuditMixin, Base):
    __tablename__ = "tenants"

    __table_args__ = (
        UniqueConstraint("name", name="uq_tenant_name"),
        CheckConstraint("fiscal_year_end_month >= 1 AND fiscal_year_end_month <= 12", name="ck_tenant_fiscal_month"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    industry: Mapped[Optional[str]] = mapped_column(String(100))
    base_currency_code: Mapped[str] = mapped_column(ForeignKey("currencies.code"), nullable=False)
    fiscal_year_end_month: Mapped[int] = mapped_column(Integer, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    accounts = relationship("AccountDB", back_populates="tenant")
    categories = relationship("CategoryDB", back_populates="tenant")
    transactions = relationship("TransactionDB", back_populates="tenant")


class AccountTypeDB(AuditMixin, Base):
    __tablename__ = "account_types"

    __table_args__ = (
        UniqueConstraint("name", name="uq_account_type_name"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)  # "Asset", "Liability", "Revenue"...
    normal_balance: Mapped[AccountNormalBalance] = mapped_column(string_enum(AccountNormalBalance, 10), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class AccountDB(AuditMixin, Base):
    __tablename__ = "accounts"

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_tenant_account_name"),
        UniqueConstraint("tenant_id", "account_code", name="uq_tenant_account_code"),
        Index("idx_accounts_tenant", "tenant_id"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(ForeignKey("tenants.id"), nullable=False)
    account_type_id: Mapped[UUID] = mapped_column(ForeignKey("account_types.id"), nullable=False)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    account_code: Mapped[Optional[str]] = mapped_column(String(50))
    description: Mapped[Optional[str]] = mapped_column(Text)
    currency_code: Mapped[str] = mapped_column(ForeignKey("currencies.code"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    tenant = relationship("TenantDB", back_populates="accounts")
    account_type = relationship("AccountTypeDB")
    journal_entries = relationship("JournalEntryDB", back_populates="account")


class CategoryDB(AuditMixin, Base):
    __tablename__ = "categories"

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_tenant_category_name"),
        Index("idx_categories_tenant", "tenant_id"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(ForeignKey("tenants.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    category_type: Mapped[CategoryType] = mapped_column(string_enum(CategoryType), nullable=False)
    parent_category_id: Mapped[Optional[UUID]] = mapped_column(ForeignKey("categories.id"))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    tenant = relationship("TenantDB", back_populates="categories")

    # Relationship to self for subcategories
    parent = relationship("CategoryDB", remote_side=[id], back_populates="children")
    children = relationship("CategoryDB", back_populates="parent")


class TagDB(AuditMixin, Base):
    __tablename__ = "tags"

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_tenant_tag_name"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(ForeignKey("tenants.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class ExchangeRateDB(AuditMixin, Base):
    """Historical conversion rate. Never soft-deleted; rows are removed outright."""
    __tablename__ = "exchange_rates"

    __table_args__ = (
        UniqueConstraint("tenant_id", "base_currency_code", "target_currency_code", "rate_date", name="uq_exchange_rate_per_day"),
        CheckConstraint("rate > 0", name="ck_exchange_rate_positive"),
        Index("idx_exchange_rates_pair_date", "base_currency_code", "target_currency_code", "rate_date"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[Optional[UUID]] = mapped_column(ForeignKey("tenants.id"))  # null = system-wide
    base_currency_code: Mapped[str] = mapped_column(ForeignKey("currencies.code"), nullable=False)
    target_currency_code: Mapped[str] = mapped_column(ForeignKey("currencies.code"), nullable=False)
    rate: Mapped[Decimal] = mapped_column(DECIMAL(18, 6), nullable=False)
    rate_date: Mapped[date] = mapped_column(Date, nullable=False)
    source: Mapped[Optional[str]] = mapped_column(String(100))  # "API", "Manual"


class TransactionDB(AuditMixin, Base):
    __tablename__ = "transactions"

    __table_args__ = (
        Index("idx_transactions_tenant_date", "tenant_id", "transaction_date"),
        Index("idx_transactions_category", "category_id"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(ForeignKey("tenants.id"), nullable=False)
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    transaction_type: Mapped[TransactionType] = mapped_column(string_enum(TransactionType), nullable=False)
    category_id: Mapped[Optional[UUID]] = mapped_column(ForeignKey("categories.id"))
    tags_json: Mapped[Optional[list]] = mapped_column(JSON)  # ["<tag uuid>", ...]
    amount: Mapped[Decimal] = mapped_column(DECIMAL(18, 2), nullable=False)
    currency_code: Mapped[str] = mapped_column(ForeignKey("currencies.code"), nullable=False)

    # Reconciliation
    is_reconciled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    reconciliation_date: Mapped[Optional[date]] = mapped_column(Date)

    notes: Mapped[Optional[str]] = mapped_column(Text)
    source_document_url: Mapped[Optional[str]] = mapped_column(Text)

    tenant = relationship("TenantDB", back_populates="transactions")
    category = relationship("CategoryDB")
    journal_entries = relationship(
        "JournalEntryDB",
        back_populates="transaction",
        order_by="JournalEntryDB.created_at",
    )

    @property
    def tag_ids(self) -> List[UUID]:
        return [UUID(str(tag_id)) for tag_id in (self.tags_json or [])]


class JournalEntryDB(AuditMixin, Base):
    """One debit or credit leg of a transaction. Immutable once written."""
    __tablename__ = "journal_entries"

    __table_args__ = (
        UniqueConstraint("transaction_id", "account_id", "entry_type", name="uq_journal_entry_leg"),
        CheckConstraint("amount >= 0", name="ck_journal_entry_amount"),
        Index("idx_journal_entries_transaction", "transaction_id"),
        Index("idx_journal_entries_account", "account_id"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    transaction_id: Mapped[UUID] = mapped_column(ForeignKey("transactions.id"), nullable=False)
    account_id: Mapped[UUID] = mapped_column(ForeignKey("accounts.id"), nullable=False)
    entry_type: Mapped[JournalEntryType] = mapped_column(string_enum(JournalEntryType, 10), nullable=False)
    amount: Mapped[Decimal] = mapped_column(DECIMAL(18, 2), nullable=False)
    currency_code: Mapped[str] = mapped_column(ForeignKey("currencies.code"), nullable=False)

    # Cross-currency legs
    exchange_rate: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(18, 6))
    converted_amount: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(18, 2))

    memo: Mapped[Optional[str]] = mapped_column(Text)

    transaction = relationship("TransactionDB", back_populates="journal_entries")
    account = relationship("AccountDB", back_populates="journal_entries")


class BudgetDB(AuditMixin, Base):
    __tablename__ = "budgets"

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="uq_tenant_budget_name"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    tenant_id: Mapped[UUID] = mapped_column(ForeignKey("tenants.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    budget_type: Mapped[BudgetType] = mapped_column(string_enum(BudgetType), nullable=False)
    currency_code: Mapped[str] = mapped_column(ForeignKey("currencies.code"), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    line_items = relationship("BudgetLineItemDB", back_populates="budget")


class BudgetLineItemDB(AuditMixin, Base):
    __tablename__ = "budget_line_items"

    __table_args__ = (
        # A category can only have one line item per budget
        UniqueConstraint("budget_id", "category_id", name="uq_budget_line_item_category"),
        CheckConstraint("amount >= 0", name="ck_budget_line_item_amount"),
    )

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    budget_id: Mapped[UUID] = mapped_column(ForeignKey("budgets.id"), nullable=False)
    category_id: Mapped[Optional[UUID]] = mapped_column(ForeignKey("categories.id"))
    account_id: Mapped[Optional[UUID]] = mapped_column(ForeignKey("accounts.id"))
    amount: Mapped[Decimal] = mapped_column(DECIMAL(18, 2), nullable=False)
    frequency_type: Mapped[FrequencyType] = mapped_column(string_enum(FrequencyType), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    budget = relationship("BudgetDB", back_populates="line_items")


# ===== ENGINE & SESSIONS =====

@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores REFERENCES clauses unless asked per connection
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


engine = create_engine(DATABASE_URL, echo=config.SQL_ECHO)
session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = engine) -> None:
    """Create every table that does not exist yet."""
    Base.metadata.create_all(bind=bind)


# Dependency to get the database session
def get_db():
    database = session_local()
    try:
        yield database
    except Exception:
        database.rollback()
        raise
    finally:
        database.close()


@contextmanager
def unit_of_work(db: Session):
    """Commit everything done inside the block, or roll all of it back."""
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DatabaseError(f"Database constraint violated: {e.orig}") from e
    except Exception:
        db.rollback()
        raise
