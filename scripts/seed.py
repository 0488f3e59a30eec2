import sys
import os
import random
from sqlalchemy.orm import Session
from datetime import date, timedelta
from decimal import Decimal
from faker import Faker

# Add the project root to the Python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from ledger_api.db.core import (
    session_local,
    init_db,
    UserDB,
    AccountNormalBalance,
    CategoryType,
    TransactionType,
    JournalEntryType,
    BudgetType,
    FrequencyType,
)
from ledger_api.crud import (
    crud_user,
    crud_currency,
    crud_tenant,
    crud_account_type,
    crud_account,
    crud_category,
    crud_tag,
    crud_exchange_rate,
    crud_transaction,
    crud_budget,
)
from ledger_api.models.user import UserCreate
from ledger_api.models.currency import CurrencyCreate
from ledger_api.models.tenant import TenantCreate
from ledger_api.models.account_type import AccountTypeCreate
from ledger_api.models.account import AccountCreate
from ledger_api.models.category import CategoryCreate
from ledger_api.models.tag import TagCreate
from ledger_api.models.exchange_rate import ExchangeRateCreate
from ledger_api.models.transaction import TransactionCreate, JournalEntryCreate
from ledger_api.models.budget import BudgetCreate, BudgetLineItemCreate
from ledger_api.logging_config import setup_logging

fake = Faker()

CURRENCIES = [("USD", "US Dollar", "$"), ("EUR", "Euro", "€"), ("GBP", "British Pound", "£")]

ACCOUNT_TYPES = [
    ("Asset", AccountNormalBalance.DEBIT),
    ("Liability", AccountNormalBalance.CREDIT),
    ("Equity", AccountNormalBalance.CREDIT),
    ("Revenue", AccountNormalBalance.CREDIT),
    ("Expense", AccountNormalBalance.DEBIT),
]

# name, code, account type
CHART_OF_ACCOUNTS = [
    ("Cash", "1000", "Asset"),
    ("Checking", "1010", "Asset"),
    ("Accounts Receivable", "1200", "Asset"),
    ("Credit Card", "2100", "Liability"),
    ("Owner's Equity", "3000", "Equity"),
    ("Sales Revenue", "4000", "Revenue"),
    ("Rent Expense", "5100", "Expense"),
    ("Office Supplies", "5200", "Expense"),
    ("Software Subscriptions", "5300", "Expense"),
]

CATEGORIES_STRUCTURE = {
    ("Income", CategoryType.INCOME): ["Product Sales", "Consulting"],
    ("Operating Expenses", CategoryType.EXPENSE): ["Rent", "Supplies", "Software"],
    ("Transfers", CategoryType.TRANSFER): [],
}


def _money(low: int, high: int) -> Decimal:
    return Decimal(random.randint(low * 100, high * 100)) / Decimal(100)


def seed_database():
    """
    Fills the database with one demo tenant, its chart of accounts and a few
    months of balanced transactions. Everything goes through the crud layer.
    """
    setup_logging()
    init_db()
    db: Session = session_local()

    try:
        # Check if data exists to prevent duplicate seeding
        if db.query(UserDB).count() > 0:
            print("Database appears to be already seeded. Exiting.")
            return

        print("Seeding database with sample ledger data...")

        # 1. Actor
        admin = crud_user.create_db_user(db, UserCreate(
            auth_provider_id=f"email|{fake.uuid4()}",
            auth_provider_type="EMAIL_PASSWORD",
            email="admin@example.com",
            password="Password123",
            first_name=fake.first_name(),
            last_name=fake.last_name(),
        ))
        actor_id = admin.id

        # 2. Reference data
        print("Creating currencies and account types...")
        for code, name, symbol in CURRENCIES:
            crud_currency.create_db_currency(db, actor_id, CurrencyCreate(code=code, name=name, symbol=symbol))

        account_types = {}
        for name, normal_balance in ACCOUNT_TYPES:
            account_type = crud_account_type.create_db_account_type(
                db, actor_id, AccountTypeCreate(name=name, normal_balance=normal_balance)
            )
            account_types[name] = account_type.id

        # 3. Tenant and chart of accounts
        tenant = crud_tenant.create_db_tenant(db, actor_id, TenantCreate(
            name=fake.company(),
            industry=random.choice(["Retail", "Consulting", "Software"]),
            base_currency_code="USD",
            fiscal_year_end_month=12,
        ))
        tenant_id = tenant.id
        print(f"Created tenant {tenant.name}")

        accounts = {}
        for name, code, type_name in CHART_OF_ACCOUNTS:
            account = crud_account.create_db_account(db, tenant_id, actor_id, AccountCreate(
                account_type_id=account_types[type_name],
                name=name,
                account_code=code,
                currency_code="USD",
            ))
            accounts[name] = account.id

        print("Creating categories and tags...")
        categories = {}
        for (parent_name, category_type), children in CATEGORIES_STRUCTURE.items():
            parent = crud_category.create_db_category(db, tenant_id, actor_id, CategoryCreate(
                name=parent_name, category_type=category_type
            ))
            categories[parent_name] = parent.id
            for child_name in children:
                child = crud_category.create_db_category(db, tenant_id, actor_id, CategoryCreate(
                    name=child_name, category_type=category_type, parent_category_id=parent.id
                ))
                categories[child_name] = child.id

        tags = [
            crud_tag.create_db_tag(db, tenant_id, actor_id, TagCreate(name=tag_name)).id
            for tag_name in ["recurring", "tax-deductible", "review"]
        ]

        crud_exchange_rate.create_db_exchange_rate(db, tenant_id, actor_id, ExchangeRateCreate(
            base_currency_code="EUR", target_currency_code="USD", rate=Decimal("1.085000"),
            rate_date=date.today(), source="Manual", system_wide=True,
        ))

        # 4. Transactions
        print("Creating transactions...")
        crud_transaction.create_db_transaction(db, tenant_id, actor_id, TransactionCreate(
            transaction_date=date.today() - timedelta(days=120),
            description="Owner capital contribution",
            transaction_type=TransactionType.OPENING_BALANCE,
            amount=Decimal("25000.00"),
            currency_code="USD",
            journal_entries=[
                JournalEntryCreate(account_id=accounts["Checking"], entry_type=JournalEntryType.DEBIT,
                                   amount=Decimal("25000.00"), currency_code="USD"),
                JournalEntryCreate(account_id=accounts["Owner's Equity"], entry_type=JournalEntryType.CREDIT,
                                   amount=Decimal("25000.00"), currency_code="USD"),
            ],
        ))

        expense_plan = [
            ("Rent Expense", "Rent", 1500, 2500),
            ("Office Supplies", "Supplies", 20, 300),
            ("Software Subscriptions", "Software", 10, 200),
        ]
        for _ in range(60):
            transaction_date = fake.date_between(start_date="-110d", end_date="today")
            if random.random() < 0.4:
                amount = _money(200, 5000)
                crud_transaction.create_db_transaction(db, tenant_id, actor_id, TransactionCreate(
                    transaction_date=transaction_date,
                    description=f"Invoice paid by {fake.company()}",
                    transaction_type=TransactionType.INCOME,
                    category_id=categories[random.choice(["Product Sales", "Consulting"])],
                    amount=amount,
                    currency_code="USD",
                    journal_entries=[
                        JournalEntryCreate(account_id=accounts["Checking"], entry_type=JournalEntryType.DEBIT,
                                           amount=amount, currency_code="USD"),
                        JournalEntryCreate(account_id=accounts["Sales Revenue"], entry_type=JournalEntryType.CREDIT,
                                           amount=amount, currency_code="USD"),
                    ],
                ))
            else:
                expense_account, category_name, low, high = random.choice(expense_plan)
                amount = _money(low, high)
                paid_from = random.choice(["Checking", "Credit Card"])
                crud_transaction.create_db_transaction(db, tenant_id, actor_id, TransactionCreate(
                    transaction_date=transaction_date,
                    description=f"{fake.company()} - {category_name.lower()}",
                    transaction_type=TransactionType.EXPENSE,
                    category_id=categories[category_name],
                    tag_ids=random.sample(tags, k=random.randint(0, 2)) or None,
                    amount=amount,
                    currency_code="USD",
                    notes=fake.sentence() if random.random() < 0.3 else None,
                    journal_entries=[
                        JournalEntryCreate(account_id=accounts[expense_account], entry_type=JournalEntryType.DEBIT,
                                           amount=amount, currency_code="USD"),
                        JournalEntryCreate(account_id=accounts[paid_from], entry_type=JournalEntryType.CREDIT,
                                           amount=amount, currency_code="USD"),
                    ],
                ))

        # 5. Budget
        print("Creating budget...")
        today = date.today()
        budget = crud_budget.create_db_budget(db, tenant_id, actor_id, BudgetCreate(
            name=f"Operating budget {today.year}",
            start_date=date(today.year, 1, 1),
            end_date=date(today.year, 12, 31),
            budget_type=BudgetType.ANNUAL,
            currency_code="USD",
        ))
        for category_name, amount in [("Rent", "2000.00"), ("Supplies", "400.00"), ("Software", "250.00")]:
            crud_budget.create_db_budget_line_item(db, tenant_id, actor_id, budget.id, BudgetLineItemCreate(
                category_id=categories[category_name],
                amount=Decimal(amount),
                frequency_type=FrequencyType.MONTHLY,
            ))

        print("Database seeded successfully!")

    finally:
        db.close()


if __name__ == "__main__":
    seed_database()
