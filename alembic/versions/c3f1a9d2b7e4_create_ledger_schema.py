"""create ledger schema: users, tenants, currencies, accounts, categories, tags,
exchange rates, transactions, journal entries, budgets

Revision ID: c3f1a9d2b7e4
Revises: 
Create Date: 2026-10-19 09:12:44.518306

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'c3f1a9d2b7e4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def audit_columns():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('created_by', sa.Uuid, sa.ForeignKey('users.id'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_by', sa.Uuid, sa.ForeignKey('users.id'), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('auth_provider_id', sa.String(255), nullable=False),
        sa.Column('auth_provider_type', sa.String(50), nullable=False),  # e.g. "EMAIL_PASSWORD", "GOOGLE"
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('email', name='uq_user_email'),
        sa.UniqueConstraint('auth_provider_id', name='uq_user_auth_provider_id'),
    )
    op.create_index('idx_users_email', 'users', ['email'])

    op.create_table(
        'currencies',
        sa.Column('code', sa.String(3), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('symbol', sa.String(10), nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        *audit_columns(),
        sa.UniqueConstraint('name', name='uq_currency_name'),
    )

    op.create_table(
        'tenants',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('industry', sa.String(100), nullable=True),
        sa.Column('base_currency_code', sa.String(3), sa.ForeignKey('currencies.code'), nullable=False),
        sa.Column('fiscal_year_end_month', sa.Integer, nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        *audit_columns(),
        sa.UniqueConstraint('name', name='uq_tenant_name'),
        sa.CheckConstraint('fiscal_year_end_month >= 1 AND fiscal_year_end_month <= 12', name='ck_tenant_fiscal_month'),
    )

    op.create_table(
        'account_types',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('normal_balance', sa.String(10), nullable=False),  # "DEBIT" or "CREDIT"
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        *audit_columns(),
        sa.UniqueConstraint('name', name='uq_account_type_name'),
    )

    op.create_table(
        'accounts',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('tenant_id', sa.Uuid, sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('account_type_id', sa.Uuid, sa.ForeignKey('account_types.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('account_code', sa.String(50), nullable=True),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('currency_code', sa.String(3), sa.ForeignKey('currencies.code'), nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        *audit_columns(),
        sa.UniqueConstraint('tenant_id', 'name', name='uq_tenant_account_name'),
        sa.UniqueConstraint('tenant_id', 'account_code', name='uq_tenant_account_code'),
    )
    op.create_index('idx_accounts_tenant', 'accounts', ['tenant_id'])

    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('tenant_id', sa.Uuid, sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('category_type', sa.String(50), nullable=False),
        sa.Column('parent_category_id', sa.Uuid, sa.ForeignKey('categories.id'), nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        *audit_columns(),
        sa.UniqueConstraint('tenant_id', 'name', name='uq_tenant_category_name'),
    )
    op.create_index('idx_categories_tenant', 'categories', ['tenant_id'])

    op.create_table(
        'tags',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('tenant_id', sa.Uuid, sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        *audit_columns(),
        sa.UniqueConstraint('tenant_id', 'name', name='uq_tenant_tag_name'),
    )

    op.create_table(
        'exchange_rates',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('tenant_id', sa.Uuid, sa.ForeignKey('tenants.id'), nullable=True),  # NULL = system-wide
        sa.Column('base_currency_code', sa.String(3), sa.ForeignKey('currencies.code'), nullable=False),
        sa.Column('target_currency_code', sa.String(3), sa.ForeignKey('currencies.code'), nullable=False),
        sa.Column('rate', sa.DECIMAL(18, 6), nullable=False),
        sa.Column('rate_date', sa.Date, nullable=False),
        sa.Column('source', sa.String(100), nullable=True),
        *audit_columns(),
        sa.UniqueConstraint('tenant_id', 'base_currency_code', 'target_currency_code', 'rate_date', name='uq_exchange_rate_per_day'),
        sa.CheckConstraint('rate > 0', name='ck_exchange_rate_positive'),
    )
    op.create_index('idx_exchange_rates_pair_date', 'exchange_rates', ['base_currency_code', 'target_currency_code', 'rate_date'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('tenant_id', sa.Uuid, sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('transaction_date', sa.Date, nullable=False),
        sa.Column('description', sa.Text, nullable=False),
        sa.Column('transaction_type', sa.String(50), nullable=False),
        sa.Column('category_id', sa.Uuid, sa.ForeignKey('categories.id'), nullable=True),
        sa.Column('tags_json', sa.JSON, nullable=True),
        sa.Column('amount', sa.DECIMAL(18, 2), nullable=False),
        sa.Column('currency_code', sa.String(3), sa.ForeignKey('currencies.code'), nullable=False),
        sa.Column('is_reconciled', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('reconciliation_date', sa.Date, nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('source_document_url', sa.Text, nullable=True),
        *audit_columns(),
    )
    op.create_index('idx_transactions_tenant_date', 'transactions', ['tenant_id', 'transaction_date'])
    op.create_index('idx_transactions_category', 'transactions', ['category_id'])

    op.create_table(
        'journal_entries',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('transaction_id', sa.Uuid, sa.ForeignKey('transactions.id'), nullable=False),
        sa.Column('account_id', sa.Uuid, sa.ForeignKey('accounts.id'), nullable=False),
        sa.Column('entry_type', sa.String(10), nullable=False),  # "DEBIT" or "CREDIT"
        sa.Column('amount', sa.DECIMAL(18, 2), nullable=False),
        sa.Column('currency_code', sa.String(3), sa.ForeignKey('currencies.code'), nullable=False),
        sa.Column('exchange_rate', sa.DECIMAL(18, 6), nullable=True),
        sa.Column('converted_amount', sa.DECIMAL(18, 2), nullable=True),
        sa.Column('memo', sa.Text, nullable=True),
        *audit_columns(),
        sa.UniqueConstraint('transaction_id', 'account_id', 'entry_type', name='uq_journal_entry_leg'),
        sa.CheckConstraint('amount >= 0', name='ck_journal_entry_amount'),
    )
    op.create_index('idx_journal_entries_transaction', 'journal_entries', ['transaction_id'])
    op.create_index('idx_journal_entries_account', 'journal_entries', ['account_id'])

    op.create_table(
        'budgets',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('tenant_id', sa.Uuid, sa.ForeignKey('tenants.id'), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('start_date', sa.Date, nullable=False),
        sa.Column('end_date', sa.Date, nullable=False),
        sa.Column('budget_type', sa.String(50), nullable=False),
        sa.Column('currency_code', sa.String(3), sa.ForeignKey('currencies.code'), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        *audit_columns(),
        sa.UniqueConstraint('tenant_id', 'name', name='uq_tenant_budget_name'),
    )

    op.create_table(
        'budget_line_items',
        sa.Column('id', sa.Uuid, primary_key=True),
        sa.Column('budget_id', sa.Uuid, sa.ForeignKey('budgets.id'), nullable=False),
        sa.Column('category_id', sa.Uuid, sa.ForeignKey('categories.id'), nullable=True),
        sa.Column('account_id', sa.Uuid, sa.ForeignKey('accounts.id'), nullable=True),
        sa.Column('amount', sa.DECIMAL(18, 2), nullable=False),
        sa.Column('frequency_type', sa.String(50), nullable=False),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        *audit_columns(),
        sa.UniqueConstraint('budget_id', 'category_id', name='uq_budget_line_item_category'),
        sa.CheckConstraint('amount >= 0', name='ck_budget_line_item_amount'),
    )


def downgrade() -> None:
    op.drop_table('budget_line_items')
    op.drop_table('budgets')
    op.drop_index('idx_journal_entries_account', table_name='journal_entries')
    op.drop_index('idx_journal_entries_transaction', table_name='journal_entries')
    op.drop_table('journal_entries')
    op.drop_index('idx_transactions_category', table_name='transactions')
    op.drop_index('idx_transactions_tenant_date', table_name='transactions')
    op.drop_table('transactions')
    op.drop_index('idx_exchange_rates_pair_date', table_name='exchange_rates')
    op.drop_table('exchange_rates')
    op.drop_table('tags')
    op.drop_index('idx_categories_tenant', table_name='categories')
    op.drop_table('categories')
    op.drop_index('idx_accounts_tenant', table_name='accounts')
    op.drop_table('accounts')
    op.drop_table('account_types')
    op.drop_table('tenants')
    op.drop_table('currencies')
    op.drop_index('idx_users_email', table_name='users')
    op.drop_table('users')
