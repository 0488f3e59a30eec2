from sqlalchemy.orm import Session, joinedload, selectinload
from sqlalchemy import desc
from typing import Optional, List, Sequence
from decimal import Decimal
from uuid import UUID

from ledger_api.db.core import (
    TransactionDB,
    JournalEntryDB,
    TransactionType,
    JournalEntryType,
    NotFoundError,
    ValidationError,
    unit_of_work,
)
from ledger_api.models.transaction import TransactionCreate, TransactionUpdate, TransactionFilter
from ledger_api.crud.ownership import EntityKind, get_owned, resolve_reference, resolve_references
from ledger_api.crud.partial_update import build_patch, apply_update, tenant_scope
from ledger_api.logging_config import get_logger

logger = get_logger(__name__)


# ===== BALANCE RULES =====

def _value_in_transaction_currency(entry, currency_code: str, position: int) -> Decimal:
    if entry.currency_code == currency_code:
        return entry.amount
    if entry.converted_amount is None:
        raise ValidationError(
            f"Journal entry {position} is in {entry.currency_code}; converted_amount in {currency_code} is required"
        )
    return entry.converted_amount


def check_balanced(transaction_type: TransactionType, currency_code: str, entries: Sequence) -> None:
    """
    Reject a set of journal entries that does not balance.

    Every leg is valued in the transaction currency: its ``amount`` when it shares
    that currency, otherwise its ``converted_amount``. Debits must equal credits and
    both sides must be present, except for ADJUSTMENT transactions which may be
    single-sided. Works on request models and stored rows alike.

    Raises:
        ValidationError: when the entries are empty or unbalanced
    """
    if not entries:
        raise ValidationError("A transaction requires at least one journal entry")

    if transaction_type == TransactionType.ADJUSTMENT:
        return

    debit_total = Decimal("0")
    credit_total = Decimal("0")
    debit_count = credit_count = 0
    for position, entry in enumerate(entries, start=1):
        value = _value_in_transaction_currency(entry, currency_code, position)
        if entry.entry_type == JournalEntryType.DEBIT:
            debit_total += value
            debit_count += 1
        else:
            credit_total += value
            credit_count += 1

    if not debit_count or not credit_count:
        raise ValidationError(f"{transaction_type.value} transactions require at least one debit and one credit entry")

    if debit_total != credit_total:
        raise ValidationError(
            f"Journal entries are not balanced: debits {debit_total} != credits {credit_total} {currency_code}"
        )


def _check_distinct_legs(entries: Sequence) -> None:
    # (transaction, account, side) is unique in storage
    seen = set()
    for entry in entries:
        leg = (entry.account_id, entry.entry_type)
        if leg in seen:
            raise ValidationError(
                f"Account {entry.account_id} appears more than once as {entry.entry_type.value} in the same transaction"
            )
        seen.add(leg)


# ===== DATABASE OPERATIONS =====

def create_db_transaction(db: Session, tenant_id: UUID, actor_id: UUID, transaction_data: TransactionCreate) -> TransactionDB:
    """Create a transaction and all of its journal entries in one unit of work"""
    entries = transaction_data.journal_entries
    logger.info(f"Creating transaction for tenant {tenant_id} with {len(entries)} journal entries")

    check_balanced(transaction_data.transaction_type, transaction_data.currency_code, entries)
    _check_distinct_legs(entries)

    if transaction_data.category_id:
        resolve_reference(db, EntityKind.CATEGORY, transaction_data.category_id, tenant_id)
    if transaction_data.tag_ids:
        resolve_references(db, EntityKind.TAG, transaction_data.tag_ids, tenant_id)

    currency_codes = [transaction_data.currency_code]
    currency_codes += [entry.currency_code for entry in entries if entry.currency_code not in currency_codes]
    resolve_references(db, EntityKind.CURRENCY, currency_codes)

    db_transaction = TransactionDB(
        tenant_id=tenant_id,
        transaction_date=transaction_data.transaction_date,
        description=transaction_data.description,
        transaction_type=transaction_data.transaction_type,
        category_id=transaction_data.category_id,
        tags_json=[str(tag_id) for tag_id in transaction_data.tag_ids] if transaction_data.tag_ids else None,
        amount=transaction_data.amount,
        currency_code=transaction_data.currency_code,
        is_reconciled=bool(transaction_data.is_reconciled),
        reconciliation_date=transaction_data.reconciliation_date,
        notes=transaction_data.notes,
        source_document_url=transaction_data.source_document_url,
        created_by=actor_id,
        updated_by=actor_id,
    )

    try:
        with unit_of_work(db):
            db.add(db_transaction)
            db.flush()

            for entry in entries:
                # Raises inside the unit of work so the header row is rolled back too
                resolve_reference(db, EntityKind.ACCOUNT, entry.account_id, tenant_id)
                db.add(JournalEntryDB(
                    transaction_id=db_transaction.id,
                    account_id=entry.account_id,
                    entry_type=entry.entry_type,
                    amount=entry.amount,
                    currency_code=entry.currency_code,
                    exchange_rate=entry.exchange_rate,
                    converted_amount=entry.converted_amount,
                    memo=entry.memo,
                    created_by=actor_id,
                    updated_by=actor_id,
                ))
                db.flush()
    except ValidationError:
        logger.warning(f"Rolled back transaction for tenant {tenant_id}: invalid journal entry account")
        raise

    logger.info(f"Created transaction {db_transaction.id} for tenant {tenant_id}")
    return read_db_transaction(db, tenant_id, db_transaction.id)


def read_db_transaction(db: Session, tenant_id: UUID, transaction_id: UUID) -> TransactionDB:
    """Get a transaction with its journal entries"""
    transaction = db.query(TransactionDB).options(
        joinedload(TransactionDB.journal_entries)
    ).filter(
        TransactionDB.id == transaction_id,
        TransactionDB.tenant_id == tenant_id
    ).first()

    if not transaction:
        raise NotFoundError(f"Transaction with ID {transaction_id} not found for tenant {tenant_id}")
    return transaction


def read_db_transactions(
    db: Session,
    tenant_id: UUID,
    filters: Optional[TransactionFilter] = None,
    skip: int = 0,
    limit: int = 100
) -> List[TransactionDB]:
    """List a tenant's transactions, newest first"""
    logger.debug(f"Listing transactions for tenant {tenant_id} (skip={skip}, limit={limit})")
    query = db.query(TransactionDB).options(
        selectinload(TransactionDB.journal_entries)
    ).filter(TransactionDB.tenant_id == tenant_id)

    if filters:
        if filters.date_from:
            query = query.filter(TransactionDB.transaction_date >= filters.date_from)
        if filters.date_to:
            query = query.filter(TransactionDB.transaction_date <= filters.date_to)
        if filters.transaction_type:
            query = query.filter(TransactionDB.transaction_type == filters.transaction_type)
        if filters.category_id:
            query = query.filter(TransactionDB.category_id == filters.category_id)
        if filters.is_reconciled is not None:
            query = query.filter(TransactionDB.is_reconciled == filters.is_reconciled)

    return query.order_by(
        desc(TransactionDB.transaction_date),
        desc(TransactionDB.created_at)
    ).offset(skip).limit(limit).all()


def update_db_transaction(
    db: Session,
    tenant_id: UUID,
    actor_id: UUID,
    transaction_id: UUID,
    transaction_updates: TransactionUpdate
) -> TransactionDB:
    """Sparse update of a transaction header. Journal entries are left untouched."""
    patch = build_patch(TransactionDB, transaction_updates, field_map={"tag_ids": "tags_json"})

    if "category_id" in patch:
        resolve_reference(db, EntityKind.CATEGORY, patch["category_id"], tenant_id)
    if "tags_json" in patch:
        resolve_references(db, EntityKind.TAG, patch["tags_json"], tenant_id)
        patch["tags_json"] = [str(tag_id) for tag_id in patch["tags_json"]]
    if "currency_code" in patch:
        resolve_reference(db, EntityKind.CURRENCY, patch["currency_code"])

    if "transaction_type" in patch or "currency_code" in patch:
        # The stored legs must still balance under the new type or currency
        current = read_db_transaction(db, tenant_id, transaction_id)
        check_balanced(
            patch.get("transaction_type", current.transaction_type),
            patch.get("currency_code", current.currency_code),
            current.journal_entries,
        )

    apply_update(db, TransactionDB, transaction_id, patch, actor_id, tenant_scope(TransactionDB, tenant_id))
    return read_db_transaction(db, tenant_id, transaction_id)


def delete_db_transaction(db: Session, tenant_id: UUID, transaction_id: UUID) -> None:
    """Delete a transaction together with its journal entries"""
    logger.info(f"Deleting transaction {transaction_id} for tenant {tenant_id}")
    owned_transaction = db.query(TransactionDB.id).filter(
        TransactionDB.id == transaction_id,
        TransactionDB.tenant_id == tenant_id
    )

    with unit_of_work(db):
        entries_deleted = db.query(JournalEntryDB).filter(
            JournalEntryDB.transaction_id.in_(owned_transaction.scalar_subquery())
        ).delete(synchronize_session=False)

        deleted = db.query(TransactionDB).filter(
            TransactionDB.id == transaction_id,
            TransactionDB.tenant_id == tenant_id
        ).delete(synchronize_session=False)

        if deleted == 0:
            raise NotFoundError(f"Transaction with ID {transaction_id} not found for tenant {tenant_id}")

    logger.info(f"Deleted transaction {transaction_id} and {entries_deleted} journal entries")


# ===== JOURNAL ENTRIES =====

def read_db_journal_entries(db: Session, tenant_id: UUID, transaction_id: UUID) -> List[JournalEntryDB]:
    """List the legs of one of the tenant's transactions"""
    get_owned(db, EntityKind.TRANSACTION, transaction_id, tenant_id)
    return db.query(JournalEntryDB).filter(
        JournalEntryDB.transaction_id == transaction_id
    ).order_by(JournalEntryDB.created_at).all()


def read_db_journal_entry(db: Session, tenant_id: UUID, entry_id: UUID) -> JournalEntryDB:
    entry = db.query(JournalEntryDB).join(
        TransactionDB, JournalEntryDB.transaction_id == TransactionDB.id
    ).filter(
        JournalEntryDB.id == entry_id,
        TransactionDB.tenant_id == tenant_id
    ).first()

    if not entry:
        raise NotFoundError(f"Journal entry with ID {entry_id} not found for tenant {tenant_id}")
    return entry
