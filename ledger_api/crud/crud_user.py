from sqlalchemy.orm import Session
from typing import Optional, List
from uuid import UUID
import bcrypt

from ledger_api.db.core import UserDB, NotFoundError, ValidationError, unit_of_work, utc_now
from ledger_api.models.user import UserCreate, UserUpdate
from ledger_api.crud.partial_update import build_patch, apply_update, deactivate
from ledger_api.logging_config import get_logger

logger = get_logger(__name__)


# ===== PASSWORD HASHING UTILITIES =====

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return bcrypt.checkpw(plain_password.encode('utf-8'), hashed_password.encode('utf-8'))


# ===== DATABASE OPERATIONS =====

def _check_unique(db: Session, email: Optional[str], auth_provider_id: Optional[str], user_id: Optional[UUID] = None) -> None:
    query = db.query(UserDB)
    if user_id:
        query = query.filter(UserDB.id != user_id)

    if email and query.filter(UserDB.email == email).first():
        raise ValidationError("Email already registered")
    if auth_provider_id and query.filter(UserDB.auth_provider_id == auth_provider_id).first():
        raise ValidationError("Auth provider ID already registered")


def create_db_user(db: Session, user_data: UserCreate) -> UserDB:
    """Create a new user in the database"""
    _check_unique(db, user_data.email, user_data.auth_provider_id)

    db_user = UserDB(
        auth_provider_id=user_data.auth_provider_id,
        auth_provider_type=user_data.auth_provider_type,
        email=user_data.email,
        password_hash=hash_password(user_data.password) if user_data.password else None,
        first_name=user_data.first_name,
        last_name=user_data.last_name,
    )
    with unit_of_work(db):
        db.add(db_user)

    logger.info(f"Created user {db_user.id}")
    return db_user


def read_db_users(db: Session, skip: int = 0, limit: int = 100) -> List[UserDB]:
    return db.query(UserDB).filter(
        UserDB.is_active.is_(True)
    ).order_by(UserDB.email).offset(skip).limit(limit).all()


def read_db_user(db: Session, user_id: UUID) -> UserDB:
    user = db.query(UserDB).filter(UserDB.id == user_id, UserDB.is_active.is_(True)).first()
    if not user:
        raise NotFoundError(f"User with ID {user_id} not found")
    return user


def read_db_user_by_email(db: Session, email: str) -> Optional[UserDB]:
    return db.query(UserDB).filter(UserDB.email == email.lower().strip()).first()


def update_db_user(db: Session, user_id: UUID, user_updates: UserUpdate) -> UserDB:
    """Sparse profile update; a new password is hashed before it is stored"""
    patch = build_patch(UserDB, user_updates, field_map={"password": "password_hash"})
    _check_unique(db, patch.get("email"), patch.get("auth_provider_id"), user_id)

    if "password_hash" in patch:
        patch["password_hash"] = hash_password(patch["password_hash"])

    # Users carry no updated_by column; the actor is not recorded
    return apply_update(db, UserDB, user_id, patch, None)


def deactivate_db_user(db: Session, user_id: UUID) -> None:
    deactivate(db, UserDB, user_id, None)


def record_login(db: Session, user_id: UUID) -> UserDB:
    """Stamp last_login_at after a successful authentication"""
    user = read_db_user(db, user_id)
    with unit_of_work(db):
        user.last_login_at = utc_now()
    return user


def authenticate_user(db: Session, email: str, password: str) -> Optional[UserDB]:
    """Return the user when the password matches, otherwise None"""
    user = read_db_user_by_email(db, email)
    if not user or not user.is_active or not user.password_hash:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return record_login(db, user.id)
