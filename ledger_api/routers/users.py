from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from ledger_api import config
from ledger_api.auth import get_current_user_id
from ledger_api.crud import crud_user
from ledger_api.models import user as user_models
from ledger_api.db.core import get_db

router = APIRouter(
    prefix="/users",
    tags=["users"],
)

@router.post("/", response_model=user_models.UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(user: user_models.UserCreate, db: Session = Depends(get_db)):
    """
    Create a new user.
    """
    return crud_user.create_db_user(db=db, user_data=user)

@router.post("/login", response_model=user_models.UserResponse)
def login(user_login: user_models.UserLogin, db: Session = Depends(get_db)):
    """
    Check a user's credentials and record the login.
    (Token issuance belongs to the upstream authentication service.)
    """
    user = crud_user.authenticate_user(db, email=user_login.email, password=user_login.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user

@router.get("/", response_model=List[user_models.UserResponse])
def read_users(
    skip: int = Query(0, ge=0),
    limit: int = Query(config.DEFAULT_PAGE_LIMIT, ge=1, le=config.MAX_PAGE_LIMIT),
    db: Session = Depends(get_db),
    current_user_id: UUID = Depends(get_current_user_id)
):
    """
    Retrieve a list of users.
    """
    return crud_user.read_db_users(db, skip=skip, limit=limit)

@router.get("/{user_id}", response_model=user_models.UserResponse)
def read_user(user_id: UUID, db: Session = Depends(get_db), current_user_id: UUID = Depends(get_current_user_id)):
    return crud_user.read_db_user(db, user_id=user_id)

@router.put("/{user_id}", response_model=user_models.UserResponse)
def update_user(
    user_id: UUID,
    user: user_models.UserUpdate,
    db: Session = Depends(get_db),
    current_user_id: UUID = Depends(get_current_user_id)
):
    """
    Update a user's profile.
    """
    return crud_user.update_db_user(db=db, user_id=user_id, user_updates=user)

@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: UUID, db: Session = Depends(get_db), current_user_id: UUID = Depends(get_current_user_id)):
    """
    Deactivate a user.
    """
    crud_user.deactivate_db_user(db=db, user_id=user_id)
