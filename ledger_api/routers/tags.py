from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID

from ledger_api import config
from ledger_api.auth import get_current_tenant_id, get_current_user_id
from ledger_api.crud import crud_tag
from ledger_api.models import tag as tag_models
from ledger_api.db.core import get_db

router = APIRouter(
    prefix="/tags",
    tags=["tags"],
)


@router.post("/", response_model=tag_models.TagResponse, status_code=status.HTTP_201_CREATED)
def create_tag(
    tag: tag_models.TagCreate,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    """
    Create a new tag.
    """
    return crud_tag.create_db_tag(db=db, tenant_id=tenant_id, actor_id=user_id, tag_data=tag)


@router.get("/", response_model=List[tag_models.TagResponse])
def read_tags(
    skip: int = Query(0, ge=0),
    limit: int = Query(config.DEFAULT_PAGE_LIMIT, ge=1, le=config.MAX_PAGE_LIMIT),
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    """
    Retrieve all tags for the current tenant.
    """
    return crud_tag.read_db_tags(db=db, tenant_id=tenant_id, skip=skip, limit=limit)


@router.get("/{tag_id}", response_model=tag_models.TagResponse)
def read_tag(
    tag_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id)
):
    return crud_tag.read_db_tag(db=db, tenant_id=tenant_id, tag_id=tag_id)


@router.put("/{tag_id}", response_model=tag_models.TagResponse)
def update_tag(
    tag_id: UUID,
    tag: tag_models.TagUpdate,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    return crud_tag.update_db_tag(db=db, tenant_id=tenant_id, actor_id=user_id, tag_id=tag_id, tag_updates=tag)


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tag(
    tag_id: UUID,
    db: Session = Depends(get_db),
    tenant_id: UUID = Depends(get_current_tenant_id),
    user_id: UUID = Depends(get_current_user_id)
):
    crud_tag.deactivate_db_tag(db=db, tenant_id=tenant_id, actor_id=user_id, tag_id=tag_id)
