"""
Request-scoped identity.

Authentication itself happens upstream: a gateway or middleware verifies the caller
and places ``user_id`` and ``tenant_id`` on ``request.state``. Routers only read them
through these dependencies, so audit stamps never come from a request body.
"""
from uuid import UUID

from fastapi import HTTPException, Request, status


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _state_uuid(request: Request, name: str) -> UUID:
    value = getattr(request.state, name, None)
    if value is None:
        raise _unauthorized()
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as e:
        raise _unauthorized() from e


def get_current_user_id(request: Request) -> UUID:
    """The verified actor id, used for created_by/updated_by"""
    return _state_uuid(request, "user_id")


def get_current_tenant_id(request: Request) -> UUID:
    """The tenant every tenant-scoped read and write is restricted to"""
    return _state_uuid(request, "tenant_id")
