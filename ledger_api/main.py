from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .db.core import LedgerError, DatabaseError, InternalServerError, ValidationError
from .logging_config import setup_logging, get_logger
from .routers.users import router as users_router
from .routers.tenants import router as tenants_router
from .routers.currencies import router as currencies_router
from .routers.account_types import router as account_types_router
from .routers.accounts import router as accounts_router
from .routers.categories import router as categories_router
from .routers.tags import router as tags_router
from .routers.exchange_rates import router as exchange_rates_router
from .routers.transactions import router as transactions_router
from .routers.budgets import router as budgets_router

logger = get_logger(__name__)

HTTP_ERROR_KINDS = {
    status.HTTP_400_BAD_REQUEST: ValidationError.kind,
    status.HTTP_401_UNAUTHORIZED: "Unauthorized",
    status.HTTP_403_FORBIDDEN: "Forbidden",
    status.HTTP_404_NOT_FOUND: "NotFound",
    status.HTTP_405_METHOD_NOT_ALLOWED: "MethodNotAllowed",
}


@asynccontextmanager
async def lifespan(_: FastAPI):
    setup_logging()
    logger.info("Ledger API starting")
    yield


app = FastAPI(title="Ledger API", lifespan=lifespan)


def error_response(status_code: int, message: str, kind: str, **extra) -> JSONResponse:
    body = {"error": message, "kind": kind}
    body.update(extra)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return error_response(exc.status_code, exc.message, exc.kind)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    kind = HTTP_ERROR_KINDS.get(exc.status_code, InternalServerError.kind if exc.status_code >= 500 else "HTTPError")
    response = error_response(exc.status_code, str(exc.detail), kind)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, "Request validation failed", ValidationError.kind, details=exc.errors())


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception(f"{request.method} {request.url.path} hit a database error")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "A database error occurred", DatabaseError.kind)


async def lookup_error_handler(request: Request, exc: LookupError) -> JSONResponse:
    # Raised when a stored enum value is not a known member
    logger.exception(f"{request.method} {request.url.path} read an undecodable value")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Stored data could not be decoded", InternalServerError.kind)


app.add_exception_handler(LedgerError, ledger_error_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
app.add_exception_handler(LookupError, lookup_error_handler)

app.include_router(users_router)
app.include_router(tenants_router)
app.include_router(currencies_router)
app.include_router(account_types_router)
app.include_router(accounts_router)
app.include_router(categories_router)
app.include_router(tags_router)
app.include_router(exchange_rates_router)
app.include_router(transactions_router)
app.include_router(budgets_router)


@app.get("/")
def read_root():
    return "Server is running."
