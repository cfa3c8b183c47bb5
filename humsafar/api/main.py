import logging
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from humsafar.adapters.sqlite.migrator import SQLiteMigrator
from humsafar.api.deps import get_settings
from humsafar.app_shell.config import validate_ops_rules
from humsafar.domain.errors import (
    HumsafarError,
    InvalidTransitionError,
    NotFoundError,
    PaymentBlockedError,
    QuotaExceededError,
    ReviewPreconditionError,
    SelfViewError,
    StoreError,
)
from humsafar.rules.loader import load_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules, validate and migrate on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules, settings.data_dir)
        applied = SQLiteMigrator(settings.db_path).run_migrations()
        logger.info("Rules loaded from %s; %d migrations applied", settings.rules_path, len(applied))
    except Exception as e:
        logger.critical("Startup failed: %s", e)
        sys.exit(1)

    yield


app = FastAPI(
    title="Humsafar Profile Access API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


# --- Error mapping ---
ERROR_STATUS: dict[type[HumsafarError], int] = {
    SelfViewError: status.HTTP_400_BAD_REQUEST,
    QuotaExceededError: status.HTTP_402_PAYMENT_REQUIRED,
    PaymentBlockedError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    ReviewPreconditionError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    StoreError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: HumsafarError) -> int:
    for error_type, code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


@app.exception_handler(HumsafarError)
async def humsafar_error_handler(request: Request, exc: HumsafarError) -> JSONResponse:
    code = status_for(exc)
    if isinstance(exc, StoreError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=code, content={"detail": exc.to_dict()})


# --- Routers ---
from humsafar.api.routes import (  # noqa: E402
    admin_payments,
    admin_profiles,
    admin_subscriptions,
    members,
    payments,
    public,
    views,
)

app.include_router(public.router, prefix="/api/public", tags=["Public"])
app.include_router(members.router, prefix="/api/members", tags=["Members"])
app.include_router(views.router, prefix="/api/views", tags=["Views"])
app.include_router(payments.router, prefix="/api/payments", tags=["Payments"])
app.include_router(admin_payments.router, prefix="/api/admin/payments", tags=["Admin Payments"])
app.include_router(admin_profiles.router, prefix="/api/admin/profiles", tags=["Admin Profiles"])
app.include_router(
    admin_subscriptions.router, prefix="/api/admin/subscriptions", tags=["Admin Subscriptions"]
)


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
