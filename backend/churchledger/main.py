"""
ChurchLedger FastAPI Application - Main entry point.

ChurchLedger is the financial backend of a church-management dashboard:

- Membership: member registry with tithing/baptism flags
- Finance: entries, expenses, per-member tithe records, balances, live feed

All endpoints live under /api/v1 and are scoped to one church via the
``church_id`` query parameter.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from churchledger.core.config import settings
from churchledger.core.exceptions import LedgerError, ConflictError
from churchledger.db.base import init_db
from churchledger.schemas.common import HealthResponse

from churchledger.api.v1.membership import membership_router
from churchledger.api.v1.finance import finance_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan - startup and shutdown."""
    # Note: In production, use Alembic migrations instead
    await init_db()
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    description="""
ChurchLedger - church finance and membership.

## Modules

- **Membership**: Member registry and tithers
- **Finance**: Entries, expenses, tithe records, balances
    """,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# HEALTH CHECK
# ============================================================================

@app.get("/api/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint."""
    return HealthResponse(code=200, message="API is healthy.")


# ============================================================================
# V1 API ENDPOINTS
# ============================================================================

# Membership module - /api/v1/membership/*
app.include_router(
    membership_router,
    prefix=settings.API_V1_PREFIX,
)

# Finance module - /api/v1/finance/*
app.include_router(
    finance_router,
    prefix=settings.API_V1_PREFIX,
)


# ============================================================================
# ERROR HANDLERS
# ============================================================================

@app.exception_handler(LedgerError)
async def ledger_exception_handler(request: Request, exc: LedgerError):
    """Map ledger errors to their HTTP status."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path}: {exc.message}")
    content = {"detail": exc.message}
    if isinstance(exc, ConflictError) and exc.current_version is not None:
        content["current_version"] = exc.current_version
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    if settings.DEBUG:
        return JSONResponse(
            status_code=500,
            content={"detail": str(exc)}
        )
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "churchledger.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG
    )
