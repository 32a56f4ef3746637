from datetime import datetime, timezone

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.api import members, periods, ledger, dashboard
from app.db.base import get_db
from app.core.config import settings
from app.core.exceptions import (
    KapununganError,
    ValidationError,
    NotFoundError,
    ConflictError,
    PersistenceError,
)
import logging

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

# Get logger for this module
logger = logging.getLogger(__name__)
logger.info("Starting Kapunungan Ledger API")

ERROR_STATUS = {
    ValidationError: 400,
    NotFoundError: 404,
    ConflictError: 409,
    PersistenceError: 500,
}

app = FastAPI(
    title="Kapunungan Ledger API",
    description="Members, periods and ledger balances for the Kapunungan lending and savings association",
    version="1.0.0",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KapununganError)
async def kapunungan_error_handler(request: Request, exc: KapununganError):
    """Surface domain errors to the admin UI as {"detail": message}."""
    status_code = next(
        (code for error_type, code in ERROR_STATUS.items() if isinstance(exc, error_type)),
        400,
    )
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


# Include routers
app.include_router(members.router)
app.include_router(periods.router)
app.include_router(ledger.router)
app.include_router(dashboard.router)


@app.get("/")
def root():
    """Root endpoint."""
    return {"message": "Kapunungan Ledger API", "version": "1.0.0"}


@app.get("/api/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint: reports API and database connectivity."""
    db_status = "unreachable"
    db_error = None
    try:
        db.execute(text("SELECT 1"))
        db_status = "connected"
    except SQLAlchemyError as e:
        db_error = str(e)

    status = "healthy" if db_status == "connected" else "degraded"

    return {
        "status": status,
        "version": "1.0.0",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "api": "ok",
            "database": db_status,
        },
        **({"database_error": db_error} if db_error else {})
    }
