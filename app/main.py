"""ADBOARD — FastAPI Application Entry Point.

Marketing-metrics dashboard backend: per-customer advertising metrics,
role-gated management screens and client-user customer assignment.
"""

import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.auth.dependencies import require_role
from app.auth.permissions import ADMIN_ONLY
from app.core.errors import AdboardError
from app.models.domain_models import User
from app.database import init_db, test_connection, db_url
from app.storage.uploads import get_blob_store
from app.api.metric_routes import router as metric_router
from app.api.customer_routes import router as customer_router
from app.api.user_routes import router as user_router
from app.api.assignment_routes import router as assignment_router
from app.api.document_routes import router as document_router
from app.core.logging import get_logger

logger = get_logger("main")


IS_SERVERLESS = bool(
    os.environ.get("VERCEL") or os.environ.get("AWS_LAMBDA_FUNCTION_NAME")
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info("🚀 ADBOARD starting up...")
    logger.info(f"🌍 Environment: {'SERVERLESS' if IS_SERVERLESS else 'LOCAL'}")
    # Test connection first
    db_ok = test_connection()
    if db_ok:
        try:
            init_db()
        except Exception as e:
            logger.error(f"❌ Table creation failed: {e}")
    else:
        logger.error("❌ Database NOT connected — endpoints will fail")
    yield
    await get_blob_store().close()
    logger.info("ADBOARD shut down")


app = FastAPI(
    title="ADBOARD",
    description="Marketing metrics dashboard — per-customer ad performance, role-gated management and client assignment.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AdboardError)
async def adboard_error_handler(request: Request, exc: AdboardError):
    """Map core errors to HTTP responses."""
    logger.warning(
        f"{type(exc).__name__}: {exc.message}",
        extra={
            "endpoint": request.url.path,
            "method": request.method,
            "status_code": exc.status_code,
        },
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Routers
app.include_router(metric_router)
app.include_router(customer_router)
app.include_router(user_router)
app.include_router(assignment_router)
app.include_router(document_router)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "adboard",
        "version": "1.0.0",
    }


@app.get("/debug/db", tags=["System"])
async def debug_db(user: User = Depends(require_role(ADMIN_ONLY))):
    """Debug endpoint — check database connectivity. Admin only."""
    from app.database import _mask_url

    error = None
    connected = False
    try:
        connected = test_connection()
    except Exception as e:
        error = str(e)

    backend = "postgresql" if db_url.startswith("postgresql") else "sqlite"
    return {
        "connected": connected,
        "backend": backend,
        "url": _mask_url(db_url),
        "environment": "serverless" if IS_SERVERLESS else "local",
        "error": error,
    }
