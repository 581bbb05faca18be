"""Storefront pricing API: FastAPI entry point.

Registers middleware, error handlers, routers, and lifecycle hooks. The
storefront router is mounted under /api/storefront/.
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.logging_config import setup_logging
from api.middleware import CorrelationIdMiddleware
from storefront.errors import CheckoutError

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:5173"
).split(",")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "console")
VERSION = "0.1.0"

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown hooks."""
    setup_logging(LOG_LEVEL, LOG_FORMAT)
    logger.info("Storefront pricing API started")
    yield
    logger.info("Storefront pricing API shutting down")


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Storefront Pricing",
    description="Variant selection, combo pricing and checkout totals for storefront templates",
    version=VERSION,
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Correlation ids for log records
app.add_middleware(CorrelationIdMiddleware)


@app.exception_handler(CheckoutError)
async def checkout_error_handler(request: Request, exc: CheckoutError):
    logger.info("Checkout rejected: %s", exc.message, extra={"details": exc.details})
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "details": exc.details},
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

from storefront.router import router as storefront_router  # noqa: E402

app.include_router(storefront_router, prefix="/api/storefront", tags=["Storefront"])


# ---------------------------------------------------------------------------
# Health & root
# ---------------------------------------------------------------------------

@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION}


@app.get("/")
async def root():
    return {
        "name": "Storefront Pricing",
        "version": VERSION,
        "docs": "/docs",
        "description": "Pricing engine API for storefront landing pages",
    }
