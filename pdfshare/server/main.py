"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request logging), registers the exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pdfshare.core.database import init_db
from pdfshare.core.logging_config import get_logger, setup_logging
from pdfshare.core.monitoring import initialize_logfire

from .api.v1 import annotations, auth, files, health, sharing
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import RequestLoggingMiddleware
from .services.deps import close_resources

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates missing tables when ``DATABASE_AUTO_CREATE`` is on and releases
    the cache client on shutdown.
    """
    logger.info(f"Starting up {constant.PROJECT_NAME} server ({settings.environment})...")
    try:
        await init_db()
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    logger.info(f"Shutting down {constant.PROJECT_NAME} server...")
    await close_resources()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    pdfshare Server API

    Backend for collaborative PDF management: accounts, document upload,
    role-based sharing (owner / editor / viewer), shareable links and
    persistence of the viewer's XFDF annotations.
    """,
    version=constant.API_VERSION,
    openapi_url=f"{constant.API_PREFIX}/openapi.json",
    docs_url=f"{constant.API_PREFIX}/docs",
    redoc_url=f"{constant.API_PREFIX}/redoc",
    lifespan=lifespan,
)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
    expose_headers=["X-Annotations", "X-Process-Time", "Content-Disposition"],
)
app.add_middleware(RequestLoggingMiddleware)

setup_exception_handlers(app)
initialize_logfire(app)

app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix=f"{constant.API_PREFIX}/auth")
app.include_router(files.router, prefix=f"{constant.API_PREFIX}/file")
app.include_router(sharing.router, prefix=f"{constant.API_PREFIX}/file")
app.include_router(annotations.router, prefix=f"{constant.API_PREFIX}/file")
