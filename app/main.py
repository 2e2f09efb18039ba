import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.database import engine, init_models
from app.core.handlers import register_exception_handlers
from app.core.logging import setup_logging
from app.core.stream import build_chat_provider
from app.api.v1.router import api_router
from app.schemas.response import ok

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    # Startup
    logger.info("Starting up %s %s", settings.APP_NAME, settings.APP_VERSION)
    await init_models()
    # Chat provider is built once and shared by every request
    app.state.chat_provider = build_chat_provider()

    yield

    # Shutdown
    logger.info("Shutting down...")
    if app.state.chat_provider is not None:
        await app.state.chat_provider.close()
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    openapi_url="/api/v1/openapi.json",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan
)

# Set up CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include API router
app.include_router(api_router, prefix="/api/v1")


# Root endpoint
@app.get("/")
async def root():
    return ok({
        "app": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/api/docs",
        "redoc": "/api/redoc",
        "health": "/health",
        "api": "/api/v1"
    })


# Health check endpoint
@app.get("/health")
async def health_check():
    database_status = "healthy"
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Database health check failed: %s", exc)
        database_status = "unhealthy"

    chat_status = "healthy" if getattr(app.state, "chat_provider", None) is not None else "unconfigured"

    return ok({
        "status": "healthy" if database_status == "healthy" else "degraded",
        "services": {
            "database": database_status,
            "chat": chat_status
        }
    })
