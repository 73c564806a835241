"""
FitTrack - Main FastAPI Application
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, settings as default_settings
from .api import (
    auth_router, user_router, tracking_router, nutrition_router,
    medical_router, assistant_router, dashboard_router, news_router,
)
from .core.logging_config import setup_logging
from .llm.base import LLMProvider
from .llm.factory import create_llm_provider
from .middleware import RequestLoggingMiddleware
from .storage import LocalStorage, RecordStore, StorageInterface, UserStorage
from .tools import HealthNewsClient

# Logger will be initialized after setup_logging() is called
logger = logging.getLogger(__name__)

_UNSET = object()


def build_llm_provider(settings: Settings) -> Optional[LLMProvider]:
    """Configured LLM provider, or None when no API key is set."""
    return create_llm_provider(
        provider=settings.llm_provider,
        api_key=settings.llm_api_key or settings.gemini_api_key or "",
        model=settings.llm_model,
        base_url=settings.llm_base_url,
        timeout=settings.llm_timeout_seconds,
    )


def build_news_client(settings: Settings) -> Optional[HealthNewsClient]:
    if not settings.gnews_api_key:
        return None
    return HealthNewsClient(
        api_key=settings.gnews_api_key,
        base_url=settings.gnews_base_url,
        timeout=settings.news_timeout_seconds,
    )


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[StorageInterface] = None,
    llm_provider=_UNSET,
    news_client=_UNSET,
) -> FastAPI:
    """
    Build the FastAPI application and its clients.

    Args:
        settings: Settings to use (module settings by default)
        storage: Storage backend (LocalStorage at settings.local_storage_path by default)
        llm_provider: LLM provider, None to disable (built from settings by default)
        news_client: GNews client, None to disable (built from settings by default)

    Returns:
        FastAPI: Configured application
    """
    settings = settings or default_settings
    storage = storage or LocalStorage(settings.local_storage_path)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup and shutdown events."""
        # Startup
        setup_logging(settings)
        logger.info(f"Starting {settings.app_name} v{settings.app_version}")
        logger.info(f"Storage path: {settings.local_storage_path}")
        logger.info(f"LLM provider: {app.state.llm_provider.name if app.state.llm_provider else 'not configured'}")
        logger.info(f"Log level: {settings.log_level.upper()}")
        logger.info(f"Debug mode: {settings.debug}")
        yield
        # Shutdown
        logger.info(f"Shutting down {settings.app_name}")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Personal health and fitness tracking backend",
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.storage = storage
    app.state.record_store = RecordStore(storage)
    app.state.user_storage = UserStorage(storage)
    app.state.llm_provider = build_llm_provider(settings) if llm_provider is _UNSET else llm_provider
    app.state.news_client = build_news_client(settings) if news_client is _UNSET else news_client

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add request logging middleware (after CORS)
    if settings.log_api_requests:
        app.add_middleware(RequestLoggingMiddleware, exclude_paths=["/health"])

    app.include_router(auth_router)
    app.include_router(user_router)
    app.include_router(tracking_router)
    app.include_router(nutrition_router)
    app.include_router(medical_router)
    app.include_router(assistant_router)
    app.include_router(dashboard_router)
    app.include_router(news_router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "app": settings.app_name,
            "version": settings.app_version,
            "status": "running",
            "message": "Welcome to FitTrack - Your Personal Health and Fitness Tracker"
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "storage": settings.storage_type,
            "version": settings.app_version
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "fittrack.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.debug
    )
