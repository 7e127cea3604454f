import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from bookstore.api.api import api_router
from bookstore.core.config import Settings, settings as default_settings
from bookstore.core.errors import BookstoreError, bookstore_error_handler
from bookstore.database.base import Base
from bookstore.database.session import create_db_engine, create_session_factory

# Configure logging
logging.basicConfig(
    level=default_settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application around one connection pool.

    The engine is created here, shared by every request through
    ``app.state`` and disposed when the app shuts down.
    """
    settings = settings or default_settings
    engine = create_db_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.CREATE_TABLES:
            Base.metadata.create_all(bind=engine)
        logger.info(f"{settings.PROJECT_NAME} started ({settings.ENVIRONMENT})")
        yield
        engine.dispose()
        logger.info("Database engine disposed")

    # Create FastAPI app
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Bookstore: orders against a shared, concurrently contended inventory",
        version="1.0.0",
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url="/docs",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    # Set up CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BookstoreError, bookstore_error_handler)

    # Include API router
    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/")
    async def root():
        """Root endpoint that returns a welcome message and API status."""
        return {
            "message": f"Welcome to {settings.PROJECT_NAME} API",
            "status": "running",
            "version": "1.0.0",
            "docs_url": "/docs"
        }

    @app.get("/health")
    def health_check(request: Request):
        """Health check endpoint for monitoring and load balancers."""
        try:
            with request.app.state.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            database = "connected"
        except Exception as exc:
            logger.error(f"Health check failed to reach the database: {exc}")
            database = "unavailable"
        return {
            "status": "healthy" if database == "connected" else "degraded",
            "api": "running",
            "database": database
        }

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run("bookstore.main:app", host="0.0.0.0", port=3000)
