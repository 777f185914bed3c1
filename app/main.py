import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import Settings, get_settings
from app.core.logging import configure_logging
from app.db.session import Database
from app.domain.accounting.exceptions import AccountingError

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API around one Database handle built from settings."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        openapi_url=f"{settings.api_v1_prefix}/openapi.json",
        docs_url="/docs",  # Simpler docs URL
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.database = Database(settings)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AccountingError)
    async def accounting_error_handler(request: Request, exc: AccountingError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected ({exc.kind}): {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    # Include API router
    from app.api.v1 import api_router
    app.include_router(api_router, prefix=settings.api_v1_prefix)

    @app.get("/")
    def root():
        """Root endpoint."""
        return {
            "name": settings.project_name,
            "docs": "/docs",
        }

    @app.get("/health")
    def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.on_event("startup")
    async def startup_event():
        """Create the schema when running without migrations."""
        logger.info(f"Starting {settings.project_name}")
        if settings.auto_create_schema:
            app.state.database.create_schema()

    @app.on_event("shutdown")
    async def shutdown_event():
        """Release pooled connections."""
        app.state.database.dispose()

    return app


app = create_app()
