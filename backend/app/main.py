"""FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, settings as default_settings
from app.database import Database, get_database
from app.schemas.common import HealthResponse
from app.services.document_analysis import DocumentAnalysisError, create_document_analyzer
from app.services.rate_limiter import SlidingWindowRateLimiter
from app.services.request_cache import RequestCache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store and create tables on startup, close it on shutdown."""
    settings: Settings = app.state.settings
    database = Database(settings.DATABASE_URL)
    await database.open()
    await database.init_schema()
    app.state.database = database

    if settings.SEED_ON_STARTUP or settings.METRICS_RETENTION_DAYS > 0:
        from app.services.seed_defaults import seed_all_defaults
        from app.services.workflow_metrics import prune_metrics
        async with database.session() as session:
            if settings.SEED_ON_STARTUP:
                await seed_all_defaults(session)
            if settings.METRICS_RETENTION_DAYS > 0:
                await prune_metrics(session, settings.METRICS_RETENTION_DAYS)

    try:
        yield
    finally:
        await database.close()


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path"))
        parts.append(f"{loc}: {err.get('msg')}" if loc else err.get("msg", "Invalid request"))
    return "; ".join(parts) or "Invalid request"


def register_exception_handlers(app: FastAPI) -> None:
    """Every error leaves the service as {"error": message}."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(DocumentAnalysisError)
    async def analysis_error(request: Request, exc: DocumentAnalysisError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(SQLAlchemyError)
    async def storage_error(request: Request, exc: SQLAlchemyError):
        logger.exception("Storage error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": str(exc)})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or default_settings

    app = FastAPI(
        title="Legal Pipeline Metrics API",
        version="1.0.0",
        description="Prompt library, workflow execution metrics and document processing for the legal review dashboard.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.rate_limiter = SlidingWindowRateLimiter(
        max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )
    app.state.analysis_cache = RequestCache(default_ttl=settings.ANALYSIS_CACHE_TTL_SECONDS)
    app.state.document_analyzer = create_document_analyzer(settings)

    # CORS
    origins = [o.strip() for o in settings.CORS_ORIGINS.split(",")]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/api/health", response_model=HealthResponse)
    async def health_check(database: Database = Depends(get_database)):
        """Verify API and database connectivity."""
        try:
            connected = await database.ping()
        except Exception as e:
            logger.warning("Health check could not reach the database: %s", e)
            connected = False
        return {
            "status": "healthy" if connected else "degraded",
            "timestamp": datetime.now(timezone.utc),
            "database": "connected" if connected else "disconnected",
        }

    # Register routers
    from app.routes.prompts import router as prompts_router
    from app.routes.workflow_metrics import router as workflow_metrics_router, performance_router, ingest_router
    from app.routes.context_templates import router as context_templates_router
    from app.routes.documents import router as documents_router
    app.include_router(prompts_router)
    app.include_router(workflow_metrics_router)
    app.include_router(performance_router)
    app.include_router(ingest_router)
    app.include_router(context_templates_router)
    app.include_router(documents_router)

    return app


app = create_app()


def main() -> None:
    """Run the server."""
    logging.basicConfig(
        level=default_settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "app.main:app",
        host=default_settings.API_HOST,
        port=default_settings.API_PORT,
    )


if __name__ == "__main__":
    main()
