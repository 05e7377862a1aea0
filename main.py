"""
Main application module for the storefront catalog REST API.

This module builds the FastAPI application: it creates the catalog store
handle once, wires the services that share it, registers all routers and
configures global exception handlers.
"""
import logging
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from starlette.responses import JSONResponse

from config.logging_config import setup_logging
from config.settings import Settings, settings

# Setup centralized logging FIRST
setup_logging()
logger = logging.getLogger(__name__)

from config.database import build_engine, build_session_factory, create_tables  # noqa: E402
from config.redis_config import UpstashRedisSync  # noqa: E402
from controllers.auth_controller import router as auth_controller  # noqa: E402
from controllers.category_controller import CategoryController  # noqa: E402
from controllers.health_check import router as health_check_controller  # noqa: E402
from controllers.product_controller import ProductController  # noqa: E402
from controllers.review_controller import ReviewController  # noqa: E402
from middleware.request_id_middleware import RequestIDMiddleware  # noqa: E402
from repositories.category_repository import CategoryRepository  # noqa: E402
from repositories.product_repository import ProductRepository  # noqa: E402
from schemas.base_schema import describe_validation_error  # noqa: E402
from services.auth_service import FirebaseIdentityVerifier, IdentityVerifier  # noqa: E402
from services.cache_service import CacheService  # noqa: E402
from services.category_service import CategoryService  # noqa: E402
from services.fuzzy_matcher import FuzzyMatcher  # noqa: E402
from services.product_service import ProductService  # noqa: E402
from services.query_planner import QueryPlanner  # noqa: E402
from services.review_service import ReviewService  # noqa: E402
from utils.exceptions import CatalogError, InvalidInputError, StoreUnavailableError  # noqa: E402


def _error_response(exc: CatalogError) -> JSONResponse:
    content = {"error": exc.code, "message": exc.message}
    if exc.details:
        content["details"] = exc.details
    headers = {"Retry-After": "1"} if isinstance(exc, StoreUnavailableError) else None
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


def register_exception_handlers(fastapi_app: FastAPI) -> None:

    @fastapi_app.exception_handler(CatalogError)
    async def catalog_exception_handler(request: Request, exc: CatalogError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
        return _error_response(exc)

    @fastapi_app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _error_response(InvalidInputError("Invalid request", details=describe_validation_error(exc)))


# ================================================================
# 🔥 Crear FastAPI app
# ================================================================
def create_fastapi_app(
    config: Settings = settings,
    engine: Optional[Engine] = None,
    identity_verifier: Optional[IdentityVerifier] = None,
    cache_service: Optional[CacheService] = None,
) -> FastAPI:

    fastapi_app = FastAPI(
        title="Storefront Catalog API",
        description="Product listing, search and review aggregation over the catalog store",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    # Single store handle for the whole process
    engine = engine or build_engine(config.database_url, timeout=config.STORE_TIMEOUT_SECONDS)
    session_factory = build_session_factory(engine)
    product_store = ProductRepository(session_factory)

    if cache_service is None:
        cache_service = CacheService(
            UpstashRedisSync(config.UPSTASH_REDIS_REST_URL, config.UPSTASH_REDIS_REST_TOKEN),
            default_ttl=config.REDIS_CACHE_TTL,
            enabled=config.CACHE_ENABLED,
        )

    fastapi_app.state.settings = config
    fastapi_app.state.engine = engine
    fastapi_app.state.cache_service = cache_service
    fastapi_app.state.identity_verifier = identity_verifier or FirebaseIdentityVerifier(config)
    fastapi_app.state.product_service = ProductService(
        product_store,
        QueryPlanner(product_store, FuzzyMatcher(config.FUZZY_MATCH_THRESHOLD)),
        cache=cache_service,
    )
    fastapi_app.state.review_service = ReviewService(
        product_store,
        max_retries=config.MAX_CONFLICT_RETRIES,
        retry_backoff=config.CONFLICT_RETRY_BACKOFF_SECONDS,
    )
    fastapi_app.state.category_service = CategoryService(CategoryRepository(session_factory), cache=cache_service)

    # Global exception handlers
    register_exception_handlers(fastapi_app)

    # Routers
    fastapi_app.include_router(ProductController().router, prefix="/products")
    fastapi_app.include_router(ReviewController().router, prefix="/products")
    fastapi_app.include_router(CategoryController().router, prefix="/categories")
    fastapi_app.include_router(auth_controller, prefix="/auth")
    fastapi_app.include_router(health_check_controller, prefix="/health_check")

    # Request ID middleware
    fastapi_app.add_middleware(RequestIDMiddleware)

    # CORS
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            config.FRONTEND_URL,
            "http://localhost:3000",
            "http://127.0.0.1:3000"
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Startup event
    @fastapi_app.on_event("startup")
    async def startup_event():
        logger.info("🚀 Starting Storefront Catalog API...")
        create_tables(engine)

        if cache_service.ping():
            logger.info("✅ Redis cache available (Upstash REST)")
        else:
            logger.warning("⚠️ Redis not available, running without cache")

    # Shutdown event
    @fastapi_app.on_event("shutdown")
    async def shutdown_event():
        logger.info("👋 Shutting down Storefront Catalog API...")
        engine.dispose()
        logger.info("✅ Database engine disposed")

    return fastapi_app


# ================================================================
# 🔥 Uvicorn local
# ================================================================
def run_app(fastapi_app: FastAPI):
    uvicorn.run(fastapi_app, host="0.0.0.0", port=settings.PORT)


app = create_fastapi_app()

if __name__ == "__main__":
    run_app(app)
