"""
ReadIt Service - FastAPI Application
GraphQL backend for users, sessions and posts
"""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import asyncpg
import logging
from contextlib import asynccontextmanager
from typing import Optional
from redis.exceptions import RedisError

from app.routes.schema import create_graphql_router
from app.utils.config import get_app_config, validate_configuration
from app.utils.dependencies import ServiceContainer, build_container
from shared.utils.logger import init_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    logger.info("ReadIt Service starting up...")

    # Containers injected by create_app() are owned by the caller
    owns_container = getattr(app.state, "container", None) is None
    if owns_container:
        validate_configuration()
        app.state.container = await build_container()

    logger.info("ReadIt Service startup complete - using Redis for sessions")

    yield

    logger.info("ReadIt Service shutting down...")
    if owns_container:
        await app.state.container.close()
        app.state.container = None


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        container: Pre-built services; when omitted they are created from
            configuration during startup
    """
    config = container.config if container else get_app_config()

    app = FastAPI(
        title="ReadIt Service",
        description="GraphQL backend for the ReadIt link-sharing app",
        version=config.service_version,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.container = container

    # Cookies are sent cross-origin from the frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Custom HTTP exception handler"""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": True,
                "message": exc.detail,
                "status_code": exc.status_code
            }
        )

    @app.get("/health")
    async def health_check():
        """Service health check"""
        return {
            "status": "healthy",
            "service": config.service_name,
            "version": config.service_version
        }

    @app.get("/health/database")
    async def database_health_check(request: Request):
        """Database connection health check"""
        pool = request.app.state.container.db_pool
        if pool is None:
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Database not configured"
            )
        try:
            async with pool.acquire() as conn:
                await conn.fetchval("SELECT 1")
        except (OSError, asyncpg.PostgresError) as e:
            logger.error(f"Database health check failed: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Database connection failed"
            )
        return {
            "status": "healthy",
            "database": "connected",
            "test_query": "passed"
        }

    @app.get("/health/redis")
    async def redis_health_check(request: Request):
        """Redis connection health check"""
        client = request.app.state.container.redis_client
        try:
            await client.ping()
        except RedisError as e:
            logger.error(f"Redis health check failed: {e}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Redis connection failed"
            )
        return {
            "status": "healthy",
            "redis": "connected"
        }

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "service": "ReadIt Service",
            "version": config.service_version,
            "description": "Users, sessions and posts over GraphQL",
            "graphql": config.graphql_path
        }

    app.include_router(create_graphql_router(), prefix=config.graphql_path)

    return app


def get_application() -> FastAPI:
    """ASGI factory: `uvicorn app.main:get_application --factory`"""
    init_logging()
    return create_app()
