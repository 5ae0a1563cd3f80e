"""
FastAPI application entry point.

Configures logging, the database, middleware, routes and exception handlers.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from orgmembers.core.config import settings
from orgmembers.core.database import DatabaseSessionManager
from orgmembers.core.dependencies import get_db_manager
from orgmembers.core.exceptions import OrgMembersError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app.state.db = DatabaseSessionManager.from_settings(settings)
    logger.info("Starting orgmembers API in %s mode", settings.ENVIRONMENT)
    yield
    logger.info("Shutting down orgmembers API")
    await app.state.db.close()


app = FastAPI(
    title="Organization Members API",
    description="Organization membership and repository access",
    version="1.0.0",
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
    openapi_url="/api/openapi.json" if settings.DEBUG else None,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(OrgMembersError)
async def org_members_error_handler(request: Request, exc: OrgMembersError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
        if not settings.DEBUG:
            return JSONResponse(
                status_code=exc.http_status,
                content={
                    "detail": {
                        "code": exc.code,
                        "message": "A storage error occurred",
                    }
                },
            )
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    if settings.DEBUG:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": {
                    "code": "INTERNAL_SERVER_ERROR",
                    "message": str(exc),
                    "type": type(exc).__name__,
                }
            },
        )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": {
                "code": "INTERNAL_SERVER_ERROR",
                "message": "An unexpected error occurred",
            }
        },
    )


@app.get("/health", tags=["Health"])
async def health_check(db: DatabaseSessionManager = Depends(get_db_manager)) -> JSONResponse:
    healthy = await db.health_check()
    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ok" if healthy else "degraded",
            "database": "ok" if healthy else "unavailable",
            "environment": settings.ENVIRONMENT,
            "version": "1.0.0",
        },
    )


from orgmembers.routers import organizations, users  # noqa: E402

app.include_router(organizations.router, prefix="/api/v1/organizations", tags=["Organizations"])
app.include_router(users.router, prefix="/api/v1/users", tags=["Users"])
