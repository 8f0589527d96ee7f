"""FastAPI application setup"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sprintdesk.api.routes import router
from sprintdesk.api.middleware import setup_cors, setup_rate_limiting
from sprintdesk.db.connection import db
from sprintdesk.exceptions import SprintDeskError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for FastAPI application"""
    logger.info("Starting API server...")
    await db.init_pool()
    logger.info("Database pool initialized")

    yield

    logger.info("Shutting down API server...")
    await db.close_pool()
    logger.info("Database pool closed")


def create_api_application() -> FastAPI:
    """Create and configure FastAPI application"""
    app = FastAPI(
        title="Sprintdesk API",
        description="Achievements and leaderboards for the sprint tracker",
        version="1.0.0",
        lifespan=lifespan
    )

    setup_cors(app)
    setup_rate_limiting(app)

    app.include_router(router)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": str(exc.detail)},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(SprintDeskError)
    async def sprintdesk_exception_handler(request: Request, exc: SprintDeskError):
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": exc.user_message, "request_id": exc.request_id}
        )

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Server error"}
        )

    logger.info("FastAPI application created")

    return app
