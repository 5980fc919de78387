"""
FastAPI application factory
"""
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.sessions import SessionMiddleware

from church_admin.config import get_settings
from church_admin.infrastructure.db.session import check_db_connection
from church_admin.application.errors import (
    ValidationError, NotFoundError, ConflictError,
)
from church_admin.api.v1 import auth, money_goals, money_goal_categories, transactions, users

logging.basicConfig(level=get_settings().LOG_LEVEL)
logger = logging.getLogger(__name__)


class ErrorLoggingMiddleware(BaseHTTPMiddleware):
    """Logs the traceback of any unhandled exception and answers 500"""

    async def dispatch(self, request, call_next):
        try:
            return await call_next(request)
        except Exception:
            tb_str = traceback.format_exc()
            logger.error(f"\n{'='*60}\nERROR on {request.method} {request.url.path}\n{tb_str}{'='*60}")
            return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception):
        logger.info("%s %s -> %d: %s", request.method, request.url.path, status_code, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})
    return handler


def create_app() -> FastAPI:
    """
    Application factory - builds and configures the FastAPI app

    Returns:
        Configured FastAPI app
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
    )

    app.add_middleware(ErrorLoggingMiddleware)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SECRET_KEY,
        max_age=settings.SESSION_MAX_AGE,
    )

    # Domain errors -> HTTP
    app.add_exception_handler(ValidationError, _error_handler(400))
    app.add_exception_handler(NotFoundError, _error_handler(404))
    app.add_exception_handler(ConflictError, _error_handler(409))

    app.include_router(auth.router)
    app.include_router(money_goals.router)
    app.include_router(money_goal_categories.router)
    app.include_router(transactions.router)
    app.include_router(transactions.balance_router)
    app.include_router(users.router)

    @app.get("/health", response_class=PlainTextResponse, tags=["system"])
    def health():
        """Health check endpoint"""
        return "ok"

    @app.get("/ready", response_class=PlainTextResponse, tags=["system"])
    def ready():
        """Readiness check endpoint (database reachable)"""
        check_db_connection()
        return "ok"

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "church_admin.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
