from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.config import LISTEN_HOST, LISTEN_PORT, Settings
from core.db import Database
from core.logging import configure_logging
from core.middleware import CORSMiddleware, JSONContentTypeMiddleware
from users import router as users_router
from users.repository import StoreError, UserStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> UserStore:
    db = Database(
        settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        command_timeout=settings.db_command_timeout,
    )
    return UserStore(db)


async def _store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.warning("request_failed method=%s path=%s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error."},
    )


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Malformed request body."},
    )


def create_app(settings: Settings | None = None, store: UserStore | None = None) -> FastAPI:
    """
    Build the application around one shared store.

    `store` defaults to a PostgreSQL-backed `UserStore`; tests pass their own.
    """
    if settings is None:
        settings = Settings.from_env()
    if store is None:
        store = build_store(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        # A store that cannot initialize stops startup.
        await store.initialize()
        try:
            yield
        finally:
            await store.close()

    app = FastAPI(lifespan=lifespan)
    app.state.user_store = store

    # Last added runs first: CORS wraps the content-type wrapper.
    app.add_middleware(JSONContentTypeMiddleware)
    app.add_middleware(CORSMiddleware)

    app.add_exception_handler(StoreError, _store_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.include_router(users_router.router, prefix=settings.api_prefix, tags=["users"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


def run() -> None:
    settings = Settings.from_env()
    configure_logging(settings.log_level, json_logs=settings.log_json)
    app = create_app(settings)
    uvicorn.run(app, host=LISTEN_HOST, port=LISTEN_PORT, log_config=None)


if __name__ == "__main__":
    run()
