from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.db import Database
from app.utils.exception_handlers import (
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.utils.router_discovery import register_routers


def create_app(db: Database | None = None) -> FastAPI:
    """Build the API around ``db``; a database for ``settings.db_url`` is created if omitted."""
    database = db or Database(settings.db_url)

    @asynccontextmanager
    async def app_lifespan(_: FastAPI) -> AsyncGenerator[None, FastAPI]:
        yield

        await database.dispose()

    app = FastAPI(title="Tennis Club API", lifespan=app_lifespan)
    app.state.db = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routers(app)

    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    @app.get("/")
    async def healthz() -> str:
        return "OK"

    return app


app = create_app()
