# backend/eventbook/main.py
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from eventbook.config import Settings, load_settings
from eventbook.db import Database
from eventbook.errors import (
    AdminRequired,
    EventBookError,
    InfrastructureFailure,
    InsufficientInventory,
    InvalidInput,
    NotFound,
)
from eventbook.routes.auth import router as auth_router
from eventbook.routes.booking import router as bookings_router
from eventbook.routes.events import router as events_router

logger = logging.getLogger("eventbook")

SERVICE_NAME = "Smart Event Booking API"

ERROR_STATUS = {
    InvalidInput: status.HTTP_400_BAD_REQUEST,
    NotFound: status.HTTP_404_NOT_FOUND,
    InsufficientInventory: status.HTTP_409_CONFLICT,
    AdminRequired: status.HTTP_401_UNAUTHORIZED,
    InfrastructureFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def configure_logging(level: str = "INFO") -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger("eventbook").setLevel(numeric)


async def eventbook_error_handler(request: Request, exc: EventBookError) -> JSONResponse:
    code = next((c for cls, c in ERROR_STATUS.items() if isinstance(exc, cls)), status.HTTP_400_BAD_REQUEST)
    body = {"error": exc.error, "message": exc.message}
    if isinstance(exc, InsufficientInventory):
        body["available"] = exc.available
    return JSONResponse(status_code=code, content=body)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": jsonable_encoder(exc.errors())})


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                        content={"error": "db_error", "message": "database operation failed"})


def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)
    database = database or Database.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.create_tables_on_startup:
            try:
                await database.create_all()
            except SQLAlchemyError:
                logger.exception("could not create tables on %s", database.engine.url.render_as_string(hide_password=True))
                raise
        logger.info("%s started", SERVICE_NAME)
        yield
        await database.dispose()

    app = FastAPI(title=SERVICE_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    app.add_exception_handler(EventBookError, eventbook_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)

    @app.get("/")
    async def root():
        return {"name": SERVICE_NAME, "status": "ok"}

    api = APIRouter(prefix="/api")

    @api.get("/health")
    async def health(request: Request):
        try:
            report = await request.app.state.database.ping()
        except (SQLAlchemyError, OSError) as exc:
            logger.error("health check failed: %s", exc)
            return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                                content={"status": "error", "message": str(exc)})
        return {"status": "ok", **report}

    api.include_router(auth_router)
    api.include_router(events_router)
    api.include_router(bookings_router)
    app.include_router(api)
    return app


if __name__ == "__main__":
    import uvicorn

    _settings = load_settings()
    uvicorn.run(create_app(_settings), host="0.0.0.0", port=_settings.port)
