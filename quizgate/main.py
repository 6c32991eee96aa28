import random
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from loguru import logger

from quizgate.api import CORS_HEADERS, CORS_METHODS, cors_headers, router as api_router
from quizgate.core.config import Settings, load_settings
from quizgate.core.errors import GateError
from quizgate.core.logging import setup_logging
from quizgate.db.kv import KeyValueStore, build_store
from quizgate.services.ledger import AnalyticsLedger
from quizgate.services.notifier import EmailNotifier
from quizgate.services.tokens import TokenIssuer
from quizgate.services.vault import VaultClient
from quizgate.utils.helpers import Clock, utc_now
from quizgate.utils.http import build_client, close_client


def _validation_message(exc: RequestValidationError) -> str:
    # loc and msg only: the raw input may hold a password
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "Malformed request: " + "; ".join(parts)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(GateError)
    async def gate_error_handler(request: Request, exc: GateError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on {} {}", request.method, request.url.path)
        # rendered by ServerErrorMiddleware, outside CORSMiddleware
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
            headers=cors_headers(request.app.state.settings, request),
        )


def create_app(
    settings: Optional[Settings] = None,
    *,
    store: Optional[KeyValueStore] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    rng: Optional[random.Random] = None,
    clock: Clock = utc_now,
) -> FastAPI:
    settings = settings or load_settings()
    setup_logging(settings)

    app = FastAPI(title=settings.APP_NAME)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=[m.strip() for m in CORS_METHODS.split(",")],
        allow_headers=[CORS_HEADERS],
    )

    http_client = build_client(settings, transport=transport)
    if store is None:
        store = build_store(settings.KV_DATABASE_URL)
        if store is None:
            logger.warning("KV_DATABASE_URL is not set; analytics endpoints will report a configuration error")

    app.state.settings = settings
    app.state.http_client = http_client
    app.state.store = store
    app.state.vault = VaultClient(settings, http_client)
    app.state.ledger = AnalyticsLedger(store, capacity=settings.LEDGER_CAPACITY)
    app.state.notifier = EmailNotifier(settings, http_client)
    app.state.issuer = TokenIssuer(settings.TOKEN_SECRET, clock=clock)
    app.state.rng = rng or random.Random()
    app.state.clock = clock

    if not settings.TOKEN_SECRET:
        logger.warning("TOKEN_SECRET is not set; access tokens are unsigned")

    register_exception_handlers(app)
    app.include_router(api_router)

    @app.on_event("startup")
    async def on_startup():
        if store is not None and hasattr(store, "init"):
            await store.init()
        logger.info("Application startup complete.")

    @app.on_event("shutdown")
    async def on_shutdown():
        await close_client(http_client)
        if store is not None and hasattr(store, "close"):
            await store.close()
        logger.info("HTTP client closed.")

    return app


app = create_app()
