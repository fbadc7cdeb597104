"""FastAPI application serving the bridge dispatcher.

The dispatch route accepts the form-encoded call and always answers with a JSON object
holding one of ``errortext``, ``jscode`` or ``result``.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from loguru import logger

from carryall import __version__
from carryall.config.access import get_config
from carryall.config.schema import Config, ServerConfig
from carryall.protocol.envelope import JSON_MEDIA_TYPE
from carryall.server.dispatcher import Dispatcher
from carryall.server.error_boundary import classify_http_status
from carryall.server.registry import CallableRegistry
from carryall.utils.exceptions import CarryallError, classify_exception, sanitize_error_message


def build_dispatcher(server_config: ServerConfig) -> Dispatcher:
    """Build a dispatcher whose registry holds the defaults plus the configured callables."""
    registry = CallableRegistry()
    for import_path in server_config.callables:
        registry.load(import_path)
    return Dispatcher(registry, force_object=server_config.force_object)


def create_app(dispatcher: Dispatcher | None = None, *, config: Config | None = None) -> FastAPI:
    """
    Create the bridge application.

    Args:
        dispatcher: Dispatcher to serve. Built from ``config.server`` when omitted.
        config: Configuration; the cached global config is used when omitted.
    """
    cfg = config or get_config()
    if dispatcher is None:
        dispatcher = build_dispatcher(cfg.server)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Starting carryall bridge on {} ({} callables allowed)",
            cfg.server.path,
            len(dispatcher.registry),
        )
        yield
        logger.info("Carryall bridge stopped")

    app = FastAPI(
        title="Carryall Bridge",
        description="Call server-side Python callables over a single HTTP exchange",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.dispatcher = dispatcher

    @app.exception_handler(CarryallError)
    async def carryall_exception_handler(request: Request, exc: CarryallError):
        logger.warning("Rejected bridge request [{}]: {}", exc.code, exc.message)
        return JSONResponse(
            status_code=classify_http_status(exc),
            content={"errortext": exc.message},
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        code, _ = classify_exception(exc)
        logger.exception("Unhandled exception [{}]: {}", code, sanitize_error_message(str(exc)))
        return JSONResponse(
            status_code=500,
            content={"errortext": "An unexpected error occurred"},
        )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.server.allow_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.post(cfg.server.path)
    async def dispatch_call(request: Request) -> Response:
        form = await request.form()
        return Response(content=await dispatcher.respond_form(form), media_type=JSON_MEDIA_TYPE)

    return app
