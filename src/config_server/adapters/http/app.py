"""FastAPI transport exposing Save and Poll.

Purpose
-------
Translate HTTP requests into calls on :class:`~config_server.core.ConfigServer`
and map the domain error taxonomy onto response statuses. Endpoints are plain
``def`` functions: every save or poll runs synchronously on the worker thread
pool and shares nothing in-process apart from the store.

Contents
--------
* :func:`create_app` – application factory.
* :data:`TRACE_HEADER` – request identifier header bound into log context.
"""

from __future__ import annotations

import uuid
from typing import Any, Final

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from ...application.save import SaveOutcome, build_document
from ...core import ConfigServer
from ...domain.errors import (
    ConfigServerError,
    InvalidFormat,
    NotFound,
    PolicyConflict,
    StoreFailure,
    TransformFailure,
    ValidationError,
)
from ...observability import bind_trace_id, log_error, log_warning
from .models import SaveConfigRequest

TRACE_HEADER: Final[str] = "X-Request-ID"

_ERROR_STATUS: Final[tuple[tuple[type[ConfigServerError], int], ...]] = (
    (PolicyConflict, 304),
    (NotFound, 404),
    (ValidationError, 400),
    (InvalidFormat, 400),
    (StoreFailure, 500),
    (TransformFailure, 500),
)


def create_app(server: ConfigServer | None = None) -> FastAPI:
    """Create the HTTP application around *server* (a default in-memory server when omitted)."""

    app = FastAPI(title="config-server", summary="Configuration synthesis and distribution")
    app.state.server = server if server is not None else ConfigServer.build()

    @app.middleware("http")
    async def bind_request_trace(request: Request, call_next: Any) -> Response:
        trace_id = request.headers.get(TRACE_HEADER) or uuid.uuid4().hex
        bind_trace_id(trace_id)
        try:
            response = await call_next(request)
        finally:
            bind_trace_id(None)
        response.headers[TRACE_HEADER] = trace_id
        return response

    @app.exception_handler(RequestValidationError)
    async def handle_invalid_request(request: Request, exc: RequestValidationError) -> Response:
        log_warning("request_invalid", path=request.url.path, errors=len(exc.errors()))
        return PlainTextResponse("invalid save config request", status_code=400)

    @app.exception_handler(ConfigServerError)
    async def handle_domain_error(request: Request, exc: ConfigServerError) -> Response:
        status = _status_for(exc)
        if status == 304:
            return Response(status_code=304)
        if status >= 500:
            log_error("request_failed", path=request.url.path, status=status, error=str(exc))
        else:
            log_warning("request_failed", path=request.url.path, status=status, error=str(exc))
        return PlainTextResponse(str(exc), status_code=status)

    @app.post("/configs")
    def save_config(payload: SaveConfigRequest, request: Request) -> Response:
        """Save a configuration document according to its update policy."""

        server: ConfigServer = request.app.state.server
        document = build_document(
            service=payload.service,
            version=payload.version,
            namespace=payload.namespace,
            update_policy=payload.update_policy,
            yaml_text=payload.yaml,
            profile=payload.profile,
        )
        outcome = server.saver.save(document)
        return Response(status_code=201 if outcome is SaveOutcome.CREATED else 200)

    @app.get("/{service}/{version}")
    def poll_config(service: str, version: str, request: Request) -> Response:
        """Return the resolved environment of *service* for profile *version*."""

        if not service.strip():
            return PlainTextResponse("service is empty", status_code=400)
        if not version.strip():
            return PlainTextResponse("version is empty", status_code=400)
        server: ConfigServer = request.app.state.server
        try:
            environment = server.assembler.resolve(service, version)
        except InvalidFormat as exc:
            log_error("stored_yaml_invalid", service=service, profile=version, error=str(exc))
            return PlainTextResponse("invalid stored yaml", status_code=500)
        return JSONResponse(environment.as_dict())

    return app


def _status_for(exc: ConfigServerError) -> int:
    for error_cls, status in _ERROR_STATUS:
        if isinstance(exc, error_cls):
            return status
    return 500
