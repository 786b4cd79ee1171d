"""FastAPI application exposing spark submit, status and kill over HTTP."""
from __future__ import annotations

import logging
import time
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from sparkserve import __version__
from sparkserve.errors import PresetNotFoundError
from sparkserve.metrics import InMemoryMetrics
from sparkserve.spark import SparkSubmitter

LOGGER = logging.getLogger(__name__)

WILDCARD_NAME = "*"


class HealthResponse(BaseModel):
    ok: bool


class StatusResponse(BaseModel):
    status: str


class MetricsResponse(BaseModel):
    retry_total: Dict[str, int]
    spark_exec_total: Dict[str, int]


def _require(name: str, value: Optional[str]) -> str:
    if not value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"missing parameter {name}")
    return value


def create_app(
    submitter: SparkSubmitter,
    metrics: Optional[InMemoryMetrics] = None,
    logger: Optional[logging.Logger] = None,
) -> FastAPI:
    """Create a FastAPI application bound to the given submitter."""

    log = logger or LOGGER
    app = FastAPI(title="sparkserve", version=__version__)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):  # type: ignore[override]
        start = time.perf_counter()
        response: Optional[Response] = None
        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            status_code = response.status_code if response is not None else 500
            log.debug(
                f"{request.method} {request.url.path} {status_code} {duration_ms:.1f}ms",
                extra={"event": "http_request"},
            )

    # Also covers the router's own 404/405 responses
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "invalid request"})

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(request: Request, exc: Exception):
        log.error(
            f"unexpected error returned in handler: {exc}",
            extra={"event": "http_unexpected_error", "metadata": {"path": request.url.path}},
            exc_info=exc,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "unexpected error"},
        )

    @app.get("/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(ok=True)

    @app.post("/")
    def submit(preset: Optional[str] = Query(None)) -> Response:
        preset = _require("preset", preset)
        try:
            submitter.submit(preset)
        except PresetNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="preset not found")
        except Exception as exc:
            log.error(
                f"error when submitting spark app: {exc}",
                extra={"event": "submit_error", "metadata": {"preset": preset}},
                exc_info=True,
            )
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="error when submitting spark app",
            ) from exc
        return Response(status_code=status.HTTP_200_OK)

    @app.get("/", response_model=StatusResponse)
    def job_status(
        namespace: Optional[str] = Query(None),
        name: Optional[str] = Query(None),
    ) -> StatusResponse:
        namespace = _require("namespace", namespace)
        return StatusResponse(status=submitter.status(namespace, name or WILDCARD_NAME))

    @app.delete("/")
    def kill(
        namespace: Optional[str] = Query(None),
        name: Optional[str] = Query(None),
    ) -> Response:
        namespace = _require("namespace", namespace)
        name = _require("name", name)
        submitter.kill(namespace, name)
        return Response(status_code=status.HTTP_200_OK)

    if metrics is not None:

        @app.get("/metrics", response_model=MetricsResponse)
        def metrics_snapshot() -> MetricsResponse:
            return MetricsResponse(**metrics.snapshot())

    return app
