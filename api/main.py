"""FastAPI entrypoint for the sales report HTTP endpoints."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse

from backend.factory import build_report_tool_service
from backend.services.tools import ReportToolService
from shared import config as _config
from shared.models import ToolError, ToolErrorCode


logger = logging.getLogger(__name__)


_STATUS_BY_ERROR_CODE = {
    ToolErrorCode.VALIDATION_ERROR: 400,
    ToolErrorCode.INTERNAL_QUERY_ERROR: 500,
    ToolErrorCode.PARTIAL_DEPENDENCY_FAILURE: 502,
}


@lru_cache(maxsize=1)
def get_report_service() -> ReportToolService:
    """Create and cache the report tool service once per process."""

    return build_report_tool_service()


def _respond(result: Any) -> Any:
    if isinstance(result, ToolError):
        raise HTTPException(
            status_code=_STATUS_BY_ERROR_CODE.get(result.code, 500),
            detail=jsonable_encoder(result),
        )
    return jsonable_encoder(result)


app = FastAPI(title="Sales Report API")

ALLOW_ORIGINS = _config.cors_allow_origins()


@app.middleware("http")
async def log_http_requests(request: Request, call_next):
    """Log incoming requests, HTTP status codes and unexpected errors."""

    logger.info("http_request_received method=%s path=%s", request.method, request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "http_request_failed method=%s path=%s",
            request.method,
            request.url.path,
        )
        raise

    logger.info(
        "http_response_sent method=%s path=%s status_code=%s",
        request.method,
        request.url.path,
        response.status_code,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info("cors_allow_origins=%s", ALLOW_ORIGINS)


@app.exception_handler(Exception)
async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Return a JSON 500 response for unhandled exceptions."""

    logger.exception(
        "unhandled_exception method=%s path=%s exception_type=%s message=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        str(exc),
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.get("/health")
def health() -> dict[str, str]:
    """Healthcheck endpoint."""

    return {"status": "ok"}


@app.api_route("/api/init", methods=["GET", "POST"])
def init_database() -> Any:
    """Replace the transaction collection with the configured seed dataset."""

    return _respond(get_report_service().seed({}))


@app.get("/api/transactions")
def list_transactions(
    month: str | None = None,
    search: str | None = None,
    page: str | None = None,
    per_page: str | None = Query(default=None, alias="perPage"),
) -> Any:
    """Return one page of the month's transactions matching ``search``."""

    payload = {"month": month, "search": search, "page": page, "perPage": per_page}
    return _respond(get_report_service().transactions_list(payload))


@app.get("/api/statistics")
def get_statistics(month: str | None = None) -> Any:
    return _respond(get_report_service().statistics({"month": month}))


@app.get("/api/bar-chart")
def get_bar_chart(month: str | None = None) -> Any:
    return _respond(get_report_service().bar_chart({"month": month}))


@app.get("/api/pie-chart")
def get_pie_chart(month: str | None = None) -> Any:
    return _respond(get_report_service().pie_chart({"month": month}))


@app.get("/api/combined-data")
def get_combined_data(month: str | None = None) -> Any:
    """Return transactions, statistics, bar chart and pie chart for one month."""

    return _respond(get_report_service().combined({"month": month}))
