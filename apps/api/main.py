"""
Test case reports API - FastAPI application entry point.
"""
from __future__ import annotations

import logging
import os
import sys
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

API_VERSION = "0.1.0"


def _parse_csv_env(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    return [value.strip() for value in raw.split(",") if value.strip()]


def _parse_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# Configure structured logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger("testcase_reports")

app = FastAPI(
    title="Test Case Reports API",
    description="Excel and PDF reports generated from the test-case dataset",
    version=API_VERSION,
)

cors_allow_origins = _parse_csv_env("CORS_ALLOW_ORIGINS", ["*"])
audit_logging_enabled = _parse_bool_env("AUDIT_LOGGING", True)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_allow_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-Id"],
    expose_headers=["Content-Disposition", "X-Request-Id"],
)


@app.middleware("http")
async def request_audit_middleware(request: Request, call_next):
    started = time.perf_counter()
    request_id = request.headers.get("X-Request-Id") or uuid.uuid4().hex

    response = await call_next(request)
    response.headers["X-Request-Id"] = request_id

    if audit_logging_enabled:
        duration_ms = int((time.perf_counter() - started) * 1000)
        logger.info(
            "request_audit request_id=%s method=%s path=%s status=%s duration_ms=%s",
            request_id,
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )

    return response


# Register routes
from apps.api.routes.reports import router as reports_router  # noqa: E402

app.include_router(reports_router)


@app.get("/health")
def health():
    return {"status": "ok", "version": API_VERSION}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "apps.api.main:app",
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", "3003")),
    )
