from __future__ import annotations

import logging
import time
from uuid import uuid4

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from cero.core.credentials.store import seed_from_token_file
from cero.core.logging import configure_logging
from cero.core.logging.context import log_context
from cero.core.settings import state_dir

from .deps import get_credential_store, get_settings
from .routes_chat import router as chat_router
from .routes_dashboard import router as dashboard_router
from .routes_tools import router as tools_router
from .routes_webhook import router as webhook_router, webhook

logger = logging.getLogger("cero.api")

app = FastAPI(title="Cero API")
configure_logging(state_dir())
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(chat_router, prefix="/chat", tags=["chat"])
app.include_router(webhook_router, prefix="/api/webhook", tags=["webhook"])
app.include_router(webhook_router, prefix="/responses", tags=["webhook"])
app.include_router(tools_router, prefix="/api/tools", tags=["tools"])
app.include_router(dashboard_router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(webhook_router, tags=["webhook"])
# Bare prefixes answer directly instead of redirecting to the trailing-slash route.
app.add_api_route("/api/webhook", webhook, methods=["POST"], tags=["webhook"])
app.add_api_route("/responses", webhook, methods=["POST"], tags=["webhook"])


@app.middleware("http")
async def request_context_middleware(request, call_next):
    correlation_id = request.headers.get("X-Correlation-ID") or str(uuid4())
    start = time.perf_counter()
    with log_context(correlation_id=correlation_id):
        response = await call_next(request)
        logger.info(
            "http_request",
            extra={
                "extra_fields": {
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                }
            },
        )
    response.headers["X-Correlation-ID"] = correlation_id
    return response


@app.on_event("startup")
def startup() -> None:
    settings = get_settings()
    if seed_from_token_file(get_credential_store(), settings.default_identity, settings.google.token_path):
        logger.info("credential_seeded", extra={"extra_fields": {"identity_key": settings.default_identity}})


@app.get("/", response_class=PlainTextResponse)
def root() -> str:
    return "Cero backend is running!"


@app.get("/healthz")
def healthz() -> dict[str, bool]:
    return {"ok": True}


def run() -> None:
    uvicorn.run("cero.apps.api.main:app", host="0.0.0.0", port=8000)
