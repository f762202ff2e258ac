# src/textdeck/main.py
from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from textdeck.core.config import settings
from textdeck.core.errors import ProblemDetails
from textdeck.core.logging import get_logger
from textdeck.core.metrics import MetricsMiddleware, metrics_app
from textdeck.core.observability import setup_otel
from textdeck.api.deps import build_orchestrator
from textdeck.api.routes.proxy import router as proxy_router
from textdeck.api.routes.slides import router as slides_router
from textdeck.services.transport_router import environment_name, is_production

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One pooled client for vendor, intermediary and proxy-route calls
    app.state.http_client = httpx.AsyncClient(timeout=settings.PROXY_TIMEOUT_SEC)
    app.state.orchestrator = build_orchestrator(settings, app.state.http_client)
    log.info(
        "textdeck ready: env=%s transport=%s api_key=%s",
        environment_name(settings),
        app.state.orchestrator.transport.name,
        "set" if settings.GLM_API_KEY else "missing",
    )
    try:
        yield
    finally:
        await app.state.http_client.aclose()


app = FastAPI(title="textdeck", version="0.1.0", lifespan=lifespan)

# ---- Middlewares (order matters) ----
app.add_middleware(MetricsMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Prometheus metrics
app.mount("/metrics", metrics_app)

# Telemetry
setup_otel(app)


@app.exception_handler(ProblemDetails)
async def problem_handler(request: Request, exc: ProblemDetails):
    return JSONResponse(status_code=exc.status, content=exc.to_dict())


@app.get("/health")
async def health():
    return JSONResponse({
        "ok": True,
        "env": environment_name(settings),
        "apiKeyConfigured": bool(settings.GLM_API_KEY),
        "model": settings.GLM_MODEL,
        "transport": "direct" if is_production(settings) else "proxied",
    })


# ---- Routers ----
app.include_router(slides_router, tags=["slides"])
app.include_router(proxy_router, tags=["proxy"])
