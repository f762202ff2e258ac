# src/textdeck/api/deps.py
from __future__ import annotations

import httpx
from fastapi import Request

from textdeck.core.config import Settings, settings
from textdeck.parsing.orchestrator import ParseConfig, ParseOrchestrator
from textdeck.services.transport_router import environment_name, select_transport


def parse_config_from(cfg: Settings) -> ParseConfig:
    """The orchestrator only ever sees this; it never reads settings itself."""
    return ParseConfig(
        api_key=cfg.GLM_API_KEY or None,
        model=cfg.GLM_MODEL,
        timeout_seconds=cfg.PARSE_TIMEOUT_SEC,
        environment=environment_name(cfg),
        max_text_chars=cfg.MAX_TEXT_CHARS,
    )


def build_orchestrator(cfg: Settings, client: httpx.AsyncClient) -> ParseOrchestrator:
    return ParseOrchestrator(parse_config_from(cfg), select_transport(cfg, client=client))


def get_settings() -> Settings:
    return settings


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_orchestrator(request: Request) -> ParseOrchestrator:
    return request.app.state.orchestrator
