# src/textdeck/services/transport_router.py
"""
Pick how the vendor is reached for this deployment.

Production hosts call the vendor directly. Everywhere else (local dev, preview
builds) long-lived outbound calls are unreliable, so requests go through the
intermediary endpoint served by this same process.
"""
from __future__ import annotations

from typing import Optional

import httpx

from textdeck.core.config import Settings
from textdeck.services.transport import ChatTransport, DirectVendorTransport, ProxiedVendorTransport


def is_production(cfg: Settings) -> bool:
    envs = (cfg.APP_ENV, cfg.NODE_ENV, cfg.VERCEL_ENV)
    return any((e or "").strip().lower() == "production" for e in envs)


def environment_name(cfg: Settings) -> str:
    return "production" if is_production(cfg) else "development"


def proxy_base_url(cfg: Settings) -> str:
    if cfg.PROXY_BASE_URL:
        return cfg.PROXY_BASE_URL.rstrip("/")
    if cfg.VERCEL_URL:
        return f"https://{cfg.VERCEL_URL}"
    return f"http://localhost:{cfg.PORT}"


def select_transport(cfg: Settings, client: Optional[httpx.AsyncClient] = None) -> ChatTransport:
    """Deterministic given `cfg`; builds the transport but performs no I/O."""
    if is_production(cfg):
        return DirectVendorTransport(cfg.GLM_API_URL, client=client)
    return ProxiedVendorTransport(proxy_base_url(cfg), client=client)
