# src/textdeck/api/routes/proxy.py
"""
Same-process intermediary for the GLM vendor.

Used by the proxied transport where the runtime cannot hold a long outbound
call itself. Mirrors the vendor status on failure.
"""
from __future__ import annotations

import time
from typing import Any, Dict

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from textdeck.api.deps import get_http_client, get_settings
from textdeck.core.config import Settings
from textdeck.core.logging import get_logger
from textdeck.services.transport import vendor_payload

router = APIRouter()
log = get_logger(__name__)

_STATUS_ERRORS = {
    401: "GLM API key is invalid or expired",
    429: "GLM API rate limit reached, please retry later",
    500: "GLM server error, please retry later",
}


def _error(http_status: int, error: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=http_status, content={"success": False, "error": error, **extra})


@router.post("/api/proxy/glm")
async def proxy_glm(
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client),
    cfg: Settings = Depends(get_settings),
) -> JSONResponse:
    try:
        body: Any = await request.json()
    except ValueError:
        return _error(400, "Request body must be JSON")
    if not isinstance(body, dict):
        return _error(400, "Request body must be a JSON object")

    api_key = body.get("apiKey")
    content = body.get("content")
    model = body.get("model") or cfg.GLM_MODEL
    if not isinstance(api_key, str) or not api_key:
        return _error(400, "API Key is required")
    if not isinstance(content, str) or not content:
        return _error(400, "Content is required")

    log.info("proxying GLM call: model=%s content=%d chars", model, len(content))
    start = time.perf_counter()
    try:
        resp = await client.post(
            cfg.GLM_API_URL,
            headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
            json=vendor_payload(model, content),
            timeout=cfg.PROXY_TIMEOUT_SEC,
        )
    except httpx.TimeoutException as e:
        log.warning("GLM proxy timed out: %s", e)
        return _error(500, "Request timed out, please retry later", details=str(e) or "timeout")
    except httpx.HTTPError as e:
        log.warning("GLM proxy network failure: %s", e)
        return _error(500, "Network connection failed, cannot reach the GLM API", details=str(e) or e.__class__.__name__)
    elapsed_ms = int((time.perf_counter() - start) * 1000)
    log.info("GLM responded %s in %dms", resp.status_code, elapsed_ms)

    if not resp.is_success:
        error = _STATUS_ERRORS.get(resp.status_code, "GLM API call failed")
        return _error(resp.status_code, error, details=resp.text, status=resp.status_code)

    try:
        data: Dict[str, Any] = resp.json()
    except (ValueError, RecursionError) as e:
        return _error(502, "GLM API returned a non-JSON body", details=str(e))

    return JSONResponse({
        "success": True,
        "data": data,
        "metadata": {
            "responseTime": elapsed_ms,
            "model": model,
            "contentLength": len(content),
        },
    })
