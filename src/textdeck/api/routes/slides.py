# src/textdeck/api/routes/slides.py
from __future__ import annotations

import uuid
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from textdeck.api.deps import get_orchestrator
from textdeck.core.ctx import set_ctx
from textdeck.core.errors import InvalidInput, sanitize_internal
from textdeck.core.logging import get_logger
from textdeck.parsing.orchestrator import ParseOrchestrator

router = APIRouter()
log = get_logger(__name__)


async def _read_text(request: Request) -> str:
    try:
        body: Any = await request.json()
    except ValueError:
        raise InvalidInput(detail="request body must be a JSON object")
    text = body.get("text") if isinstance(body, dict) else None
    if not isinstance(text, str) or not text.strip():
        raise InvalidInput(detail="`text` is missing or blank")
    return text


@router.post("/api/parse-slides")
async def parse_slides(request: Request, orchestrator: ParseOrchestrator = Depends(get_orchestrator)) -> JSONResponse:
    """
    Turn free text into slide records.

    Body: {"text": "..."}
    200:  {"success": true, "slides": [...], "count": n, "metadata": {...}, "message": "..."}
    400:  {"success": false, "error": "...", "details": "..."} for missing/blank text
    """
    set_ctx(request_id=request.headers.get("x-request-id") or uuid.uuid4().hex[:12])
    text = await _read_text(request)
    try:
        outcome = await orchestrator.parse(text)
    except Exception as e:
        log.exception("parse-slides failed")
        raise sanitize_internal(e) from e
    payload: Dict[str, Any] = outcome.to_response()
    return JSONResponse(payload)
