# src/textdeck/core/ctx.py
from __future__ import annotations
import contextvars
from typing import Optional, Mapping

_request_id   = contextvars.ContextVar("request_id",   default=None)
_parse_method = contextvars.ContextVar("parse_method", default=None)

def set_ctx(*, request_id: Optional[str]=None, parse_method: Optional[str]=None) -> None:
    if request_id is not None:   _request_id.set(request_id)
    if parse_method is not None: _parse_method.set(parse_method)

def get_ctx() -> Mapping[str, Optional[str]]:
    return {
        "request_id":   _request_id.get(),
        "parse_method": _parse_method.get(),
    }
