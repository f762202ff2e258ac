# src/textdeck/parsing/extractor.py
from __future__ import annotations

import json
import re
from typing import Any, List

from textdeck.core.errors import MalformedResponse

_FENCE = re.compile(r"```[ \t]*(?:json)?[ \t]*\r?\n?", re.I)


def strip_code_fences(text: str) -> str:
    """Remove ```json / ``` markers wherever they appear; keep the fenced content."""
    return _FENCE.sub("", text or "")


def extract_json_text(raw: str) -> str:
    """
    Best-effort JSON array text from model output.

    Slices from the first '[' to the last ']' after fence removal. When no such
    pair exists the trimmed text is returned as-is and decoding is left to fail.
    """
    clean = strip_code_fences((raw or "").strip()).strip()
    start = clean.find("[")
    end = clean.rfind("]")
    if start != -1 and end != -1 and end > start:
        return clean[start:end + 1]
    return clean


def decode_slide_array(raw: str) -> List[Any]:
    txt = extract_json_text(raw)
    try:
        data = json.loads(txt)
    except (ValueError, RecursionError) as e:
        raise MalformedResponse(detail=f"invalid JSON: {e}", raw=txt) from e
    if not isinstance(data, list):
        raise MalformedResponse(detail=f"expected a JSON array, got {type(data).__name__}", raw=txt)
    return data
