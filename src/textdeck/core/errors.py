# src/textdeck/core/errors.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional, Dict, Any


@dataclass(eq=False)
class ProblemDetails(Exception):
    """Base for errors that are rendered to the caller as `{success: false, ...}`."""
    error: str = "Request failed"
    detail: str = ""
    status: int = 400
    code: Optional[str] = None
    meta: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": False,
            "error": self.error,
            "details": self.detail,
        }
        if self.code is not None:
            data["code"] = self.code
        if self.meta is not None:
            data["meta"] = self.meta
        return data

    def __str__(self) -> str:
        return f"{self.error} ({self.code or ''}): {self.detail}"


@dataclass(eq=False)
class InvalidInput(ProblemDetails):
    error: str = "Please provide the text to parse"
    status: int = 400
    code: Optional[str] = "E_INVALID_INPUT"


@dataclass(eq=False)
class InternalError(ProblemDetails):
    error: str = "Parsing failed, please try again later"
    status: int = 500
    code: Optional[str] = "E_INTERNAL"


@dataclass(eq=False)
class MalformedResponse(ProblemDetails):
    """Model output could not be turned into a JSON array. Never leaves the orchestrator."""
    error: str = "Malformed model response"
    status: int = 502
    code: Optional[str] = "E_MALFORMED_RESPONSE"
    raw: str = field(default="", repr=False)


def sanitize_internal(exc: BaseException) -> InternalError:
    """Map an unexpected exception to a caller-safe message, keeping the raw text as details."""
    msg = str(exc)
    if "API_KEY" in msg:
        error = "AI service is misconfigured, please contact the administrator"
    elif "quota" in msg:
        error = "AI service usage limit reached, please try again later"
    elif "network" in msg:
        error = "Network connection failed, please check the network and retry"
    else:
        error = InternalError.error
    return InternalError(error=error, detail=msg or exc.__class__.__name__)
