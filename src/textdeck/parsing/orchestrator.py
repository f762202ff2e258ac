# src/textdeck/parsing/orchestrator.py
"""
Drives one text → slides parse.

    Idle → PreparingPrompt → AwaitingTransport → ExtractingResponse → Normalizing → Done
                                    └──────────────┴──→ Fallback ──→ Normalizing

Once the input is accepted the result is always a successful, non-empty slide
set: every AI-path failure lands in Fallback instead of propagating.
"""
from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

import anyio

from textdeck.core.ctx import set_ctx
from textdeck.core.errors import MalformedResponse
from textdeck.core.logging import get_logger
from textdeck.core.metrics import SLIDE_PARSES
from textdeck.models.slide import ParseMetadata, ParseOutcome
from textdeck.parsing.extractor import decode_slide_array
from textdeck.parsing.fallback import RuleBasedParser
from textdeck.parsing.normalizer import normalize_slides
from textdeck.parsing.prompt import build_parse_prompt
from textdeck.services.transport import ChatTransport, FailureKind, TransportFailure, TransportResult

log = get_logger(__name__)

RULE_FALLBACK = "rule-fallback"
REASON_MISSING_CREDENTIAL = "missing-credential"
REASON_EMPTY_RESULT = "empty-result"


class ParseState(str, Enum):
    IDLE = "Idle"
    PREPARING_PROMPT = "PreparingPrompt"
    AWAITING_TRANSPORT = "AwaitingTransport"
    EXTRACTING_RESPONSE = "ExtractingResponse"
    FALLBACK = "Fallback"
    NORMALIZING = "Normalizing"
    DONE = "Done"


@dataclass(frozen=True)
class ParseConfig:
    api_key: Optional[str] = None
    model: str = "glm-4.5"
    timeout_seconds: float = 55.0
    environment: str = "development"
    max_text_chars: int = 50000
    # Extra time granted to the transport to honour its own deadline before we cancel it
    grace_seconds: float = 1.0


class ParseOrchestrator:
    def __init__(self, config: ParseConfig, transport: ChatTransport, fallback: Optional[RuleBasedParser] = None):
        self.config = config
        self.transport = transport
        self.fallback = fallback or RuleBasedParser()

    @property
    def ai_method(self) -> str:
        return f"{self.transport.name}-ai"

    async def _call(self, prompt: str) -> TransportResult:
        cfg = self.config
        start = time.perf_counter()
        result: Optional[TransportResult] = None
        with anyio.move_on_after(cfg.timeout_seconds + cfg.grace_seconds):
            result = await self.transport.complete(cfg.api_key or "", cfg.model, prompt, cfg.timeout_seconds)
        if result is None:
            ms = int((time.perf_counter() - start) * 1000)
            log.warning("%s transport ignored its deadline; cancelled after %dms", self.transport.name, ms)
            return TransportResult(failure=TransportFailure(FailureKind.TIMEOUT, detail="cancelled"), elapsed_ms=ms)
        return result

    def _describe_failure(self, failure: TransportFailure) -> str:
        label = self.transport.name.capitalize()
        if failure.kind is FailureKind.TIMEOUT:
            return f"{label} API call timed out after {self.config.timeout_seconds:g}s, used rule-based fallback"
        if failure.kind is FailureKind.MALFORMED_RESPONSE:
            return f"{label} API response could not be parsed, used rule-based fallback"
        status = f" ({failure.status})" if failure.status else ""
        return f"{label} API call failed: {failure.kind.value}{status}"

    async def parse(self, text: str) -> ParseOutcome:
        cfg = self.config
        trail: List[str] = [ParseState.IDLE.value]
        candidates: List[Any] = []
        used_ai = False
        reason: Optional[str] = None
        timed_out = False
        elapsed_ms: Optional[int] = None

        if not cfg.api_key:
            log.warning("no API key configured, using rule-based parsing")
            reason = REASON_MISSING_CREDENTIAL
            api_call_time = "Rule-based parsing used (no API key configured)"
        else:
            trail.append(ParseState.PREPARING_PROMPT.value)
            prompt = build_parse_prompt(text[:cfg.max_text_chars])

            trail.append(ParseState.AWAITING_TRANSPORT.value)
            result = await self._call(prompt)
            elapsed_ms = result.elapsed_ms

            if result.ok:
                trail.append(ParseState.EXTRACTING_RESPONSE.value)
                try:
                    candidates = decode_slide_array(result.text or "")
                except MalformedResponse as e:
                    log.warning("model output rejected: %s", e.detail)
                    reason = FailureKind.MALFORMED_RESPONSE.value
                    api_call_time = self._describe_failure(TransportFailure(FailureKind.MALFORMED_RESPONSE))
                else:
                    if candidates:
                        used_ai = True
                        api_call_time = f"{self.transport.name.capitalize()} API call succeeded ({elapsed_ms}ms)"
                    else:
                        reason = REASON_EMPTY_RESULT
                        api_call_time = f"{self.transport.name.capitalize()} API returned no slides, used rule-based fallback"
            else:
                failure = result.failure or TransportFailure(FailureKind.MALFORMED_RESPONSE)
                reason = failure.kind.value
                timed_out = failure.kind is FailureKind.TIMEOUT
                api_call_time = self._describe_failure(failure)

        if not used_ai:
            trail.append(ParseState.FALLBACK.value)
            candidates = self.fallback.parse(text)

        method = self.ai_method if used_ai else RULE_FALLBACK
        set_ctx(parse_method=method)

        trail.append(ParseState.NORMALIZING.value)
        slides = normalize_slides(candidates)
        trail.append(ParseState.DONE.value)

        SLIDE_PARSES.labels(method, reason or "none").inc()
        log.info("parsed %d slide(s) via %s (reason=%s)", len(slides), method, reason)

        n = len(slides)
        if used_ai:
            message = f"AI parsing succeeded, generated {n} high-quality slide(s)"
        elif timed_out:
            message = f"AI service timed out, generated {n} slide(s) with rule-based parsing"
        else:
            message = f"Used rule-based parsing, generated {n} slide(s)"

        metadata = ParseMetadata(
            usedAI=used_ai,
            parseMethod=method,
            apiCallTime=api_call_time,
            quality="high" if used_ai else "medium",
            timedOut=timed_out,
            reason=reason,
            elapsedMs=elapsed_ms,
            textLength=len(text),
            slideCount=n,
            environment=cfg.environment,
            transport=self.transport.name,
        )
        return ParseOutcome(slides=slides, count=n, metadata=metadata, message=message, trail=trail)
