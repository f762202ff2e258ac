# src/textdeck/services/transport.py
"""
Single chat-completion call against the GLM vendor, either directly or via the
in-process intermediary (`/api/proxy/glm`).

Every failure is returned as a `TransportFailure` value; nothing raises past
`complete()`.
"""
from __future__ import annotations

import abc
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import anyio
import httpx

from textdeck.core.logging import get_logger
from textdeck.core.metrics import VENDOR_LATENCY

log = get_logger(__name__)

TEMPERATURE = 0.3
MAX_TOKENS = 2000


class FailureKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate-limited"
    SERVER_ERROR = "server-error"
    NETWORK_ERROR = "network-error"
    TIMEOUT = "timeout"
    MALFORMED_RESPONSE = "malformed-response"


@dataclass(frozen=True)
class TransportFailure:
    kind: FailureKind
    status: Optional[int] = None
    detail: str = ""


@dataclass(frozen=True)
class TransportResult:
    text: Optional[str] = None
    failure: Optional[TransportFailure] = None
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.failure is None and self.text is not None


@runtime_checkable
class ChatTransport(Protocol):
    name: str
    async def complete(self, api_key: str, model: str, prompt: str, timeout: float) -> TransportResult: ...


def classify_status(status: int) -> FailureKind:
    if status in (401, 403):
        return FailureKind.UNAUTHORIZED
    if status == 429:
        return FailureKind.RATE_LIMITED
    return FailureKind.SERVER_ERROR


def vendor_payload(model: str, content: str) -> Dict[str, Any]:
    return {
        "model": model,
        "messages": [{"role": "user", "content": content}],
        "temperature": TEMPERATURE,
        "max_tokens": MAX_TOKENS,
        "stream": False,
    }


def message_content(data: Any) -> Optional[str]:
    """Pull `choices[0].message.content` out of a vendor body, or None."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None


class _HttpTransport(abc.ABC):
    """Shared call/timeout/classification logic; subclasses build the request and read the body."""
    name = "http"

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self._client = client

    @abc.abstractmethod
    def _request(self, api_key: str, model: str, prompt: str) -> tuple[str, Dict[str, str], Dict[str, Any]]:
        raise NotImplementedError

    @abc.abstractmethod
    def _read(self, data: Any) -> Optional[str]:
        raise NotImplementedError

    async def _post(self, url: str, headers: Dict[str, str], body: Dict[str, Any], timeout: float) -> httpx.Response:
        if self._client is not None:
            return await self._client.post(url, headers=headers, json=body, timeout=timeout)
        async with httpx.AsyncClient(timeout=timeout) as c:
            return await c.post(url, headers=headers, json=body)

    async def complete(self, api_key: str, model: str, prompt: str, timeout: float) -> TransportResult:
        url, headers, body = self._request(api_key, model, prompt)
        start = time.perf_counter()

        def _elapsed() -> int:
            return int((time.perf_counter() - start) * 1000)

        def _fail(kind: FailureKind, status: Optional[int] = None, detail: str = "") -> TransportResult:
            ms = _elapsed()
            VENDOR_LATENCY.labels(self.name, kind.value).observe(ms / 1000)
            log.warning("%s call failed: %s status=%s after %dms %s", self.name, kind.value, status, ms, detail[:200])
            return TransportResult(failure=TransportFailure(kind, status, detail), elapsed_ms=ms)

        try:
            with anyio.fail_after(timeout):
                resp = await self._post(url, headers, body, timeout)
        except (TimeoutError, httpx.TimeoutException) as e:
            return _fail(FailureKind.TIMEOUT, detail=str(e) or "deadline exceeded")
        except httpx.HTTPError as e:
            return _fail(FailureKind.NETWORK_ERROR, detail=str(e) or e.__class__.__name__)
        except Exception as e:  # adapter boundary: nothing escapes as an exception
            return _fail(FailureKind.NETWORK_ERROR, detail=f"{e.__class__.__name__}: {e}")

        if not resp.is_success:
            return _fail(classify_status(resp.status_code), resp.status_code, resp.text)

        try:
            data = resp.json()
        except (ValueError, RecursionError) as e:
            return _fail(FailureKind.MALFORMED_RESPONSE, resp.status_code, f"body is not JSON: {e}")

        text = self._read(data)
        if text is None:
            return _fail(FailureKind.MALFORMED_RESPONSE, resp.status_code, "missing choices[0].message.content")

        ms = _elapsed()
        VENDOR_LATENCY.labels(self.name, "ok").observe(ms / 1000)
        log.info("%s call ok in %dms, %d chars", self.name, ms, len(text))
        return TransportResult(text=text.strip(), elapsed_ms=ms)


class DirectVendorTransport(_HttpTransport):
    name = "direct"

    def __init__(self, api_url: str, client: Optional[httpx.AsyncClient] = None):
        super().__init__(client)
        self.api_url = api_url

    def _request(self, api_key, model, prompt):
        headers = {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}
        return self.api_url, headers, vendor_payload(model, prompt)

    def _read(self, data):
        return message_content(data)


class ProxiedVendorTransport(_HttpTransport):
    name = "proxied"

    def __init__(self, base_url: str, client: Optional[httpx.AsyncClient] = None):
        super().__init__(client)
        self.base_url = base_url.rstrip("/")

    def _request(self, api_key, model, prompt):
        headers = {"Content-Type": "application/json"}
        body = {"apiKey": api_key, "model": model, "content": prompt}
        return f"{self.base_url}/api/proxy/glm", headers, body

    def _read(self, data):
        if not isinstance(data, dict) or not data.get("success"):
            return None
        return message_content(data.get("data"))
