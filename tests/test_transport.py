import asyncio
import json

import httpx
import pytest

from textdeck.services.transport import (
    ChatTransport,
    _HttpTransport,
    DirectVendorTransport,
    FailureKind,
    ProxiedVendorTransport,
    classify_status,
)

VENDOR_URL = "https://vendor.test/api/paas/v4/chat/completions"


def _vendor_body(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def _run(transport, timeout=5.0):
    return asyncio.run(transport.complete("sk-test", "glm-4.5", "make slides", timeout))


def test_classify_status():
    assert classify_status(401) is FailureKind.UNAUTHORIZED
    assert classify_status(403) is FailureKind.UNAUTHORIZED
    assert classify_status(429) is FailureKind.RATE_LIMITED
    assert classify_status(500) is FailureKind.SERVER_ERROR
    assert classify_status(503) is FailureKind.SERVER_ERROR
    assert classify_status(404) is FailureKind.SERVER_ERROR


def test_transports_satisfy_protocol():
    assert isinstance(DirectVendorTransport(VENDOR_URL), ChatTransport)
    assert isinstance(ProxiedVendorTransport("http://localhost:3000"), ChatTransport)


def test_direct_sends_vendor_payload_and_returns_content():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_vendor_body("  [{\"title\": \"A\"}]  "))

    res = _run(DirectVendorTransport(VENDOR_URL, client=_client(handler)))
    assert res.ok
    assert res.text == '[{"title": "A"}]'
    assert seen["url"] == VENDOR_URL
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"] == {
        "model": "glm-4.5",
        "messages": [{"role": "user", "content": "make slides"}],
        "temperature": 0.3,
        "max_tokens": 2000,
        "stream": False,
    }


def test_direct_maps_http_errors():
    for status, kind in ((401, FailureKind.UNAUTHORIZED), (429, FailureKind.RATE_LIMITED), (502, FailureKind.SERVER_ERROR)):
        res = _run(DirectVendorTransport(VENDOR_URL, client=_client(lambda r, s=status: httpx.Response(s, text="nope"))))
        assert not res.ok
        assert res.failure.kind is kind
        assert res.failure.status == status


def test_direct_missing_content_is_malformed():
    res = _run(DirectVendorTransport(VENDOR_URL, client=_client(lambda r: httpx.Response(200, json={"choices": []}))))
    assert res.failure.kind is FailureKind.MALFORMED_RESPONSE


def test_non_json_body_is_malformed():
    res = _run(DirectVendorTransport(VENDOR_URL, client=_client(lambda r: httpx.Response(200, text="<html>"))))
    assert res.failure.kind is FailureKind.MALFORMED_RESPONSE


def test_network_error_is_captured():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    res = _run(DirectVendorTransport(VENDOR_URL, client=_client(handler)))
    assert res.failure.kind is FailureKind.NETWORK_ERROR


def test_deadline_cancels_slow_call():
    async def handler(request):
        await asyncio.sleep(5)
        return httpx.Response(200, json=_vendor_body("[]"))

    res = _run(DirectVendorTransport(VENDOR_URL, client=_client(handler)), timeout=0.05)
    assert res.failure.kind is FailureKind.TIMEOUT
    assert res.elapsed_ms < 2000


def test_proxied_posts_to_intermediary():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "data": _vendor_body("[]")})

    res = _run(ProxiedVendorTransport("http://localhost:3000/", client=_client(handler)))
    assert res.ok and res.text == "[]"
    assert seen["url"] == "http://localhost:3000/api/proxy/glm"
    assert seen["body"] == {"apiKey": "sk-test", "model": "glm-4.5", "content": "make slides"}


def test_proxied_unsuccessful_envelope_is_malformed():
    res = _run(ProxiedVendorTransport("http://p", client=_client(lambda r: httpx.Response(200, json={"success": False}))))
    assert res.failure.kind is FailureKind.MALFORMED_RESPONSE


def test_proxied_mirrors_vendor_status():
    res = _run(ProxiedVendorTransport("http://p", client=_client(lambda r: httpx.Response(429, json={"success": False}))))
    assert res.failure.kind is FailureKind.RATE_LIMITED


def test_deeply_nested_body_is_malformed():
    body = b"[" * 5000 + b"]" * 5000
    res = _run(DirectVendorTransport(VENDOR_URL, client=_client(
        lambda r: httpx.Response(200, content=body, headers={"content-type": "application/json"})
    )))
    assert res.failure.kind is FailureKind.MALFORMED_RESPONSE


def test_http_transport_base_cannot_be_instantiated():
    with pytest.raises(TypeError):
        _HttpTransport()
