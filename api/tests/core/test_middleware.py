"""Unit tests for core.middleware module.

Tests ASGI middleware:
- SecurityHeadersMiddleware adds security headers to HTTP responses
- SecurityHeadersMiddleware allows data: images for avatar previews
- SecurityHeadersMiddleware skips non-HTTP scopes
- SecurityHeadersMiddleware adds cache-control for static paths
"""

import pytest

from core.middleware import SecurityHeadersMiddleware


async def _noop_receive():
    return {"type": "http.request", "body": b""}


async def _make_app_that_sends_response(scope, receive, send):
    """Simulate an ASGI app that sends a response."""
    await send({"type": "http.response.start", "status": 200, "headers": []})
    await send({"type": "http.response.body", "body": b"OK"})


async def _collect_start_headers(path: str) -> dict[bytes, bytes]:
    middleware = SecurityHeadersMiddleware(_make_app_that_sends_response)
    sent_messages = []

    async def mock_send(message):
        sent_messages.append(message)

    await middleware({"type": "http", "path": path}, _noop_receive, mock_send)
    return {h[0]: h[1] for h in sent_messages[0]["headers"]}


@pytest.mark.unit
class TestSecurityHeadersMiddleware:
    """Test SecurityHeadersMiddleware adds expected headers."""

    async def test_adds_security_headers(self):
        headers = await _collect_start_headers("/htmx/preview/abc")

        assert b"x-content-type-options" in headers
        assert b"x-frame-options" in headers
        assert b"x-xss-protection" in headers
        assert b"referrer-policy" in headers
        assert b"content-security-policy" in headers
        assert b"permissions-policy" in headers

    async def test_csp_allows_data_uri_images(self):
        headers = await _collect_start_headers("/")

        assert b"img-src 'self' data:" in headers[b"content-security-policy"]

    async def test_skips_non_http_scopes(self):
        called = False

        async def inner_app(scope, receive, send):
            nonlocal called
            called = True

        middleware = SecurityHeadersMiddleware(inner_app)
        scope = {"type": "websocket"}

        await middleware(scope, _noop_receive, lambda msg: None)
        assert called

    async def test_adds_cache_control_for_static_paths(self):
        headers = await _collect_start_headers("/static/css/editor.css")

        assert b"cache-control" in headers
        assert b"immutable" in headers[b"cache-control"]

    async def test_no_cache_control_for_non_static_paths(self):
        headers = await _collect_start_headers("/health")

        assert b"cache-control" not in headers

    async def test_preserves_existing_headers(self):
        async def app_with_headers(scope, receive, send):
            await send(
                {
                    "type": "http.response.start",
                    "status": 200,
                    "headers": [(b"x-custom", b"value")],
                }
            )

        middleware = SecurityHeadersMiddleware(app_with_headers)
        scope = {"type": "http", "path": "/test"}
        sent_messages = []

        async def mock_send(message):
            sent_messages.append(message)

        await middleware(scope, _noop_receive, mock_send)

        response_start = sent_messages[0]
        header_names = {h[0] for h in response_start["headers"]}
        assert b"x-custom" in header_names
        assert b"x-content-type-options" in header_names
