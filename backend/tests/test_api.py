"""End-to-end tests for the image endpoint."""

import pytest

from gateway.dependencies import get_redis_client
from gateway.redis.keys import CacheKeys
from gateway.services.image.options import parse_transform_options
from tests.conftest import ALLOWED_HOST, IMAGE_BYTES, encode_src

JPG_SOURCE = f"https://{ALLOWED_HOST}/photos/cat.jpg"
PNG_SOURCE = f"https://{ALLOWED_HOST}/photos/logo.png"


# ============================================================================
# Validation
# ============================================================================


@pytest.mark.asyncio
async def test_missing_src_is_400(client, transform_stub):
    response = await client.get("/", params={"w": "100"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MISSING_SOURCE"
    assert transform_stub.calls == 0


@pytest.mark.asyncio
async def test_invalid_src_is_400(client):
    response = await client.get("/", params={"src": "%%%"})
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_SOURCE"


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ["/photos/cat.bmp", "/photos/cat"])
async def test_disallowed_extension_is_400(client, path):
    response = await client.get("/", params={"src": encode_src(f"https://{ALLOWED_HOST}{path}")})

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Disallowed file extension"


@pytest.mark.asyncio
async def test_foreign_host_is_403(client, transform_stub):
    response = await client.get("/", params={"src": encode_src("https://other.example.org/a.jpg")})

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN_HOST"
    assert transform_stub.calls == 0


@pytest.mark.asyncio
async def test_backslash_authority_is_rejected(client, transform_stub):
    src = encode_src("https://evil.example.org\\@images.example.com/a.jpg")
    response = await client.get("/", params={"src": src})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_SOURCE"
    assert transform_stub.calls == 0


# ============================================================================
# Format Resolution
# ============================================================================


@pytest.mark.asyncio
async def test_png_source_beats_avif_accept(client, transform_stub):
    response = await client.get(
        "/", params={"src": encode_src(PNG_SOURCE)}, headers={"Accept": "image/avif"}
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert "format" not in transform_stub.requests[0].url.params


@pytest.mark.asyncio
async def test_jpg_source_with_webp_accept(client, transform_stub):
    response = await client.get(
        "/", params={"src": encode_src(JPG_SOURCE)}, headers={"Accept": "image/webp,*/*"}
    )

    assert response.headers["content-type"] == "image/webp"
    assert transform_stub.requests[0].url.params["format"] == "webp"


@pytest.mark.asyncio
async def test_jpg_source_defaults_to_jpeg(client, transform_stub):
    response = await client.get(
        "/", params={"src": encode_src(JPG_SOURCE)}, headers={"Accept": "text/html"}
    )

    assert response.headers["content-type"] == "image/jpeg"
    assert "format" not in transform_stub.requests[0].url.params


# ============================================================================
# Cache Waterfall
# ============================================================================


@pytest.mark.asyncio
async def test_success_headers_and_cache_writes(client, settings, object_store, edge_cache):
    params = {"src": encode_src(JPG_SOURCE), "w": "300", "fit": "cover"}
    response = await client.get("/", params=params, headers={"Accept": "image/avif"})

    assert response.status_code == 200
    assert response.content == IMAGE_BYTES
    assert response.headers["cache-control"] == (
        f"public, max-age={settings.cache_max_age_seconds}"
    )
    assert response.headers["access-control-allow-origin"] == "*"
    assert "form-action 'none'" in response.headers["content-security-policy"]
    assert response.headers["content-type"] == "image/avif"

    expected_key = CacheKeys.image(
        JPG_SOURCE,
        parse_transform_options({"fit": "cover", "w": "300"}).with_option("format", "avif"),
    )
    assert object_store.puts == [expected_key]
    assert object_store.data[expected_key] == IMAGE_BYTES
    assert await edge_cache.match(str(response.request.url)) is not None


@pytest.mark.asyncio
async def test_default_cache_duration_is_180_days(client):
    response = await client.get("/", params={"src": encode_src(JPG_SOURCE)})
    assert response.headers["cache-control"] == "public, max-age=15552000"


@pytest.mark.asyncio
async def test_repeat_request_served_from_edge(client, transform_stub):
    params = {"src": encode_src(JPG_SOURCE), "w": "300"}

    first = await client.get("/", params=params)
    second = await client.get("/", params=params)

    assert first.status_code == second.status_code == 200
    assert first.content == second.content
    assert transform_stub.calls == 1


@pytest.mark.asyncio
async def test_differently_formatted_url_hits_durable_tier(client, transform_stub, object_store):
    """Test that reordered query parameters share the durable entry."""
    src = encode_src(JPG_SOURCE)

    first = await client.get(f"/?src={src}&w=300&h=200")
    second = await client.get(f"/?h=200&w=300&src={src}")

    assert first.content == second.content == IMAGE_BYTES
    assert transform_stub.calls == 1
    assert len(object_store.puts) == 1


@pytest.mark.asyncio
async def test_request_headers_are_forwarded(client, transform_stub):
    await client.get(
        "/", params={"src": encode_src(JPG_SOURCE)}, headers={"User-Agent": "test-agent/1.0"}
    )

    assert transform_stub.requests[0].headers["user-agent"] == "test-agent/1.0"
    assert transform_stub.requests[0].url.params["url"] == JPG_SOURCE


@pytest.mark.asyncio
async def test_method_agnostic(client):
    response = await client.post("/", params={"src": encode_src(JPG_SOURCE)})
    assert response.status_code == 200


# ============================================================================
# Upstream Failures
# ============================================================================


@pytest.mark.asyncio
async def test_transform_network_failure_is_404(client, transform_stub, object_store, edge_cache):
    transform_stub.fail = True

    response = await client.get("/", params={"src": encode_src(JPG_SOURCE)})

    assert response.status_code == 404
    assert object_store.puts == []
    assert len(edge_cache) == 0


@pytest.mark.asyncio
async def test_empty_transform_result_is_500(client, transform_stub, object_store):
    transform_stub.body = b""

    response = await client.get("/", params={"src": encode_src(JPG_SOURCE)})

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "EMPTY_UPSTREAM_RESULT"
    assert object_store.puts == []


@pytest.mark.asyncio
async def test_unexpected_error_is_500_with_message(client, object_store):
    async def broken_get(key: str):
        raise RuntimeError("store exploded")

    object_store.get = broken_get

    response = await client.get("/", params={"src": encode_src(JPG_SOURCE)})

    assert response.status_code == 500
    assert response.json()["error"]["message"] == "store exploded"


@pytest.mark.asyncio
async def test_durable_write_failure_does_not_affect_response(client, object_store):
    object_store.fail_writes = True

    response = await client.get("/", params={"src": encode_src(JPG_SOURCE)})

    assert response.status_code == 200
    assert response.content == IMAGE_BYTES


# ============================================================================
# Ambient Endpoints
# ============================================================================


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_request_id_is_echoed(client):
    response = await client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["x-request-id"] == "req-123"


@pytest.mark.asyncio
async def test_readiness_reports_degraded_redis(app, client):
    class DownRedis:
        async def health_check(self) -> bool:
            return False

    app.dependency_overrides[get_redis_client] = lambda: DownRedis()

    response = await client.get("/api/v1/health/ready")

    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "degraded"
    assert body["services"]["redis"]["status"] == "error"
    assert body["services"]["transform"]["status"] == "ok"
