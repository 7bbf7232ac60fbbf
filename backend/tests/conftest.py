"""Shared pytest fixtures for gateway tests."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field

import httpx
import pytest
import pytest_asyncio

from gateway.config import Settings, get_settings
from gateway.dependencies import get_object_store
from gateway.main import create_app
from gateway.services.cache.edge import EdgeCache
from gateway.services.transform.client import TransformClient

ALLOWED_HOST = "images.example.com"
IMAGE_BYTES = b"\xff\xd8\xff\xe0transformed-image"


def encode_src(url: str) -> str:
    """Base64-encode a source URL the way callers do."""
    return base64.b64encode(url.encode("utf-8")).decode("ascii")


# ============================================================================
# Collaborator Fakes
# ============================================================================


class FakeObjectStore:
    """In-memory durable tier that records every call."""

    def __init__(self, fail_writes: bool = False):
        self.data: dict[str, bytes] = {}
        self.gets: list[str] = []
        self.puts: list[str] = []
        self.fail_writes = fail_writes

    async def get(self, key: str) -> bytes | None:
        self.gets.append(key)
        return self.data.get(key)

    async def put(self, key: str, data: bytes) -> None:
        self.puts.append(key)
        if self.fail_writes:
            raise ConnectionError("store offline")
        self.data[key] = data


@dataclass
class TransformStub:
    """MockTransport handler standing in for the transformation service."""

    body: bytes = IMAGE_BYTES
    status_code: int = 200
    fail: bool = False
    requests: list[httpx.Request] = field(default_factory=list)

    @property
    def calls(self) -> int:
        return len(self.requests)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail:
            raise httpx.ConnectError("connection refused", request=request)
        return httpx.Response(self.status_code, content=self.body)


# ============================================================================
# Settings & Collaborator Fixtures
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    """Settings allowing a single source host."""
    return Settings(
        _env_file=None,
        allowed_source_hosts=ALLOWED_HOST,
        transform_base_url="http://transform.test",
    )


@pytest.fixture
def object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def edge_cache() -> EdgeCache:
    return EdgeCache(max_entries=16)


@pytest.fixture
def transform_stub() -> TransformStub:
    return TransformStub()


@pytest.fixture
def transform_client(settings: Settings, transform_stub: TransformStub) -> TransformClient:
    return TransformClient(transport=httpx.MockTransport(transform_stub), settings=settings)


# ============================================================================
# Application Fixtures
# ============================================================================


@pytest.fixture
def app(settings, object_store, edge_cache, transform_client):
    """Application wired to in-memory tiers and the transform stub."""
    application = create_app()
    application.state.edge_cache = edge_cache
    application.state.transform_client = transform_client
    application.state.transform_coalescer = None
    application.dependency_overrides[get_settings] = lambda: settings
    application.dependency_overrides[get_object_store] = lambda: object_store
    return application


@pytest_asyncio.fixture
async def client(app):
    """HTTP client calling the app in-process."""
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http
