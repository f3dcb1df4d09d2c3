"""Fixtures for the backend adapter tests."""

from collections.abc import AsyncIterator

import httpx
import pytest
from fake_backend import ANON_KEY, USER_ID, FakeBackend, session_body

from adapters.backend.auth import AuthService
from adapters.backend.client import BackendClient
from neowatch.config import BackendConfig


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def backend_config() -> BackendConfig:
    return BackendConfig(url="https://project.example.co", anon_key=ANON_KEY, timeout_seconds=5)


@pytest.fixture
async def client(backend: FakeBackend, backend_config: BackendConfig) -> AsyncIterator[BackendClient]:
    async with BackendClient(backend_config, transport=httpx.MockTransport(backend.handle)) as c:
        yield c


@pytest.fixture
def auth(client: BackendClient) -> AuthService:
    return AuthService(client)


@pytest.fixture
async def signed_in(backend: FakeBackend, auth: AuthService) -> AuthService:
    backend.on("POST", "/auth/v1/token", body=session_body())
    backend.on("GET", "/auth/v1/user", body={"id": USER_ID, "email": "ana@example.com"})
    await auth.sign_in("ana@example.com", "secret")
    return auth
