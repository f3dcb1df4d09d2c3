"""
Tests for the HTTP client in `adapters/backend/client.py`.

Covers:
- Query-string filters, ordering and limits
- Request signing (anon key vs. user token)
- Error parsing, including the no-rows code
- Identity errors surfacing as AuthError
"""

import pytest
from fake_backend import ANON_KEY, FakeBackend

from adapters.backend.client import NO_ROWS_CODE, SINGLE_OBJECT, AuthError, BackendClient, BackendError


class TestSelect:
    @pytest.mark.asyncio
    async def test_filters_order_and_limit(self, backend: FakeBackend, client: BackendClient) -> None:
        backend.on("GET", "/rest/v1/vital_signs", body=[{"id": 1}])

        rows = await client.select(
            "vital_signs", eq={"baby_id": "b1"}, order="recorded_at", descending=True, limit=5
        )

        assert rows == [{"id": 1}]
        params = backend.requests[0].url.params
        assert params["select"] == "*"
        assert params["baby_id"] == "eq.b1"
        assert params["order"] == "recorded_at.desc"
        assert params["limit"] == "5"

    @pytest.mark.asyncio
    async def test_range_filters(self, backend: FakeBackend, client: BackendClient) -> None:
        backend.on("GET", "/rest/v1/daily_logs", body=[])

        await client.select("daily_logs", gte={"started_at": "a"}, lte={"started_at": "b"})

        assert backend.requests[0].url.params.get_list("started_at") == ["gte.a", "lte.b"]

    @pytest.mark.asyncio
    async def test_single_row_asks_for_an_object(self, backend: FakeBackend, client: BackendClient) -> None:
        backend.on("GET", "/rest/v1/Salud", body={"id": 3})

        row = await client.select("Salud", eq={"id": 3}, single=True)

        assert row == {"id": 3}
        assert backend.requests[0].headers["accept"] == SINGLE_OBJECT

    @pytest.mark.asyncio
    async def test_no_rows_error(self, backend: FakeBackend, client: BackendClient) -> None:
        backend.on(
            "GET",
            "/rest/v1/Salud",
            status_code=406,
            body={
                "code": NO_ROWS_CODE,
                "message": "JSON object requested, multiple (or no) rows returned",
                "details": "The result contains 0 rows",
            },
        )

        with pytest.raises(BackendError) as exc_info:
            await client.select("Salud", single=True)

        error = exc_info.value
        assert error.is_no_rows
        assert error.status_code == 406
        assert error.details == "The result contains 0 rows"
        assert str(error).startswith(f"[{NO_ROWS_CODE}] ")


class TestSigning:
    @pytest.mark.asyncio
    async def test_anonymous_requests_use_anon_key(self, backend: FakeBackend, client: BackendClient) -> None:
        backend.on("GET", "/rest/v1/datos", body=[])

        await client.select("datos")

        headers = backend.requests[0].headers
        assert headers["apikey"] == ANON_KEY
        assert headers["authorization"] == f"Bearer {ANON_KEY}"

    @pytest.mark.asyncio
    async def test_user_token_replaces_anon_key(self, backend: FakeBackend, client: BackendClient) -> None:
        backend.on("GET", "/rest/v1/datos", body=[])
        client.set_access_token("jwt")

        await client.select("datos")

        assert backend.requests[0].headers["authorization"] == "Bearer jwt"
        assert client.access_token == "jwt"


class TestWrites:
    @pytest.mark.asyncio
    async def test_insert_returns_stored_row(self, backend: FakeBackend, client: BackendClient) -> None:
        backend.on("POST", "/rest/v1/Emergencias", status_code=201, body={"id": 9, "Nombre": "Ana"})

        row = await client.insert("Emergencias", {"Nombre": "Ana"})

        assert row == {"id": 9, "Nombre": "Ana"}
        request = backend.requests[0]
        assert backend.body(request) == {"Nombre": "Ana"}
        assert request.headers["prefer"] == "return=representation"

    @pytest.mark.asyncio
    async def test_update_filters_rows(self, backend: FakeBackend, client: BackendClient) -> None:
        backend.on("PATCH", "/rest/v1/datos", body={"id": 1, "sexo": "Femenino"})

        await client.update("datos", {"sexo": "Femenino"}, eq={"id": 1})

        assert backend.requests[0].url.params["id"] == "eq.1"

    @pytest.mark.asyncio
    async def test_delete_with_empty_response(self, backend: FakeBackend, client: BackendClient) -> None:
        backend.on("DELETE", "/rest/v1/datos", status_code=204)

        assert await client.delete("datos", eq={"id": 1}) is None
        assert backend.requests[0].url.params["id"] == "eq.1"

    @pytest.mark.asyncio
    async def test_unfiltered_writes_are_rejected(self, client: BackendClient) -> None:
        with pytest.raises(ValueError, match="filter"):
            await client.update("datos", {"sexo": "Femenino"}, eq={})
        with pytest.raises(ValueError, match="filter"):
            await client.delete("datos", eq={})

    @pytest.mark.asyncio
    async def test_non_json_error_uses_reason_phrase(self, backend: FakeBackend, client: BackendClient) -> None:
        backend.on("POST", "/rest/v1/datos", status_code=500, body="upstream exploded")

        with pytest.raises(BackendError) as exc_info:
            await client.insert("datos", {})

        assert exc_info.value.message == "Internal Server Error"
        assert exc_info.value.code is None


@pytest.mark.asyncio
async def test_identity_errors_are_auth_errors(backend: FakeBackend, client: BackendClient) -> None:
    backend.on(
        "POST",
        "/auth/v1/token",
        status_code=400,
        body={"error": "invalid_grant", "error_description": "Invalid login credentials"},
    )

    with pytest.raises(AuthError, match="Invalid login credentials") as exc_info:
        await client.auth_request("POST", "token", params=[("grant_type", "password")], json={})

    assert exc_info.value.status_code == 400
    assert backend.requests[0].url.params["grant_type"] == "password"
