"""
HTTP client for the hosted backend.

The backend exposes two REST surfaces under one project URL:
- /rest/v1/<table>  PostgREST data API (rows as JSON, filters in the query string)
- /auth/v1/...      GoTrue identity API (sign-up, password grant, logout, user)

Every call is a single request: failures raise BackendError and propagate to
the caller. There is no retry, backoff or partial-failure recovery.
"""

from collections.abc import Mapping
from types import TracebackType
from typing import Any

import httpx

from neowatch.config import BackendConfig
from neowatch.services.results import logger

NO_ROWS_CODE = "PGRST116"
SINGLE_OBJECT = "application/vnd.pgrst.object+json"

JSONRow = dict[str, Any]


class BackendError(Exception):
    """Error reported by the backend (or a malformed backend response)."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        status_code: int | None = None,
        details: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details

    @property
    def is_no_rows(self) -> bool:
        """True when a single-row query matched nothing."""
        return self.code == NO_ROWS_CODE

    @classmethod
    def from_response(cls, response: httpx.Response) -> "BackendError":
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        message = (
            body.get("message")
            or body.get("msg")
            or body.get("error_description")
            or body.get("error")
            or response.reason_phrase
            or f"HTTP {response.status_code}"
        )
        code = body.get("code") or body.get("error_code")
        return cls(
            message=str(message),
            code=str(code) if code is not None else None,
            status_code=response.status_code,
            details=body.get("details") or body.get("hint"),
        )

    def __str__(self) -> str:
        prefix = f"[{self.code}] " if self.code else ""
        return f"{prefix}{self.message}"


class AuthError(BackendError):
    """Identity errors, including calls that need a signed-in user."""


def _filter_params(
    eq: Mapping[str, Any] | None = None,
    gte: Mapping[str, Any] | None = None,
    lte: Mapping[str, Any] | None = None,
) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = []
    for operator, filters in (("eq", eq), ("gte", gte), ("lte", lte)):
        for column, value in (filters or {}).items():
            params.append((column, f"{operator}.{value}"))
    return params


class BackendClient:
    """
    Thin async client over the backend's REST surfaces.

    Holds the current access token; requests are signed with it once a user
    signs in and with the anonymous key otherwise.
    """

    def __init__(
        self, config: BackendConfig, transport: httpx.AsyncBaseTransport | None = None
    ) -> None:
        self.config = config
        self._http = httpx.AsyncClient(
            base_url=config.url,
            timeout=config.timeout_seconds,
            headers={"apikey": config.anon_key},
            transport=transport,
        )
        self._access_token: str | None = None
        self.logger = logger.bind(component="backend_client")

    @property
    def access_token(self) -> str | None:
        return self._access_token

    def set_access_token(self, token: str | None) -> None:
        self._access_token = token

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, str]] | None = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        request_headers = {"Authorization": f"Bearer {self._access_token or self.config.anon_key}"}
        request_headers.update(headers or {})

        response = await self._http.request(
            method, path, params=params, json=json, headers=request_headers
        )
        if response.is_error:
            error = BackendError.from_response(response)
            self.logger.warning(
                "backend_request_failed",
                method=method,
                path=path,
                status_code=response.status_code,
                code=error.code,
                error=error.message,
            )
            raise error

        self.logger.debug(
            "backend_request_completed", method=method, path=path, status_code=response.status_code
        )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        if not response.content:
            return None
        return response.json()

    async def select(
        self,
        table: str,
        *,
        columns: str = "*",
        eq: Mapping[str, Any] | None = None,
        gte: Mapping[str, Any] | None = None,
        lte: Mapping[str, Any] | None = None,
        order: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        single: bool = False,
    ) -> Any:
        """
        Read rows from a table.

        Returns a list of rows, or one row when `single` is set (a query
        matching no rows then raises BackendError with code PGRST116).
        """
        params = [("select", columns), *_filter_params(eq, gte, lte)]
        if order:
            params.append(("order", f"{order}.{'desc' if descending else 'asc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))
        headers = {"Accept": SINGLE_OBJECT} if single else None

        response = await self._send("GET", f"/rest/v1/{table}", params=params, headers=headers)
        return self._json(response)

    async def insert(self, table: str, payload: JSONRow) -> JSONRow:
        """Insert one row and return it as stored."""
        response = await self._send(
            "POST",
            f"/rest/v1/{table}",
            params=[("select", "*")],
            json=payload,
            headers={"Prefer": "return=representation", "Accept": SINGLE_OBJECT},
        )
        return self._json(response)

    async def update(self, table: str, payload: JSONRow, *, eq: Mapping[str, Any]) -> JSONRow:
        """Update the single row matching `eq` and return it."""
        if not eq:
            raise ValueError("update requires at least one filter")
        response = await self._send(
            "PATCH",
            f"/rest/v1/{table}",
            params=[("select", "*"), *_filter_params(eq)],
            json=payload,
            headers={"Prefer": "return=representation", "Accept": SINGLE_OBJECT},
        )
        return self._json(response)

    async def delete(self, table: str, *, eq: Mapping[str, Any]) -> None:
        if not eq:
            raise ValueError("delete requires at least one filter")
        await self._send("DELETE", f"/rest/v1/{table}", params=_filter_params(eq))

    async def auth_request(
        self,
        method: str,
        endpoint: str,
        *,
        json: Any = None,
        params: list[tuple[str, str]] | None = None,
    ) -> Any:
        """Call the identity API; errors surface as AuthError."""
        try:
            response = await self._send(method, f"/auth/v1/{endpoint}", params=params, json=json)
        except BackendError as e:
            raise AuthError(e.message, e.code, e.status_code, e.details) from e
        return self._json(response)
