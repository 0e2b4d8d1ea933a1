from __future__ import annotations

from typing import Any

import httpx


class ApiError(Exception):
    def __init__(self, status_code: int, message: str, errors: list[dict] | None = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


class ApiValidationError(ApiError):
    pass


class ApiUnauthorized(ApiError):
    pass


class ApiForbidden(ApiError):
    pass


class ApiNotFound(ApiError):
    pass


class ApiConflict(ApiError):
    pass


_ERRORS_BY_STATUS: dict[int, type[ApiError]] = {
    400: ApiValidationError,
    401: ApiUnauthorized,
    403: ApiForbidden,
    404: ApiNotFound,
    409: ApiConflict,
}


def raise_for_api_error(response: httpx.Response) -> None:
    if response.is_success:
        return
    try:
        body = response.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        body = {}
    message = str(body.get("message") or response.reason_phrase or "request failed")
    errors = body.get("errors") if isinstance(body.get("errors"), list) else None
    cls = _ERRORS_BY_STATUS.get(response.status_code, ApiError)
    raise cls(response.status_code, message, errors)


class ContentApiClient:
    """Async JSON client for the content API.

    The session cookie set by ``login``/``register`` is kept in the underlying
    httpx cookie jar and sent with every later request.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)
        self.base_url = str(self._client.base_url or base_url).rstrip("/")

    async def __aenter__(self) -> "ContentApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def websocket_url(self, path: str = "/ws") -> str:
        url = httpx.URL(self.base_url)
        scheme = "wss" if url.scheme == "https" else "ws"
        return str(url.copy_with(scheme=scheme, path=path))

    def session_headers(self) -> dict[str, str]:
        """Cookie header carrying the current session, for the push channel handshake."""
        cookie = "; ".join(f"{name}={value}" for name, value in self._client.cookies.items())
        return {"Cookie": cookie} if cookie else {}

    async def _request(self, method: str, path: str, json: Any = None) -> httpx.Response:
        response = await self._client.request(method, path, json=json)
        raise_for_api_error(response)
        return response

    async def list_contents(self) -> list[dict[str, Any]]:
        return (await self._request("GET", "/api/contents")).json()

    async def get_content(self, content_id: int) -> dict[str, Any]:
        return (await self._request("GET", f"/api/contents/{content_id}")).json()

    async def create_content(self, data: dict[str, Any]) -> dict[str, Any]:
        return (await self._request("POST", "/api/contents", json=data)).json()

    async def update_content(self, content_id: int, data: dict[str, Any]) -> dict[str, Any]:
        return (await self._request("PATCH", f"/api/contents/{content_id}", json=data)).json()

    async def update_stage(self, content_id: int, stage: str) -> dict[str, Any]:
        return (await self._request("PATCH", f"/api/contents/{content_id}/stage", json={"stage": stage})).json()

    async def delete_content(self, content_id: int) -> None:
        await self._request("DELETE", f"/api/contents/{content_id}")

    async def login(self, username: str, password: str) -> dict[str, Any]:
        return (await self._request("POST", "/api/login", json={"username": username, "password": password})).json()

    async def logout(self) -> None:
        await self._request("POST", "/api/logout")

    async def register(self, username: str, password: str, email: str | None = None) -> dict[str, Any]:
        body = {"username": username, "password": password, "email": email}
        return (await self._request("POST", "/api/register", json=body)).json()

    async def current_user(self) -> dict[str, Any] | None:
        try:
            return (await self._request("GET", "/api/user")).json()
        except ApiUnauthorized:
            return None

    async def change_password(self, current_password: str, new_password: str) -> None:
        body = {"currentPassword": current_password, "password": new_password}
        await self._request("POST", "/api/user/password", json=body)
