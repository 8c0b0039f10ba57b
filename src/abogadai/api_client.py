"""HTTP client for the Abogadai REST backend.

Thin wrapper over ``httpx.AsyncClient`` that:
    - prefixes every path with the configured base URL
    - attaches the bearer token of the current auth session
    - converts non-2xx responses and transport failures into ApiError

Usage:
    client = ApiClient("https://api.abogadai.co", token_provider=auth.get_token)
    caso = await client.get("/casos/42")
    await client.aclose()
"""

from __future__ import annotations

import logging
from typing import Any, Callable, TypeVar

import httpx

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Raised by model constructors when a 2xx body does not have the expected shape
MALFORMED_BODY_ERRORS = (KeyError, TypeError, AttributeError, ValueError)


class ApiError(Exception):
    """Request failed on the wire or came back with a non-2xx status.

    Attributes:
        message: Human readable reason (server ``detail`` when present)
        status_code: HTTP status, or None for connection/timeouts and
            malformed response bodies
        payload: Decoded JSON body of the error response, if any
    """

    def __init__(self, message: str, status_code: int | None = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    @property
    def detail(self) -> str | None:
        """Server-supplied ``detail`` (or ``detail.message``), if any."""
        return extract_detail(self.payload)


def extract_detail(payload: Any) -> str | None:
    """Pull the user-facing message out of a FastAPI-style error body."""
    if not isinstance(payload, dict):
        return None
    detail = payload.get("detail")
    if isinstance(detail, str):
        return detail or None
    if isinstance(detail, dict):
        message = detail.get("message")
        if isinstance(message, str) and message:
            return message
    return None


def decode(factory: Callable[[Any], T], data: Any) -> T:
    """Build a model from a response body; a malformed body becomes ApiError."""
    try:
        return factory(data)
    except MALFORMED_BODY_ERRORS as exc:
        logger.debug("Malformed response body %r: %r", data, exc)
        raise ApiError(f"Invalid response: {exc!r}", payload=data) from exc


class ApiClient:
    """JSON-over-HTTPS client bound to one backend."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        token_provider: Callable[[], str | None] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._token_provider = token_provider
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self._token_provider() if self._token_provider else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict | None = None,
        data: dict | None = None,
        files: dict | None = None,
        raw: bool = False,
    ) -> Any:
        """Send one request and return the decoded body.

        Args:
            method: HTTP verb
            path: Path relative to the base URL
            json: JSON body
            params: Query parameters
            data: Form fields (multipart when ``files`` is given)
            files: Multipart file parts
            raw: Return the response bytes instead of decoded JSON

        Returns:
            Decoded JSON, bytes when ``raw``, or None for empty bodies

        Raises:
            ApiError: On transport failure or non-2xx status
        """
        try:
            response = await self._client.request(
                method,
                path,
                json=json,
                params=params,
                data=data,
                files=files,
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            logger.debug("%s %s failed: %s", method, path, exc)
            raise ApiError(f"Connection error: {exc}") from exc

        if response.is_error:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            message = extract_detail(payload) or f"HTTP {response.status_code}"
            logger.debug("%s %s -> %s %s", method, path, response.status_code, message)
            raise ApiError(message, status_code=response.status_code, payload=payload)

        if raw:
            return response.content
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError("Invalid JSON in response", status_code=response.status_code) from exc

    async def get(self, path: str, **kwargs) -> Any:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs) -> Any:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs) -> Any:
        return await self.request("PUT", path, **kwargs)

    async def delete(self, path: str, **kwargs) -> Any:
        return await self.request("DELETE", path, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
