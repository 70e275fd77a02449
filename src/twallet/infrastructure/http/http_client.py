from __future__ import annotations

from typing import Mapping, Optional, Type
from types import TracebackType

import httpx

from ...domain.errors import TransportError


class HttpClient:
    """Thin synchronous HTTP client wrapper around httpx.

    - Normalizes base URLs and paths.
    - Applies a default timeout.
    - Returns the raw status code and body; status validation is up to callers.
    - Wraps every httpx failure in ``TransportError``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        content: Optional[bytes] = None,
    ) -> tuple[int, bytes]:
        try:
            resp = self._client.request(
                method, self._url(path), headers=headers, content=content
            )
        except httpx.HTTPError as e:
            raise TransportError(f"failed to send request: {e}") from e
        return resp.status_code, resp.content

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()


class AsyncHttpClient:
    """Thin asynchronous HTTP client wrapper around httpx.AsyncClient.

    Mirrors ``HttpClient``.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        content: Optional[bytes] = None,
    ) -> tuple[int, bytes]:
        try:
            resp = await self._client.request(
                method, self._url(path), headers=headers, content=content
            )
        except httpx.HTTPError as e:
            raise TransportError(f"failed to send request: {e}") from e
        return resp.status_code, resp.content

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHttpClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        await self.aclose()
