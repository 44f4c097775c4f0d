"""Thin async HTTP executor shared by the GitHub and OpenRouter clients."""

from __future__ import annotations

from typing import Any, Dict

import httpx


class TransportError(RuntimeError):
    """Raised when an HTTP request fails at the network level or with a non-success status."""

    def __init__(self, message: str, status_code: int, response_body: Any | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


def decode_body(response: httpx.Response) -> Any | None:
    """Return the response body as JSON when possible, else as text (``None`` when empty)."""

    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class HTTPClient:
    """Executes requests against one base URL and surfaces failures uniformly.

    Successful responses are returned decoded: JSON when the server says so,
    otherwise the raw text.
    """

    error_class: type[TransportError] = TransportError
    service_name = "HTTP"

    def __init__(
        self,
        *,
        base_url: str,
        headers: Dict[str, str] | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client: httpx.AsyncClient | None = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=timeout,
            headers=headers or {},
            transport=transport,
            follow_redirects=True,
        )

    async def send(
        self,
        method: str,
        url: str,
        *,
        params: Dict[str, Any] | None = None,
        json: Any | None = None,
        headers: Dict[str, str] | None = None,
    ) -> httpx.Response:
        """Perform the request (following redirects) and require a 2xx answer."""

        try:
            response = await self._client.request(method, url, params=params, json=json, headers=headers)
        except httpx.HTTPError as exc:
            raise self.error_class(
                f"{self.service_name} request {method} {url} failed: {exc}",
                0,
                None,
            ) from exc

        if not response.is_success:
            detail = decode_body(response)
            raise self.error_class(
                f"{self.service_name} request {method} {url} failed with status "
                f"{response.status_code} {response.reason_phrase} - {detail}",
                response.status_code,
                detail,
            )
        return response

    def decode(self, response: httpx.Response) -> Any:
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                return response.json()
            except ValueError as exc:
                raise self.error_class(
                    f"{self.service_name} returned invalid JSON for "
                    f"{response.request.method} {response.request.url}.",
                    response.status_code,
                    response.text,
                ) from exc
        return response.text

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Dict[str, Any] | None = None,
        json: Any | None = None,
        headers: Dict[str, str] | None = None,
    ) -> Any:
        response = await self.send(method, url, params=params, json=json, headers=headers)
        return self.decode(response)

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""

        if self._client is not None:
            await self._client.aclose()
            self._client = None
