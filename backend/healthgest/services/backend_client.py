"""HTTP client for the remote HealthGest backend.

Thin wrapper over httpx.AsyncClient. Every failure mode (transport error,
non-2xx status, non-JSON body) is raised as BackendError so callers decide
whether a failure is surfaced, scoped, or silently degraded.
"""

import logging
from typing import Any

import httpx
from fastapi import Request

from healthgest.config import settings

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Raised when the remote backend cannot serve a request."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        payload: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


class BackendClient:
    """Async JSON client bound to one backend base URL."""

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.backend_base_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.request_timeout_seconds,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    def url(self, path: str) -> str:
        """Absolute URL for a backend path."""
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def get_json(self, path: str) -> Any:
        """GET a JSON document.

        Raises:
            BackendError: On transport errors, non-2xx responses or bad JSON.
        """
        return await self._request("GET", path)

    async def post_json(self, path: str, body: dict[str, Any]) -> Any:
        """POST a JSON body and return the decoded JSON response.

        Raises:
            BackendError: On transport errors, non-2xx responses or bad JSON.
        """
        return await self._request("POST", path, json=body)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = self.url(path)
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise BackendError(f"Request to {url} failed") from e

        if response.is_error:
            payload = _safe_json(response)
            logger.warning(
                "%s %s returned status %d", method, url, response.status_code
            )
            raise BackendError(
                f"Server responded with status: {response.status_code}",
                status_code=response.status_code,
                payload=payload,
            )

        try:
            return response.json()
        except ValueError as e:
            logger.warning("%s %s returned a non-JSON body", method, url)
            raise BackendError(
                f"Invalid JSON from {url}", status_code=response.status_code
            ) from e

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def get_backend_client(request: Request) -> BackendClient:
    """FastAPI dependency returning the app-wide backend client."""
    return request.app.state.backend_client
