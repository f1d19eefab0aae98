"""API key authentication via the X-API-Key header."""

import secrets

from fastapi import HTTPException, Security, WebSocket, status
from fastapi.security import APIKeyHeader

from healthgest.config import settings

API_KEY_HEADER = "X-API-Key"

api_key_scheme = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)


def is_valid_api_key(api_key: str | None) -> bool:
    """Constant-time comparison against the configured key."""
    if not api_key:
        return False
    return secrets.compare_digest(api_key.encode(), settings.api_key.encode())


async def verify_api_key(api_key: str | None = Security(api_key_scheme)) -> str:
    """Validate the X-API-Key header.

    Returns:
        The validated API key.

    Raises:
        HTTPException: 401 if the key is missing or does not match.
    """
    if api_key is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
        )

    if not is_valid_api_key(api_key):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )

    return api_key


def websocket_api_key(websocket: WebSocket) -> str | None:
    """Read the API key from a WebSocket handshake (header or query param)."""
    return websocket.headers.get(API_KEY_HEADER) or websocket.query_params.get("api_key")
