"""Shared utilities for adapter implementations."""

from typing import Any

import requests

from errors import BackendError, ProtocolError, TransportError


def create_session_with_pooling(
    pool_connections: int = 10,
    pool_maxsize: int = 20,
    max_retries: int = 0,
) -> requests.Session:
    """Create a requests Session with connection pooling.

    Args:
        pool_connections: Number of connection pools to cache.
        pool_maxsize: Maximum number of connections to save per pool.
        max_retries: Maximum number of retries per connection. Generation
            calls are never retried, so this defaults to zero.

    Returns:
        Configured requests Session.
    """
    session = requests.Session()
    adapter = requests.adapters.HTTPAdapter(
        pool_connections=pool_connections,
        pool_maxsize=pool_maxsize,
        max_retries=max_retries,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


def post_json(
    session: requests.Session,
    provider: str,
    url: str,
    payload: dict[str, Any],
    headers: dict[str, str] | None = None,
    timeout: float = 60.0,
) -> dict[str, Any]:
    """POST a JSON payload and return the decoded JSON object.

    Raises:
        TransportError: The request failed before a response arrived.
        BackendError: The provider answered with a non-2xx status.
        ProtocolError: The body is not a JSON object.
    """
    try:
        response = session.post(url, json=payload, headers=headers, timeout=timeout)
    except requests.exceptions.RequestException as e:
        raise TransportError(provider, f"request failed: {e}") from e

    if not 200 <= response.status_code < 300:
        raise BackendError(provider, response.status_code, response.text)

    try:
        data = response.json()
    except ValueError as e:
        raise ProtocolError(provider, f"invalid JSON body: {e}") from e

    if not isinstance(data, dict):
        raise ProtocolError(provider, "response body is not a JSON object")
    return data


def conversation_turns(messages: list[dict[str, str]]) -> list[dict[str, str]]:
    """Non-system messages, starting from the first user turn.

    A trimmed history window can open on an assistant reply; providers that
    require the conversation to begin with the user reject that.
    """
    turns = [m for m in messages if m["role"] != "system"]
    while turns and turns[0]["role"] == "assistant":
        turns = turns[1:]
    return turns
