"""Request builder for Spark Cloud operations.

Turns an :class:`~pysparkcloud.models.Operation` plus the client's
:class:`~pysparkcloud.models.Credentials` into a fully formed
:class:`~pysparkcloud.models.RequestSpec`. No I/O happens here.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from aiohttp import BasicAuth

from pysparkcloud.const import (
    API_VERSION_PREFIX,
    DEFAULT_BASE_URL,
    DEFAULT_CONTENT_TYPE,
    DEFAULT_USER_AGENT,
)
from pysparkcloud.exceptions import MissingCredentialsError
from pysparkcloud.models import AuthMode, RequestSpec


if TYPE_CHECKING:
    from collections.abc import Mapping

    from pysparkcloud.models import Credentials, Operation

_LOGGER = logging.getLogger(__name__)


def encode_form(fields: Mapping[str, Any]) -> str:
    """Encode a mapping as ``application/x-www-form-urlencoded``.

    Sequence values expand to repeated keys. None values encode as empty
    fields (``key=``).

    Args:
        fields: Mapping to encode.

    Returns:
        The encoded string.
    """
    return urlencode({key: "" if value is None else value for key, value in fields.items()}, doseq=True)


def encode_body(body: Mapping[str, Any] | str | None) -> str | None:
    """Encode a request body.

    Args:
        body: A mapping to form-encode, a preencoded string, or None.

    Returns:
        The encoded body, or None when there is nothing to send.
    """
    if body is None:
        return None
    encoded = body if isinstance(body, str) else encode_form(body)
    return encoded or None


def resolve_path(path: str, query: Mapping[str, Any] | None = None) -> str:
    """Resolve a relative operation path against the versioned API prefix.

    Args:
        path: Relative path such as ``"devices/abc/temperature"``.
        query: Optional query parameters appended when non-empty.

    Returns:
        Absolute path, e.g. ``"/v1/devices?a=1"``.
    """
    resolved = f"{API_VERSION_PREFIX}/{path.lstrip('/')}"
    if query:
        resolved = f"{resolved}?{encode_form(query)}"
    return resolved


def _authorization(auth: AuthMode, credentials: Credentials) -> str:
    if auth is AuthMode.BASIC:
        if not credentials.has_password:
            msg = "Username and password are required for this request"
            raise MissingCredentialsError(msg)
        return BasicAuth(credentials.username or "", credentials.password or "").encode()

    # An absent token is sent as-is; the API answers with an auth error.
    return f"Bearer {credentials.access_token or ''}"


def _merge_headers(headers: dict[str, str], overrides: Mapping[str, str]) -> None:
    # Header names compare case-insensitively, so drop any computed spelling first.
    for name, value in overrides.items():
        for existing in [key for key in headers if key.lower() == name.lower()]:
            del headers[existing]
        headers[name] = value


def build_request(
    operation: Operation,
    credentials: Credentials,
    *,
    base_url: str = DEFAULT_BASE_URL,
) -> RequestSpec:
    """Build the HTTP request for an operation.

    Args:
        operation: The operation descriptor.
        credentials: Authentication material of the calling client.
        base_url: Scheme and host of the API.

    Returns:
        The request specification to dispatch.

    Raises:
        MissingCredentialsError: If Basic auth is requested but the username
            or password is unset.
    """
    headers: dict[str, str] = {
        "User-Agent": operation.user_agent or DEFAULT_USER_AGENT,
        "Authorization": _authorization(operation.auth, credentials),
    }

    body = None
    if operation.method != "GET":
        body = encode_body(operation.body)
        if body is not None:
            headers["Content-Type"] = operation.content_type or DEFAULT_CONTENT_TYPE
            headers["Content-Length"] = str(len(body.encode("utf-8")))
    elif operation.body is not None:
        _LOGGER.debug("Ignoring body for GET %s", operation.path)

    if operation.headers:
        _merge_headers(headers, operation.headers)

    return RequestSpec(
        method=operation.method,
        host=base_url.rstrip("/"),
        path=resolve_path(operation.path, operation.query),
        headers=headers,
        body=body,
    )
