"""Data models for Spark Cloud requests and responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any, NamedTuple


if TYPE_CHECKING:
    from collections.abc import Mapping

    from pysparkcloud.exceptions import ErrorKind, SparkCloudError


__all__ = [
    "AuthMode",
    "Credentials",
    "Operation",
    "Outcome",
    "RequestSpec",
]


class AuthMode(StrEnum):
    """Authentication scheme used for a single request."""

    BASIC = "basic"
    BEARER = "bearer"


@dataclass
class Credentials:
    """Authentication material owned by one client instance.

    Either the username/password pair or the access token is expected to be
    set. A successful password exchange fills in ``access_token`` and
    ``expires_in`` in place.

    Attributes:
        username: Account username, used for Basic auth and the password grant.
        password: Account password.
        access_token: Bearer token for all non-Basic requests.
        expires_in: Lifetime of the access token in seconds, as reported by the API.
    """

    username: str | None = None
    password: str | None = field(default=None, repr=False)
    access_token: str | None = field(default=None, repr=False)
    expires_in: int | None = None

    @property
    def has_password(self) -> bool:
        """Whether both username and password are set."""
        return bool(self.username) and bool(self.password)

    def store_token(self, payload: Mapping[str, Any]) -> None:
        """Record the token from an ``oauth/token`` response.

        Args:
            payload: Parsed token response containing ``access_token`` and
                optionally ``expires_in``.
        """
        self.access_token = payload.get("access_token")
        self.expires_in = payload.get("expires_in")


@dataclass(frozen=True)
class Operation:
    """Caller-specified parameters for one API call before HTTP encoding.

    Attributes:
        path: Path relative to the versioned API root (e.g. ``"devices"``).
        method: HTTP method, normalized to upper case.
        query: Optional query parameters.
        body: Optional body, either a mapping to form-encode or a preencoded string.
        headers: Optional headers; these override every computed header.
        auth: Authentication scheme to apply.
        content_type: Optional Content-Type override for requests with a body.
        user_agent: Optional User-Agent override.
        timeout: Deadline in seconds; ``None`` uses the client default.
    """

    path: str
    method: str = "GET"
    query: Mapping[str, Any] | None = None
    body: Mapping[str, Any] | str | None = None
    headers: Mapping[str, str] | None = None
    auth: AuthMode = AuthMode.BEARER
    content_type: str | None = None
    user_agent: str | None = None
    timeout: float | None = None

    def __post_init__(self) -> None:
        """Normalize the HTTP method."""
        object.__setattr__(self, "method", self.method.upper())


@dataclass(frozen=True)
class RequestSpec:
    """Fully formed HTTP request produced by the request builder.

    Attributes:
        method: HTTP method.
        host: Scheme and authority of the API (e.g. ``"https://api.spark.io"``).
        path: Absolute path including the encoded query string.
        headers: Final header map.
        body: Encoded body, or None when nothing is sent.
    """

    method: str
    host: str
    path: str
    headers: dict[str, str]
    body: str | None = None

    @property
    def url(self) -> str:
        """Absolute URL of the request."""
        return f"{self.host}{self.path}"


class Outcome(NamedTuple):
    """The single success-or-failure result of one API call.

    Unpacks as ``error, data``. On success ``error`` is None and ``data``
    holds the parsed JSON body. On failure ``error`` is set and ``data`` is
    None, except for action failures where the payload is kept.
    """

    error: SparkCloudError | None = None
    data: Any = None

    @property
    def ok(self) -> bool:
        """Whether the call succeeded."""
        return self.error is None

    @property
    def kind(self) -> ErrorKind | None:
        """Failure discriminant, or None on success."""
        return None if self.error is None else self.error.kind

    def unwrap(self) -> Any:
        """Return the data, raising the carried error on failure.

        Raises:
            SparkCloudError: The failure this outcome carries.
        """
        if self.error is not None:
            raise self.error
        return self.data
