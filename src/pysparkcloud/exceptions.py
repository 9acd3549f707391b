"""Custom exceptions for pysparkcloud library.

Every failure kind the dispatch engine can report has its own exception
class. Instances are delivered as values inside an
:class:`~pysparkcloud.models.Outcome` rather than raised, so each class
carries a stable ``kind`` discriminant callers can switch on.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Stable discriminant for the failure kinds of a single API call."""

    MISSING_CREDENTIALS = "missing_credentials"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    DROPPED = "dropped"
    INVALID_RESPONSE = "invalid_response"
    API_ERROR = "api_error"
    ACTION_FAILED = "action_failed"


class SparkCloudError(Exception):
    """Base exception for all Spark Cloud errors."""

    kind: ErrorKind


class MissingCredentialsError(SparkCloudError):
    """Exception raised when required authentication material is absent."""

    kind = ErrorKind.MISSING_CREDENTIALS


class SparkTimeoutError(SparkCloudError):
    """Exception raised when a request exceeds its deadline or the connection is reset."""

    kind = ErrorKind.TIMEOUT


class SparkConnectionError(SparkCloudError):
    """Exception raised for transport-level failures.

    Attributes:
        original: The underlying transport error.
    """

    kind = ErrorKind.NETWORK_ERROR

    def __init__(self, message: str = "", original: BaseException | None = None) -> None:
        """Initialize SparkConnectionError.

        Args:
            message: Error message.
            original: The underlying transport error.
        """
        super().__init__(message)
        self.original = original


class RequestDroppedError(SparkCloudError):
    """Exception raised when the response stream closes before it completes."""

    kind = ErrorKind.DROPPED


class InvalidResponseError(SparkCloudError):
    """Exception raised when the response body is not valid JSON.

    Attributes:
        body: The trimmed response text that failed to parse.
    """

    kind = ErrorKind.INVALID_RESPONSE

    def __init__(self, message: str = "", body: str | None = None) -> None:
        """Initialize InvalidResponseError.

        Args:
            message: Error message.
            body: The trimmed response text that failed to parse.
        """
        super().__init__(message)
        self.body = body


class ApiError(SparkCloudError):
    """Exception raised when the API answers with a non-200 status.

    The ``code``, ``error`` and ``error_description`` fields are copied
    verbatim from the response body and are ``None`` when the server did
    not send them.

    Attributes:
        status: HTTP status code of the response.
        code: Server-supplied error code.
        error: Server-supplied short error identifier.
        error_description: Server-supplied human-readable description.
    """

    kind = ErrorKind.API_ERROR

    def __init__(
        self,
        message: str = "",
        *,
        status: int | None = None,
        code: Any = None,
        error: Any = None,
        error_description: Any = None,
    ) -> None:
        """Initialize ApiError.

        Args:
            message: Error message.
            status: HTTP status code of the response.
            code: Server-supplied error code.
            error: Server-supplied short error identifier.
            error_description: Server-supplied human-readable description.
        """
        super().__init__(message)
        self.status = status
        self.code = code
        self.error = error
        self.error_description = error_description


class ActionFailedError(SparkCloudError):
    """Exception raised when a 200 response reports ``return_value == -1``.

    This is the one failure kind whose payload is still meaningful, so the
    parsed body travels with the error.

    Attributes:
        data: The parsed response body.
    """

    kind = ErrorKind.ACTION_FAILED

    def __init__(self, message: str = "", data: Any = None) -> None:
        """Initialize ActionFailedError.

        Args:
            message: Error message.
            data: The parsed response body.
        """
        super().__init__(message)
        self.data = data
