"""Python client library for the Spark device cloud.

This package provides an async client for listing devices, reading their
variables, calling their functions and managing access tokens through the
Spark Cloud REST API.

The library is organized into layers:
1. **Request Builder** (pysparkcloud.builder): Pure translation of operations into HTTP requests
2. **Dispatch Engine** (pysparkcloud.api): One request per call, deadline enforcement, response classification
3. **Facades** (pysparkcloud.client, pysparkcloud.devices, pysparkcloud.auth): Device and token operations

Every call returns an :class:`Outcome` that unpacks as ``(error, data)``;
failures are values, not exceptions.

Example:
    ```python
    from pysparkcloud import SparkClient

    async with SparkClient(username="user@example.com", password="secret") as client:
        error, devices = await client.list_devices()

        core = client.device("my-core")
        error, reading = await core.variable("temperature")
        error, result = await core.call_function("led", "on")
        if error is not None and error.kind == "action_failed":
            print("Device refused:", result)
    ```
"""

from __future__ import annotations

from pysparkcloud.api import SparkCloudAPI, classify_response
from pysparkcloud.auth import TokenManager
from pysparkcloud.builder import build_request
from pysparkcloud.client import SparkClient
from pysparkcloud.const import VERSION
from pysparkcloud.devices import SparkDevice
from pysparkcloud.exceptions import (
    ActionFailedError,
    ApiError,
    ErrorKind,
    InvalidResponseError,
    MissingCredentialsError,
    RequestDroppedError,
    SparkCloudError,
    SparkConnectionError,
    SparkTimeoutError,
)
from pysparkcloud.models import AuthMode, Credentials, Operation, Outcome, RequestSpec


__version__ = VERSION

__all__ = [
    "ActionFailedError",
    "ApiError",
    "AuthMode",
    "Credentials",
    "ErrorKind",
    "InvalidResponseError",
    "MissingCredentialsError",
    "Operation",
    "Outcome",
    "RequestDroppedError",
    "RequestSpec",
    "SparkClient",
    "SparkCloudAPI",
    "SparkCloudError",
    "SparkConnectionError",
    "SparkDevice",
    "SparkTimeoutError",
    "TokenManager",
    "__version__",
    "build_request",
    "classify_response",
]
