"""Dispatch engine for Spark Cloud requests.

Every public operation of the library funnels through
:meth:`SparkCloudAPI.dispatch`, which sends exactly one HTTP request and
turns the response into an :class:`~pysparkcloud.models.Outcome`.
Failures are returned as values, never raised.
"""

from __future__ import annotations

import asyncio
import errno
import functools
import json
import logging
from http import HTTPStatus
from typing import TYPE_CHECKING, Any

from aiohttp import ClientError, ClientPayloadError, ClientSession, ClientTimeout, ServerDisconnectedError

from pysparkcloud.builder import build_request
from pysparkcloud.const import ACTION_FAILED_RETURN_VALUE, DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from pysparkcloud.exceptions import (
    ActionFailedError,
    ApiError,
    InvalidResponseError,
    MissingCredentialsError,
    RequestDroppedError,
    SparkCloudError,
    SparkConnectionError,
    SparkTimeoutError,
)
from pysparkcloud.models import AuthMode, Outcome


if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from pysparkcloud.models import Credentials, Operation, RequestSpec

    OutcomeCallback = Callable[[SparkCloudError | None, Any], None]

_LOGGER = logging.getLogger(__name__)


def classify_response(status: int, raw: bytes) -> Outcome:
    """Classify a fully received response.

    Args:
        status: HTTP status code.
        raw: Complete response body.

    Returns:
        The outcome of the call.
    """
    try:
        data = json.loads(raw.decode("utf-8").strip())
    except ValueError:
        body = raw.decode("utf-8", errors="replace").strip()
        return Outcome(error=InvalidResponseError("API returned an invalid response", body=body))

    if status != HTTPStatus.OK:
        fields = data if isinstance(data, dict) else {}
        error = ApiError(
            f"API error (status {status})",
            status=status,
            code=fields.get("code"),
            error=fields.get("error"),
            error_description=fields.get("error_description"),
        )
        return Outcome(error=error)

    if isinstance(data, dict) and data.get("return_value") == ACTION_FAILED_RETURN_VALUE:
        return Outcome(error=ActionFailedError("Device action failed", data=data), data=data)

    return Outcome(data=data)


def _is_connection_reset(exc: BaseException) -> bool:
    return isinstance(exc, ConnectionResetError) or (isinstance(exc, OSError) and exc.errno == errno.ECONNRESET)


def _deliver(callback: OutcomeCallback, task: asyncio.Task[Outcome]) -> None:
    """Hand a finished dispatch task's outcome to a caller callback."""
    if task.cancelled():
        outcome = Outcome(error=SparkTimeoutError("Request was cancelled"))
    elif (exc := task.exception()) is not None:
        _LOGGER.error("Dispatch failed unexpectedly", exc_info=exc)
        outcome = Outcome(error=SparkConnectionError(f"Request failed: {exc}", original=exc))
    else:
        outcome = task.result()
    callback(*outcome)


class SparkCloudAPI:
    """Low-level dispatch engine for the Spark Cloud API.

    This class owns the HTTP session, builds requests from operation
    descriptors, enforces per-call deadlines and classifies responses.
    It never retries and never caches.

    Example:
        ```python
        from pysparkcloud.api import SparkCloudAPI
        from pysparkcloud.models import Credentials, Operation

        api = SparkCloudAPI(Credentials(access_token="abc123"))

        async with api:
            error, data = await api.dispatch(Operation("devices"))
            if error is None:
                print(data)

            # Fire-and-forget with a completion callback
            api.submit(Operation("devices/0123/temperature"), callback=print)
        ```

    Attributes:
        credentials: Authentication material shared with the owning client.
        timeout: Default deadline in seconds for calls that do not set one.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        session: ClientSession | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the dispatch engine.

        Args:
            credentials: Authentication material, read on every request.
            session: Optional aiohttp ClientSession. If not provided, one will be
                created when entering the context manager.
            base_url: Scheme and host of the API.
            timeout: Default deadline in seconds.
        """
        self.credentials = credentials
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None
        self._base_url = base_url.rstrip("/")
        self._bearer_gate: asyncio.Future[Any] | None = None
        self._pending: set[asyncio.Task[Outcome]] = set()

    @property
    def base_url(self) -> str:
        """Scheme and host requests are sent to."""
        return self._base_url

    @property
    def pending_count(self) -> int:
        """Number of submitted calls that have not finished yet."""
        return len(self._pending)

    async def __aenter__(self) -> SparkCloudAPI:
        """Enter the context manager.

        Returns:
            Self for use in async with statements.
        """
        if self._session is None:
            self._session = ClientSession()
            self._owns_session = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the context manager.

        Waits for submitted calls to finish, then closes the session if it
        was created by this instance.

        Args:
            exc_type: Exception type if an exception occurred.
            exc_val: Exception value if an exception occurred.
            exc_tb: Exception traceback if an exception occurred.
        """
        if self._pending:
            await asyncio.wait(set(self._pending))

        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _validate_session(self) -> ClientSession:
        """Return the open session.

        Raises:
            RuntimeError: If session is not initialized or is closed.
        """
        if self._session is None:
            msg = "Session not initialized. Use 'async with' or provide a session."
            raise RuntimeError(msg)

        if self._session.closed:
            msg = "Session is closed. Cannot make request."
            raise RuntimeError(msg)

        return self._session

    def _deadline(self, operation: Operation) -> float:
        """Resolve the deadline of a call.

        aiohttp treats a total timeout of zero or less as no deadline at all,
        so such values fall back to the instance default, then to the library default.
        """
        for candidate in (operation.timeout, self.timeout):
            if candidate is not None and candidate > 0:
                return candidate
        return DEFAULT_TIMEOUT

    def gate_bearer(self, pending: asyncio.Future[Any] | None) -> None:
        """Hold bearer requests until ``pending`` settles.

        Used while the initial password exchange is in flight so that no
        request goes out with a stale token.

        Args:
            pending: Future or task to wait for, or None to clear the gate.
        """
        self._bearer_gate = pending

    async def dispatch(self, operation: Operation) -> Outcome:
        """Perform one API call and classify the result.

        Args:
            operation: The operation descriptor.

        Returns:
            The outcome of the call.

        Raises:
            RuntimeError: If session is not initialized or is closed.
        """
        session = self._validate_session()

        gate = self._bearer_gate
        if operation.auth is AuthMode.BEARER and gate is not None and not gate.done():
            _LOGGER.debug("Waiting for token exchange before %s %s", operation.method, operation.path)
            await asyncio.wait({gate})

        try:
            spec = build_request(operation, self.credentials, base_url=self._base_url)
        except MissingCredentialsError as exc:
            _LOGGER.warning("%s %s not sent: %s", operation.method, operation.path, exc)
            return Outcome(error=exc)

        timeout = self._deadline(operation)

        try:
            status, raw = await self._exchange(session, spec, timeout)
        except SparkCloudError as exc:
            _LOGGER.warning("%s %s failed: %s", spec.method, spec.path, exc)
            return Outcome(error=exc)

        outcome = classify_response(status, raw)
        if outcome.error is not None:
            _LOGGER.warning("%s %s returned %s: %s", spec.method, spec.path, outcome.kind, outcome.error)
        else:
            _LOGGER.debug("%s %s succeeded", spec.method, spec.path)
        return outcome

    async def _exchange(self, session: ClientSession, spec: RequestSpec, timeout: float) -> tuple[int, bytes]:
        """Send a request and read the whole body under a deadline.

        Raises:
            SparkTimeoutError: If the deadline passes or the connection is reset.
            RequestDroppedError: If the response stream ends before completion.
            SparkConnectionError: For any other transport failure.
        """
        _LOGGER.debug("%s %s (timeout %.1fs)", spec.method, spec.url, timeout)
        data = spec.body.encode("utf-8") if spec.body is not None else None

        try:
            async with session.request(
                spec.method,
                spec.url,
                headers=spec.headers,
                data=data,
                timeout=ClientTimeout(total=timeout),
            ) as response:
                try:
                    raw = await response.read()
                except (ClientPayloadError, ServerDisconnectedError) as exc:
                    msg = "Request dropped before the response completed"
                    raise RequestDroppedError(msg) from exc
                return response.status, raw

        except TimeoutError as exc:
            msg = f"Request timed out after {timeout:g}s"
            raise SparkTimeoutError(msg) from exc

        except (ClientError, OSError) as exc:
            if _is_connection_reset(exc):
                msg = "Request timed out (connection reset)"
                raise SparkTimeoutError(msg) from exc
            msg = f"Request failed: {exc}"
            raise SparkConnectionError(msg, original=exc) from exc

    def submit(self, operation: Operation, callback: OutcomeCallback | None = None) -> asyncio.Task[Outcome]:
        """Start a call without waiting for it.

        The call runs as a task. When ``callback`` is given it is invoked
        as ``callback(error, data)`` once the task finishes; a task resolves
        only once, so the callback fires exactly once. Cancelling the task
        is reported to the callback as a timeout.

        Args:
            operation: The operation descriptor.
            callback: Optional completion callback.

        Returns:
            The task producing the outcome.

        Raises:
            RuntimeError: If session is not initialized or is closed.
        """
        self._validate_session()

        task = asyncio.get_running_loop().create_task(self.dispatch(operation))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        if callback is not None:
            task.add_done_callback(functools.partial(_deliver, callback))
        return task
