"""High-level client for the Spark Cloud API.

This module ties together the credentials, the dispatch engine, the token
manager and device handles.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from aiohttp import ClientSession  # noqa: TC002 - Used at runtime for session injection

from pysparkcloud.api import SparkCloudAPI
from pysparkcloud.auth import TokenManager
from pysparkcloud.const import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from pysparkcloud.devices import SparkDevice
from pysparkcloud.models import Credentials, Operation, Outcome


if TYPE_CHECKING:
    from types import TracebackType

_LOGGER = logging.getLogger(__name__)


class SparkClient:
    """Client for reading and controlling Spark devices.

    The client is built either from an access token, which is used directly,
    or from a username and password. In the latter case entering the context
    starts a background password exchange; bearer requests issued before it
    settles wait for it instead of racing it.

    Example:
        Token-based usage:

        ```python
        from pysparkcloud import SparkClient

        async with SparkClient("access-token") as client:
            error, devices = await client.list_devices()
            for entry in devices or []:
                print(entry["id"], entry["name"])
        ```

        Password-based usage with a shorter default timeout:

        ```python
        async with SparkClient(username="user@example.com", password="secret", timeout=5) as client:
            core = client.device("my-core")
            error, data = await core.call_function("led", "on")
            if error is not None:
                print(error.kind, error)
        ```

    Attributes:
        credentials: Authentication material owned by this client.
        api: Low-level dispatch engine.
        tokens: Token manager.
    """

    def __init__(
        self,
        access_token: str | None = None,
        *,
        username: str | None = None,
        password: str | None = None,
        timeout: float | None = None,
        session: ClientSession | None = None,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        """Initialize the client.

        Args:
            access_token: Bearer token to use directly.
            username: Account username for the password exchange and token endpoints.
            password: Account password.
            timeout: Default deadline in seconds for every call (10 seconds if not set).
            session: Optional aiohttp ClientSession. If not provided, one will be
                created when entering the context manager.
            base_url: Scheme and host of the API. Defaults to the Spark Cloud.

        Raises:
            ValueError: If neither an access token nor a username and password are given.
        """
        self.credentials = Credentials(username=username, password=password, access_token=access_token)
        if not access_token and not self.credentials.has_password:
            msg = "Either an access token or a username and password are required"
            raise ValueError(msg)

        self.api = SparkCloudAPI(
            self.credentials,
            session=session,
            base_url=base_url,
            timeout=timeout or DEFAULT_TIMEOUT,
        )
        self.tokens = TokenManager(self.api)
        self._token_exchange: asyncio.Task[Outcome] | None = None

    async def __aenter__(self) -> SparkClient:
        """Enter the context manager.

        Creates the session if needed and, for password credentials without a
        token, starts the password exchange in the background.

        Returns:
            Self for use in async with statements.
        """
        await self.api.__aenter__()

        if not self.credentials.access_token and self.credentials.has_password:
            self._token_exchange = asyncio.create_task(self.tokens.exchange())
            self.api.gate_bearer(self._token_exchange)

        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit the context manager.

        Waits for a pending token exchange and closes the API client.

        Args:
            exc_type: Exception type if an exception occurred.
            exc_val: Exception value if an exception occurred.
            exc_tb: Exception traceback if an exception occurred.
        """
        if self._token_exchange is not None:
            await asyncio.wait({self._token_exchange})
            self._token_exchange = None
            self.api.gate_bearer(None)

        await self.api.__aexit__(exc_type, exc_val, exc_tb)

    async def wait_for_token(self) -> Outcome | None:
        """Wait for the background password exchange.

        Returns:
            Outcome of the exchange, or None if no exchange was started.
        """
        if self._token_exchange is None:
            return None
        return await asyncio.shield(self._token_exchange)

    async def list_devices(self) -> Outcome:
        """List the devices claimed by the account."""
        return await self.api.dispatch(Operation("devices"))

    def device(self, device_id: str) -> SparkDevice:
        """Get a handle for one device.

        Args:
            device_id: Device identifier or name.

        Returns:
            SparkDevice bound to this client.
        """
        return SparkDevice(self.api, device_id)
