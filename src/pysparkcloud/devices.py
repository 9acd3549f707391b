"""Device handles for Spark Cloud devices.

A :class:`SparkDevice` is a thin, stateless view on one device: every
method builds a single operation and dispatches it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pysparkcloud.models import Operation, Outcome


if TYPE_CHECKING:
    from pysparkcloud.api import SparkCloudAPI

_LOGGER = logging.getLogger(__name__)

FunctionArgument = str | int | float


class SparkDevice:
    """Read variables from and call functions on one device.

    Example:
        ```python
        async with SparkClient("access-token") as client:
            core = client.device("53ff6f065067544840551187")

            error, info = await core.info()
            error, reading = await core.variable("temperature")
            error, result = await core.call_function("led", "on")
        ```

    Attributes:
        device_id: Device identifier or name.
    """

    def __init__(self, api: SparkCloudAPI, device_id: str) -> None:
        """Initialize the device handle.

        Args:
            api: Dispatch engine used for every call.
            device_id: Device identifier or name.
        """
        self._api = api
        self.device_id = device_id

    def __repr__(self) -> str:
        """Return a readable representation."""
        return f"SparkDevice({self.device_id!r})"

    @property
    def path(self) -> str:
        """API path of this device."""
        return f"devices/{self.device_id}"

    async def info(self) -> Outcome:
        """Get device details, including its variables and functions."""
        return await self._api.dispatch(Operation(self.path))

    async def variable(self, name: str) -> Outcome:
        """Read a variable exposed by the device.

        Args:
            name: Variable name.

        Returns:
            Outcome whose data holds the variable reading.
        """
        return await self._api.dispatch(Operation(f"{self.path}/{name}"))

    async def call_function(self, name: str, argument: FunctionArgument | None = None) -> Outcome:
        """Call a function exposed by the device.

        Args:
            name: Function name.
            argument: Optional single argument, sent as the ``args`` form field.

        Returns:
            Outcome whose data holds the function's ``return_value``. A
            ``return_value`` of -1 is reported as ``action_failed`` with the
            payload attached.

        Raises:
            TypeError: If argument is not a string or number.
        """
        body = None
        if argument is not None:
            if isinstance(argument, bool) or not isinstance(argument, str | int | float):
                msg = f"Function argument must be a string or number, got {type(argument).__name__}"
                raise TypeError(msg)
            body = {"args": argument}

        _LOGGER.debug("Calling %s on %s", name, self.device_id)
        return await self._api.dispatch(Operation(f"{self.path}/{name}", method="POST", body=body))
