"""Access token management for the Spark Cloud API."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pysparkcloud.const import OAUTH_PASSWORD_GRANT
from pysparkcloud.exceptions import MissingCredentialsError
from pysparkcloud.models import AuthMode, Operation, Outcome


if TYPE_CHECKING:
    from pysparkcloud.api import SparkCloudAPI

_LOGGER = logging.getLogger(__name__)


class TokenManager:
    """List, generate and revoke access tokens.

    All token endpoints authenticate with the account username and password
    (HTTP Basic), never with a bearer token.

    Example:
        ```python
        async with SparkClient(username="user@example.com", password="secret") as client:
            error, tokens = await client.tokens.list()
            error, token = await client.tokens.generate(expires_in=3600)
            error, _ = await client.tokens.delete(token["access_token"])
        ```
    """

    def __init__(self, api: SparkCloudAPI) -> None:
        """Initialize the token manager.

        Args:
            api: Dispatch engine; its credentials are read and updated in place.
        """
        self._api = api

    async def list(self) -> Outcome:
        """List the access tokens of the account.

        Returns:
            Outcome whose data is the list of token records.
        """
        return await self._api.dispatch(Operation("access_tokens", auth=AuthMode.BASIC))

    async def generate(self, *, expires_in: int | None = None) -> Outcome:
        """Issue a new access token using the password grant.

        The stored credentials are not modified; see :meth:`exchange`.

        Args:
            expires_in: Optional requested token lifetime in seconds.

        Returns:
            Outcome whose data holds ``access_token`` and ``expires_in``.
            Fails with ``missing_credentials`` without sending anything when
            username or password is unset.
        """
        credentials = self._api.credentials
        if not credentials.has_password:
            return Outcome(error=MissingCredentialsError("Username and password are required to generate a token"))

        body: dict[str, str | int] = {
            "grant_type": OAUTH_PASSWORD_GRANT,
            "username": credentials.username or "",
            "password": credentials.password or "",
        }
        if expires_in is not None:
            body["expires_in"] = expires_in

        return await self._api.dispatch(Operation("oauth/token", method="POST", body=body, auth=AuthMode.BASIC))

    async def delete(self, token: str) -> Outcome:
        """Revoke an access token.

        Args:
            token: The access token to revoke.

        Returns:
            Outcome of the deletion.
        """
        return await self._api.dispatch(Operation(f"access_tokens/{token}", method="DELETE", auth=AuthMode.BASIC))

    async def exchange(self) -> Outcome:
        """Trade the stored username and password for an access token.

        On success the token and its lifetime are written into the shared
        credentials, so later bearer requests use it.

        Returns:
            Outcome of the token request.
        """
        outcome = await self.generate()
        if outcome.error is not None:
            _LOGGER.warning("Token exchange failed: %s", outcome.error)
            return outcome

        if not isinstance(outcome.data, dict) or not outcome.data.get("access_token"):
            _LOGGER.warning("Token exchange returned no access token")
            return outcome

        self._api.credentials.store_token(outcome.data)
        _LOGGER.info("Access token issued for %s", self._api.credentials.username)
        return outcome
