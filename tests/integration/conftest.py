"""Pytest configuration and fixtures for integration tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

import pytest
from dotenv import load_dotenv

from pysparkcloud import SparkClient
from pysparkcloud.const import DEFAULT_BASE_URL


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


# Load .env file from project root
env_path = Path(__file__).parents[2] / ".env"
load_dotenv(env_path)


@pytest.fixture(scope="session")
def integration_config() -> dict[str, str]:
    """Load integration test configuration from environment.

    Returns:
        Dictionary with API credentials and configuration.

    Raises:
        ValueError: If required environment variables are missing.
    """
    username = os.getenv("SPARK_USERNAME")
    password = os.getenv("SPARK_PASSWORD")
    base_url = os.getenv("SPARK_API_BASE_URL", DEFAULT_BASE_URL)

    if not username or not password:
        msg = "Missing required environment variables. Please create .env file with SPARK_USERNAME and SPARK_PASSWORD"
        raise ValueError(msg)

    return {
        "username": username,
        "password": password,
        "base_url": base_url,
    }


@pytest.fixture(scope="session")
def test_device_id() -> str | None:
    """Get test device ID from environment if available.

    Returns:
        Device ID for testing, or None to use the first listed device.
    """
    return os.getenv("SPARK_TEST_DEVICE_ID")


@pytest.fixture
async def client(integration_config: dict[str, str]) -> AsyncGenerator[SparkClient]:
    """Create a client that exchanges the password for a token on entry."""
    client = SparkClient(
        username=integration_config["username"],
        password=integration_config["password"],
        base_url=integration_config["base_url"],
    )

    async with client:
        outcome = await client.wait_for_token()
        assert outcome is not None
        assert outcome.ok, f"Token exchange failed: {outcome.error}"
        yield client
