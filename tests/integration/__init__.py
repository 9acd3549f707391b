"""Integration tests for pysparkcloud library.

These tests use real API credentials from .env file and make actual API calls.
They are marked with @pytest.mark.integration and skipped by default.

To run integration tests:
    pytest tests/integration -v -m integration

Environment variables required in .env:
    SPARK_USERNAME: Account username
    SPARK_PASSWORD: Account password
    SPARK_API_BASE_URL: API base URL (optional, defaults to production)
    SPARK_TEST_DEVICE_ID: Device used for variable reads (optional)
    SPARK_TEST_VARIABLE: Variable read on the test device (optional)
"""
